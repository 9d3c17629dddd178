"""
URL configuration for the bookings app.

Routes:
    - GET/POST /      - List bookings / book a session
    - POST /bundles/checkout/ - Credit bundle checkout
    - GET  /credits/  - Remaining credits

All routes are prefixed with /api/v1/bookings/ when included in the main URLconf.
"""

from django.urls import path

from bookings.views import BookingListCreateView, BundleCheckoutView, CreditBalanceView

app_name = "bookings"

urlpatterns = [
    path("", BookingListCreateView.as_view(), name="booking_list"),
    path("bundles/checkout/", BundleCheckoutView.as_view(), name="bundle_checkout"),
    path("credits/", CreditBalanceView.as_view(), name="credits"),
]
