"""
URL configuration for the settlement core.

URL Structure:
    /                              - ReDoc API documentation
    /admin/                        - Django admin interface
    /health/                       - Health check endpoint (for load balancers, Docker)
    /schema/                       - OpenAPI schema (YAML)
    /api/v1/bookings/              - Booking endpoints
        (root)                     - List own bookings (GET) / create booking (POST)
        credits/                   - Remaining credits per provider
        bundles/checkout/          - Start a credit bundle purchase
    /api/v1/marketplace/           - Marketplace endpoints
        orders/                    - Start a product checkout
        orders/{id}/ship/          - Seller marks a physical order shipped
    /api/v1/payments/              - Payment endpoints
        connect/onboard/           - Start or continue payout onboarding
        balance/                   - Seller ledger balance
        webhooks/stripe/           - Stripe webhook endpoint (POST)
    /api/v1/disputes/              - Dispute endpoints
        (root)                     - File a dispute
        {id}/resolve/              - Resolve a dispute (staff only)
    /api/v1/notifications/         - In-app notifications

For more information, see:
https://docs.djangoproject.com/en/5.2/topics/http/urls/
"""

from django.contrib import admin
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularRedocView

from core.views import health_check

# =============================================================================
# API v1 Routes
# =============================================================================
api_v1_patterns = [
    path("bookings/", include("bookings.urls")),
    path("marketplace/", include("marketplace.urls")),
    path("payments/", include("payments.urls")),
    path("disputes/", include("disputes.urls")),
    path("notifications/", include("notifications.urls")),
]

urlpatterns = [
    # Documentation
    path("", SpectacularRedocView.as_view(url_name="schema"), name="redoc"),
    path("schema/", SpectacularAPIView.as_view(), name="schema"),
    # Admin
    path("admin/", admin.site.urls),
    # Health check (Docker, Kubernetes, load balancers)
    path("health/", health_check, name="health_check"),
    # API v1
    path("api/v1/", include(api_v1_patterns)),
]

# =============================================================================
# Admin Site Customization
# =============================================================================
admin.site.site_header = "Settlement Admin"
admin.site.site_title = "Settlement Admin Portal"
admin.site.index_title = "Bookings, orders and payouts"
