"""
URL configuration for the marketplace app.

Routes:
    - GET/POST /orders/           - List orders / buy a listing
    - POST /orders/{id}/ship/     - Mark a physical order shipped

All routes are prefixed with /api/v1/marketplace/ when included in the main URLconf.
"""

from django.urls import path

from marketplace.views import OrderListCreateView, ShipOrderView

app_name = "marketplace"

urlpatterns = [
    path("orders/", OrderListCreateView.as_view(), name="order_list"),
    path("orders/<uuid:order_id>/ship/", ShipOrderView.as_view(), name="order_ship"),
]
