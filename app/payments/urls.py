"""
URL configuration for the payments app.

Routes:
    - POST /connect/onboard/ - Start or continue payout onboarding
    - GET  /balance/ - Seller balance
    - POST /webhooks/stripe/ - Stripe webhook endpoint

All routes are prefixed with /api/v1/payments/ when included in the main URLconf.
"""

from django.urls import path

from payments.views import ConnectOnboardingView, SellerBalanceView
from payments.webhooks.views import stripe_webhook

app_name = "payments"

urlpatterns = [
    path("connect/onboard/", ConnectOnboardingView.as_view(), name="connect_onboard"),
    path("balance/", SellerBalanceView.as_view(), name="balance"),
    path("webhooks/stripe/", stripe_webhook, name="stripe_webhook"),
]
