"""
Webhook handling for payment events from Stripe.

Webhooks are verified, stored idempotently and applied synchronously in
one transaction per event.

Usage:
    from payments.webhooks.views import stripe_webhook

    urlpatterns = [
        path("webhooks/stripe/", stripe_webhook, name="stripe_webhook"),
    ]
"""
