"""
Payments app configuration.

This app owns everything that touches the payment gateway:
- Hosted checkout sessions and Connect onboarding
- Webhook ingestion and reconciliation
- The seller ledger and balances
"""

from django.apps import AppConfig


class PaymentsConfig(AppConfig):
    """Configuration for the payments application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "payments"
    verbose_name = "Payments"

    def ready(self):
        # Registers webhook handlers with the dispatcher
        from payments.webhooks import handlers  # noqa: F401
