"""
State enums shared by payment-related models.
"""

from payments.state_machines.states import (
    OnboardingStatus,
    PaymentStatus,
    WebhookEventStatus,
)

__all__ = [
    "OnboardingStatus",
    "PaymentStatus",
    "WebhookEventStatus",
]
