"""
State enums for payment models.

These are Django TextChoices for database storage and admin integration.

State Machines Overview:

WebhookEvent:
    pending → processing → processed
    pending → processing → failed → processing (retry)

ConnectedAccount onboarding:
    not_started → in_progress → complete
    in_progress → rejected

Payment status (bookings and orders):
    pending → paid → refunded
"""

from django.db import models


class OnboardingStatus(models.TextChoices):
    """
    Stripe Connect onboarding status for ConnectedAccount.

    Derived from account.updated webhooks. Only COMPLETE accounts with
    payouts enabled can fund bundle purchases.
    """

    NOT_STARTED = "not_started", "Not Started"
    IN_PROGRESS = "in_progress", "In Progress"
    COMPLETE = "complete", "Complete"
    REJECTED = "rejected", "Rejected"


class WebhookEventStatus(models.TextChoices):
    """
    Processing status for WebhookEvent.

    State Flow:
        PENDING → PROCESSING → PROCESSED
        PENDING → PROCESSING → FAILED (can retry)
    """

    PENDING = "pending", "Pending"
    PROCESSING = "processing", "Processing"
    PROCESSED = "processed", "Processed"
    FAILED = "failed", "Failed"


class PaymentStatus(models.TextChoices):
    """Money state of a booking, independent of its lifecycle status."""

    PENDING = "pending", "Pending"
    PAID = "paid", "Paid"
    REFUNDED = "refunded", "Refunded"


__all__ = [
    "OnboardingStatus",
    "WebhookEventStatus",
    "PaymentStatus",
]
