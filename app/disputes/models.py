"""
Dispute model.

A dispute targets exactly one paid booking or order. It is open while
pending or investigating, and closes as resolved (refunded) or rejected.

State Flow:
    PENDING → INVESTIGATING
    PENDING/INVESTIGATING → RESOLVED
    PENDING/INVESTIGATING → REJECTED
"""

from __future__ import annotations

from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone
from django_fsm import FSMField, transition

from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel


class DisputeType(models.TextChoices):
    REFUND = "refund", "Refund request"
    SERVICE_NOT_DELIVERED = "service_not_delivered", "Service not delivered"
    QUALITY_ISSUE = "quality_issue", "Quality issue"
    PAYMENT_HOLD = "payment_hold", "Payment hold"


class DisputeStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    INVESTIGATING = "investigating", "Investigating"
    RESOLVED = "resolved", "Resolved"
    REJECTED = "rejected", "Rejected"


OPEN_STATUSES = [DisputeStatus.PENDING, DisputeStatus.INVESTIGATING]


class Dispute(UUIDPrimaryKeyMixin, BaseModel):
    """
    A buyer's claim against a booking or an order.

    Fields:
        booking / order: The disputed purchase, exactly one is set
        claimant: The buyer who filed the dispute
        amount_cents: Amount refunded if the dispute is resolved
        resolution_note: Staff note sent to both parties
        resolved_by: Staff member who closed the dispute
    """

    booking = models.ForeignKey(
        "bookings.Booking",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="disputes",
    )
    order = models.ForeignKey(
        "marketplace.Order",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="disputes",
    )
    claimant = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="disputes",
    )
    dispute_type = models.CharField(max_length=30, choices=DisputeType.choices)
    reason = models.TextField()
    amount_cents = models.PositiveIntegerField()

    status = FSMField(
        default=DisputeStatus.PENDING,
        choices=DisputeStatus.choices,
        db_index=True,
        help_text="Dispute lifecycle status (managed by FSM)",
    )
    resolution_note = models.TextField(blank=True, default="")
    resolved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="resolved_disputes",
    )
    resolved_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=(
                    Q(booking__isnull=False, order__isnull=True)
                    | Q(booking__isnull=True, order__isnull=False)
                ),
                name="dispute_single_target",
            ),
        ]

    def __str__(self) -> str:
        return f"Dispute({self.id}, {self.status})"

    @property
    def is_open(self) -> bool:
        return self.status in OPEN_STATUSES

    @property
    def target(self):
        """The disputed booking or order."""
        return self.booking if self.booking_id else self.order

    @property
    def respondent(self):
        """User whose earnings are at stake: the provider or the seller."""
        if self.booking_id:
            return self.booking.provider.user
        return self.order.seller

    # ==========================================================================
    # State Transitions (django-fsm)
    # ==========================================================================

    @transition(
        field=status,
        source=DisputeStatus.PENDING,
        target=DisputeStatus.INVESTIGATING,
    )
    def start_investigation(self):
        pass

    @transition(field=status, source=OPEN_STATUSES, target=DisputeStatus.RESOLVED)
    def resolve(self, note: str, resolved_by):
        self._close(note, resolved_by)

    @transition(field=status, source=OPEN_STATUSES, target=DisputeStatus.REJECTED)
    def reject(self, note: str, resolved_by):
        self._close(note, resolved_by)

    def _close(self, note: str, resolved_by) -> None:
        self.resolution_note = note
        self.resolved_by = resolved_by
        self.resolved_at = timezone.now()
