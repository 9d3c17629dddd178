"""
In-app notification models.

Notifications are immutable records: title and body are fully rendered when
written and serve as the history shown in the client inbox.

Design Decisions:
    - recipient CASCADE: notifications go with the user
    - actor SET_NULL: notification preserved when actor deleted
    - idempotency_key unique when set, so retried writers (reminder sweeps,
      webhook replays) cannot double-notify
"""

from __future__ import annotations

from django.conf import settings
from django.db import models

from core.models import BaseModel


class NotificationKind(models.TextChoices):
    """Programmatic notification type keys."""

    BOOKING_CONFIRMED = "booking_confirmed", "Booking confirmed"
    SESSION_REMINDER = "session_reminder", "Session reminder"
    ORDER_PAID = "order_paid", "Order paid"
    ORDER_SHIPPED = "order_shipped", "Order shipped"
    DIGITAL_DELIVERED = "digital_delivered", "Digital delivery ready"
    DISPUTE_OPENED = "dispute_opened", "Dispute opened"
    DISPUTE_RESOLVED = "dispute_resolved", "Dispute resolved"
    DISPUTE_REJECTED = "dispute_rejected", "Dispute rejected"
    ACHIEVEMENT = "achievement", "Achievement unlocked"


class Notification(BaseModel):
    """
    Individual notification record for a user.

    Fields:
        recipient: User receiving the notification (scopes all queries)
        actor: Optional user who triggered the notification
        type_key: NotificationKind value
        title: Fully rendered title string
        body: Fully rendered body string
        link: Relative client link (e.g. /bookings/<id>)
        data: Arbitrary JSON context (ids, amounts)
        is_read: Whether recipient has read this notification
        idempotency_key: Optional dedupe key, unique when not null
    """

    recipient = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="notifications",
        help_text="User receiving this notification",
    )
    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="triggered_notifications",
        help_text="User who triggered this notification (optional)",
    )
    type_key = models.CharField(
        max_length=50,
        choices=NotificationKind.choices,
        db_index=True,
    )
    title = models.CharField(max_length=500)
    body = models.TextField(blank=True, default="")
    link = models.CharField(max_length=500, blank=True, default="")
    data = models.JSONField(default=dict, blank=True)
    is_read = models.BooleanField(default=False, db_index=True)
    idempotency_key = models.CharField(
        max_length=255,
        null=True,
        blank=True,
        help_text="Idempotency key to prevent duplicate notifications",
    )

    class Meta:
        db_table = "notifications_notification"
        ordering = ["-created_at"]
        indexes = [
            models.Index(
                fields=["recipient", "is_read", "-created_at"],
                name="notif_recipient_unread_idx",
            ),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["idempotency_key"],
                name="notif_idempotency_key_unique",
                condition=models.Q(idempotency_key__isnull=False),
            ),
        ]

    def __str__(self) -> str:
        read_status = "read" if self.is_read else "unread"
        return (
            f"Notification({self.type_key}) -> User {self.recipient_id} "
            f"[{read_status}]"
        )
