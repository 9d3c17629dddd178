"""
WebhookEvent model: the processed-event record for gateway notifications.

The unique stripe_event_id makes redelivered events detectable. An event is
only marked processed inside the same transaction that applied its effects,
so a crash never leaves a processed marker without the state change.

Usage:
    event, created = WebhookEvent.objects.get_or_create(
        stripe_event_id=payload["id"],
        defaults={"event_type": payload["type"], "payload": payload},
    )
    if event.is_processed:
        return JsonResponse({"received": True})
"""

from __future__ import annotations

from django.conf import settings
from django.db import models
from django.utils import timezone

from core.models import BaseModel
from core.model_mixins import UUIDPrimaryKeyMixin

from payments.state_machines import WebhookEventStatus

DEFAULT_MAX_WEBHOOK_RETRIES = 5


class WebhookEvent(UUIDPrimaryKeyMixin, BaseModel):
    """
    A verified gateway event and its processing outcome.

    Fields:
        stripe_event_id: Unique Stripe Event ID (evt_xxx)
        event_type: e.g. checkout.session.completed
        payload: Verified event body
        status: pending, processing, processed or failed
        processed_at: Set in the transaction that applied the event
        error_message: Last failure, cleared on success
        retry_count: Number of processing attempts
    """

    stripe_event_id = models.CharField(
        max_length=255,
        unique=True,
        help_text="Stripe Event ID (evt_xxx)",
    )
    event_type = models.CharField(
        max_length=100,
        db_index=True,
        help_text="Stripe event type (e.g., 'checkout.session.completed')",
    )
    payload = models.JSONField(
        help_text="Verified webhook payload",
    )

    status = models.CharField(
        max_length=20,
        choices=WebhookEventStatus.choices,
        default=WebhookEventStatus.PENDING,
        db_index=True,
    )
    processed_at = models.DateTimeField(null=True, blank=True)

    error_message = models.TextField(null=True, blank=True)
    retry_count = models.PositiveSmallIntegerField(
        default=0,
        help_text="Number of processing attempts",
    )

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Webhook Event"
        verbose_name_plural = "Webhook Events"
        indexes = [
            models.Index(
                fields=["status", "retry_count"], name="webhook_status_retry_idx"
            ),
            models.Index(
                fields=["event_type", "created_at"], name="webhook_type_created_idx"
            ),
        ]

    def __str__(self) -> str:
        return f"WebhookEvent({self.stripe_event_id}, {self.event_type})"

    @classmethod
    def max_retries(cls) -> int:
        return getattr(settings, "WEBHOOK_MAX_RETRIES", DEFAULT_MAX_WEBHOOK_RETRIES)

    @property
    def is_processed(self) -> bool:
        return self.status == WebhookEventStatus.PROCESSED

    @property
    def data_object(self) -> dict:
        """The event's data.object, or an empty dict for odd payloads."""
        data = self.payload.get("data") if isinstance(self.payload, dict) else None
        obj = data.get("object") if isinstance(data, dict) else None
        return obj if isinstance(obj, dict) else {}

    # Helpers below do not save; the caller saves inside its transaction.

    def mark_processing(self) -> None:
        self.status = WebhookEventStatus.PROCESSING
        self.retry_count += 1

    def mark_processed(self) -> None:
        self.status = WebhookEventStatus.PROCESSED
        self.processed_at = timezone.now()
        self.error_message = None
