"""
Celery tasks for payment processing.

- process_webhook_event: Apply one stored webhook event
- retry_failed_webhooks: Periodic re-queue of failed events (celery-beat)

Usage:
    from payments.tasks import process_webhook_event

    process_webhook_event.delay(str(webhook_event.id))
"""

from __future__ import annotations

import logging

from celery import shared_task

from core.exceptions import NotFoundError
from payments.exceptions import WebhookProcessingError
from payments.models import WebhookEvent
from payments.state_machines import WebhookEventStatus

logger = logging.getLogger(__name__)

RETRY_BATCH_SIZE = 100


@shared_task(
    bind=True,
    autoretry_for=(WebhookProcessingError,),
    retry_backoff=True,
    retry_backoff_max=300,
    retry_kwargs={"max_retries": 3},
    acks_late=True,
)
def process_webhook_event(self, webhook_event_id: str) -> dict:
    """
    Apply a stored webhook event.

    Returns:
        Dict with processing result status

    Raises:
        WebhookProcessingError: Re-raised to trigger Celery retry
    """
    from payments.webhooks.processor import WebhookProcessor

    logger.info(
        "Processing webhook event",
        extra={"webhook_event_id": str(webhook_event_id)},
    )

    try:
        result = WebhookProcessor.process(webhook_event_id)
    except NotFoundError:
        logger.error(
            "WebhookEvent not found",
            extra={"webhook_event_id": str(webhook_event_id)},
        )
        return {"status": "not_found", "webhook_event_id": str(webhook_event_id)}

    return {
        "status": "processed",
        "webhook_event_id": str(webhook_event_id),
        "stripe_event_id": result.data.stripe_event_id,
    }


@shared_task
def retry_failed_webhooks() -> dict:
    """
    Re-queue failed webhook events that are under the retry cap.

    Scheduled via celery-beat every 5 minutes.
    """
    failed_webhooks = WebhookEvent.objects.filter(
        status=WebhookEventStatus.FAILED,
        retry_count__lt=WebhookEvent.max_retries(),
    ).order_by("created_at")[:RETRY_BATCH_SIZE]

    queued_count = 0
    for webhook in failed_webhooks:
        try:
            process_webhook_event.delay(str(webhook.id))
        except WebhookProcessingError:
            # Eager mode runs the task inline; the event is already marked failed
            logger.warning(
                "Retried webhook failed again",
                extra={"webhook_event_id": str(webhook.id)},
            )
            continue
        queued_count += 1
        logger.info(
            "Queued failed webhook for retry",
            extra={
                "webhook_event_id": str(webhook.id),
                "stripe_event_id": webhook.stripe_event_id,
                "retry_count": webhook.retry_count,
            },
        )

    logger.info(
        f"Queued {queued_count} failed webhooks for retry",
        extra={"queued_count": queued_count},
    )
    return {"queued_count": queued_count}
