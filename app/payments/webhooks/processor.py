"""
WebhookProcessor: applies one stored webhook event exactly once.

The event row is locked for the duration of the transaction. The handler's
effects and the processed marker commit together; on any failure both roll
back and the event is recorded as failed in a separate write.
"""

from __future__ import annotations

import uuid

from django.db import transaction
from django.db.models import F

from core.exceptions import NotFoundError
from core.services import BaseService, ServiceResult
from payments.exceptions import WebhookProcessingError
from payments.models import WebhookEvent
from payments.state_machines import WebhookEventStatus
from payments.webhooks.handlers import dispatch_webhook


class WebhookProcessor(BaseService):
    """Runs handlers for stored webhook events."""

    @classmethod
    def process(cls, webhook_event_id: uuid.UUID | str) -> ServiceResult[WebhookEvent]:
        """
        Process a stored event.

        Returns:
            Success with the event (also when it was already processed)

        Raises:
            NotFoundError: No such event
            WebhookProcessingError: Handler failed; the event is marked failed
        """
        logger = cls.get_logger()
        log_context = {"webhook_event_id": str(webhook_event_id)}

        try:
            with transaction.atomic():
                try:
                    event = WebhookEvent.objects.select_for_update().get(
                        id=webhook_event_id
                    )
                except WebhookEvent.DoesNotExist:
                    raise NotFoundError(
                        "Webhook event not found",
                        details=log_context,
                    )

                log_context.update(
                    stripe_event_id=event.stripe_event_id,
                    event_type=event.event_type,
                )
                if event.is_processed:
                    logger.info("WebhookEvent already processed", extra=log_context)
                    return ServiceResult.success(event)

                event.mark_processing()
                result = dispatch_webhook(event)
                if not result.success:
                    raise WebhookProcessingError(
                        result.error or "Handler returned failure",
                        details={"handler_error_code": result.error_code},
                    )

                event.mark_processed()
                event.save()

        except NotFoundError:
            raise
        except Exception as e:
            error_message = f"{type(e).__name__}: {e}"
            WebhookEvent.objects.filter(id=webhook_event_id).update(
                status=WebhookEventStatus.FAILED,
                error_message=error_message,
                retry_count=F("retry_count") + 1,
            )
            logger.exception(
                "Webhook processing failed",
                extra={**log_context, "error": error_message},
            )
            if isinstance(e, WebhookProcessingError):
                raise
            raise WebhookProcessingError(
                "Webhook processing failed",
                details={"error": error_message},
            ) from e

        logger.info("Webhook processed successfully", extra=log_context)
        return ServiceResult.success(event)
