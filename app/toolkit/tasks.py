"""
Celery tasks for transactional email.

- send_email: Deliver one email, retried with exponential backoff

Queued through EmailService.queue from transaction.on_commit hooks, so a
slow or failing mail backend never holds up the request that changed state.

Usage:
    from toolkit.tasks import send_email
    send_email.delay(to="buyer@example.com", subject="...", body_text="...")
"""

from __future__ import annotations

import logging

from celery import shared_task

from core.exceptions import DownstreamNotificationFailure
from toolkit.helpers import mask_recipients
from toolkit.services.email import EmailService

logger = logging.getLogger(__name__)

MAX_EMAIL_RETRIES = 3


@shared_task(
    bind=True,
    autoretry_for=(Exception,),
    retry_backoff=True,
    retry_backoff_max=600,
    retry_kwargs={"max_retries": MAX_EMAIL_RETRIES},
    ignore_result=True,
)
def send_email(
    self,
    to: str | list[str],
    subject: str,
    body_text: str,
    context: dict | None = None,
) -> bool:
    """
    Send one email, retrying backend errors.

    Once retries are exhausted the failure is logged as a
    DownstreamNotificationFailure and the task finishes without raising.

    Returns:
        True if sent, False after the final failed attempt
    """
    try:
        return EmailService.send_raw(to=to, subject=subject, body_text=body_text)
    except Exception as e:
        details = {**(context or {}), "subject": subject, "error": str(e)}

        if self.request.retries >= MAX_EMAIL_RETRIES:
            failure = DownstreamNotificationFailure(
                "Email delivery failed", details=details
            )
            logger.error(
                str(failure),
                exc_info=True,
                extra={
                    "to": mask_recipients(to),
                    "retries": self.request.retries,
                    **failure.details,
                },
            )
            return False

        logger.warning(
            "Email delivery failed, will retry",
            extra={
                "to": mask_recipients(to),
                "retry": self.request.retries + 1,
                "max_retries": MAX_EMAIL_RETRIES,
                **details,
            },
        )
        raise
