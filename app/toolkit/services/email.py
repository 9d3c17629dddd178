"""
Transactional email sending.

Booking confirmations, session reminders, digital delivery links and
dispute outcomes all go through EmailService. Emails are queued after the
primary state change has committed and sent by toolkit.tasks.send_email,
which retries with backoff. A failure never rolls back the caller.

Configuration:
    - EMAIL_BACKEND
    - EMAIL_HOST, EMAIL_PORT
    - DEFAULT_FROM_EMAIL

Usage:
    from toolkit.services.email import EmailService

    EmailService.send_raw(
        to="buyer@example.com",
        subject="Session starts in 1 hour",
        body_text="Join here: https://meet.jit.si/session-...",
    )

    # From an on_commit hook: queues the retrying task, never raises
    EmailService.queue(to=..., subject=..., body_text=..., context={...})
"""

from __future__ import annotations

import logging

from django.conf import settings
from django.core.mail import EmailMultiAlternatives

from core.exceptions import DownstreamNotificationFailure
from toolkit.helpers import mask_recipients

logger = logging.getLogger(__name__)


class EmailService:
    """
    Sends plain-text (and optional HTML) emails.

    send_raw raises whatever the mail backend raises; it is the caller's
    decision whether a failure matters.
    """

    @staticmethod
    def send_raw(
        to: str | list[str],
        subject: str,
        body_text: str,
        body_html: str | None = None,
        from_email: str | None = None,
        reply_to: str | None = None,
    ) -> bool:
        """
        Send an email with raw content.

        Args:
            to: Recipient email address(es)
            subject: Email subject line
            body_text: Plain text email body
            body_html: HTML email body (optional)
            from_email: Sender email (defaults to DEFAULT_FROM_EMAIL)
            reply_to: Reply-to address

        Returns:
            True if the backend accepted the message
        """
        if isinstance(to, str):
            to = [to]

        email = EmailMultiAlternatives(
            subject=subject,
            body=body_text,
            from_email=from_email or settings.DEFAULT_FROM_EMAIL,
            to=to,
            reply_to=[reply_to] if reply_to else None,
        )
        if body_html:
            email.attach_alternative(body_html, "text/html")

        sent = email.send(fail_silently=False)
        logger.info(
            "Email sent",
            extra={"to": mask_recipients(to), "subject": subject, "sent": sent},
        )
        return sent > 0

    @staticmethod
    def queue(
        to: str | list[str],
        subject: str,
        body_text: str,
        context: dict | None = None,
    ) -> bool:
        """
        Hand an email to the send_email task, which retries on failure.

        Call through transaction.on_commit. Queueing errors are wrapped in
        DownstreamNotificationFailure, logged with the given context and
        swallowed, so the committed state change is never affected.

        Returns:
            True if queued, False if the broker refused the task
        """
        from toolkit.tasks import send_email

        try:
            send_email.delay(
                to=to, subject=subject, body_text=body_text, context=context
            )
        except Exception as e:
            failure = DownstreamNotificationFailure(
                "Email could not be queued",
                details={**(context or {}), "subject": subject, "error": str(e)},
            )
            logger.warning(
                str(failure),
                exc_info=True,
                extra={"to": mask_recipients(to), **failure.details},
            )
            return False
        return True
