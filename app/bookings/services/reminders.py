"""
Session reminders.

A beat task sweeps confirmed bookings every minute and reminds both
participants 1 hour and 5 minutes before the session. Each reminder is
claimed by flipping its flag with a conditional UPDATE; the flag never goes
back to false, so overlapping sweeps send each reminder once.

Lead times:
    1h: 60 minutes before, +-5 minutes
    5m: 5 minutes before, +-1 minute
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from django.db import transaction
from django.utils import timezone

from bookings.models import Booking, BookingStatus
from core.services import BaseService
from notifications.models import NotificationKind
from notifications.services import NotificationService
from toolkit.services.email import EmailService


@dataclass(frozen=True)
class ReminderLead:
    key: str
    lead: timedelta
    tolerance: timedelta
    flag: str
    label: str


REMINDER_LEADS = (
    ReminderLead(
        key="1h",
        lead=timedelta(minutes=60),
        tolerance=timedelta(minutes=5),
        flag="reminder_1h_sent",
        label="1 hour",
    ),
    ReminderLead(
        key="5m",
        lead=timedelta(minutes=5),
        tolerance=timedelta(minutes=1),
        flag="reminder_5m_sent",
        label="5 minutes",
    ),
)


class ReminderService(BaseService):
    """Sends session reminders. Safe to run from overlapping workers."""

    @classmethod
    def sweep(cls, now: datetime | None = None) -> dict[str, int]:
        """
        Send every reminder that is due.

        Returns:
            Number of bookings reminded per lead, e.g. {"1h": 2, "5m": 0}
        """
        now = now or timezone.now()
        counts = {}
        for lead in REMINDER_LEADS:
            counts[lead.key] = sum(
                1 for booking in cls._due(lead, now) if cls._remind(booking, lead)
            )

        if any(counts.values()):
            cls.get_logger().info("Reminders sent", extra={"counts": counts})
        return counts

    @classmethod
    def _due(cls, lead: ReminderLead, now: datetime):
        target = now + lead.lead
        return (
            Booking.objects.select_related("buyer", "provider", "provider__user")
            .filter(
                status=BookingStatus.CONFIRMED,
                session_at__gte=target - lead.tolerance,
                session_at__lte=target + lead.tolerance,
                **{lead.flag: False},
            )
            .order_by("session_at")
        )

    @classmethod
    def _remind(cls, booking: Booking, lead: ReminderLead) -> bool:
        """
        Claim and send one reminder.

        Returns False when another sweep already claimed it.
        """
        participants = [booking.buyer, booking.provider.user]
        title = f"Your session starts in {lead.label}"
        body = (
            f"Your session with {booking.provider.display_name} starts in "
            f"{lead.label}."
        )
        if booking.join_url:
            body += f" Join here: {booking.join_url}"

        with transaction.atomic():
            claimed = Booking.objects.filter(
                pk=booking.pk, **{lead.flag: False}
            ).update(**{lead.flag: True})
            if claimed == 0:
                return False

            for user in participants:
                NotificationService.create_notification(
                    recipient=user,
                    type_key=NotificationKind.SESSION_REMINDER,
                    title=title,
                    body=body,
                    link=f"/bookings/{booking.id}",
                    data={"booking_id": str(booking.id), "lead": lead.key},
                    idempotency_key=(
                        f"booking-reminder:{booking.id}:{lead.key}:{user.pk}"
                    ),
                )

            transaction.on_commit(
                lambda: cls._queue_emails(booking, participants, title, body, lead)
            )
        return True

    @classmethod
    def _queue_emails(cls, booking, participants, title, body, lead) -> None:
        for user in participants:
            EmailService.queue(
                to=user.email,
                subject=title,
                body_text=body,
                context={"booking_id": str(booking.id), "lead": lead.key},
            )
