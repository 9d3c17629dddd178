"""
Celery tasks for bookings.

- send_session_reminders: Reminder sweep (celery-beat, every minute)
- evaluate_booking_achievements: XP awards after a confirmed booking
"""

from __future__ import annotations

import logging

from celery import shared_task

from bookings.services.achievements import AchievementService
from bookings.services.reminders import ReminderService

logger = logging.getLogger(__name__)


@shared_task
def send_session_reminders() -> dict:
    """
    Send due 1h and 5m reminders.

    Scheduled via celery-beat every REMINDER_SWEEP_INTERVAL_SECONDS.
    """
    return ReminderService.sweep()


@shared_task(ignore_result=True)
def evaluate_booking_achievements(booking_id: str) -> None:
    """
    Grant XP for a confirmed booking.

    Best-effort: errors are logged and never retried, the booking is
    already committed.
    """
    try:
        result = AchievementService.evaluate_booking(booking_id)
    except Exception:
        logger.exception(
            "Achievement evaluation failed",
            extra={"booking_id": booking_id},
        )
        return

    if not result.success:
        logger.warning(
            "Achievement evaluation skipped",
            extra={"booking_id": booking_id, "error_code": result.error_code},
        )
