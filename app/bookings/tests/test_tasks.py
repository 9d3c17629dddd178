"""
Tests for booking Celery tasks.
"""

from unittest.mock import patch

import pytest

from bookings.models import XPAward, XPReason
from bookings.tasks import evaluate_booking_achievements, send_session_reminders
from bookings.tests.factories import BookingFactory
from notifications.models import Notification, NotificationKind


# =============================================================================
# Reminder Task
# =============================================================================


@pytest.mark.django_db
class TestSendSessionReminders:
    def test_returns_counts(self):
        with patch(
            "bookings.services.reminders.ReminderService.sweep",
            return_value={"1h": 2, "5m": 1},
        ):
            assert send_session_reminders() == {"1h": 2, "5m": 1}


# =============================================================================
# Achievements Task
# =============================================================================


@pytest.mark.django_db
class TestEvaluateBookingAchievements:
    @pytest.fixture(autouse=True)
    def xp_settings(self, settings):
        settings.XP_SESSION_BOOKED = 10
        settings.XP_FIRST_SESSION_BONUS = 50

    def test_first_booking_awards_both(self):
        booking = BookingFactory(confirmed=True)

        evaluate_booking_achievements(str(booking.id))

        awards = {
            a.reason: a.amount for a in XPAward.objects.filter(user=booking.buyer)
        }
        assert awards == {XPReason.SESSION_BOOKED: 10, XPReason.FIRST_SESSION: 50}
        assert Notification.objects.filter(
            recipient=booking.buyer, type_key=NotificationKind.ACHIEVEMENT
        ).exists()

    def test_first_session_bonus_only_once(self):
        first = BookingFactory(confirmed=True)
        second = BookingFactory(confirmed=True, buyer=first.buyer)

        evaluate_booking_achievements(str(first.id))
        evaluate_booking_achievements(str(second.id))

        assert (
            XPAward.objects.filter(
                user=first.buyer, reason=XPReason.FIRST_SESSION
            ).count()
            == 1
        )
        assert (
            XPAward.objects.filter(
                user=first.buyer, reason=XPReason.SESSION_BOOKED
            ).count()
            == 2
        )

    def test_rerun_is_idempotent(self):
        booking = BookingFactory(confirmed=True)

        evaluate_booking_achievements(str(booking.id))
        evaluate_booking_achievements(str(booking.id))

        assert XPAward.objects.filter(user=booking.buyer).count() == 2

    def test_pending_booking_awards_nothing(self):
        booking = BookingFactory()

        evaluate_booking_achievements(str(booking.id))

        assert not XPAward.objects.exists()

    def test_errors_are_swallowed(self):
        booking = BookingFactory(confirmed=True)

        with patch(
            "bookings.services.achievements.AchievementService.evaluate_booking",
            side_effect=RuntimeError("boom"),
        ):
            evaluate_booking_achievements(str(booking.id))

        booking.refresh_from_db()
        assert booking.is_paid
