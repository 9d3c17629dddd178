"""
Tests for BookingConfirmationService.confirm_paid.
"""

import uuid
from unittest.mock import patch

import pytest

from bookings.models import BookingStatus
from bookings.services.confirmation import BookingConfirmationService
from bookings.tests.factories import BookingFactory
from notifications.models import Notification, NotificationKind
from payments.state_machines import PaymentStatus


@pytest.mark.django_db
class TestConfirmPaid:
    def test_confirms_pending_booking(self, mock_retrieve_charge):
        booking = BookingFactory(stripe_session_id="cs_test_booking")

        result = BookingConfirmationService.confirm_paid(booking.id, "cs_test_booking")

        assert result.success
        booking.refresh_from_db()
        assert booking.status == BookingStatus.CONFIRMED
        assert booking.payment_status == PaymentStatus.PAID
        assert booking.confirmed_at is not None
        mock_retrieve_charge.assert_called_once_with("cs_test_booking")

    def test_fees_come_from_realized_charge(self, mock_retrieve_charge):
        booking = BookingFactory(amount_cents=5000)

        BookingConfirmationService.confirm_paid(booking.id, booking.stripe_session_id)

        booking.refresh_from_db()
        assert booking.stripe_payment_intent_id == "pi_test_booking"
        assert booking.stripe_charge_id == "ch_test_booking"
        assert booking.stripe_transfer_id == "tr_test_booking"
        assert booking.application_fee_cents == 750
        assert booking.net_amount_cents == 4250

    def test_sets_join_url(self, mock_retrieve_charge):
        booking = BookingFactory()
        assert booking.join_url == ""

        BookingConfirmationService.confirm_paid(booking.id, booking.stripe_session_id)

        booking.refresh_from_db()
        assert booking.join_url.endswith(f"session-{booking.id}")
        assert booking.join_expires_at is not None

    def test_notifies_both_participants(self, mock_retrieve_charge):
        booking = BookingFactory()

        BookingConfirmationService.confirm_paid(booking.id, booking.stripe_session_id)

        recipients = set(
            Notification.objects.filter(
                type_key=NotificationKind.BOOKING_CONFIRMED
            ).values_list("recipient_id", flat=True)
        )
        assert recipients == {booking.buyer_id, booking.provider.user_id}

    def test_replay_is_noop(self, mock_retrieve_charge):
        booking = BookingFactory()
        BookingConfirmationService.confirm_paid(booking.id, booking.stripe_session_id)
        booking.refresh_from_db()
        confirmed_at = booking.confirmed_at

        result = BookingConfirmationService.confirm_paid(
            booking.id, booking.stripe_session_id
        )

        assert result.success
        booking.refresh_from_db()
        assert booking.confirmed_at == confirmed_at
        assert mock_retrieve_charge.call_count == 1
        assert Notification.objects.count() == 2

    def test_unknown_booking_fails(self, mock_retrieve_charge):
        result = BookingConfirmationService.confirm_paid(uuid.uuid4(), "cs_missing")

        assert not result.success
        assert result.error_code == "BOOKING_NOT_FOUND"
        mock_retrieve_charge.assert_not_called()

    def test_schedules_achievements_after_commit(
        self, mock_retrieve_charge, django_capture_on_commit_callbacks
    ):
        booking = BookingFactory()

        with patch(
            "bookings.tasks.evaluate_booking_achievements.delay"
        ) as mock_delay:
            with django_capture_on_commit_callbacks(execute=True):
                BookingConfirmationService.confirm_paid(
                    booking.id, booking.stripe_session_id
                )

        mock_delay.assert_called_once_with(str(booking.id))

    def test_queue_failure_does_not_affect_confirmation(
        self, mock_retrieve_charge, django_capture_on_commit_callbacks
    ):
        booking = BookingFactory()

        with patch(
            "bookings.tasks.evaluate_booking_achievements.delay",
            side_effect=ConnectionError("broker down"),
        ):
            with django_capture_on_commit_callbacks(execute=True):
                result = BookingConfirmationService.confirm_paid(
                    booking.id, booking.stripe_session_id
                )

        assert result.success
        booking.refresh_from_db()
        assert booking.status == BookingStatus.CONFIRMED
