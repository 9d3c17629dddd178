"""
Tests for BookingIntentService.

Tests cover:
- Input validation (missing, unknown and own provider)
- Credit-funded bookings
- Payment-funded bookings and the checkout failure path
- Retrying a credit lost to a concurrent booking, then falling back to payment
- Bundle purchase checkout
"""

from datetime import timedelta
from unittest.mock import patch

import pytest
from django.test import override_settings
from django.utils import timezone

from bookings.models import Booking, BookingStatus, CreditBundle
from bookings.services.credits import CreditLedger
from bookings.services.intents import BookingIntentService
from bookings.tests.factories import CreditBundleFactory, ProviderFactory
from core.exceptions import NotFoundError, ValidationError
from payments.exceptions import (
    ConcurrencyConflict,
    GatewayUnavailableError,
    PayoutDestinationMissing,
)
from payments.metadata import SessionBooking
from payments.state_machines import PaymentStatus
from payments.tests.factories import ConnectedAccountFactory


# =============================================================================
# Validation
# =============================================================================


@pytest.mark.django_db
class TestRequestBookingValidation:
    def test_missing_provider_id(self, buyer):
        with pytest.raises(ValidationError) as exc_info:
            BookingIntentService.request_booking(buyer, None)

        assert exc_info.value.details == {"field": "provider_id"}

    def test_unknown_provider(self, buyer):
        with pytest.raises(NotFoundError):
            BookingIntentService.request_booking(
                buyer, "00000000-0000-0000-0000-000000000000"
            )

    def test_malformed_provider_id_is_not_found(self, buyer):
        with pytest.raises(NotFoundError):
            BookingIntentService.request_booking(buyer, "not-a-uuid")

    def test_inactive_provider_is_not_found(self, buyer):
        provider = ProviderFactory(is_active=False)

        with pytest.raises(NotFoundError):
            BookingIntentService.request_booking(buyer, provider.id)

    def test_cannot_book_own_provider(self, provider):
        with pytest.raises(ValidationError) as exc_info:
            BookingIntentService.request_booking(provider.user, provider.id)

        assert exc_info.value.error_code == "SELF_BOOKING"
        assert not Booking.objects.exists()


# =============================================================================
# Credit Path
# =============================================================================


@pytest.mark.django_db
class TestCreditBooking:
    def test_creates_confirmed_booking(self, buyer, provider, mock_create_checkout):
        bundle = CreditBundleFactory(
            buyer=buyer, provider=provider, bundle_size=5, price_cents=21250
        )

        intent = BookingIntentService.request_booking(buyer, provider.id, notes="Hi")

        assert intent.used_credit is True
        assert intent.credits_left == 4
        assert intent.checkout_url is None
        booking = Booking.objects.get(pk=intent.booking_id)
        assert booking.status == BookingStatus.CONFIRMED
        assert booking.payment_status == PaymentStatus.PAID
        assert booking.used_credit is True
        assert booking.credit_bundle_id == bundle.pk
        assert booking.stripe_session_id is None
        assert booking.amount_cents == 4250
        assert booking.notes == "Hi"
        mock_create_checkout.assert_not_called()

    @override_settings(BOOKING_JOIN_WINDOW_HOURS=48)
    def test_sets_join_url_and_expiry(self, buyer, provider):
        CreditBundleFactory(buyer=buyer, provider=provider)

        intent = BookingIntentService.request_booking(buyer, provider.id)

        booking = Booking.objects.get(pk=intent.booking_id)
        assert booking.join_url.endswith(f"-{booking.id}")
        hours = (booking.join_expires_at - booking.confirmed_at).total_seconds() / 3600
        assert round(hours) == 48

    def test_credit_booking_works_without_payout_account(self, buyer, provider):
        """Credits were paid up front, so no destination is needed."""
        CreditBundleFactory(buyer=buyer, provider=provider)

        intent = BookingIntentService.request_booking(buyer, provider.id)

        assert intent.used_credit is True

    def test_lost_credit_falls_through_to_payment(
        self, buyer, payable_provider, mock_create_checkout
    ):
        CreditBundleFactory(buyer=buyer, provider=payable_provider, credits_left=1)

        with patch.object(
            CreditLedger,
            "consume",
            side_effect=ConcurrencyConflict("Credit was consumed"),
        ):
            intent = BookingIntentService.request_booking(buyer, payable_provider.id)

        assert intent.used_credit is False
        assert intent.checkout_url is not None
        booking = Booking.objects.get(pk=intent.booking_id)
        assert booking.status == BookingStatus.PENDING
        assert booking.used_credit is False

    def test_lost_credit_retried_against_younger_bundle(
        self, buyer, payable_provider, mock_create_checkout
    ):
        now = timezone.now()
        oldest = CreditBundleFactory(
            buyer=buyer,
            provider=payable_provider,
            credits_left=1,
            purchased_at=now - timedelta(days=2),
        )
        younger = CreditBundleFactory(
            buyer=buyer, provider=payable_provider, credits_left=3, purchased_at=now
        )
        # A concurrent booking empties the oldest bundle after it was read
        CreditBundle.objects.filter(pk=oldest.pk).update(credits_left=0)
        oldest_available = CreditLedger.oldest_available

        def stale_first_read(*args):
            if mock_oldest.call_count == 1:
                return oldest
            return oldest_available(*args)

        with patch.object(
            CreditLedger, "oldest_available", side_effect=stale_first_read
        ) as mock_oldest:
            intent = BookingIntentService.request_booking(buyer, payable_provider.id)

        assert mock_oldest.call_count == 2
        assert intent.used_credit is True
        assert intent.credits_left == 2
        booking = Booking.objects.get(pk=intent.booking_id)
        assert booking.status == BookingStatus.CONFIRMED
        assert booking.credit_bundle_id == younger.pk
        mock_create_checkout.assert_not_called()

    def test_credit_only_without_credit_needs_purchase(self, buyer, provider):
        intent = BookingIntentService.request_booking(
            buyer, provider.id, credit_only=True
        )

        assert intent.needs_purchase is True
        assert intent.booking_id is None
        assert not Booking.objects.exists()


# =============================================================================
# Payment Path
# =============================================================================


@pytest.mark.django_db
class TestPaymentBooking:
    def test_creates_pending_booking_with_checkout(
        self, buyer, payable_provider, mock_create_checkout, checkout_session
    ):
        intent = BookingIntentService.request_booking(buyer, payable_provider.id)

        assert intent.checkout_url == checkout_session.url
        booking = Booking.objects.get(pk=intent.booking_id)
        assert booking.status == BookingStatus.PENDING
        assert booking.payment_status == PaymentStatus.PENDING
        assert booking.stripe_session_id == checkout_session.id
        assert booking.amount_cents == 5000
        assert booking.join_url == ""

    def test_checkout_carries_destination_fee_and_metadata(
        self, buyer, payable_provider, mock_create_checkout
    ):
        intent = BookingIntentService.request_booking(buyer, payable_provider.id)

        params = mock_create_checkout.call_args.args[0]
        account = payable_provider.user.connected_account
        assert params.destination_account == account.stripe_account_id
        assert params.application_fee_cents == 750
        assert params.unit_amount_cents == 5000
        assert params.metadata == SessionBooking(
            booking_id=intent.booking_id, provider_id=payable_provider.id
        ).to_stripe()

    @override_settings(MINIMUM_UNIT_AMOUNT_CENTS=100)
    def test_price_below_minimum_is_raised(self, buyer, mock_create_checkout):
        provider = ProviderFactory(price_cents=50)
        ConnectedAccountFactory(user=provider.user)

        intent = BookingIntentService.request_booking(buyer, provider.id)

        assert Booking.objects.get(pk=intent.booking_id).amount_cents == 100

    def test_missing_destination_writes_nothing(
        self, buyer, provider, mock_create_checkout
    ):
        with pytest.raises(PayoutDestinationMissing):
            BookingIntentService.request_booking(buyer, provider.id)

        assert not Booking.objects.exists()
        mock_create_checkout.assert_not_called()

    def test_gateway_failure_cancels_booking(self, buyer, payable_provider):
        with patch(
            "payments.adapters.stripe_adapter.StripeAdapter.create_checkout_session",
            side_effect=GatewayUnavailableError("Stripe is down"),
        ):
            with pytest.raises(GatewayUnavailableError):
                BookingIntentService.request_booking(buyer, payable_provider.id)

        booking = Booking.objects.get()
        assert booking.status == BookingStatus.CANCELLED
        assert booking.cancelled_at is not None


# =============================================================================
# Bundle Purchase
# =============================================================================


@pytest.mark.django_db
class TestRequestBundlePurchase:
    def test_returns_checkout_url(
        self, buyer, payable_provider, mock_create_checkout, checkout_session
    ):
        intent = BookingIntentService.request_bundle_purchase(
            buyer, payable_provider.id, 5
        )

        assert intent.checkout_url == checkout_session.url
        params = mock_create_checkout.call_args.args[0]
        # 5 x 50.00 with 15% off
        assert params.unit_amount_cents == 21250

    def test_unsupported_size(self, buyer, payable_provider, mock_create_checkout):
        with pytest.raises(ValidationError) as exc_info:
            BookingIntentService.request_bundle_purchase(
                buyer, payable_provider.id, 4
            )

        assert exc_info.value.error_code == "UNSUPPORTED_BUNDLE_SIZE"
        mock_create_checkout.assert_not_called()

    def test_requires_payouts_enabled(self, buyer, provider, mock_create_checkout):
        ConnectedAccountFactory(user=provider.user, onboarding=True)

        with pytest.raises(PayoutDestinationMissing) as exc_info:
            BookingIntentService.request_bundle_purchase(buyer, provider.id, 5)

        assert exc_info.value.error_code == "PAYOUTS_NOT_ENABLED"
