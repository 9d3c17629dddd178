"""
Booking intents: the entry point for booking a session.

A booking request takes one of two funding paths:

1. Credit: the buyer holds a credit with this provider. One credit is
   consumed and a confirmed booking is created in the same transaction.
2. Payment: a pending booking is created and the buyer is sent to a hosted
   checkout. The booking is confirmed by the checkout-completed webhook.

If a concurrent booking takes the chosen credit first, the credit path is
tried once more; losing again falls through to the payment path.

Usage:
    from bookings.services import BookingIntentService

    intent = BookingIntentService.request_booking(request.user, provider_id)
    if intent.checkout_url:
        return redirect(intent.checkout_url)
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.utils import timezone

from bookings.meeting import resolve_join_url
from bookings.models import Booking, BookingStatus, Provider
from bookings.services.achievements import AchievementService
from bookings.services.credits import CreditLedger
from core.exceptions import NotFoundError, ValidationError
from core.services import BaseService
from payments.exceptions import ConcurrencyConflict, GatewayError
from payments.fees import unit_amount_cents
from payments.services import CheckoutService
from payments.state_machines import PaymentStatus

if TYPE_CHECKING:
    from authentication.models import User

# A lost race for a credit is retried once before falling through to checkout
CREDIT_ATTEMPTS = 2


@dataclass
class BookingIntent:
    """
    Outcome of a booking request.

    Exactly one of these shapes is filled:
        - credit booking: booking_id, credits_left, used_credit=True
        - payment booking: booking_id, checkout_url
        - credit_only without credit: needs_purchase=True
    """

    booking_id: uuid.UUID | None = None
    credits_left: int | None = None
    checkout_url: str | None = None
    needs_purchase: bool = False
    used_credit: bool = False


@dataclass
class BundleIntent:
    checkout_url: str
    session_id: str


class BookingIntentService(BaseService):
    """Creates bookings and bundle checkouts on behalf of a buyer."""

    @classmethod
    def _get_provider(cls, buyer: User, provider_id) -> Provider:
        if not provider_id:
            raise ValidationError(
                "provider_id is required",
                details={"field": "provider_id"},
            )
        try:
            provider = Provider.objects.select_related("user").get(
                pk=provider_id, is_active=True
            )
        except (Provider.DoesNotExist, ValueError, DjangoValidationError):
            raise NotFoundError(
                "Provider not found",
                error_code="PROVIDER_NOT_FOUND",
                details={"provider_id": str(provider_id)},
            )
        if provider.user_id == buyer.pk:
            raise ValidationError(
                "You cannot book a session with yourself",
                error_code="SELF_BOOKING",
                details={"provider_id": str(provider.id)},
            )
        return provider

    @classmethod
    def request_booking(
        cls,
        buyer: User,
        provider_id,
        notes: str = "",
        session_at: datetime | None = None,
        credit_only: bool = False,
    ) -> BookingIntent:
        """
        Book a session with a provider.

        Raises:
            ValidationError: Missing provider_id, or booking oneself
            NotFoundError: Unknown or inactive provider
            PayoutDestinationMissing: Provider cannot be paid; nothing written
            GatewayError: Checkout creation failed; the pending booking is
                cancelled
        """
        provider = cls._get_provider(buyer, provider_id)

        intent = None
        for _ in range(CREDIT_ATTEMPTS):
            try:
                intent = cls._book_with_credit(buyer, provider, notes, session_at)
                break
            except ConcurrencyConflict:
                continue

        if intent is not None:
            return intent

        if credit_only:
            return BookingIntent(needs_purchase=True)

        return cls._book_with_payment(buyer, provider, notes, session_at)

    @classmethod
    def _book_with_credit(
        cls,
        buyer: User,
        provider: Provider,
        notes: str,
        session_at: datetime | None,
    ) -> BookingIntent | None:
        """Returns None when the buyer holds no credit with this provider."""
        now = timezone.now()
        join_window = timedelta(hours=settings.BOOKING_JOIN_WINDOW_HOURS)
        booking_id = uuid.uuid4()

        with cls.atomic():
            bundle = CreditLedger.consume(buyer, provider)
            if bundle is None:
                return None

            booking = Booking.objects.create(
                id=booking_id,
                buyer=buyer,
                provider=provider,
                status=BookingStatus.CONFIRMED,
                payment_status=PaymentStatus.PAID,
                used_credit=True,
                credit_bundle=bundle,
                amount_cents=bundle.price_cents // bundle.bundle_size,
                currency=bundle.currency,
                notes=notes,
                session_at=session_at,
                join_url=resolve_join_url(
                    provider.meeting_provider,
                    provider.meeting_base_url,
                    booking_id,
                ),
                join_expires_at=now + join_window,
                confirmed_at=now,
            )

        transaction.on_commit(
            lambda: AchievementService.schedule_evaluation(booking.id)
        )
        cls.get_logger().info(
            "Booking created with credit",
            extra={
                "booking_id": str(booking.id),
                "bundle_id": str(bundle.id),
                "credits_left": bundle.credits_left,
            },
        )
        return BookingIntent(
            booking_id=booking.id,
            credits_left=bundle.credits_left,
            used_credit=True,
        )

    @classmethod
    def _book_with_payment(
        cls,
        buyer: User,
        provider: Provider,
        notes: str,
        session_at: datetime | None,
    ) -> BookingIntent:
        destination = CheckoutService.payout_destination_for(provider.user)

        booking = Booking.objects.create(
            buyer=buyer,
            provider=provider,
            amount_cents=unit_amount_cents(provider.session_price_cents),
            currency=provider.currency,
            notes=notes,
            session_at=session_at,
        )

        try:
            checkout = CheckoutService.create_session_checkout(booking, destination)
        except GatewayError:
            booking.cancel()
            booking.save()
            cls.get_logger().warning(
                "Checkout failed, booking cancelled",
                exc_info=True,
                extra={"booking_id": str(booking.id)},
            )
            raise

        booking.stripe_session_id = checkout.id
        booking.save(update_fields=["stripe_session_id", "updated_at"])

        cls.get_logger().info(
            "Booking awaiting payment",
            extra={"booking_id": str(booking.id), "session_id": checkout.id},
        )
        return BookingIntent(booking_id=booking.id, checkout_url=checkout.url)

    @classmethod
    def request_bundle_purchase(
        cls,
        buyer: User,
        provider_id,
        bundle_size: int,
    ) -> BundleIntent:
        """
        Start a checkout for a bundle of credits with one provider.

        Raises:
            ValidationError: Unsupported bundle size, or buying from oneself
            NotFoundError: Unknown provider
            PayoutDestinationMissing: Provider has no payouts enabled
        """
        provider = cls._get_provider(buyer, provider_id)
        checkout = CheckoutService.create_bundle_checkout(buyer, provider, bundle_size)
        return BundleIntent(checkout_url=checkout.url, session_id=checkout.id)
