"""
Confirmation of paid session bookings.

Called by the checkout-completed webhook handler inside the webhook
transaction. Confirmation is a conditional UPDATE on status=pending, so a
replayed or concurrent delivery of the same event confirms at most once.
"""

from __future__ import annotations

import uuid
from datetime import timedelta

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from bookings.meeting import resolve_join_url
from bookings.models import Booking, BookingStatus
from bookings.services.achievements import AchievementService
from core.services import BaseService, ServiceResult
from notifications.models import NotificationKind
from notifications.services import NotificationService
from payments.adapters import StripeAdapter
from payments.state_machines import PaymentStatus


class BookingConfirmationService(BaseService):
    """Moves paid bookings from pending to confirmed."""

    @classmethod
    def confirm_paid(
        cls,
        booking_id: uuid.UUID,
        session_id: str,
    ) -> ServiceResult[Booking]:
        """
        Confirm a booking whose checkout session has been paid.

        Fee, net and gateway ids are copied from the realized charge.

        Error codes:
            BOOKING_NOT_FOUND: No such booking; the event fails and the
                gateway redelivers it
        """
        logger = cls.get_logger()
        booking = (
            Booking.objects.select_related("provider", "provider__user", "buyer")
            .filter(pk=booking_id)
            .first()
        )
        if booking is None:
            logger.error(
                "Paid checkout for unknown booking",
                extra={"booking_id": str(booking_id), "session_id": session_id},
            )
            return ServiceResult.failure(
                f"Booking {booking_id} not found",
                error_code="BOOKING_NOT_FOUND",
            )

        if booking.status != BookingStatus.PENDING:
            logger.info(
                "Booking no longer pending, skipping",
                extra={"booking_id": str(booking.id), "status": booking.status},
            )
            return ServiceResult.success(booking)

        charge = StripeAdapter.retrieve_checkout_charge(session_id)
        provider = booking.provider
        now = timezone.now()

        updated = Booking.objects.filter(
            pk=booking.pk,
            status=BookingStatus.PENDING,
        ).update(
            status=BookingStatus.CONFIRMED,
            payment_status=PaymentStatus.PAID,
            stripe_session_id=session_id,
            stripe_payment_intent_id=charge.payment_intent_id or "",
            stripe_charge_id=charge.charge_id or "",
            stripe_transfer_id=charge.transfer_id or "",
            application_fee_cents=charge.application_fee_cents,
            net_amount_cents=charge.net_cents,
            join_url=resolve_join_url(
                provider.meeting_provider,
                provider.meeting_base_url,
                booking.id,
            ),
            join_expires_at=now + timedelta(hours=settings.BOOKING_JOIN_WINDOW_HOURS),
            confirmed_at=now,
            updated_at=now,
        )

        if updated == 0:
            # A concurrent delivery confirmed it between our read and update
            logger.info(
                "Booking confirmed concurrently",
                extra={"booking_id": str(booking.id)},
            )
            booking.refresh_from_db()
            return ServiceResult.success(booking)

        booking.refresh_from_db()
        cls._notify_confirmed(booking)
        transaction.on_commit(
            lambda: AchievementService.schedule_evaluation(booking.id)
        )

        logger.info(
            "Booking confirmed",
            extra={
                "booking_id": str(booking.id),
                "charge_id": booking.stripe_charge_id,
                "application_fee_cents": booking.application_fee_cents,
                "net_amount_cents": booking.net_amount_cents,
            },
        )
        return ServiceResult.success(booking)

    @classmethod
    def _notify_confirmed(cls, booking: Booking) -> None:
        provider = booking.provider
        for recipient, title in (
            (booking.buyer, f"Your session with {provider.display_name} is booked"),
            (provider.user, "You have a new booking"),
        ):
            NotificationService.create_notification(
                recipient=recipient,
                type_key=NotificationKind.BOOKING_CONFIRMED,
                title=title,
                link=f"/bookings/{booking.id}",
                data={"booking_id": str(booking.id), "join_url": booking.join_url},
                idempotency_key=f"booking-confirmed:{booking.id}:{recipient.pk}",
            )

