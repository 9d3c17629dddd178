"""
Experience points for bookings.

Runs in a Celery task after the booking has committed. Nothing here may
affect the booking: failures are logged by the task and dropped.
"""

from __future__ import annotations

import uuid

from django.conf import settings
from django.db import IntegrityError, transaction

from bookings.models import Booking, BookingStatus, XPAward, XPReason
from core.services import BaseService, ServiceResult
from notifications.models import NotificationKind
from notifications.services import NotificationService

BOOKING_REFERENCE = "booking"


class AchievementService(BaseService):
    """Grants XP awards. Every award is idempotent per (user, reason, reference)."""

    @classmethod
    def schedule_evaluation(cls, booking_id: uuid.UUID) -> None:
        """
        Queue evaluate_booking_achievements for a committed booking.

        Call through transaction.on_commit. Queueing failures are logged.
        """
        from bookings.tasks import evaluate_booking_achievements

        try:
            evaluate_booking_achievements.delay(str(booking_id))
        except Exception:
            cls.get_logger().warning(
                "Could not queue achievement evaluation",
                exc_info=True,
                extra={"booking_id": str(booking_id)},
            )

    @classmethod
    def _award(
        cls,
        user,
        reason: str,
        amount: int,
        reference_id: uuid.UUID,
    ) -> XPAward | None:
        """Create the award, or return None if the user already has it."""
        try:
            with transaction.atomic():
                return XPAward.objects.create(
                    user=user,
                    amount=amount,
                    reason=reason,
                    reference_type=BOOKING_REFERENCE,
                    reference_id=reference_id,
                )
        except IntegrityError:
            return None

    @classmethod
    def evaluate_booking(cls, booking_id: uuid.UUID) -> ServiceResult[list[XPAward]]:
        """
        Award the buyer for a confirmed booking.

        - session_booked: once per booking
        - first_session: once per user, with an in-app notification
        """
        booking = Booking.objects.select_related("buyer").filter(pk=booking_id).first()
        if booking is None:
            return ServiceResult.failure(
                f"Booking {booking_id} not found", error_code="BOOKING_NOT_FOUND"
            )
        if booking.status not in (BookingStatus.CONFIRMED, BookingStatus.COMPLETED):
            return ServiceResult.success([])

        buyer = booking.buyer
        awards = []

        booked = cls._award(
            buyer, XPReason.SESSION_BOOKED, settings.XP_SESSION_BOOKED, booking.id
        )
        if booked is not None:
            awards.append(booked)

        if not XPAward.objects.filter(
            user=buyer, reason=XPReason.FIRST_SESSION
        ).exists():
            first = cls._award(
                buyer,
                XPReason.FIRST_SESSION,
                settings.XP_FIRST_SESSION_BONUS,
                booking.id,
            )
            if first is not None:
                awards.append(first)
                NotificationService.create_notification(
                    recipient=buyer,
                    type_key=NotificationKind.ACHIEVEMENT,
                    title="First session booked",
                    body=(
                        f"You earned {first.amount} XP for booking your first "
                        "session."
                    ),
                    link=f"/bookings/{booking.id}",
                    data={"xp": first.amount, "reason": first.reason},
                    idempotency_key=f"achievement:first_session:{buyer.pk}",
                )

        cls.get_logger().info(
            "Booking achievements evaluated",
            extra={
                "booking_id": str(booking.id),
                "buyer_id": buyer.pk,
                "awards": [award.reason for award in awards],
            },
        )
        return ServiceResult.success(awards)
