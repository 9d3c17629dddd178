"""
Dispute filing and resolution.

Resolution with a refund happens in two steps:
1. Gateway refund, outside any transaction. A GatewayError aborts the
   resolution and nothing changes locally. The idempotency key is per
   dispute, so retrying after a later failure never refunds twice.
2. One transaction: target refunded, ledger refund entry, dispute resolved,
   both parties notified.

Usage:
    from disputes.services import DisputeService

    dispute = DisputeService.open_dispute(
        claimant=request.user,
        booking_id=booking.id,
        dispute_type=DisputeType.SERVICE_NOT_DELIVERED,
        reason="Provider never joined",
    )
    result = DisputeService.resolve_dispute(dispute.id, "refund", note, staff)
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from django.core.exceptions import ValidationError as DjangoValidationError
from django_fsm import can_proceed

from bookings.models import Booking
from core.exceptions import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from core.services import BaseService, ServiceResult
from disputes.models import OPEN_STATUSES, Dispute
from marketplace.models import Order
from notifications.models import NotificationKind
from notifications.services import NotificationService
from payments.adapters import IdempotencyKeyGenerator, StripeAdapter
from payments.ledger import BalanceBucket, LedgerService, ReferenceType

if TYPE_CHECKING:
    from authentication.models import User


class Decision:
    REFUND = "refund"
    REJECT = "reject"

    ALL = (REFUND, REJECT)


def _format_cents(amount_cents: int, currency: str) -> str:
    return f"{amount_cents / 100:.2f} {currency.upper()}"


class DisputeService(BaseService):
    """Opens and resolves disputes. All methods are classmethods."""

    @classmethod
    def _get_target(cls, booking_id, order_id) -> Booking | Order:
        if (booking_id is None) == (order_id is None):
            raise ValidationError(
                "Provide exactly one of booking_id or order_id",
                details={"fields": ["booking_id", "order_id"]},
            )

        try:
            if booking_id is not None:
                return Booking.objects.select_related("provider__user").get(
                    pk=booking_id
                )
            return Order.objects.select_related("seller").get(pk=order_id)
        except (
            Booking.DoesNotExist,
            Order.DoesNotExist,
            ValueError,
            DjangoValidationError,
        ):
            if booking_id is not None:
                raise NotFoundError(
                    "Booking not found",
                    error_code="BOOKING_NOT_FOUND",
                    details={"booking_id": str(booking_id)},
                )
            raise NotFoundError(
                "Order not found",
                error_code="ORDER_NOT_FOUND",
                details={"order_id": str(order_id)},
            )

    @staticmethod
    def _paid_amount(target: Booking | Order) -> int:
        if isinstance(target, Booking):
            return target.amount_cents
        return target.total_cents

    @classmethod
    def open_dispute(
        cls,
        claimant: User,
        dispute_type: str,
        reason: str,
        booking_id: uuid.UUID | None = None,
        order_id: uuid.UUID | None = None,
        amount_cents: int | None = None,
    ) -> Dispute:
        """
        File a dispute against a paid booking or order.

        The amount defaults to what the buyer paid and cannot exceed it.

        Raises:
            ValidationError: Not exactly one target, target not refundable,
                or amount above the paid amount
            NotFoundError: Unknown booking or order
            PermissionDeniedError: Claimant is not the buyer
            ConflictError: An open dispute already exists for the target
        """
        target = cls._get_target(booking_id, order_id)

        if target.buyer_id != claimant.pk:
            raise PermissionDeniedError(
                "Only the buyer can dispute this purchase",
                details={"target_id": str(target.pk)},
            )
        if not can_proceed(target.refund):
            raise ValidationError(
                f"A {target.status} purchase cannot be disputed",
                error_code="NOT_DISPUTABLE",
                details={"target_id": str(target.pk), "status": target.status},
            )

        paid = cls._paid_amount(target)
        if amount_cents is None:
            amount_cents = paid
        if amount_cents > paid:
            raise ValidationError(
                "Dispute amount exceeds the amount paid",
                details={"amount_cents": amount_cents, "paid_cents": paid},
            )

        target_field = "booking" if isinstance(target, Booking) else "order"
        if Dispute.objects.filter(
            **{target_field: target}, status__in=OPEN_STATUSES
        ).exists():
            raise ConflictError(
                "An open dispute already exists for this purchase",
                error_code="DISPUTE_ALREADY_OPEN",
                details={"target_id": str(target.pk)},
            )

        with cls.atomic():
            dispute = Dispute.objects.create(
                claimant=claimant,
                dispute_type=dispute_type,
                reason=reason,
                amount_cents=amount_cents,
                **{target_field: target},
            )
            NotificationService.create_notification(
                recipient=dispute.respondent,
                type_key=NotificationKind.DISPUTE_OPENED,
                title="A buyer opened a dispute",
                body=reason,
                link=f"/disputes/{dispute.id}",
                data={
                    "dispute_id": str(dispute.id),
                    "dispute_type": dispute_type,
                    "amount_cents": amount_cents,
                },
                actor=claimant,
                idempotency_key=f"dispute-opened:{dispute.id}",
            )

        cls.get_logger().info(
            "Dispute opened",
            extra={
                "dispute_id": str(dispute.id),
                target_field + "_id": str(target.pk),
                "dispute_type": dispute_type,
                "amount_cents": amount_cents,
            },
        )
        return dispute

    @classmethod
    def start_investigation(
        cls, dispute_id: uuid.UUID, staff: User
    ) -> ServiceResult[Dispute]:
        """
        Move a pending dispute to investigating.

        Error codes:
            DISPUTE_NOT_FOUND: No such dispute
            DISPUTE_NOT_PENDING: Already under investigation or closed
        """
        with cls.atomic():
            dispute = Dispute.objects.select_for_update().filter(pk=dispute_id).first()
            if dispute is None:
                return ServiceResult.failure(
                    f"Dispute {dispute_id} not found", error_code="DISPUTE_NOT_FOUND"
                )
            if not can_proceed(dispute.start_investigation):
                return ServiceResult.failure(
                    f"Cannot investigate a dispute in status {dispute.status}",
                    error_code="DISPUTE_NOT_PENDING",
                )
            dispute.start_investigation()
            dispute.save()

        cls.get_logger().info(
            "Dispute under investigation",
            extra={"dispute_id": str(dispute.id), "staff_id": staff.pk},
        )
        return ServiceResult.success(dispute)

    @classmethod
    def resolve_dispute(
        cls,
        dispute_id: uuid.UUID,
        decision: str,
        note: str,
        resolved_by: User,
    ) -> ServiceResult[Dispute]:
        """
        Close a dispute with a refund or a rejection.

        Raises:
            ValidationError: Unknown decision
            GatewayError: The gateway refund failed; nothing was changed

        Error codes:
            DISPUTE_NOT_FOUND: No such dispute
            DISPUTE_ALREADY_CLOSED: The dispute is resolved or rejected
            NOT_REFUNDABLE: The target can no longer be refunded
        """
        if decision not in Decision.ALL:
            raise ValidationError(
                f"Unknown decision: {decision}",
                details={"decision": decision, "allowed": list(Decision.ALL)},
            )

        dispute = (
            Dispute.objects.select_related(
                "claimant",
                "booking",
                "booking__provider__user",
                "order",
                "order__seller",
            )
            .filter(pk=dispute_id)
            .first()
        )
        if dispute is None:
            return ServiceResult.failure(
                f"Dispute {dispute_id} not found", error_code="DISPUTE_NOT_FOUND"
            )
        if not dispute.is_open:
            return ServiceResult.failure(
                "Dispute is already closed", error_code="DISPUTE_ALREADY_CLOSED"
            )

        if decision == Decision.REJECT:
            return cls._reject(dispute, note, resolved_by)
        return cls._refund(dispute, note, resolved_by)

    @classmethod
    def _reject(
        cls, dispute: Dispute, note: str, resolved_by
    ) -> ServiceResult[Dispute]:
        with cls.atomic():
            dispute.reject(note, resolved_by)
            dispute.save()
            NotificationService.create_notification(
                recipient=dispute.claimant,
                type_key=NotificationKind.DISPUTE_REJECTED,
                title="Your dispute was rejected",
                body=note,
                link=f"/disputes/{dispute.id}",
                data={"dispute_id": str(dispute.id)},
                idempotency_key=f"dispute-closed:{dispute.id}:{dispute.claimant_id}",
            )

        cls.get_logger().info(
            "Dispute rejected",
            extra={"dispute_id": str(dispute.id), "resolved_by": resolved_by.pk},
        )
        return ServiceResult.success(dispute)

    @classmethod
    def _refund(
        cls, dispute: Dispute, note: str, resolved_by
    ) -> ServiceResult[Dispute]:
        target = dispute.target
        if not can_proceed(target.refund):
            return ServiceResult.failure(
                f"A {target.status} purchase cannot be refunded",
                error_code="NOT_REFUNDABLE",
            )

        if target.paid_through_gateway:
            cls._refund_through_gateway(dispute, target)

        with cls.atomic():
            target.refund()
            target.save()
            cls._record_ledger_refund(dispute, target)
            dispute.resolve(note, resolved_by)
            dispute.save()

            amount = _format_cents(dispute.amount_cents, target.currency)
            for recipient in (dispute.claimant, dispute.respondent):
                NotificationService.create_notification(
                    recipient=recipient,
                    type_key=NotificationKind.DISPUTE_RESOLVED,
                    title=f"Dispute resolved with a refund of {amount}",
                    body=note,
                    link=f"/disputes/{dispute.id}",
                    data={
                        "dispute_id": str(dispute.id),
                        "amount_cents": dispute.amount_cents,
                    },
                    idempotency_key=f"dispute-closed:{dispute.id}:{recipient.pk}",
                )

        cls.get_logger().info(
            "Dispute resolved with refund",
            extra={
                "dispute_id": str(dispute.id),
                "amount_cents": dispute.amount_cents,
                "resolved_by": resolved_by.pk,
            },
        )
        return ServiceResult.success(dispute)

    @classmethod
    def _refund_through_gateway(cls, dispute: Dispute, target: Booking | Order) -> None:
        """
        Refund the buyer's payment.

        Destination charges also reverse the transfer and return the
        application fee, so seller and platform each give back their share.
        """
        if isinstance(target, Booking):
            destination_charge = bool(target.stripe_transfer_id)
        else:
            destination_charge = target.is_digital

        refund = StripeAdapter.create_refund(
            payment_intent_id=target.stripe_payment_intent_id,
            idempotency_key=IdempotencyKeyGenerator.generate(
                "dispute_refund", dispute.id
            ),
            amount_cents=dispute.amount_cents,
            reverse_transfer=destination_charge,
            refund_application_fee=destination_charge,
            reason="requested_by_customer",
            metadata={"dispute_id": str(dispute.id)},
        )
        cls.get_logger().info(
            "Gateway refund created",
            extra={
                "dispute_id": str(dispute.id),
                "refund_id": refund.id,
                "refund_status": refund.status,
            },
        )

    @classmethod
    def _record_ledger_refund(cls, dispute: Dispute, target: Booking | Order) -> None:
        if dispute.amount_cents == 0:
            return

        note = f"Refund for dispute {dispute.id}"
        idempotency_key = f"dispute:{dispute.id}:refund"
        if isinstance(target, Order):
            LedgerService.record_order_refund(
                target,
                amount_cents=dispute.amount_cents,
                idempotency_key=idempotency_key,
                note=note,
            )
            return

        LedgerService.record_refund(
            seller=dispute.respondent,
            reference_type=ReferenceType.BOOKING,
            reference_id=target.pk,
            amount_cents=dispute.amount_cents,
            note=note,
            idempotency_key=idempotency_key,
            balance_bucket=BalanceBucket.AVAILABLE,
            currency=target.currency,
        )
