"""
Ledger service layer.

All ledger writes go through LedgerService so that entries and seller
balances always move together in one transaction.

Usage:
    from payments.ledger.services import LedgerService

    # Marketplace order paid
    LedgerService.record_order_settlement(order)

    # Dispute refunded
    LedgerService.record_refund(
        seller=booking.provider.user,
        reference_type=ReferenceType.BOOKING,
        reference_id=booking.id,
        amount_cents=booking.amount_cents,
        note="Refund for dispute",
        idempotency_key=f"dispute:{dispute.id}:refund",
    )
"""

from __future__ import annotations

import logging
import uuid
from collections import defaultdict
from typing import TYPE_CHECKING

from django.db import IntegrityError, transaction
from django.db.models import F

from .exceptions import UnsettledReferenceError
from .models import BalanceBucket, EntryType, LedgerEntry, ReferenceType, SellerBalance
from .types import BalanceSnapshot, Money, RecordEntryParams

if TYPE_CHECKING:
    from django.contrib.auth.models import AbstractBaseUser

logger = logging.getLogger(__name__)


class LedgerService:
    """
    Service class for seller ledger operations.

    Key features:
    - Atomic transactions covering entries and balance updates
    - Idempotency via unique keys (safe to replay)
    - Balance updates with F() expressions, never read-modify-write

    All methods are static - no instance state is maintained.
    """

    @staticmethod
    def record_entries(entries: list[RecordEntryParams]) -> list[LedgerEntry]:
        """
        Record multiple ledger entries atomically.

        Entries whose idempotency key already exists are returned as they
        are and do not touch the balance again. The summed deltas of the new
        entries are applied to SellerBalance in the same transaction.

        Args:
            entries: List of entry parameters

        Returns:
            List of created or existing LedgerEntry objects, in input order
        """
        if not entries:
            return []

        results: list[LedgerEntry] = []
        deltas: dict[tuple[int, str], int] = defaultdict(int)
        currencies: dict[int, str] = {}

        with transaction.atomic():
            for params in entries:
                existing = LedgerEntry.objects.filter(
                    idempotency_key=params.idempotency_key
                ).first()
                if existing is not None:
                    results.append(existing)
                    continue

                try:
                    with transaction.atomic():
                        entry = LedgerEntry.objects.create(
                            idempotency_key=params.idempotency_key,
                            seller_id=params.seller_id,
                            reference_type=params.reference_type,
                            reference_id=params.reference_id,
                            entry_type=params.entry_type,
                            amount_cents=params.amount_cents,
                            currency=params.currency,
                            balance_bucket=params.balance_bucket,
                            note=params.note,
                        )
                except IntegrityError:
                    # Another transaction inserted the same key first
                    results.append(
                        LedgerEntry.objects.get(idempotency_key=params.idempotency_key)
                    )
                    continue

                deltas[(params.seller_id, params.balance_bucket)] += params.amount_cents
                currencies.setdefault(params.seller_id, params.currency)
                results.append(entry)

            for (seller_id, bucket), delta in deltas.items():
                if delta == 0:
                    continue
                LedgerService._apply_delta(
                    seller_id, bucket, delta, currencies[seller_id]
                )

        if deltas:
            logger.info(
                "Ledger entries recorded",
                extra={
                    "entry_count": len(entries),
                    "sellers": sorted({seller for seller, _ in deltas}),
                },
            )
        return results

    @staticmethod
    def _apply_delta(seller_id: int, bucket: str, delta: int, currency: str) -> None:
        """Upsert the seller balance row and add delta to one bucket."""
        SellerBalance.objects.get_or_create(
            seller_id=seller_id,
            defaults={"currency": currency},
        )
        column = (
            "on_hold_cents" if bucket == BalanceBucket.ON_HOLD else "available_cents"
        )
        SellerBalance.objects.filter(seller_id=seller_id).update(
            **{column: F(column) + delta}
        )

    @staticmethod
    def record_order_settlement(order) -> list[LedgerEntry]:
        """
        Record the sale and commission entries for a paid order.

        Writes +subtotal (sale) and -platform_fee (commission), so the
        entries of every order sum to its seller net. Digital orders land in
        the available bucket, physical orders on hold.

        Raises:
            UnsettledReferenceError: If the order has not been paid
        """
        if order.paid_at is None:
            raise UnsettledReferenceError(
                "Cannot settle an unpaid order",
                details={"order_id": str(order.id)},
            )

        if order.kind == "physical":
            bucket = BalanceBucket.ON_HOLD
        else:
            bucket = BalanceBucket.AVAILABLE
        entries = [
            RecordEntryParams(
                seller_id=order.seller_id,
                reference_type=ReferenceType.ORDER,
                reference_id=order.id,
                entry_type=EntryType.SALE,
                amount_cents=order.subtotal_cents,
                idempotency_key=f"order:{order.id}:sale",
                balance_bucket=bucket,
                currency=order.currency,
                note=f"Sale of {order.quantity} x {order.listing.title}",
            )
        ]
        if order.platform_fee_cents > 0:
            entries.append(
                RecordEntryParams(
                    seller_id=order.seller_id,
                    reference_type=ReferenceType.ORDER,
                    reference_id=order.id,
                    entry_type=EntryType.COMMISSION,
                    amount_cents=-order.platform_fee_cents,
                    idempotency_key=f"order:{order.id}:commission",
                    balance_bucket=bucket,
                    currency=order.currency,
                    note="Platform commission",
                )
            )
        return LedgerService.record_entries(entries)

    @staticmethod
    def record_refund(
        seller: AbstractBaseUser,
        reference_type: str,
        reference_id: uuid.UUID,
        amount_cents: int,
        note: str,
        idempotency_key: str,
        balance_bucket: str = BalanceBucket.AVAILABLE,
        currency: str = "usd",
    ) -> LedgerEntry:
        """
        Record one refund entry of -amount_cents against the seller.

        Args:
            amount_cents: Refunded amount, positive
        """
        return LedgerService.record_entries(
            [
                RecordEntryParams(
                    seller_id=seller.pk,
                    reference_type=reference_type,
                    reference_id=reference_id,
                    entry_type=EntryType.REFUND,
                    amount_cents=-abs(amount_cents),
                    idempotency_key=idempotency_key,
                    balance_bucket=balance_bucket,
                    currency=currency,
                    note=note,
                )
            ]
        )[0]

    @staticmethod
    def record_order_refund(
        order, amount_cents: int, idempotency_key: str, note: str = ""
    ) -> list[LedgerEntry]:
        """
        Reverse the seller's share of a refunded order.

        Shipping is refunded first from the platform's side, so only the part
        of the refund covering goods is debited as -refund. The commission
        taken on those goods is credited back in proportion, which makes a
        full refund net the order's entries to zero. Lands in the same bucket
        the settlement used.

        Args:
            amount_cents: Amount refunded to the buyer, positive
            idempotency_key: Key for the refund entry; the commission
                reversal uses "<key>:commission"
        """
        goods_cents = min(abs(amount_cents), order.subtotal_cents)
        if goods_cents == 0:
            return []

        if goods_cents == order.subtotal_cents:
            reversal_cents = order.platform_fee_cents
        else:
            reversal_cents = (
                goods_cents * order.platform_fee_cents // order.subtotal_cents
            )

        if order.kind == "physical":
            bucket = BalanceBucket.ON_HOLD
        else:
            bucket = BalanceBucket.AVAILABLE
        entries = [
            RecordEntryParams(
                seller_id=order.seller_id,
                reference_type=ReferenceType.ORDER,
                reference_id=order.id,
                entry_type=EntryType.REFUND,
                amount_cents=-goods_cents,
                idempotency_key=idempotency_key,
                balance_bucket=bucket,
                currency=order.currency,
                note=note or f"Refund of order {order.id}",
            )
        ]
        if reversal_cents > 0:
            entries.append(
                RecordEntryParams(
                    seller_id=order.seller_id,
                    reference_type=ReferenceType.ORDER,
                    reference_id=order.id,
                    entry_type=EntryType.COMMISSION,
                    amount_cents=reversal_cents,
                    idempotency_key=f"{idempotency_key}:commission",
                    balance_bucket=bucket,
                    currency=order.currency,
                    note="Commission reversal",
                )
            )
        return LedgerService.record_entries(entries)

    @staticmethod
    def entries_for(reference_type: str, reference_id: uuid.UUID) -> list[LedgerEntry]:
        """All entries for an order or booking, oldest first."""
        return list(
            LedgerEntry.objects.filter(
                reference_type=reference_type,
                reference_id=reference_id,
            ).order_by("created_at")
        )

    @staticmethod
    def balance_for(seller: AbstractBaseUser) -> BalanceSnapshot:
        """
        Current balance of a seller.

        Sellers without any entries have a zero balance.
        """
        balance = SellerBalance.objects.filter(seller_id=seller.pk).first()
        if balance is None:
            return BalanceSnapshot(available=Money(0), on_hold=Money(0))
        return BalanceSnapshot(
            available=Money(balance.available_cents, balance.currency),
            on_hold=Money(balance.on_hold_cents, balance.currency),
        )
