"""
Seller ledger models.

- LedgerEntry: An append-only, signed money movement for a seller
- SellerBalance: Running totals per seller, split by balance bucket

Entries are never updated or deleted; corrections are new entries. Balances
only change in the same transaction that inserts the entries behind them
(see LedgerService.record_entries).

Usage:
    from payments.ledger.models import LedgerEntry, EntryType

    LedgerEntry.objects.filter(
        reference_type=ReferenceType.ORDER,
        reference_id=order.id,
    ).aggregate(total=Sum("amount_cents"))
"""

from __future__ import annotations

from django.conf import settings
from django.db import models
from django.db.models import Q

from core.model_mixins import UUIDPrimaryKeyMixin


class ReferenceType(models.TextChoices):
    """Business object an entry belongs to."""

    ORDER = "order", "Order"
    BOOKING = "booking", "Booking"


class EntryType(models.TextChoices):
    """
    Types of ledger entries.

    Values:
        SALE: Gross sale amount credited to the seller (positive)
        COMMISSION: Platform fee taken from the sale (negative)
        REFUND: Money returned to the buyer (negative)
    """

    SALE = "sale", "Sale"
    COMMISSION = "commission", "Commission"
    REFUND = "refund", "Refund"


class BalanceBucket(models.TextChoices):
    """
    Where an entry lands on the seller's balance.

    Digital sales are available immediately; physical sales stay on hold
    until fulfilled.
    """

    AVAILABLE = "available", "Available"
    ON_HOLD = "on_hold", "On Hold"


class LedgerEntry(UUIDPrimaryKeyMixin, models.Model):
    """
    A signed money movement attributed to a seller.

    Fields:
        seller: User whose balance the entry affects
        reference_type: order or booking
        reference_id: UUID of the order or booking
        entry_type: sale, commission or refund
        amount_cents: Signed amount (sales positive, fees and refunds negative)
        currency: ISO 4217 currency code
        balance_bucket: available or on_hold
        note: Free text shown in statements
        idempotency_key: Unique key that makes replays harmless

    Example:
        LedgerEntry(
            seller=order.seller,
            reference_type=ReferenceType.ORDER,
            reference_id=order.id,
            entry_type=EntryType.COMMISSION,
            amount_cents=-750,
            balance_bucket=BalanceBucket.AVAILABLE,
            idempotency_key=f"order:{order.id}:commission",
        )
    """

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    seller = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="ledger_entries",
    )
    reference_type = models.CharField(
        max_length=20,
        choices=ReferenceType.choices,
    )
    reference_id = models.UUIDField(
        help_text="UUID of the order or booking",
    )

    entry_type = models.CharField(
        max_length=20,
        choices=EntryType.choices,
    )
    amount_cents = models.BigIntegerField(
        help_text="Signed amount in cents",
    )
    currency = models.CharField(max_length=3, default="usd")
    balance_bucket = models.CharField(
        max_length=20,
        choices=BalanceBucket.choices,
        default=BalanceBucket.AVAILABLE,
    )

    note = models.TextField(blank=True, default="")
    idempotency_key = models.CharField(
        max_length=255,
        unique=True,
        help_text="Unique key to prevent duplicate entries",
    )

    class Meta:
        ordering = ["created_at"]
        verbose_name_plural = "Ledger entries"
        indexes = [
            models.Index(
                fields=["reference_type", "reference_id"], name="ledger_reference_idx"
            ),
            models.Index(
                fields=["seller", "created_at"], name="ledger_seller_created_idx"
            ),
        ]
        constraints = [
            models.CheckConstraint(
                condition=~Q(amount_cents=0),
                name="ledger_entry_amount_nonzero",
            )
        ]

    def __str__(self) -> str:
        return f"{self.get_entry_type_display()}: {self.amount_cents} cents"


class SellerBalance(models.Model):
    """
    Running balance for one seller.

    Maintained with F() increments by LedgerService; never written directly.
    """

    seller = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="seller_balance",
        primary_key=True,
    )
    available_cents = models.BigIntegerField(default=0)
    on_hold_cents = models.BigIntegerField(default=0)
    currency = models.CharField(max_length=3, default="usd")
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Seller balance"

    def __str__(self) -> str:
        return (
            f"SellerBalance({self.seller_id}: "
            f"{self.available_cents} available, {self.on_hold_cents} on hold)"
        )

    @property
    def total_cents(self) -> int:
        return self.available_cents + self.on_hold_cents
