"""
Data types for ledger operations.

Types:
    Money: A monetary amount in cents with currency
    RecordEntryParams: Parameters for recording one ledger entry
    BalanceSnapshot: A seller's balance at read time

Usage:
    from payments.ledger.types import Money, RecordEntryParams

    amount = Money(cents=5000, currency="usd")
    print(amount)  # "$50.00 USD"
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass


@dataclass
class Money:
    """
    Represents a monetary amount.

    All amounts are stored in cents to avoid floating-point precision
    issues.

    Example:
        Money(cents=-2500)  # "$-25.00 USD"
    """

    cents: int
    currency: str = "usd"

    def __str__(self) -> str:
        dollars = self.cents / 100
        return f"${dollars:.2f} {self.currency.upper()}"

    def __add__(self, other: Money) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        if self.currency != other.currency:
            raise ValueError(
                f"Cannot add Money with different currencies: "
                f"{self.currency} and {other.currency}"
            )
        return Money(cents=self.cents + other.cents, currency=self.currency)


@dataclass
class RecordEntryParams:
    """
    Parameters for recording a ledger entry.

    Required Attributes:
        seller_id: User whose balance is affected
        reference_type: 'order' or 'booking'
        reference_id: UUID of the order or booking
        entry_type: 'sale', 'commission' or 'refund'
        amount_cents: Signed, non-zero amount
        idempotency_key: Unique key to prevent duplicate entries

    Example:
        RecordEntryParams(
            seller_id=order.seller_id,
            reference_type=ReferenceType.ORDER,
            reference_id=order.id,
            entry_type=EntryType.SALE,
            amount_cents=order.subtotal_cents,
            idempotency_key=f"order:{order.id}:sale",
        )
    """

    seller_id: int
    reference_type: str
    reference_id: uuid.UUID
    entry_type: str
    amount_cents: int
    idempotency_key: str

    balance_bucket: str = "available"
    currency: str = "usd"
    note: str = ""

    def __post_init__(self) -> None:
        if self.amount_cents == 0:
            raise ValueError("amount_cents must be non-zero")
        if not self.idempotency_key:
            raise ValueError("idempotency_key is required")


@dataclass
class BalanceSnapshot:
    available: Money
    on_hold: Money

    @property
    def total(self) -> Money:
        return self.available + self.on_hold
