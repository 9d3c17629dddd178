"""
Ledger - signed money movements and balances per seller.

Public API:
    Models:
        LedgerEntry - One signed movement (sale, commission, refund)
        SellerBalance - Running available/on-hold totals per seller
        EntryType, BalanceBucket, ReferenceType - Choices

    Service:
        LedgerService - All ledger writes and reads

    Types:
        Money, RecordEntryParams, BalanceSnapshot

Usage:
    from payments.ledger import LedgerService

    LedgerService.record_order_settlement(order)
    balance = LedgerService.balance_for(order.seller)
    print(balance.available)  # "$42.50 USD"
"""

from .exceptions import LedgerError, UnsettledReferenceError
from .models import BalanceBucket, EntryType, LedgerEntry, ReferenceType, SellerBalance
from .services import LedgerService
from .types import BalanceSnapshot, Money, RecordEntryParams

__all__ = [
    # Models
    "LedgerEntry",
    "SellerBalance",
    "EntryType",
    "BalanceBucket",
    "ReferenceType",
    # Service
    "LedgerService",
    # Types
    "Money",
    "RecordEntryParams",
    "BalanceSnapshot",
    # Exceptions
    "LedgerError",
    "UnsettledReferenceError",
]
