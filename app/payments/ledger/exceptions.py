"""
Ledger-specific exceptions.

Exception Hierarchy:
    LedgerError (base)
    └── UnsettledReferenceError - Settlement requested for an unpaid order
"""

from __future__ import annotations

from core.exceptions import BaseApplicationError


class LedgerError(BaseApplicationError):
    """Base exception for all ledger operations."""

    default_error_code: str = "LEDGER_ERROR"


class UnsettledReferenceError(LedgerError):
    """
    Raised when ledger entries are requested for an order that has not been
    paid.

    Example:
        if order.paid_at is None:
            raise UnsettledReferenceError(
                "Order is not paid",
                details={"order_id": str(order.id)},
            )
    """

    default_error_code: str = "UNSETTLED_REFERENCE"
    status_code: int = 409
