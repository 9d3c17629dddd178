"""
Payment domain models.

- ConnectedAccount: Stripe Connect accounts for providers and sellers
- WebhookEvent: Processed-event records for gateway notifications
- LedgerEntry, SellerBalance: Seller money movements (see payments.ledger)
"""

from payments.ledger.models import (
    BalanceBucket,
    EntryType,
    LedgerEntry,
    ReferenceType,
    SellerBalance,
)
from payments.models.connected_account import ConnectedAccount
from payments.models.webhook_event import WebhookEvent

__all__ = [
    "BalanceBucket",
    "ConnectedAccount",
    "EntryType",
    "LedgerEntry",
    "ReferenceType",
    "SellerBalance",
    "WebhookEvent",
]
