"""
Factory Boy factories for ledger test data.

Usage:
    from payments.ledger.tests.factories import LedgerEntryFactory

    entry = LedgerEntryFactory(seller=seller, amount_cents=-750)
"""

import uuid

import factory

from authentication.tests.factories import UserFactory
from payments.ledger.models import BalanceBucket, EntryType, LedgerEntry, ReferenceType


class LedgerEntryFactory(factory.django.DjangoModelFactory):
    """A sale entry for a random order. Does not touch SellerBalance."""

    class Meta:
        model = LedgerEntry

    seller = factory.SubFactory(UserFactory)
    reference_type = ReferenceType.ORDER
    reference_id = factory.LazyFunction(uuid.uuid4)
    entry_type = EntryType.SALE
    amount_cents = 5000
    currency = "usd"
    balance_bucket = BalanceBucket.AVAILABLE
    idempotency_key = factory.Sequence(lambda n: f"test-entry-{n}")
