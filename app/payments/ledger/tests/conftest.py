"""
Pytest fixtures for ledger tests.
"""

import uuid

import pytest

from authentication.tests.factories import UserFactory
from payments.ledger.models import BalanceBucket, EntryType, ReferenceType
from payments.ledger.types import RecordEntryParams


@pytest.fixture
def seller(db):
    return UserFactory()


@pytest.fixture
def order_id():
    return uuid.uuid4()


@pytest.fixture
def sale_params(seller, order_id):
    """Builds entry params for the seller's order; override any field."""

    def _create(**overrides) -> RecordEntryParams:
        params = {
            "seller_id": seller.pk,
            "reference_type": ReferenceType.ORDER,
            "reference_id": order_id,
            "entry_type": EntryType.SALE,
            "amount_cents": 5000,
            "idempotency_key": f"order:{order_id}:sale",
            "balance_bucket": BalanceBucket.AVAILABLE,
        }
        params.update(overrides)
        return RecordEntryParams(**params)

    return _create
