"""
Pytest fixtures for dispute tests.
"""

from unittest.mock import patch

import pytest

from authentication.tests.factories import UserFactory
from bookings.tests.factories import BookingFactory
from payments.adapters import RefundResult


@pytest.fixture
def staff(db):
    return UserFactory(is_staff=True)


@pytest.fixture
def paid_booking(db):
    """Confirmed destination-charge booking at 50.00 USD."""
    return BookingFactory(
        confirmed=True, amount_cents=5000, stripe_transfer_id="tr_test_dispute"
    )


@pytest.fixture
def mock_create_refund():
    refund = RefundResult(
        id="re_test_dispute",
        amount_cents=5000,
        currency="usd",
        status="succeeded",
        payment_intent_id="pi_test_dispute",
    )
    with patch(
        "payments.adapters.stripe_adapter.StripeAdapter.create_refund",
        return_value=refund,
    ) as mock:
        yield mock
