"""
Pytest fixtures for payment tests.

Gateway calls are never made: tests patch StripeAdapter (service tests) or
the stripe SDK resources (adapter tests).
"""

from unittest.mock import patch

import pytest

from authentication.tests.factories import UserFactory
from payments.adapters import ChargeResult, CheckoutSessionResult
from payments.tests.factories import ConnectedAccountFactory


# =============================================================================
# User Fixtures
# =============================================================================


@pytest.fixture
def buyer(db):
    return UserFactory()


@pytest.fixture
def seller(db):
    return UserFactory()


@pytest.fixture
def seller_account(db, seller):
    """Seller with payouts fully enabled."""
    return ConnectedAccountFactory(user=seller)


# =============================================================================
# Gateway Fixtures
# =============================================================================


@pytest.fixture
def checkout_session():
    return CheckoutSessionResult(
        id="cs_test_123",
        url="https://checkout.stripe.com/c/pay/cs_test_123",
        payment_status="unpaid",
    )


@pytest.fixture
def mock_create_checkout(checkout_session):
    """Patch hosted checkout creation and return the mock."""
    with patch(
        "payments.adapters.stripe_adapter.StripeAdapter.create_checkout_session",
        return_value=checkout_session,
    ) as mock:
        yield mock


@pytest.fixture
def realized_charge():
    return ChargeResult(
        session_id="cs_test_123",
        payment_intent_id="pi_test_123",
        charge_id="ch_test_123",
        amount_cents=5000,
        application_fee_cents=750,
        transfer_id="tr_test_123",
    )


@pytest.fixture
def mock_retrieve_charge(realized_charge):
    with patch(
        "payments.adapters.stripe_adapter.StripeAdapter.retrieve_checkout_charge",
        return_value=realized_charge,
    ) as mock:
        yield mock
