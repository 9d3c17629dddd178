"""
Pytest fixtures for marketplace tests.
"""

from unittest.mock import patch

import pytest

from authentication.tests.factories import UserFactory
from marketplace.tests.factories import ListingFactory
from payments.adapters import ChargeResult, CheckoutSessionResult
from payments.tests.factories import ConnectedAccountFactory


# =============================================================================
# Participant Fixtures
# =============================================================================


@pytest.fixture
def buyer(db):
    return UserFactory()


@pytest.fixture
def seller(db):
    return UserFactory()


@pytest.fixture
def seller_account(seller):
    return ConnectedAccountFactory(user=seller)


@pytest.fixture
def digital_listing(seller):
    return ListingFactory(seller=seller, price_cents=2000)


@pytest.fixture
def physical_listing(seller):
    return ListingFactory(seller=seller, physical=True, price_cents=3000, inventory=5)


# =============================================================================
# Gateway Fixtures
# =============================================================================


@pytest.fixture
def checkout_session():
    return CheckoutSessionResult(
        id="cs_test_order",
        url="https://checkout.stripe.com/c/pay/cs_test_order",
    )


@pytest.fixture
def mock_create_checkout(checkout_session):
    with patch(
        "payments.adapters.stripe_adapter.StripeAdapter.create_checkout_session",
        return_value=checkout_session,
    ) as mock:
        yield mock


@pytest.fixture
def mock_retrieve_charge():
    charge = ChargeResult(
        session_id="cs_test_order",
        payment_intent_id="pi_test_order",
        charge_id="ch_test_order",
        amount_cents=4000,
        application_fee_cents=600,
        transfer_id=None,
    )
    with patch(
        "payments.adapters.stripe_adapter.StripeAdapter.retrieve_checkout_charge",
        return_value=charge,
    ) as mock:
        yield mock
