"""
Pytest fixtures for booking tests.
"""

from unittest.mock import patch

import pytest

from authentication.tests.factories import UserFactory
from bookings.tests.factories import ProviderFactory
from payments.adapters import ChargeResult, CheckoutSessionResult
from payments.tests.factories import ConnectedAccountFactory


# =============================================================================
# Participant Fixtures
# =============================================================================


@pytest.fixture
def buyer(db):
    return UserFactory()


@pytest.fixture
def provider(db):
    """Provider at 50.00 USD per session, without a payout account."""
    return ProviderFactory(price_cents=5000)


@pytest.fixture
def payable_provider(provider):
    """Provider whose connected account can receive payouts."""
    ConnectedAccountFactory(user=provider.user)
    return provider


# =============================================================================
# Gateway Fixtures
# =============================================================================


@pytest.fixture
def checkout_session():
    return CheckoutSessionResult(
        id="cs_test_booking",
        url="https://checkout.stripe.com/c/pay/cs_test_booking",
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
        session_id="cs_test_booking",
        payment_intent_id="pi_test_booking",
        charge_id="ch_test_booking",
        amount_cents=5000,
        application_fee_cents=750,
        transfer_id="tr_test_booking",
    )
    with patch(
        "payments.adapters.stripe_adapter.StripeAdapter.retrieve_checkout_charge",
        return_value=charge,
    ) as mock:
        yield mock
