"""
Pytest fixtures for webhook tests.

Events are stored with WebhookEventFactory; the gateway charge lookup is
patched so settlement never leaves the process.
"""

from unittest.mock import patch

import pytest

from authentication.tests.factories import UserFactory
from bookings.tests.factories import BookingFactory, ProviderFactory
from marketplace.tests.factories import OrderFactory
from payments.adapters import ChargeResult
from payments.metadata import BundlePurchase, MarketplaceOrder, SessionBooking
from payments.tests.factories import ConnectedAccountFactory, WebhookEventFactory


def _checkout_event(
    metadata: dict | None, session_id: str = "cs_test_123", **session
):
    """Stored checkout.session.completed event for a paid session."""
    data_object = {
        "id": session_id,
        "object": "checkout.session",
        "payment_status": "paid",
        "amount_total": 5000,
        "currency": "usd",
        "metadata": metadata,
        **session,
    }
    return WebhookEventFactory(
        event_type="checkout.session.completed",
        data_object=data_object,
    )


# =============================================================================
# Connect Fixtures
# =============================================================================


@pytest.fixture
def onboarding_account(db):
    return ConnectedAccountFactory(onboarding=True)


@pytest.fixture
def account_updated_payload(onboarding_account):
    """account.updated body for an account that finished onboarding."""
    return {
        "id": onboarding_account.stripe_account_id,
        "object": "account",
        "payouts_enabled": True,
        "charges_enabled": True,
        "requirements": {
            "currently_due": [],
            "past_due": [],
            "disabled_reason": None,
        },
    }


# =============================================================================
# Checkout Fixtures
# =============================================================================


@pytest.fixture
def make_checkout_event(db):
    """Factory for paid checkout events with custom metadata or session fields."""
    return _checkout_event


@pytest.fixture
def buyer(db):
    return UserFactory()


@pytest.fixture
def pending_booking(db):
    provider = ProviderFactory(price_cents=5000)
    ConnectedAccountFactory(user=provider.user)
    return BookingFactory(provider=provider, stripe_session_id="cs_test_123")


@pytest.fixture
def booking_event(pending_booking):
    metadata = SessionBooking(
        booking_id=pending_booking.id,
        provider_id=pending_booking.provider_id,
    )
    return _checkout_event(metadata.to_stripe())


@pytest.fixture
def bundle_event(db, buyer):
    provider = ProviderFactory(price_cents=5000)
    metadata = BundlePurchase(
        buyer_id=buyer.pk,
        provider_id=provider.id,
        bundle_size=5,
    )
    return _checkout_event(metadata.to_stripe(), amount_total=21250)


@pytest.fixture
def created_order(db):
    return OrderFactory(stripe_session_id="cs_test_123")


@pytest.fixture
def order_event(created_order):
    metadata = MarketplaceOrder(
        order_id=created_order.id,
        listing_id=created_order.listing_id,
        order_kind=created_order.kind,
    )
    return _checkout_event(metadata.to_stripe())


@pytest.fixture
def ignored_event(db):
    """Event type nothing is registered for."""
    return WebhookEventFactory(
        event_type="customer.created",
        data_object={"id": "cus_test_123"},
    )


@pytest.fixture
def mock_retrieve_charge():
    charge = ChargeResult(
        session_id="cs_test_123",
        payment_intent_id="pi_test_123",
        charge_id="ch_test_123",
        amount_cents=5000,
        application_fee_cents=750,
        transfer_id="tr_test_123",
    )
    with patch(
        "payments.adapters.stripe_adapter.StripeAdapter.retrieve_checkout_charge",
        return_value=charge,
    ) as mock:
        yield mock
