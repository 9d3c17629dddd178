"""
Tests for checkout session metadata.
"""

import uuid

import pytest

from core.exceptions import ValidationError
from payments.metadata import (
    BundlePurchase,
    MarketplaceOrder,
    SessionBooking,
    parse_checkout_metadata,
)

BOOKING_ID = uuid.UUID("6f1c2f4e-3a0b-4c55-9a4e-2f0f7b1f2a10")
PROVIDER_ID = uuid.UUID("0b8f4a0e-5e1d-4d7c-8a5b-7c3f9e2d1a44")


class TestToStripe:
    def test_values_are_strings_with_kind(self):
        metadata = BundlePurchase(buyer_id=7, provider_id=PROVIDER_ID, bundle_size=5)

        assert metadata.to_stripe() == {
            "kind": "bundle_purchase",
            "buyer_id": "7",
            "provider_id": str(PROVIDER_ID),
            "bundle_size": "5",
        }

    def test_marketplace_order_carries_order_kind(self):
        order_id = uuid.uuid4()
        metadata = MarketplaceOrder(
            order_id=order_id, listing_id=uuid.uuid4(), order_kind="physical"
        )

        stripe_metadata = metadata.to_stripe()

        assert stripe_metadata["kind"] == "marketplace_order"
        assert stripe_metadata["order_id"] == str(order_id)
        assert stripe_metadata["order_kind"] == "physical"


class TestParse:
    def test_session_booking(self):
        parsed = parse_checkout_metadata(
            {
                "kind": "session_booking",
                "booking_id": str(BOOKING_ID),
                "provider_id": str(PROVIDER_ID),
            }
        )

        assert parsed == SessionBooking(booking_id=BOOKING_ID, provider_id=PROVIDER_ID)

    def test_bundle_purchase_parses_integers(self):
        parsed = parse_checkout_metadata(
            {
                "kind": "bundle_purchase",
                "buyer_id": "42",
                "provider_id": str(PROVIDER_ID),
                "bundle_size": "10",
            }
        )

        assert isinstance(parsed, BundlePurchase)
        assert parsed.buyer_id == 42
        assert parsed.bundle_size == 10

    @pytest.mark.parametrize("raw", [None, {}, {"order_id": "123"}, {"kind": ""}])
    def test_untagged_metadata_is_not_ours(self, raw):
        assert parse_checkout_metadata(raw) is None

    def test_unknown_kind_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_checkout_metadata({"kind": "subscription"})

        assert exc_info.value.error_code == "INVALID_CHECKOUT_METADATA"
        assert exc_info.value.details == {"kind": "subscription"}

    def test_bad_uuid_names_field(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_checkout_metadata(
                {
                    "kind": "session_booking",
                    "booking_id": "42",
                    "provider_id": str(PROVIDER_ID),
                }
            )

        assert exc_info.value.details["field"] == "booking_id"

    def test_missing_order_kind_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_checkout_metadata(
                {
                    "kind": "marketplace_order",
                    "order_id": str(uuid.uuid4()),
                    "listing_id": str(uuid.uuid4()),
                }
            )

        assert exc_info.value.details["field"] == "order_kind"
