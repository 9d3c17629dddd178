"""
Checkout session metadata.

Every checkout session we create carries flat string metadata with an
explicit ``kind`` tag, so the webhook side can tell the three purchase
flows apart without guessing from which keys happen to be present.

    CheckoutMetadata = BundlePurchase | SessionBooking | MarketplaceOrder

Usage:
    metadata = SessionBooking(booking_id=booking.id, provider_id=provider.id)
    params = CreateCheckoutSessionParams(..., metadata=metadata.to_stripe())

    match parse_checkout_metadata(session["metadata"]):
        case SessionBooking(booking_id=booking_id):
            ...
        case None:
            pass  # not one of our sessions
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Any, ClassVar, Union

from core.exceptions import ValidationError

KIND_KEY = "kind"


def _uuid(raw: dict[str, Any], key: str) -> uuid.UUID:
    try:
        return uuid.UUID(str(raw[key]))
    except (KeyError, ValueError) as e:
        raise ValidationError(
            f"Checkout metadata field {key!r} is missing or not a UUID",
            error_code="INVALID_CHECKOUT_METADATA",
            details={"field": key, "kind": raw.get(KIND_KEY)},
        ) from e


def _int(raw: dict[str, Any], key: str) -> int:
    try:
        return int(raw[key])
    except (KeyError, TypeError, ValueError) as e:
        raise ValidationError(
            f"Checkout metadata field {key!r} is missing or not an integer",
            error_code="INVALID_CHECKOUT_METADATA",
            details={"field": key, "kind": raw.get(KIND_KEY)},
        ) from e


def _str(raw: dict[str, Any], key: str) -> str:
    value = raw.get(key)
    if not value:
        raise ValidationError(
            f"Checkout metadata field {key!r} is missing",
            error_code="INVALID_CHECKOUT_METADATA",
            details={"field": key, "kind": raw.get(KIND_KEY)},
        )
    return str(value)


@dataclass(frozen=True)
class BundlePurchase:
    """A buyer paying for a bundle of session credits with one provider."""

    kind: ClassVar[str] = "bundle_purchase"

    buyer_id: int
    provider_id: uuid.UUID
    bundle_size: int

    def to_stripe(self) -> dict[str, str]:
        return {
            KIND_KEY: self.kind,
            "buyer_id": str(self.buyer_id),
            "provider_id": str(self.provider_id),
            "bundle_size": str(self.bundle_size),
        }

    @classmethod
    def from_stripe(cls, raw: dict[str, Any]) -> BundlePurchase:
        return cls(
            buyer_id=_int(raw, "buyer_id"),
            provider_id=_uuid(raw, "provider_id"),
            bundle_size=_int(raw, "bundle_size"),
        )


@dataclass(frozen=True)
class SessionBooking:
    """A single paid session booking."""

    kind: ClassVar[str] = "session_booking"

    booking_id: uuid.UUID
    provider_id: uuid.UUID

    def to_stripe(self) -> dict[str, str]:
        return {
            KIND_KEY: self.kind,
            "booking_id": str(self.booking_id),
            "provider_id": str(self.provider_id),
        }

    @classmethod
    def from_stripe(cls, raw: dict[str, Any]) -> SessionBooking:
        return cls(
            booking_id=_uuid(raw, "booking_id"),
            provider_id=_uuid(raw, "provider_id"),
        )


@dataclass(frozen=True)
class MarketplaceOrder:
    """A marketplace product order (digital or physical)."""

    kind: ClassVar[str] = "marketplace_order"

    order_id: uuid.UUID
    listing_id: uuid.UUID
    order_kind: str

    def to_stripe(self) -> dict[str, str]:
        return {
            KIND_KEY: self.kind,
            "order_id": str(self.order_id),
            "listing_id": str(self.listing_id),
            "order_kind": self.order_kind,
        }

    @classmethod
    def from_stripe(cls, raw: dict[str, Any]) -> MarketplaceOrder:
        return cls(
            order_id=_uuid(raw, "order_id"),
            listing_id=_uuid(raw, "listing_id"),
            order_kind=_str(raw, "order_kind"),
        )


CheckoutMetadata = Union[BundlePurchase, SessionBooking, MarketplaceOrder]

_KINDS: dict[str, type[CheckoutMetadata]] = {
    BundlePurchase.kind: BundlePurchase,
    SessionBooking.kind: SessionBooking,
    MarketplaceOrder.kind: MarketplaceOrder,
}


def parse_checkout_metadata(raw: dict[str, Any] | None) -> CheckoutMetadata | None:
    """
    Parse session metadata into one of the tagged variants.

    Returns:
        The variant, or None when the metadata carries no kind tag

    Raises:
        ValidationError: Unknown kind, or a known kind with bad fields
    """
    if not raw or not raw.get(KIND_KEY):
        return None

    kind = raw[KIND_KEY]
    variant = _KINDS.get(kind)
    if variant is None:
        raise ValidationError(
            f"Unknown checkout metadata kind: {kind}",
            error_code="INVALID_CHECKOUT_METADATA",
            details={"kind": kind},
        )
    return variant.from_stripe(raw)
