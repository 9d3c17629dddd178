"""
Checkout session creation for the three purchase flows.

The CheckoutService turns a pending booking, a bundle request or a created
order into a hosted checkout session. It decides where the money goes:

- Session bookings: destination charge to the provider's connected account
- Credit bundles: destination charge, and the provider must have payouts
  enabled
- Digital orders: destination charge to the seller
- Physical orders: collected by the platform; the seller share is tracked
  on hold in the ledger until fulfilment

Payout destinations are resolved before anything is written, so a missing
destination never leaves orphaned rows behind.

Usage:
    from payments.services import CheckoutService

    destination = CheckoutService.payout_destination_for(provider.user)
    booking = Booking.objects.create(...)
    checkout = CheckoutService.create_session_checkout(booking, destination)
"""

from __future__ import annotations

import logging
import uuid
from typing import TYPE_CHECKING

from django.conf import settings

from core.services import BaseService
from payments.adapters import (
    CheckoutSessionResult,
    CreateCheckoutSessionParams,
    IdempotencyKeyGenerator,
    StripeAdapter,
)
from payments.exceptions import PayoutDestinationMissing
from payments.fees import bundle_price_cents, platform_fee_cents, unit_amount_cents
from payments.metadata import BundlePurchase, MarketplaceOrder, SessionBooking
from payments.models import ConnectedAccount

if TYPE_CHECKING:
    from authentication.models import User
    from bookings.models import Booking, Provider
    from marketplace.models import Order

logger = logging.getLogger(__name__)

CHECKOUT_SESSION_PLACEHOLDER = "{CHECKOUT_SESSION_ID}"


class CheckoutService(BaseService):
    """Creates hosted checkout sessions. All methods are classmethods."""

    @classmethod
    def payout_destination_for(
        cls,
        user: User,
        require_payouts_enabled: bool = False,
    ) -> ConnectedAccount:
        """
        The connected account that receives a seller's share.

        Raises:
            PayoutDestinationMissing: No account, or payouts not enabled
                when require_payouts_enabled is set
        """
        account = ConnectedAccount.objects.filter(user=user).first()
        if account is None:
            raise PayoutDestinationMissing(
                "This provider has not set up payouts yet",
                details={"user_id": user.pk},
            )
        if require_payouts_enabled and not account.payouts_enabled:
            raise PayoutDestinationMissing(
                "This provider cannot receive payouts yet",
                error_code="PAYOUTS_NOT_ENABLED",
                details={"user_id": user.pk},
            )
        return account

    @staticmethod
    def _frontend_url(path: str) -> str:
        return f"{settings.FRONTEND_URL.rstrip('/')}/{path.lstrip('/')}"

    @classmethod
    def create_session_checkout(
        cls,
        booking: Booking,
        destination: ConnectedAccount | None = None,
    ) -> CheckoutSessionResult:
        """
        Checkout for one paid session.

        The platform fee is computed from the booking amount; the amounts
        actually applied are read back from the realized charge on
        confirmation.
        """
        provider = booking.provider
        if destination is None:
            destination = cls.payout_destination_for(provider.user)

        metadata = SessionBooking(booking_id=booking.id, provider_id=provider.id)
        params = CreateCheckoutSessionParams(
            name=f"Session with {provider.display_name}",
            unit_amount_cents=booking.amount_cents,
            currency=booking.currency,
            success_url=cls._frontend_url(
                f"bookings/{booking.id}?checkout=success"
                f"&session_id={CHECKOUT_SESSION_PLACEHOLDER}"
            ),
            cancel_url=cls._frontend_url(f"bookings/{booking.id}?checkout=cancelled"),
            idempotency_key=IdempotencyKeyGenerator.generate(
                "booking_checkout", booking.id
            ),
            metadata=metadata.to_stripe(),
            application_fee_cents=platform_fee_cents(booking.amount_cents),
            destination_account=destination.stripe_account_id,
            customer_email=booking.buyer.email,
        )
        return StripeAdapter.create_checkout_session(params)

    @classmethod
    def create_bundle_checkout(
        cls,
        buyer: User,
        provider: Provider,
        bundle_size: int,
    ) -> CheckoutSessionResult:
        """
        Checkout for a discounted bundle of session credits.

        Nothing is written locally; the bundle is granted when the
        checkout-completed webhook arrives.

        Raises:
            ValidationError: Unsupported bundle size
            PayoutDestinationMissing: Provider cannot receive payouts
        """
        price = bundle_price_cents(provider.session_price_cents, bundle_size)
        destination = cls.payout_destination_for(
            provider.user, require_payouts_enabled=True
        )

        metadata = BundlePurchase(
            buyer_id=buyer.pk,
            provider_id=provider.id,
            bundle_size=bundle_size,
        )
        params = CreateCheckoutSessionParams(
            name=f"{bundle_size} sessions with {provider.display_name}",
            unit_amount_cents=price,
            currency=provider.currency,
            success_url=cls._frontend_url(
                f"providers/{provider.id}?bundle=success"
                f"&session_id={CHECKOUT_SESSION_PLACEHOLDER}"
            ),
            cancel_url=cls._frontend_url(f"providers/{provider.id}?bundle=cancelled"),
            # Each purchase attempt is its own checkout
            idempotency_key=IdempotencyKeyGenerator.generate(
                "bundle_checkout", uuid.uuid4()
            ),
            metadata=metadata.to_stripe(),
            application_fee_cents=platform_fee_cents(price),
            destination_account=destination.stripe_account_id,
            customer_email=buyer.email,
        )

        logger.info(
            "Creating bundle checkout",
            extra={
                "buyer_id": buyer.pk,
                "provider_id": str(provider.id),
                "bundle_size": bundle_size,
                "price_cents": price,
            },
        )
        return StripeAdapter.create_checkout_session(params)

    @classmethod
    def create_order_checkout(
        cls,
        order: Order,
        destination: ConnectedAccount | None = None,
    ) -> CheckoutSessionResult:
        """
        Checkout for a marketplace order.

        Digital orders pay the seller through a destination charge. Physical
        orders are collected by the platform, including shipping.
        """
        listing = order.listing
        is_digital = order.kind == "digital"
        if is_digital and destination is None:
            destination = cls.payout_destination_for(order.seller)

        metadata = MarketplaceOrder(
            order_id=order.id,
            listing_id=listing.id,
            order_kind=order.kind,
        )
        params = CreateCheckoutSessionParams(
            name=listing.title,
            unit_amount_cents=unit_amount_cents(listing.price_cents),
            quantity=order.quantity,
            currency=order.currency,
            success_url=cls._frontend_url(
                f"orders/{order.id}?checkout=success"
                f"&session_id={CHECKOUT_SESSION_PLACEHOLDER}"
            ),
            cancel_url=cls._frontend_url(f"orders/{order.id}?checkout=cancelled"),
            idempotency_key=IdempotencyKeyGenerator.generate(
                "order_checkout", order.id
            ),
            metadata=metadata.to_stripe(),
            application_fee_cents=order.platform_fee_cents if is_digital else None,
            destination_account=destination.stripe_account_id if is_digital else None,
            customer_email=order.buyer.email,
            shipping_cents=order.shipping_cents,
        )
        return StripeAdapter.create_checkout_session(params)
