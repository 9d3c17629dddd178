"""
Payment adapters for external services.

All payment gateway calls go through these adapters so that timeouts,
idempotency, error translation and logging are applied consistently.

Usage:
    from payments.adapters import StripeAdapter, CreateCheckoutSessionParams

    session = StripeAdapter.create_checkout_session(
        CreateCheckoutSessionParams(
            name="Session with Ada",
            unit_amount_cents=5000,
            currency="usd",
            success_url="https://app.example.com/ok",
            cancel_url="https://app.example.com/cancel",
            idempotency_key="booking_checkout:123:1:abcd1234",
        )
    )
"""

from payments.adapters.stripe_adapter import (
    AccountLinkResult,
    ChargeResult,
    CheckoutSessionResult,
    ConnectedAccountResult,
    CreateCheckoutSessionParams,
    IdempotencyKeyGenerator,
    RefundResult,
    StripeAdapter,
)

__all__ = [
    "AccountLinkResult",
    "ChargeResult",
    "CheckoutSessionResult",
    "ConnectedAccountResult",
    "CreateCheckoutSessionParams",
    "IdempotencyKeyGenerator",
    "RefundResult",
    "StripeAdapter",
]
