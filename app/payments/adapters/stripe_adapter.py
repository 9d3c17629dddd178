"""
Stripe API adapter.

Every call to the payment gateway goes through StripeAdapter so that
timeouts, idempotency keys, error translation and structured logging are
applied the same way everywhere.

Operations:
- Hosted checkout sessions (destination charges with an application fee)
- Realized charge lookup for a completed checkout session
- Refunds (reversing the transfer and the application fee)
- Express connected accounts and onboarding links
- Webhook signature verification

Configuration (via settings):
- STRIPE_SECRET_KEY: Stripe API secret key
- STRIPE_WEBHOOK_SECRET: Webhook signing secret
- STRIPE_API_TIMEOUT_SECONDS: API call timeout (default: 10)
- STRIPE_MAX_RETRIES: Network retries performed by the SDK (default: 3)

Usage:
    from payments.adapters import StripeAdapter, CreateCheckoutSessionParams

    session = StripeAdapter.create_checkout_session(
        CreateCheckoutSessionParams(
            name="Session with Ada",
            unit_amount_cents=5000,
            currency="usd",
            success_url="https://app.example.com/bookings/success",
            cancel_url="https://app.example.com/bookings/cancel",
            metadata=SessionBooking(booking_id=..., provider_id=...).to_stripe(),
            application_fee_cents=750,
            destination_account="acct_123",
            idempotency_key=IdempotencyKeyGenerator.generate("checkout", booking.id),
        )
    )
"""

from __future__ import annotations

import hashlib
import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Any

import stripe
from django.conf import settings

from payments.exceptions import (
    GatewayCardDeclinedError,
    GatewayError,
    GatewayInvalidAccountError,
    GatewayInvalidRequestError,
    GatewayRateLimitError,
    GatewayTimeoutError,
    GatewayUnavailableError,
    SignatureVerificationError,
)


# =============================================================================
# Data Types
# =============================================================================


@dataclass
class CreateCheckoutSessionParams:
    """
    Parameters for a hosted checkout session with a single line item.

    Attributes:
        name: Line item name shown on the checkout page
        unit_amount_cents: Price per unit in the smallest currency unit
        quantity: Number of units
        currency: ISO 4217 currency code
        success_url: Redirect after payment
        cancel_url: Redirect when the buyer abandons checkout
        idempotency_key: Unique key for idempotent creation
        metadata: Flat string metadata (see payments.metadata)
        application_fee_cents: Platform fee kept from a destination charge
        destination_account: Connected account receiving the remainder
        customer_email: Prefills the checkout email field
        shipping_cents: Flat shipping line added when positive
    """

    name: str
    unit_amount_cents: int
    currency: str
    success_url: str
    cancel_url: str
    idempotency_key: str
    quantity: int = 1
    metadata: dict[str, str] = field(default_factory=dict)
    application_fee_cents: int | None = None
    destination_account: str | None = None
    customer_email: str | None = None
    shipping_cents: int = 0

    def __post_init__(self) -> None:
        if self.unit_amount_cents <= 0:
            raise ValueError("unit_amount_cents must be positive")
        if self.quantity <= 0:
            raise ValueError("quantity must be positive")
        if not self.idempotency_key:
            raise ValueError("idempotency_key is required")
        if not self.currency:
            raise ValueError("currency is required")
        if self.application_fee_cents is not None and not self.destination_account:
            raise ValueError("application_fee_cents requires destination_account")


@dataclass
class CheckoutSessionResult:
    """
    Result from creating a checkout session.

    Attributes:
        id: Checkout session ID (cs_xxx)
        url: Hosted checkout URL to redirect the buyer to
        payment_status: unpaid, paid or no_payment_required
        raw_response: Full Stripe response dict (for debugging)
    """

    id: str
    url: str
    payment_status: str = "unpaid"
    raw_response: dict[str, Any] = field(default_factory=dict)


@dataclass
class ChargeResult:
    """
    The realized charge behind a completed checkout session.

    Fees reported here are what the gateway actually applied; they are the
    only source for booking fee and net amounts.

    Attributes:
        session_id: Checkout session ID
        payment_intent_id: PaymentIntent ID (pi_xxx)
        charge_id: Charge ID (ch_xxx)
        amount_cents: Charged amount
        application_fee_cents: Platform fee applied to the charge
        transfer_id: Transfer to the connected account (destination charges)
        currency: Currency code
    """

    session_id: str
    payment_intent_id: str | None
    charge_id: str | None
    amount_cents: int
    application_fee_cents: int
    transfer_id: str | None = None
    currency: str = "usd"

    @property
    def net_cents(self) -> int:
        return self.amount_cents - self.application_fee_cents


@dataclass
class RefundResult:
    """
    Result from Stripe Refund operations.

    Attributes:
        id: Refund ID (re_xxx)
        amount_cents: Refunded amount in cents
        currency: Currency code
        status: Refund status (succeeded, pending, failed)
        payment_intent_id: Original PaymentIntent ID
        raw_response: Full Stripe response dict
    """

    id: str
    amount_cents: int
    currency: str
    status: str
    payment_intent_id: str | None
    raw_response: dict[str, Any] = field(default_factory=dict)


@dataclass
class ConnectedAccountResult:
    id: str
    payouts_enabled: bool = False
    charges_enabled: bool = False
    raw_response: dict[str, Any] = field(default_factory=dict)


@dataclass
class AccountLinkResult:
    url: str
    expires_at: int | None = None


# =============================================================================
# Idempotency Key Generator
# =============================================================================


class IdempotencyKeyGenerator:
    """
    Generate idempotency keys for Stripe API calls.

    Format: "{operation}:{entity_id}:{attempt}:{hash}"

    The same inputs always produce the same key, so a retried request after a
    timeout is recognised by the gateway as the original one.

    Example:
        key = IdempotencyKeyGenerator.generate("refund", dispute.id)
        # "refund:550e8400-e29b-41d4-a716-446655440000:1:a1b2c3d4"
    """

    @staticmethod
    def generate(
        operation: str,
        entity_id: uuid.UUID | int | str,
        attempt: int = 1,
    ) -> str:
        entity_str = str(entity_id)
        hash_input = f"{operation}:{entity_str}:{attempt}:{settings.SECRET_KEY}"
        short_hash = hashlib.sha256(hash_input.encode()).hexdigest()[:8]

        return f"{operation}:{entity_str}:{attempt}:{short_hash}"


def _field(obj: Any, name: str, default: Any = None) -> Any:
    """Read a field from a Stripe object, a plain dict, or an id string."""
    if obj is None or isinstance(obj, str):
        return default
    if isinstance(obj, dict):
        return obj.get(name, default)
    value = getattr(obj, name, default)
    return default if value is None else value


def _object_id(obj: Any) -> str | None:
    """Expanded objects carry an id; unexpanded references are the id."""
    if obj is None or isinstance(obj, str):
        return obj
    return _field(obj, "id")


# =============================================================================
# Stripe Adapter
# =============================================================================


class StripeAdapter:
    """
    Adapter for Stripe API operations.

    All methods are classmethods; no instance state is kept. Safe to call
    from request handlers and Celery workers alike.

    Every SDK exception is translated into a payments.exceptions.GatewayError
    subclass; callers never see stripe.* exceptions.
    """

    # =========================================================================
    # Configuration
    # =========================================================================

    @staticmethod
    def _configure_stripe() -> None:
        """Configure the Stripe client with API key, timeout and retries."""
        stripe.api_key = settings.STRIPE_SECRET_KEY
        stripe.max_network_retries = getattr(settings, "STRIPE_MAX_RETRIES", 3)
        timeout = getattr(settings, "STRIPE_API_TIMEOUT_SECONDS", 10)
        stripe.default_http_client = stripe.RequestsClient(timeout=timeout)

    @classmethod
    def get_logger(cls) -> logging.Logger:
        return logging.getLogger(f"{cls.__module__}.{cls.__name__}")

    # =========================================================================
    # Checkout
    # =========================================================================

    @classmethod
    def create_checkout_session(
        cls,
        params: CreateCheckoutSessionParams,
    ) -> CheckoutSessionResult:
        """
        Create a hosted checkout session in payment mode.

        When a destination account is given the charge is a destination
        charge: the application fee stays with the platform and the remainder
        is transferred to the connected account.

        Raises:
            GatewayInvalidAccountError: Destination account unusable
            GatewayInvalidRequestError: Invalid parameters
            GatewayUnavailableError: Stripe service unavailable
        """
        cls._configure_stripe()
        logger = cls.get_logger()

        log_context = {
            "operation": "create_checkout_session",
            "unit_amount_cents": params.unit_amount_cents,
            "quantity": params.quantity,
            "currency": params.currency,
            "application_fee_cents": params.application_fee_cents,
            "destination_account": params.destination_account,
            "idempotency_key": params.idempotency_key,
            "metadata_kind": params.metadata.get("kind"),
        }

        start_time = time.time()
        logger.info("Starting Stripe operation", extra=log_context)

        line_items: list[dict[str, Any]] = [
            {
                "price_data": {
                    "currency": params.currency,
                    "product_data": {"name": params.name},
                    "unit_amount": params.unit_amount_cents,
                },
                "quantity": params.quantity,
            }
        ]
        if params.shipping_cents > 0:
            line_items.append(
                {
                    "price_data": {
                        "currency": params.currency,
                        "product_data": {"name": "Shipping"},
                        "unit_amount": params.shipping_cents,
                    },
                    "quantity": 1,
                }
            )

        session_params: dict[str, Any] = {
            "mode": "payment",
            "line_items": line_items,
            "success_url": params.success_url,
            "cancel_url": params.cancel_url,
            "metadata": params.metadata,
        }
        if params.customer_email:
            session_params["customer_email"] = params.customer_email

        payment_intent_data: dict[str, Any] = {"metadata": params.metadata}
        if params.destination_account:
            payment_intent_data["transfer_data"] = {
                "destination": params.destination_account
            }
            if params.application_fee_cents is not None:
                payment_intent_data["application_fee_amount"] = (
                    params.application_fee_cents
                )
        session_params["payment_intent_data"] = payment_intent_data

        try:
            session = stripe.checkout.Session.create(
                idempotency_key=params.idempotency_key,
                **session_params,
            )

            duration_ms = (time.time() - start_time) * 1000
            logger.info(
                "Stripe operation completed",
                extra={
                    **log_context,
                    "session_id": session.id,
                    "duration_ms": duration_ms,
                },
            )

            return CheckoutSessionResult(
                id=session.id,
                url=session.url,
                payment_status=session.payment_status or "unpaid",
                raw_response=session.to_dict(),
            )

        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            cls._handle_stripe_error(e, log_context, duration_ms)
            raise

    @classmethod
    def retrieve_checkout_charge(cls, session_id: str) -> ChargeResult:
        """
        Fetch the realized charge of a completed checkout session.

        Expands payment_intent.latest_charge so the applied application fee
        and the transfer id come straight from the charge.

        Raises:
            GatewayInvalidRequestError: Unknown session
            GatewayUnavailableError: Stripe service unavailable
        """
        cls._configure_stripe()
        logger = cls.get_logger()

        log_context = {
            "operation": "retrieve_checkout_charge",
            "session_id": session_id,
        }

        start_time = time.time()
        logger.info("Starting Stripe operation", extra=log_context)

        try:
            session = stripe.checkout.Session.retrieve(
                session_id,
                expand=["payment_intent.latest_charge"],
            )
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            cls._handle_stripe_error(e, log_context, duration_ms)
            raise

        payment_intent = _field(session, "payment_intent")
        charge = _field(payment_intent, "latest_charge")

        amount = _field(charge, "amount") or _field(session, "amount_total") or 0
        application_fee = (
            _field(charge, "application_fee_amount")
            or _field(payment_intent, "application_fee_amount")
            or 0
        )

        result = ChargeResult(
            session_id=session_id,
            payment_intent_id=_object_id(payment_intent),
            charge_id=_object_id(charge),
            amount_cents=int(amount),
            application_fee_cents=int(application_fee),
            transfer_id=_object_id(_field(charge, "transfer")),
            currency=_field(session, "currency") or "usd",
        )

        duration_ms = (time.time() - start_time) * 1000
        logger.info(
            "Stripe operation completed",
            extra={
                **log_context,
                "charge_id": result.charge_id,
                "amount_cents": result.amount_cents,
                "application_fee_cents": result.application_fee_cents,
                "duration_ms": duration_ms,
            },
        )
        return result

    # =========================================================================
    # Refunds
    # =========================================================================

    @classmethod
    def create_refund(
        cls,
        payment_intent_id: str,
        idempotency_key: str,
        amount_cents: int | None = None,
        reverse_transfer: bool = False,
        refund_application_fee: bool = False,
        reason: str | None = None,
        metadata: dict[str, str] | None = None,
    ) -> RefundResult:
        """
        Refund a PaymentIntent, fully or partially.

        For destination charges pass reverse_transfer and
        refund_application_fee so the connected account and the platform
        each return their share.

        Raises:
            GatewayInvalidRequestError: Refund not possible
        """
        cls._configure_stripe()
        logger = cls.get_logger()

        log_context = {
            "operation": "create_refund",
            "payment_intent_id": payment_intent_id,
            "amount_cents": amount_cents,
            "reverse_transfer": reverse_transfer,
            "idempotency_key": idempotency_key,
        }

        start_time = time.time()
        logger.info("Starting Stripe operation", extra=log_context)

        try:
            refund_params: dict[str, Any] = {
                "payment_intent": payment_intent_id,
                "metadata": metadata or {},
            }
            if amount_cents is not None:
                refund_params["amount"] = amount_cents
            if reason:
                refund_params["reason"] = reason
            if reverse_transfer:
                refund_params["reverse_transfer"] = True
            if refund_application_fee:
                refund_params["refund_application_fee"] = True

            refund = stripe.Refund.create(
                idempotency_key=idempotency_key,
                **refund_params,
            )

            duration_ms = (time.time() - start_time) * 1000
            logger.info(
                "Stripe operation completed",
                extra={
                    **log_context,
                    "refund_id": refund.id,
                    "status": refund.status,
                    "duration_ms": duration_ms,
                },
            )

            return RefundResult(
                id=refund.id,
                amount_cents=refund.amount,
                currency=refund.currency,
                status=refund.status,
                payment_intent_id=_object_id(refund.payment_intent),
                raw_response=refund.to_dict(),
            )

        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            cls._handle_stripe_error(e, log_context, duration_ms)
            raise

    # =========================================================================
    # Connect
    # =========================================================================

    @classmethod
    def create_connected_account(
        cls,
        email: str,
        idempotency_key: str,
        country: str | None = None,
    ) -> ConnectedAccountResult:
        """
        Create an Express connected account for an individual seller.

        Requests the transfers and card_payments capabilities.
        """
        cls._configure_stripe()
        logger = cls.get_logger()

        log_context = {
            "operation": "create_connected_account",
            "idempotency_key": idempotency_key,
        }

        start_time = time.time()
        logger.info("Starting Stripe operation", extra=log_context)

        try:
            account_params: dict[str, Any] = {
                "type": "express",
                "email": email,
                "business_type": "individual",
                "capabilities": {
                    "transfers": {"requested": True},
                    "card_payments": {"requested": True},
                },
            }
            if country:
                account_params["country"] = country

            account = stripe.Account.create(
                idempotency_key=idempotency_key,
                **account_params,
            )

            duration_ms = (time.time() - start_time) * 1000
            logger.info(
                "Stripe operation completed",
                extra={
                    **log_context,
                    "account_id": account.id,
                    "duration_ms": duration_ms,
                },
            )

            return ConnectedAccountResult(
                id=account.id,
                payouts_enabled=bool(account.payouts_enabled),
                charges_enabled=bool(account.charges_enabled),
                raw_response=account.to_dict(),
            )

        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            cls._handle_stripe_error(e, log_context, duration_ms)
            raise

    @classmethod
    def create_account_link(
        cls,
        account_id: str,
        return_url: str,
        refresh_url: str,
    ) -> AccountLinkResult:
        """Create a single-use onboarding link for a connected account."""
        cls._configure_stripe()
        logger = cls.get_logger()

        log_context = {
            "operation": "create_account_link",
            "account_id": account_id,
        }

        start_time = time.time()
        logger.info("Starting Stripe operation", extra=log_context)

        try:
            link = stripe.AccountLink.create(
                account=account_id,
                type="account_onboarding",
                return_url=return_url,
                refresh_url=refresh_url,
            )

            duration_ms = (time.time() - start_time) * 1000
            logger.info(
                "Stripe operation completed",
                extra={**log_context, "duration_ms": duration_ms},
            )

            return AccountLinkResult(url=link.url, expires_at=link.expires_at)

        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            cls._handle_stripe_error(e, log_context, duration_ms)
            raise

    # =========================================================================
    # Webhooks
    # =========================================================================

    @classmethod
    def verify_webhook_signature(
        cls,
        payload: bytes,
        signature: str,
    ) -> dict[str, Any]:
        """
        Verify and parse a Stripe webhook event.

        Returns:
            Parsed event data dict

        Raises:
            SignatureVerificationError: Signature or payload rejected
        """
        try:
            event = stripe.Webhook.construct_event(
                payload,
                signature,
                settings.STRIPE_WEBHOOK_SECRET,
            )
        except stripe.SignatureVerificationError as e:
            raise SignatureVerificationError(
                "Invalid webhook signature",
                details={"error": str(e)},
            ) from e
        except ValueError as e:
            raise SignatureVerificationError(
                "Invalid webhook payload",
                error_code="INVALID_PAYLOAD",
                details={"error": str(e)},
            ) from e
        return event.to_dict()

    # =========================================================================
    # Error Handling
    # =========================================================================

    @classmethod
    def _handle_stripe_error(
        cls,
        error: Exception,
        log_context: dict[str, Any],
        duration_ms: float,
    ) -> None:
        """
        Translate Stripe SDK exceptions to gateway exceptions.

        Always raises.
        """
        logger = cls.get_logger()
        log_context = {**log_context, "duration_ms": duration_ms}

        if isinstance(error, GatewayError):
            raise error

        if isinstance(error, stripe.CardError):
            decline_code = getattr(error, "decline_code", None)
            logger.warning(
                "Card error from Stripe",
                extra={**log_context, "decline_code": decline_code},
            )
            raise GatewayCardDeclinedError(
                str(error.user_message or error),
                gateway_code=error.code,
                decline_code=decline_code,
            ) from error

        elif isinstance(error, stripe.InvalidRequestError):
            logger.error(
                "Invalid request to Stripe",
                extra={**log_context, "gateway_code": error.code},
            )
            if "account" in str(error).lower():
                raise GatewayInvalidAccountError(
                    str(error),
                    gateway_code=error.code,
                ) from error

            raise GatewayInvalidRequestError(
                str(error),
                gateway_code=error.code,
            ) from error

        elif isinstance(error, stripe.RateLimitError):
            logger.warning("Rate limited by Stripe", extra=log_context)
            raise GatewayRateLimitError(
                "Stripe rate limit exceeded. Please retry.",
                gateway_code="rate_limit",
            ) from error

        elif isinstance(error, stripe.APIConnectionError):
            logger.error(
                "Connection error to Stripe",
                extra=log_context,
                exc_info=True,
            )
            if "timed out" in str(error).lower():
                raise GatewayTimeoutError(
                    "Stripe request timed out. Please retry.",
                    gateway_code="timeout",
                ) from error
            raise GatewayUnavailableError(
                "Could not connect to Stripe. Please retry.",
                gateway_code="api_connection_error",
            ) from error

        elif isinstance(error, stripe.AuthenticationError):
            logger.critical(
                "Stripe authentication failed - check API key",
                extra=log_context,
            )
            raise GatewayInvalidRequestError(
                "Stripe authentication failed",
                gateway_code="authentication_error",
            ) from error

        elif isinstance(error, stripe.APIError):
            logger.error("Stripe API error", extra=log_context, exc_info=True)
            raise GatewayUnavailableError(
                "Stripe service error. Please retry.",
                gateway_code="api_error",
            ) from error

        else:
            logger.error(
                f"Unexpected error from Stripe: {type(error).__name__}",
                extra=log_context,
                exc_info=True,
            )
            raise GatewayUnavailableError(
                f"Unexpected Stripe error: {error}",
                gateway_code="unknown_error",
            ) from error
