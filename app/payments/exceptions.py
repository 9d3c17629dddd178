"""
Payment-specific exceptions.

Exception Hierarchy:
    PaymentError (base for payment domain)
    ├── ConfigurationError - Setup missing before money can move (409)
    │   └── PayoutDestinationMissing - Seller has no usable connected account
    ├── SignatureVerificationError - Webhook signature rejected (400)
    ├── WebhookProcessingError - A webhook handler failed; gateway must retry (500)
    └── PaymentProcessingError - Payment processing failures
        └── GatewayError - Base for all payment gateway errors (502)
            ├── GatewayCardDeclinedError - Card declined (permanent)
            ├── GatewayInvalidAccountError - Invalid connected account (permanent)
            ├── GatewayInvalidRequestError - Invalid request params (permanent)
            ├── GatewayRateLimitError - Rate limited (transient, retry)
            ├── GatewayUnavailableError - API unavailable (transient, retry)
            └── GatewayTimeoutError - Request timeout (transient, retry)

    ConcurrencyConflict - Lost a conditional-update race (inherits ConflictError)
    InvalidStateTransitionError - FSM transition not allowed (inherits ConflictError)

Usage:
    from payments.exceptions import ConcurrencyConflict, PayoutDestinationMissing

    rows = CreditBundle.objects.filter(pk=pk, credits_left__gt=0).update(...)
    if rows == 0:
        raise ConcurrencyConflict(
            "Credit bundle was drained by another request",
            details={"bundle_id": pk},
        )
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from core.exceptions import BaseApplicationError, ConflictError

if TYPE_CHECKING:
    from typing import Any


# =============================================================================
# Payment Domain Exceptions
# =============================================================================


class PaymentError(BaseApplicationError):
    """Base exception for all payment operations."""

    default_error_code: str = "PAYMENT_ERROR"


class ConfigurationError(PaymentError):
    """
    Required setup is missing, so no money can be collected.

    Raised before any row is written. The client should ask the other party
    to finish setup (e.g. provider payout onboarding).
    """

    default_error_code: str = "CONFIGURATION_ERROR"
    status_code: int = 409


class PayoutDestinationMissing(ConfigurationError):
    """
    The seller or provider cannot receive funds.

    Either no connected account exists, or payouts are not enabled where the
    flow requires it (bundle purchases).
    """

    default_error_code: str = "PAYOUT_DESTINATION_MISSING"


class SignatureVerificationError(PaymentError):
    """
    Webhook payload failed signature verification.

    The event is discarded without touching the database.
    """

    default_error_code: str = "INVALID_SIGNATURE"
    status_code: int = 400


class WebhookProcessingError(PaymentError):
    """
    A verified webhook could not be applied.

    The transaction has rolled back and the event is marked failed; the
    endpoint answers 5xx so the gateway redelivers.
    """

    default_error_code: str = "WEBHOOK_PROCESSING_FAILED"
    status_code: int = 500


class PaymentProcessingError(PaymentError):
    """Raised when the payment itself could not be processed."""

    default_error_code: str = "PAYMENT_PROCESSING_ERROR"


# =============================================================================
# Gateway Exceptions
# =============================================================================


class GatewayError(PaymentProcessingError):
    """
    Base exception for payment gateway errors.

    Attributes:
        gateway_code: The gateway's own error code
        decline_code: Card decline code (if applicable)
        is_retryable: Whether the call may be retried with the same
            idempotency key

    Example:
        try:
            StripeAdapter.create_checkout_session(params)
        except GatewayError as e:
            if e.is_retryable:
                raise self.retry(exc=e)
            raise
    """

    default_error_code: str = "GATEWAY_ERROR"
    status_code: int = 502
    is_retryable: bool = False

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        gateway_code: str | None = None,
        decline_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        details = details or {}
        if gateway_code:
            details["gateway_code"] = gateway_code
        if decline_code:
            details["decline_code"] = decline_code
        super().__init__(message, error_code=error_code, details=details)
        self.gateway_code = gateway_code
        self.decline_code = decline_code


# -----------------------------------------------------------------------------
# Permanent Errors (do not retry)
# -----------------------------------------------------------------------------


class GatewayCardDeclinedError(GatewayError):
    """
    Card was declined by the issuing bank.

    Only reachable from refunds and direct charges; hosted checkout collects
    card details on the gateway's page.
    """

    default_error_code: str = "CARD_DECLINED"


class GatewayInvalidAccountError(GatewayError):
    """
    The destination connected account is missing, disabled or restricted.

    Needs manual intervention on the seller's side.
    """

    default_error_code: str = "INVALID_CONNECTED_ACCOUNT"


class GatewayInvalidRequestError(GatewayError):
    """
    The request was rejected as malformed.

    Usually a bug on our side (refund above the captured amount, unknown
    session id). Never retried.
    """

    default_error_code: str = "INVALID_GATEWAY_REQUEST"


# -----------------------------------------------------------------------------
# Transient Errors (safe to retry with backoff)
# -----------------------------------------------------------------------------


class GatewayRateLimitError(GatewayError):
    default_error_code: str = "GATEWAY_RATE_LIMITED"
    is_retryable: bool = True


class GatewayUnavailableError(GatewayError):
    """Network failures and gateway 5xx responses."""

    default_error_code: str = "GATEWAY_UNAVAILABLE"
    is_retryable: bool = True


class GatewayTimeoutError(GatewayError):
    """
    The call timed out.

    The operation may have succeeded on the gateway's side; retries must
    reuse the same idempotency key.
    """

    default_error_code: str = "GATEWAY_TIMEOUT"
    is_retryable: bool = True


# =============================================================================
# Concurrency Control Exceptions
# =============================================================================


class ConcurrencyConflict(ConflictError):
    """
    A conditional update matched zero rows.

    Another request changed the row between read and write (two bookings
    racing for the last credit). Callers treat this as a lost race and take
    their fallback path.
    """

    default_error_code: str = "CONCURRENCY_CONFLICT"


class InvalidStateTransitionError(ConflictError):
    """
    Raised when a state machine transition is not allowed.

    Wraps django-fsm's TransitionNotAllowed in the standard error format.
    """

    default_error_code: str = "INVALID_STATE_TRANSITION"


# =============================================================================
# Exports
# =============================================================================

__all__ = [
    # Payment domain
    "PaymentError",
    "ConfigurationError",
    "PayoutDestinationMissing",
    "SignatureVerificationError",
    "WebhookProcessingError",
    "PaymentProcessingError",
    # Gateway
    "GatewayError",
    "GatewayCardDeclinedError",
    "GatewayInvalidAccountError",
    "GatewayInvalidRequestError",
    "GatewayRateLimitError",
    "GatewayUnavailableError",
    "GatewayTimeoutError",
    # Concurrency control
    "ConcurrencyConflict",
    "InvalidStateTransitionError",
]
