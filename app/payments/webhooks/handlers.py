"""
Webhook event handlers for Stripe events.

This module provides a handler registry and implementations for the
Stripe events the platform reacts to:

- account.updated: sync connected account capabilities
- checkout.session.completed / checkout.session.async_payment_succeeded:
  settle whichever purchase the session belongs to

Handlers run inside the WebhookProcessor transaction. They return a
ServiceResult; a failure (or an exception) rolls the transaction back and
leaves the event failed so the gateway redelivers it.

Usage:
    from payments.webhooks.handlers import dispatch_webhook, register_handler

    @register_handler("custom.event")
    def handle_custom_event(webhook_event: WebhookEvent) -> ServiceResult:
        ...

    result = dispatch_webhook(webhook_event)
"""

from __future__ import annotations

import logging
from typing import Callable

from bookings.services.confirmation import BookingConfirmationService
from bookings.services.credits import CreditLedger
from core.exceptions import ValidationError
from core.services import ServiceResult
from marketplace.services import OrderSettlementService
from payments.metadata import (
    BundlePurchase,
    MarketplaceOrder,
    SessionBooking,
    parse_checkout_metadata,
)
from payments.models import ConnectedAccount, WebhookEvent
from payments.state_machines import OnboardingStatus

logger = logging.getLogger(__name__)

PAID_SESSION_STATUSES = frozenset({"paid", "no_payment_required"})


# =============================================================================
# Handler Registry
# =============================================================================


# Maps event type strings to handler functions
WEBHOOK_HANDLERS: dict[str, Callable[[WebhookEvent], ServiceResult]] = {}


def register_handler(*event_types: str) -> Callable:
    """
    Decorator to register a webhook event handler for one or more types.

    Usage:
        @register_handler("checkout.session.completed")
        def handle_checkout(webhook_event: WebhookEvent) -> ServiceResult:
            ...
    """

    def decorator(func: Callable[[WebhookEvent], ServiceResult]) -> Callable:
        for event_type in event_types:
            WEBHOOK_HANDLERS[event_type] = func
            logger.debug(f"Registered webhook handler for {event_type}")
        return func

    return decorator


def dispatch_webhook(webhook_event: WebhookEvent) -> ServiceResult:
    """
    Dispatch a webhook event to the appropriate handler.

    Unknown event types succeed as a no-op so they get marked processed.
    """
    handler = WEBHOOK_HANDLERS.get(webhook_event.event_type)

    if not handler:
        logger.info(
            f"No handler registered for event type: {webhook_event.event_type}",
            extra={"stripe_event_id": webhook_event.stripe_event_id},
        )
        return ServiceResult.success(None)

    logger.info(
        f"Dispatching {webhook_event.event_type} to handler",
        extra={"stripe_event_id": webhook_event.stripe_event_id},
    )

    return handler(webhook_event)


# =============================================================================
# Connect Handlers
# =============================================================================


@register_handler("account.updated")
def handle_account_updated(webhook_event: WebhookEvent) -> ServiceResult:
    """
    Sync a connected account's capabilities.

    Idempotent: the account row is overwritten with the event's state.
    Accounts we don't know are ignored.
    """
    data_object = webhook_event.data_object
    account_id = data_object.get("id")

    if not account_id:
        logger.error(
            "account.updated: Could not extract account_id",
            extra={"stripe_event_id": webhook_event.stripe_event_id},
        )
        return ServiceResult.failure(
            "Could not extract account_id from webhook",
            error_code="INVALID_WEBHOOK_PAYLOAD",
        )

    payouts_enabled = bool(data_object.get("payouts_enabled", False))
    charges_enabled = bool(data_object.get("charges_enabled", False))
    requirements = data_object.get("requirements") or {}
    currently_due = requirements.get("currently_due") or []
    past_due = requirements.get("past_due") or []
    disabled_reason = requirements.get("disabled_reason")
    requirements_due = len(currently_due) + len(past_due)

    connected_account = ConnectedAccount.objects.filter(
        stripe_account_id=account_id
    ).first()

    if not connected_account:
        logger.info(
            "ConnectedAccount not found, may be external account",
            extra={
                "account_id": account_id,
                "stripe_event_id": webhook_event.stripe_event_id,
            },
        )
        return ServiceResult.success(None)

    if disabled_reason and not charges_enabled:
        onboarding_status = OnboardingStatus.REJECTED
    elif requirements_due == 0:
        onboarding_status = OnboardingStatus.COMPLETE
    else:
        onboarding_status = OnboardingStatus.IN_PROGRESS

    connected_account.payouts_enabled = payouts_enabled
    connected_account.charges_enabled = charges_enabled
    connected_account.onboarding_required = requirements_due > 0
    connected_account.onboarding_status = onboarding_status
    connected_account.metadata = {
        **connected_account.metadata,
        "requirements": {
            "currently_due": currently_due,
            "past_due": past_due,
            "disabled_reason": disabled_reason,
        },
    }
    connected_account.save()

    logger.info(
        "ConnectedAccount updated",
        extra={
            "connected_account_id": str(connected_account.id),
            "onboarding_status": onboarding_status,
            "payouts_enabled": payouts_enabled,
            "charges_enabled": charges_enabled,
            "requirements_due": requirements_due,
        },
    )
    return ServiceResult.success(connected_account)


# =============================================================================
# Checkout Handlers
# =============================================================================


@register_handler(
    "checkout.session.completed",
    "checkout.session.async_payment_succeeded",
)
def handle_checkout_paid(webhook_event: WebhookEvent) -> ServiceResult:
    """
    Settle a paid checkout session.

    Sessions that are not paid yet (delayed payment methods) are skipped;
    async_payment_succeeded arrives once the money is there.
    """
    session = webhook_event.data_object
    session_id = session.get("id")
    payment_status = session.get("payment_status")
    log_context = {
        "stripe_event_id": webhook_event.stripe_event_id,
        "session_id": session_id,
        "payment_status": payment_status,
    }

    if not session_id:
        logger.error("checkout session without id", extra=log_context)
        return ServiceResult.failure(
            "Could not extract session id from webhook",
            error_code="INVALID_WEBHOOK_PAYLOAD",
        )

    if payment_status not in PAID_SESSION_STATUSES:
        logger.info("Checkout session not paid yet, skipping", extra=log_context)
        return ServiceResult.success(None)

    try:
        metadata = parse_checkout_metadata(session.get("metadata"))
    except ValidationError as e:
        logger.error(
            "Checkout session has malformed metadata",
            extra={**log_context, "error": e.message, **e.details},
        )
        return ServiceResult.from_exception(e)

    match metadata:
        case BundlePurchase(
            buyer_id=buyer_id, provider_id=provider_id, bundle_size=size
        ):
            bundle, created = CreditLedger.grant_bundle(
                buyer_id=buyer_id,
                provider_id=provider_id,
                bundle_size=size,
                price_cents=int(session.get("amount_total") or 0),
                currency=session.get("currency") or "usd",
                stripe_session_id=session_id,
            )
            logger.info(
                "Credit bundle granted" if created else "Credit bundle already granted",
                extra={**log_context, "bundle_id": str(bundle.id)},
            )
            return ServiceResult.success(bundle)

        case SessionBooking(booking_id=booking_id):
            return BookingConfirmationService.confirm_paid(booking_id, session_id)

        case MarketplaceOrder(order_id=order_id):
            return OrderSettlementService.settle_paid(order_id, session_id)

        case None:
            logger.info("Checkout session is not ours, ignoring", extra=log_context)
            return ServiceResult.success(None)
