"""
Marketplace services.

- OrderCheckoutService: Create an order and its hosted checkout
- OrderSettlementService: Settle a paid order (called from the webhook)
- FulfillmentService: Digital delivery and shipping

Settlement runs inside the webhook transaction: the status change, the
ledger entries and, for digital goods, the delivery hash commit together.
Emails go out after commit and may fail without affecting the order.

Usage:
    from marketplace.services import OrderCheckoutService

    checkout = OrderCheckoutService.create_order(request.user, listing_id, 2)
    return {"order_id": checkout.order_id, "checkout_url": checkout.checkout_url}
"""

from __future__ import annotations

import hashlib
import uuid
from dataclasses import dataclass
from typing import TYPE_CHECKING

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.utils import timezone

from core.exceptions import NotFoundError, PermissionDeniedError, ValidationError
from core.services import BaseService, ServiceResult
from marketplace.models import Fulfillment, Listing, ListingKind, Order, OrderStatus
from notifications.models import NotificationKind
from notifications.services import NotificationService
from payments.adapters import StripeAdapter
from payments.exceptions import GatewayError, InvalidStateTransitionError
from payments.fees import platform_fee_cents, unit_amount_cents
from payments.ledger import LedgerService
from payments.services import CheckoutService
from payments.state_machines import PaymentStatus
from toolkit.services.email import EmailService

if TYPE_CHECKING:
    from authentication.models import User


@dataclass
class OrderCheckout:
    order_id: uuid.UUID
    checkout_url: str


class OrderCheckoutService(BaseService):
    """Creates orders and starts their checkout."""

    @classmethod
    def create_order(
        cls,
        buyer: User,
        listing_id,
        quantity: int = 1,
    ) -> OrderCheckout:
        """
        Create an order for a listing and return its checkout URL.

        Raises:
            ValidationError: Bad quantity, own listing or insufficient
                inventory
            NotFoundError: Unknown or inactive listing
            PayoutDestinationMissing: Digital listing whose seller cannot be
                paid; nothing written
            GatewayError: Checkout creation failed; the order is cancelled
        """
        if quantity < 1:
            raise ValidationError(
                "Quantity must be at least 1", details={"field": "quantity"}
            )

        try:
            listing = Listing.objects.select_related("seller").get(
                pk=listing_id, is_active=True
            )
        except (Listing.DoesNotExist, ValueError, DjangoValidationError):
            raise NotFoundError(
                "Listing not found",
                error_code="LISTING_NOT_FOUND",
                details={"listing_id": str(listing_id)},
            )

        if listing.seller_id == buyer.pk:
            raise ValidationError(
                "You cannot buy your own listing", error_code="SELF_PURCHASE"
            )
        if (
            listing.kind == ListingKind.PHYSICAL
            and listing.inventory is not None
            and listing.inventory < quantity
        ):
            raise ValidationError(
                "Insufficient inventory",
                error_code="INSUFFICIENT_INVENTORY",
                details={"available": listing.inventory, "requested": quantity},
            )

        destination = None
        if listing.kind == ListingKind.DIGITAL:
            destination = CheckoutService.payout_destination_for(listing.seller)

        subtotal = unit_amount_cents(listing.price_cents) * quantity
        shipping = (
            settings.PHYSICAL_SHIPPING_CENTS
            if listing.kind == ListingKind.PHYSICAL
            else 0
        )
        order = Order.objects.create(
            buyer=buyer,
            seller=listing.seller,
            listing=listing,
            quantity=quantity,
            subtotal_cents=subtotal,
            shipping_cents=shipping,
            platform_fee_cents=platform_fee_cents(subtotal),
            total_cents=subtotal + shipping,
            currency=listing.currency,
            kind=listing.kind,
        )

        try:
            checkout = CheckoutService.create_order_checkout(order, destination)
        except GatewayError:
            order.cancel()
            order.save()
            cls.get_logger().warning(
                "Checkout failed, order cancelled",
                exc_info=True,
                extra={"order_id": str(order.id)},
            )
            raise

        order.stripe_session_id = checkout.id
        order.save(update_fields=["stripe_session_id", "updated_at"])

        cls.get_logger().info(
            "Order awaiting payment",
            extra={
                "order_id": str(order.id),
                "kind": order.kind,
                "total_cents": order.total_cents,
            },
        )
        return OrderCheckout(order_id=order.id, checkout_url=checkout.url)


class OrderSettlementService(BaseService):
    """Settles orders whose checkout has been paid."""

    @classmethod
    def settle_paid(cls, order_id: uuid.UUID, session_id: str) -> ServiceResult[Order]:
        """
        Mark an order paid, write its ledger entries and deliver digital goods.

        Replays are no-ops: the status change is a conditional UPDATE on
        status=created, and ledger entries are keyed per order.

        Error codes:
            ORDER_NOT_FOUND: No such order; the event fails and is retried
        """
        logger = cls.get_logger()
        order = (
            Order.objects.select_related("listing", "buyer", "seller")
            .filter(pk=order_id)
            .first()
        )
        if order is None:
            logger.error(
                "Paid checkout for unknown order",
                extra={"order_id": str(order_id), "session_id": session_id},
            )
            return ServiceResult.failure(
                f"Order {order_id} not found", error_code="ORDER_NOT_FOUND"
            )

        if order.status != OrderStatus.CREATED:
            logger.info(
                "Order already settled",
                extra={"order_id": str(order.id), "status": order.status},
            )
            return ServiceResult.success(order)

        charge = StripeAdapter.retrieve_checkout_charge(session_id)
        now = timezone.now()

        with cls.atomic():
            updated = Order.objects.filter(
                pk=order.pk,
                status=OrderStatus.CREATED,
            ).update(
                status=OrderStatus.PAID_PENDING_FULFILLMENT,
                payment_status=PaymentStatus.PAID,
                stripe_session_id=session_id,
                stripe_payment_intent_id=charge.payment_intent_id or "",
                stripe_charge_id=charge.charge_id or "",
                paid_at=now,
                updated_at=now,
            )
            if updated == 0:
                order.refresh_from_db()
                return ServiceResult.success(order)

            order.refresh_from_db()
            LedgerService.record_order_settlement(order)

            NotificationService.create_notification(
                recipient=order.seller,
                type_key=NotificationKind.ORDER_PAID,
                title=f"New order: {order.quantity} x {order.listing.title}",
                link=f"/orders/{order.id}",
                data={
                    "order_id": str(order.id),
                    "seller_net_cents": order.seller_net_cents,
                },
                idempotency_key=f"order-paid:{order.id}",
            )

            if order.is_digital:
                FulfillmentService.deliver_digital(order)

        logger.info(
            "Order settled",
            extra={
                "order_id": str(order.id),
                "kind": order.kind,
                "subtotal_cents": order.subtotal_cents,
                "platform_fee_cents": order.platform_fee_cents,
            },
        )
        return ServiceResult.success(order)


class FulfillmentService(BaseService):
    """Delivers digital orders and ships physical ones."""

    @staticmethod
    def delivery_hash(order: Order) -> str:
        """
        Revocable download token for a digital order.

        Rotating DELIVERY_SECRET invalidates every outstanding link.
        """
        raw = (
            f"{order.id}:{order.buyer_id}:{order.listing_id}:"
            f"{settings.DELIVERY_SECRET}"
        )
        return hashlib.sha256(raw.encode()).hexdigest()

    @classmethod
    def delivery_url(cls, order: Order) -> str:
        return f"{settings.FRONTEND_URL.rstrip('/')}/dl/{order.delivery_link_hash}"

    @classmethod
    def deliver_digital(cls, order: Order) -> Order:
        """
        Store the delivery hash and email the buyer the download link.

        The email is queued after commit and sent with retries.

        Raises:
            ValidationError: Not a digital order
            InvalidStateTransitionError: Order is not paid
        """
        if not order.is_digital:
            raise ValidationError(
                "Not a digital order",
                error_code="NOT_DIGITAL",
                details={"order_id": str(order.id)},
            )
        if order.status != OrderStatus.PAID_PENDING_FULFILLMENT:
            raise InvalidStateTransitionError(
                f"Cannot deliver an order in status {order.status}",
                details={"order_id": str(order.id), "status": order.status},
            )

        order.delivery_link_hash = cls.delivery_hash(order)
        order.deliver()
        order.save()

        url = cls.delivery_url(order)
        NotificationService.create_notification(
            recipient=order.buyer,
            type_key=NotificationKind.DIGITAL_DELIVERED,
            title=f"{order.listing.title} is ready to download",
            link=f"/dl/{order.delivery_link_hash}",
            data={"order_id": str(order.id)},
            idempotency_key=f"order-delivered:{order.id}",
        )
        transaction.on_commit(
            lambda: EmailService.queue(
                to=order.buyer.email,
                subject=f"Your download: {order.listing.title}",
                body_text=f"Thanks for your purchase. Download it here: {url}",
                context={"order_id": str(order.id)},
            )
        )

        cls.get_logger().info(
            "Digital order delivered", extra={"order_id": str(order.id)}
        )
        return order

    @classmethod
    def mark_shipped(
        cls,
        order: Order,
        seller: User,
        carrier: str,
        tracking_number: str,
        label_url: str = "",
    ) -> Fulfillment:
        """
        Record shipping details and move the order to shipped.

        Calling again for a shipped order updates the tracking details.

        Raises:
            PermissionDeniedError: Caller is not the seller
            InvalidStateTransitionError: Digital, unpaid or finished order
        """
        if order.seller_id != seller.pk:
            raise PermissionDeniedError(
                "Only the seller can ship this order",
                details={"order_id": str(order.id)},
            )
        if order.status not in (
            OrderStatus.PAID_PENDING_FULFILLMENT,
            OrderStatus.SHIPPED,
        ) or order.is_digital:
            raise InvalidStateTransitionError(
                f"Cannot ship an order in status {order.status}",
                details={"order_id": str(order.id), "status": order.status},
            )

        with cls.atomic():
            fulfillment, _ = Fulfillment.objects.update_or_create(
                order=order,
                defaults={
                    "carrier": carrier,
                    "tracking_number": tracking_number,
                    "label_url": label_url,
                    "shipped_at": timezone.now(),
                },
            )
            if order.status == OrderStatus.PAID_PENDING_FULFILLMENT:
                order.ship()
                order.save()

            NotificationService.create_notification(
                recipient=order.buyer,
                type_key=NotificationKind.ORDER_SHIPPED,
                title=f"{order.listing.title} has shipped",
                body=f"{carrier} tracking number: {tracking_number}",
                link=f"/orders/{order.id}",
                data={
                    "order_id": str(order.id),
                    "carrier": carrier,
                    "tracking_number": tracking_number,
                },
                idempotency_key=f"order-shipped:{order.id}:{tracking_number}",
            )
            transaction.on_commit(
                lambda: EmailService.queue(
                    to=order.buyer.email,
                    subject=f"Your order has shipped: {order.listing.title}",
                    body_text=f"Carrier: {carrier}\nTracking number: {tracking_number}",
                    context={"order_id": str(order.id)},
                )
            )

        cls.get_logger().info(
            "Order shipped",
            extra={"order_id": str(order.id), "carrier": carrier},
        )
        return fulfillment
