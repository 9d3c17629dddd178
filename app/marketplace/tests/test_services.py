"""
Tests for order creation and fulfillment.
"""

import uuid
from unittest.mock import patch

import pytest
from django.test import override_settings

from core.exceptions import NotFoundError, PermissionDeniedError, ValidationError
from marketplace.models import Fulfillment, Order, OrderStatus
from marketplace.services import FulfillmentService, OrderCheckoutService
from marketplace.tests.factories import ListingFactory, OrderFactory
from notifications.models import Notification, NotificationKind
from payments.exceptions import (
    GatewayUnavailableError,
    InvalidStateTransitionError,
    PayoutDestinationMissing,
)


# =============================================================================
# Order Creation
# =============================================================================


@pytest.mark.django_db
class TestCreateOrder:
    def test_digital_order_amounts(
        self, buyer, digital_listing, seller_account, mock_create_checkout
    ):
        checkout = OrderCheckoutService.create_order(buyer, digital_listing.id, 2)

        order = Order.objects.get(pk=checkout.order_id)
        assert order.status == OrderStatus.CREATED
        assert order.subtotal_cents == 4000
        assert order.shipping_cents == 0
        assert order.platform_fee_cents == 600
        assert order.total_cents == 4000
        assert order.stripe_session_id == "cs_test_order"
        assert checkout.checkout_url.endswith("cs_test_order")

    def test_digital_checkout_pays_seller_account(
        self, buyer, digital_listing, seller_account, mock_create_checkout
    ):
        OrderCheckoutService.create_order(buyer, digital_listing.id, 1)

        params = mock_create_checkout.call_args.args[0]
        assert params.destination_account == seller_account.stripe_account_id
        assert params.application_fee_cents == 300

    def test_physical_order_adds_shipping(
        self, buyer, physical_listing, mock_create_checkout
    ):
        checkout = OrderCheckoutService.create_order(buyer, physical_listing.id, 1)

        order = Order.objects.get(pk=checkout.order_id)
        assert order.shipping_cents == 2000
        assert order.total_cents == 5000
        params = mock_create_checkout.call_args.args[0]
        assert params.destination_account is None

    def test_digital_seller_without_account_writes_nothing(
        self, buyer, digital_listing, mock_create_checkout
    ):
        with pytest.raises(PayoutDestinationMissing):
            OrderCheckoutService.create_order(buyer, digital_listing.id, 1)

        assert Order.objects.count() == 0
        mock_create_checkout.assert_not_called()

    def test_unknown_listing(self, buyer):
        with pytest.raises(NotFoundError) as exc_info:
            OrderCheckoutService.create_order(buyer, uuid.uuid4(), 1)

        assert exc_info.value.error_code == "LISTING_NOT_FOUND"

    def test_inactive_listing(self, buyer):
        listing = ListingFactory(is_active=False)

        with pytest.raises(NotFoundError):
            OrderCheckoutService.create_order(buyer, listing.id, 1)

    def test_own_listing_rejected(self, seller, digital_listing):
        with pytest.raises(ValidationError) as exc_info:
            OrderCheckoutService.create_order(seller, digital_listing.id, 1)

        assert exc_info.value.error_code == "SELF_PURCHASE"

    def test_insufficient_inventory(self, buyer, physical_listing):
        with pytest.raises(ValidationError) as exc_info:
            OrderCheckoutService.create_order(buyer, physical_listing.id, 6)

        assert exc_info.value.error_code == "INSUFFICIENT_INVENTORY"

    def test_gateway_failure_cancels_order(
        self, buyer, physical_listing, mock_create_checkout
    ):
        mock_create_checkout.side_effect = GatewayUnavailableError("Stripe is down")

        with pytest.raises(GatewayUnavailableError):
            OrderCheckoutService.create_order(buyer, physical_listing.id, 1)

        order = Order.objects.get()
        assert order.status == OrderStatus.CANCELLED


# =============================================================================
# Digital Delivery
# =============================================================================


@pytest.mark.django_db
class TestDeliverDigital:
    @override_settings(DELIVERY_SECRET="s3cret", FRONTEND_URL="https://app.test")
    def test_stores_hash_and_delivers(self):
        order = OrderFactory(paid=True)

        FulfillmentService.deliver_digital(order)

        order.refresh_from_db()
        assert order.status == OrderStatus.DELIVERED
        assert len(order.delivery_link_hash) == 64
        assert order.delivery_link_hash == FulfillmentService.delivery_hash(order)
        assert FulfillmentService.delivery_url(order) == (
            f"https://app.test/dl/{order.delivery_link_hash}"
        )

    def test_hash_changes_with_secret(self):
        order = OrderFactory(paid=True)

        with override_settings(DELIVERY_SECRET="one"):
            first = FulfillmentService.delivery_hash(order)
        with override_settings(DELIVERY_SECRET="two"):
            second = FulfillmentService.delivery_hash(order)

        assert first != second

    def test_notifies_buyer(self):
        order = OrderFactory(paid=True)

        FulfillmentService.deliver_digital(order)

        notification = Notification.objects.get(
            type_key=NotificationKind.DIGITAL_DELIVERED
        )
        assert notification.recipient_id == order.buyer_id

    def test_emails_download_link_after_commit(
        self, django_capture_on_commit_callbacks
    ):
        order = OrderFactory(paid=True)

        with patch("toolkit.tasks.send_email.delay") as mock_delay:
            with django_capture_on_commit_callbacks(execute=True):
                FulfillmentService.deliver_digital(order)

        kwargs = mock_delay.call_args.kwargs
        assert kwargs["to"] == order.buyer.email
        assert f"/dl/{order.delivery_link_hash}" in kwargs["body_text"]
        assert kwargs["context"] == {"order_id": str(order.id)}

    def test_email_queue_failure_keeps_delivery(
        self, django_capture_on_commit_callbacks
    ):
        order = OrderFactory(paid=True)

        with patch(
            "toolkit.tasks.send_email.delay",
            side_effect=ConnectionError("broker down"),
        ) as mock_delay:
            with django_capture_on_commit_callbacks(execute=True):
                FulfillmentService.deliver_digital(order)

        mock_delay.assert_called_once()
        order.refresh_from_db()
        assert order.status == OrderStatus.DELIVERED

    def test_unpaid_order_rejected(self):
        order = OrderFactory()

        with pytest.raises(InvalidStateTransitionError):
            FulfillmentService.deliver_digital(order)

    def test_physical_order_rejected(self):
        order = OrderFactory(listing=ListingFactory(physical=True), paid=True)

        with pytest.raises(ValidationError):
            FulfillmentService.deliver_digital(order)


# =============================================================================
# Shipping
# =============================================================================


@pytest.mark.django_db
class TestMarkShipped:
    @pytest.fixture
    def physical_order(self, buyer, physical_listing):
        return OrderFactory(buyer=buyer, listing=physical_listing, paid=True)

    def test_ships_order(self, physical_order, seller):
        fulfillment = FulfillmentService.mark_shipped(
            physical_order, seller, carrier="UPS", tracking_number="1Z999"
        )

        physical_order.refresh_from_db()
        assert physical_order.status == OrderStatus.SHIPPED
        assert fulfillment.carrier == "UPS"
        assert fulfillment.tracking_number == "1Z999"

    def test_notifies_buyer(self, physical_order, seller, buyer):
        FulfillmentService.mark_shipped(
            physical_order, seller, carrier="UPS", tracking_number="1Z999"
        )

        notification = Notification.objects.get(type_key=NotificationKind.ORDER_SHIPPED)
        assert notification.recipient_id == buyer.pk
        assert notification.data["tracking_number"] == "1Z999"

    def test_emails_tracking_after_commit(
        self, physical_order, seller, buyer, django_capture_on_commit_callbacks
    ):
        with patch("toolkit.tasks.send_email.delay") as mock_delay:
            with django_capture_on_commit_callbacks(execute=True):
                FulfillmentService.mark_shipped(
                    physical_order, seller, carrier="UPS", tracking_number="1Z999"
                )

        kwargs = mock_delay.call_args.kwargs
        assert kwargs["to"] == buyer.email
        assert "Tracking number: 1Z999" in kwargs["body_text"]

    def test_reship_updates_tracking(self, physical_order, seller):
        FulfillmentService.mark_shipped(
            physical_order, seller, carrier="UPS", tracking_number="1Z999"
        )
        FulfillmentService.mark_shipped(
            physical_order, seller, carrier="FedEx", tracking_number="7788"
        )

        fulfillment = Fulfillment.objects.get(order=physical_order)
        assert fulfillment.carrier == "FedEx"
        assert fulfillment.tracking_number == "7788"

    def test_only_seller_can_ship(self, physical_order, buyer):
        with pytest.raises(PermissionDeniedError):
            FulfillmentService.mark_shipped(
                physical_order, buyer, carrier="UPS", tracking_number="1Z999"
            )

        assert not Fulfillment.objects.exists()

    def test_unpaid_order_cannot_ship(self, buyer, physical_listing, seller):
        order = OrderFactory(buyer=buyer, listing=physical_listing)

        with pytest.raises(InvalidStateTransitionError):
            FulfillmentService.mark_shipped(
                order, seller, carrier="UPS", tracking_number="1Z999"
            )

    def test_digital_order_cannot_ship(self, seller, digital_listing):
        order = OrderFactory(listing=digital_listing, paid=True)

        with pytest.raises(InvalidStateTransitionError):
            FulfillmentService.mark_shipped(
                order, seller, carrier="UPS", tracking_number="1Z999"
            )
