"""
Marketplace models.

- Listing: A digital or physical product offered by a seller
- Order: One checkout for a listing, settled by the checkout webhook
- Fulfillment: Shipping details for a physical order

Money flow:
    Digital orders are paid to the seller through a destination charge and
    the seller share lands in the available ledger bucket. Physical orders
    are collected by the platform; the seller share is held on_hold.
"""

from __future__ import annotations

from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone
from django_fsm import FSMField, transition

from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel
from payments.state_machines import PaymentStatus


class ListingKind(models.TextChoices):
    DIGITAL = "digital", "Digital"
    PHYSICAL = "physical", "Physical"


class OrderStatus(models.TextChoices):
    """
    Order lifecycle.

    State Flow:
        CREATED → PAID_PENDING_FULFILLMENT → SHIPPED → DELIVERED
        PAID_PENDING_FULFILLMENT → DELIVERED (digital)
        CREATED → CANCELLED
        PAID_PENDING_FULFILLMENT/SHIPPED/DELIVERED → REFUNDED
    """

    CREATED = "created", "Created"
    PAID_PENDING_FULFILLMENT = "paid_pending_fulfillment", "Paid, pending fulfillment"
    SHIPPED = "shipped", "Shipped"
    DELIVERED = "delivered", "Delivered"
    REFUNDED = "refunded", "Refunded"
    CANCELLED = "cancelled", "Cancelled"


class Listing(UUIDPrimaryKeyMixin, BaseModel):
    """
    A product for sale.

    inventory is only tracked for physical listings; None means unlimited.
    """

    seller = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="listings",
    )
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True, default="")
    kind = models.CharField(
        max_length=20,
        choices=ListingKind.choices,
        default=ListingKind.DIGITAL,
    )
    price_cents = models.PositiveIntegerField()
    currency = models.CharField(max_length=3, default="usd")
    inventory = models.PositiveIntegerField(null=True, blank=True)
    is_active = models.BooleanField(default=True, db_index=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return self.title


class Order(UUIDPrimaryKeyMixin, BaseModel):
    """
    A marketplace purchase.

    Amounts are fixed when the order is created:
        subtotal = price * quantity
        total = subtotal + shipping
        platform_fee = floor(subtotal * PLATFORM_FEE_PERCENT / 100)

    The seller is owed subtotal - platform_fee; shipping stays with the
    platform.
    """

    buyer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="orders",
    )
    seller = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="sales",
    )
    listing = models.ForeignKey(
        Listing,
        on_delete=models.PROTECT,
        related_name="orders",
    )
    quantity = models.PositiveIntegerField(default=1)
    subtotal_cents = models.PositiveIntegerField()
    shipping_cents = models.PositiveIntegerField(default=0)
    platform_fee_cents = models.PositiveIntegerField(default=0)
    total_cents = models.PositiveIntegerField()
    currency = models.CharField(max_length=3, default="usd")
    kind = models.CharField(max_length=20, choices=ListingKind.choices)

    status = FSMField(
        default=OrderStatus.CREATED,
        choices=OrderStatus.choices,
        db_index=True,
        help_text="Order lifecycle status (managed by FSM)",
    )
    payment_status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING,
    )

    stripe_session_id = models.CharField(
        max_length=255,
        unique=True,
        null=True,
        blank=True,
    )
    stripe_payment_intent_id = models.CharField(max_length=255, blank=True, default="")
    stripe_charge_id = models.CharField(max_length=255, blank=True, default="")
    delivery_link_hash = models.CharField(max_length=64, blank=True, default="")

    paid_at = models.DateTimeField(null=True, blank=True)
    refunded_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["seller", "status"], name="order_seller_status_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(quantity__gte=1),
                name="order_quantity_positive",
            ),
        ]

    def __str__(self) -> str:
        return f"Order({self.id}, {self.status})"

    @property
    def seller_net_cents(self) -> int:
        return self.subtotal_cents - self.platform_fee_cents

    @property
    def is_digital(self) -> bool:
        return self.kind == ListingKind.DIGITAL

    @property
    def paid_through_gateway(self) -> bool:
        return self.payment_status == PaymentStatus.PAID and bool(
            self.stripe_payment_intent_id
        )

    # ==========================================================================
    # State Transitions (django-fsm)
    # ==========================================================================

    @transition(
        field=status,
        source=OrderStatus.CREATED,
        target=OrderStatus.CANCELLED,
    )
    def cancel(self):
        pass

    @transition(
        field=status,
        source=OrderStatus.PAID_PENDING_FULFILLMENT,
        target=OrderStatus.SHIPPED,
        conditions=[lambda order: not order.is_digital],
    )
    def ship(self):
        """Transition: PAID_PENDING_FULFILLMENT -> SHIPPED (physical only)"""

    @transition(
        field=status,
        source=[OrderStatus.PAID_PENDING_FULFILLMENT, OrderStatus.SHIPPED],
        target=OrderStatus.DELIVERED,
    )
    def deliver(self):
        pass

    @transition(
        field=status,
        source=[
            OrderStatus.PAID_PENDING_FULFILLMENT,
            OrderStatus.SHIPPED,
            OrderStatus.DELIVERED,
        ],
        target=OrderStatus.REFUNDED,
    )
    def refund(self):
        self.payment_status = PaymentStatus.REFUNDED
        self.refunded_at = timezone.now()


class Fulfillment(BaseModel):
    """Shipping record of a physical order. One per order, updated in place."""

    order = models.OneToOneField(
        Order,
        on_delete=models.CASCADE,
        related_name="fulfillment",
    )
    carrier = models.CharField(max_length=100)
    tracking_number = models.CharField(max_length=255)
    label_url = models.URLField(blank=True, default="")
    shipped_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"Fulfillment({self.order_id}, {self.carrier} {self.tracking_number})"
