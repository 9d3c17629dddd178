"""
Booking domain models.

- Provider: A person who sells sessions, with price and meeting settings
- Booking: One scheduled session, funded by a credit or a checkout payment
- CreditBundle: Prepaid session credits for one (buyer, provider) pair
- XPAward: Experience points granted after bookings

Usage:
    from bookings.models import Booking, BookingStatus

    Booking.objects.filter(status=BookingStatus.CONFIRMED, session_at__gte=now)
"""

from __future__ import annotations

from django.conf import settings
from django.db import models
from django.db.models import F, Q
from django.utils import timezone
from django_fsm import FSMField, transition

from core.models import BaseModel
from core.model_mixins import UUIDPrimaryKeyMixin
from payments.state_machines import PaymentStatus


class MeetingProvider(models.TextChoices):
    """
    Where a provider runs their sessions.

    JITSI is built in: rooms are derived from the booking id. All others use
    the provider's own meeting_base_url.
    """

    JITSI = "jitsi", "Built-in (Jitsi)"
    ZOOM = "zoom", "Zoom"
    GOOGLE_MEET = "google_meet", "Google Meet"
    CUSTOM = "custom", "Custom link"


class BookingStatus(models.TextChoices):
    """
    Booking lifecycle.

    State Flow:
        PENDING → CONFIRMED
        PENDING → CANCELLED
        CONFIRMED/COMPLETED → REFUNDED

    Credit-funded bookings are created CONFIRMED.
    """

    PENDING = "pending", "Pending"
    CONFIRMED = "confirmed", "Confirmed"
    COMPLETED = "completed", "Completed"
    CANCELLED = "cancelled", "Cancelled"
    REFUNDED = "refunded", "Refunded"


class Provider(UUIDPrimaryKeyMixin, BaseModel):
    """
    A session provider (mentor, coach, practitioner).

    Fields:
        user: The provider's account; also owns the payout account
        display_name: Shown on checkout and notifications
        price_cents: Price of one session; None uses DEFAULT_SESSION_PRICE_CENTS
        meeting_provider: Built-in or external meeting service
        meeting_base_url: Room URL for external providers
    """

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="provider",
    )
    display_name = models.CharField(max_length=200)
    price_cents = models.PositiveIntegerField(
        null=True,
        blank=True,
        help_text="Price of one session in cents",
    )
    currency = models.CharField(max_length=3, default="usd")
    meeting_provider = models.CharField(
        max_length=20,
        choices=MeetingProvider.choices,
        default=MeetingProvider.JITSI,
    )
    meeting_base_url = models.URLField(blank=True, default="")
    is_active = models.BooleanField(default=True, db_index=True)

    class Meta:
        ordering = ["display_name"]

    def __str__(self) -> str:
        return self.display_name

    @property
    def session_price_cents(self) -> int:
        if self.price_cents is None:
            return settings.DEFAULT_SESSION_PRICE_CENTS
        return self.price_cents


class CreditBundle(UUIDPrimaryKeyMixin, BaseModel):
    """
    Prepaid session credits a buyer holds with one provider.

    Created when a bundle checkout completes; decremented once per
    credit-funded booking. A bundle at zero stays at zero.

    Constraints:
        - 0 <= credits_left <= bundle_size
        - stripe_session_id unique, so a replayed checkout grants nothing
    """

    buyer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="credit_bundles",
    )
    provider = models.ForeignKey(
        Provider,
        on_delete=models.CASCADE,
        related_name="credit_bundles",
    )
    bundle_size = models.PositiveSmallIntegerField()
    credits_left = models.PositiveSmallIntegerField()
    price_cents = models.PositiveIntegerField(help_text="Amount paid for the bundle")
    currency = models.CharField(max_length=3, default="usd")
    purchased_at = models.DateTimeField(default=timezone.now)
    stripe_session_id = models.CharField(
        max_length=255,
        unique=True,
        null=True,
        blank=True,
        help_text="Checkout session that paid for this bundle",
    )

    class Meta:
        ordering = ["purchased_at", "created_at"]
        indexes = [
            models.Index(
                fields=["buyer", "provider", "credits_left"],
                name="bundle_buyer_provider_idx",
            ),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(credits_left__gte=0),
                name="bundle_credits_left_non_negative",
            ),
            models.CheckConstraint(
                condition=Q(credits_left__lte=F("bundle_size")),
                name="bundle_credits_left_within_size",
            ),
        ]

    def __str__(self) -> str:
        return (
            f"CreditBundle({self.credits_left}/{self.bundle_size}, {self.provider_id})"
        )


class Booking(UUIDPrimaryKeyMixin, BaseModel):
    """
    A scheduled session between a buyer and a provider.

    Exactly one funding path: either used_credit (with credit_bundle) or a
    checkout session. Fees and net amounts are copied from the realized
    charge on confirmation, never from the checkout request.

    join_url is empty until the booking is confirmed.
    """

    buyer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="bookings",
    )
    provider = models.ForeignKey(
        Provider,
        on_delete=models.CASCADE,
        related_name="bookings",
    )

    status = FSMField(
        default=BookingStatus.PENDING,
        choices=BookingStatus.choices,
        db_index=True,
        help_text="Booking lifecycle status (managed by FSM)",
    )
    payment_status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING,
        db_index=True,
    )

    # Funding
    used_credit = models.BooleanField(default=False)
    credit_bundle = models.ForeignKey(
        CreditBundle,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="bookings",
    )
    amount_cents = models.PositiveIntegerField(default=0)
    currency = models.CharField(max_length=3, default="usd")

    notes = models.TextField(blank=True, default="")
    session_at = models.DateTimeField(null=True, blank=True, db_index=True)

    join_url = models.CharField(max_length=500, blank=True, default="")
    join_expires_at = models.DateTimeField(null=True, blank=True)

    # Gateway references, from the realized charge
    stripe_session_id = models.CharField(
        max_length=255,
        unique=True,
        null=True,
        blank=True,
    )
    stripe_payment_intent_id = models.CharField(max_length=255, blank=True, default="")
    stripe_charge_id = models.CharField(max_length=255, blank=True, default="")
    stripe_transfer_id = models.CharField(max_length=255, blank=True, default="")
    application_fee_cents = models.PositiveIntegerField(null=True, blank=True)
    net_amount_cents = models.PositiveIntegerField(null=True, blank=True)

    confirmed_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    refunded_at = models.DateTimeField(null=True, blank=True)

    # Monotonic: false -> true once, never reset
    reminder_1h_sent = models.BooleanField(default=False)
    reminder_5m_sent = models.BooleanField(default=False)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(
                fields=["status", "session_at"], name="booking_status_session_idx"
            ),
        ]
        constraints = [
            models.CheckConstraint(
                condition=~Q(used_credit=True, stripe_session_id__isnull=False),
                name="booking_single_funding_path",
            ),
        ]

    def __str__(self) -> str:
        return f"Booking({self.id}, {self.status})"

    @property
    def is_paid(self) -> bool:
        return self.payment_status == PaymentStatus.PAID

    @property
    def paid_through_gateway(self) -> bool:
        return (
            self.is_paid
            and not self.used_credit
            and bool(self.stripe_payment_intent_id)
        )

    # ==========================================================================
    # State Transitions (django-fsm)
    # ==========================================================================

    @transition(
        field=status,
        source=BookingStatus.PENDING,
        target=BookingStatus.CANCELLED,
    )
    def cancel(self):
        """
        Cancel a booking whose checkout never completed.

        Transition: PENDING -> CANCELLED
        """
        self.cancelled_at = timezone.now()

    @transition(
        field=status,
        source=[BookingStatus.CONFIRMED, BookingStatus.COMPLETED],
        target=BookingStatus.REFUNDED,
    )
    def refund(self):
        """
        Mark as refunded after a dispute was resolved in the buyer's favour.

        Transition: CONFIRMED/COMPLETED -> REFUNDED
        """
        self.payment_status = PaymentStatus.REFUNDED
        self.refunded_at = timezone.now()


class XPReason(models.TextChoices):
    SESSION_BOOKED = "session_booked", "Session booked"
    FIRST_SESSION = "first_session", "First session"


class XPAward(BaseModel):
    """
    Experience points granted to a user.

    One award per (user, reason, reference); first_session at most once per
    user.
    """

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="xp_awards",
    )
    amount = models.PositiveIntegerField()
    reason = models.CharField(max_length=50, choices=XPReason.choices)
    reference_type = models.CharField(max_length=20, blank=True, default="")
    reference_id = models.UUIDField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["user", "reason", "reference_id"],
                name="xp_award_once_per_reference",
            ),
            models.UniqueConstraint(
                fields=["user"],
                condition=Q(reason="first_session"),
                name="xp_first_session_once",
            ),
        ]

    def __str__(self) -> str:
        return f"XPAward({self.user_id}, {self.reason}, +{self.amount})"
