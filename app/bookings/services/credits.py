"""
Prepaid session credits.

Bundles are granted by the checkout-completed webhook and consumed one
credit per booking. consume() never reads and writes back credits_left; it
decrements with a conditional UPDATE so two concurrent bookings against the
last credit cannot both succeed.

Usage:
    from bookings.services.credits import CreditLedger

    with transaction.atomic():
        bundle = CreditLedger.consume(buyer, provider)
        if bundle is not None:
            Booking.objects.create(..., used_credit=True, credit_bundle=bundle)
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from django.db import IntegrityError, transaction
from django.db.models import F, Sum

from bookings.models import CreditBundle
from core.services import BaseService
from payments.exceptions import ConcurrencyConflict

if TYPE_CHECKING:
    from authentication.models import User
    from bookings.models import Provider


class CreditLedger(BaseService):
    """Grants and consumes credit bundles."""

    @classmethod
    def available_bundles(cls, buyer: User, provider: Provider):
        return CreditBundle.objects.filter(
            buyer=buyer,
            provider=provider,
            credits_left__gt=0,
        ).order_by("purchased_at", "created_at")

    @classmethod
    def oldest_available(cls, buyer: User, provider: Provider) -> CreditBundle | None:
        """The bundle the next credit is taken from (oldest purchase first)."""
        return cls.available_bundles(buyer, provider).first()

    @classmethod
    def consume(cls, buyer: User, provider: Provider) -> CreditBundle | None:
        """
        Take one credit from the buyer's oldest non-empty bundle.

        Must run inside the caller's transaction so the decrement rolls back
        together with the booking insert.

        Returns:
            The bundle with credits_left refreshed, or None when the buyer
            holds no credit with this provider

        Raises:
            ConcurrencyConflict: The chosen bundle was emptied by a
                concurrent booking between the read and the update
        """
        bundle = cls.oldest_available(buyer, provider)
        if bundle is None:
            return None

        updated = CreditBundle.objects.filter(
            pk=bundle.pk,
            credits_left__gt=0,
        ).update(credits_left=F("credits_left") - 1)

        if updated == 0:
            cls.get_logger().info(
                "Lost race for credit",
                extra={"bundle_id": str(bundle.pk), "buyer_id": buyer.pk},
            )
            raise ConcurrencyConflict(
                "Credit was consumed by a concurrent booking",
                details={"bundle_id": str(bundle.pk)},
            )

        bundle.refresh_from_db(fields=["credits_left"])
        cls.get_logger().info(
            "Credit consumed",
            extra={
                "bundle_id": str(bundle.pk),
                "buyer_id": buyer.pk,
                "credits_left": bundle.credits_left,
            },
        )
        return bundle

    @classmethod
    def grant_bundle(
        cls,
        buyer_id: int,
        provider_id: uuid.UUID,
        bundle_size: int,
        price_cents: int,
        currency: str,
        stripe_session_id: str,
    ) -> tuple[CreditBundle, bool]:
        """
        Create the bundle paid for by a checkout session.

        Idempotent on stripe_session_id: a replayed webhook gets the
        existing bundle back with created=False.
        """
        existing = CreditBundle.objects.filter(
            stripe_session_id=stripe_session_id
        ).first()
        if existing is not None:
            return existing, False

        try:
            with transaction.atomic():
                bundle = CreditBundle.objects.create(
                    buyer_id=buyer_id,
                    provider_id=provider_id,
                    bundle_size=bundle_size,
                    credits_left=bundle_size,
                    price_cents=price_cents,
                    currency=currency,
                    stripe_session_id=stripe_session_id,
                )
        except IntegrityError:
            # Concurrent delivery of the same session
            return CreditBundle.objects.get(stripe_session_id=stripe_session_id), False

        cls.get_logger().info(
            "Credit bundle granted",
            extra={
                "bundle_id": str(bundle.pk),
                "buyer_id": buyer_id,
                "provider_id": str(provider_id),
                "bundle_size": bundle_size,
            },
        )
        return bundle, True

    @classmethod
    def balances_for(cls, buyer: User) -> list[dict]:
        """
        Remaining credits of a buyer, one row per provider.

        Example:
            [{"provider_id": UUID(...), "provider_name": "Ada", "credits_left": 4}]
        """
        rows = (
            CreditBundle.objects.filter(buyer=buyer, credits_left__gt=0)
            .values("provider_id", "provider__display_name")
            .annotate(credits_left=Sum("credits_left"))
            .order_by("provider__display_name")
        )
        return [
            {
                "provider_id": row["provider_id"],
                "provider_name": row["provider__display_name"],
                "credits_left": row["credits_left"],
            }
            for row in rows
        ]
