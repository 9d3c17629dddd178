"""
DRF serializers for the bookings API.

Request serializers validate input shape only; business rules (self-booking,
credit availability, payout readiness) are enforced by the services.
"""

from __future__ import annotations

from rest_framework import serializers

from bookings.models import Booking


class CreateBookingSerializer(serializers.Serializer):
    """
    Example:
        {"provider_id": "7c9e...", "notes": "Intro call", "credit_only": false}
    """

    provider_id = serializers.UUIDField()
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    session_at = serializers.DateTimeField(required=False, allow_null=True)
    credit_only = serializers.BooleanField(required=False, default=False)


class BookingIntentSerializer(serializers.Serializer):
    booking_id = serializers.UUIDField(read_only=True, allow_null=True)
    used_credit = serializers.BooleanField(read_only=True)
    credits_left = serializers.IntegerField(read_only=True, allow_null=True)
    checkout_url = serializers.CharField(read_only=True, allow_null=True)
    needs_purchase = serializers.BooleanField(read_only=True)


class BundleCheckoutSerializer(serializers.Serializer):
    provider_id = serializers.UUIDField()
    bundle_size = serializers.IntegerField(min_value=1)


class BundleIntentSerializer(serializers.Serializer):
    checkout_url = serializers.CharField(read_only=True)
    session_id = serializers.CharField(read_only=True)


class CreditBalanceSerializer(serializers.Serializer):
    provider_id = serializers.UUIDField(read_only=True)
    provider_name = serializers.CharField(read_only=True)
    credits_left = serializers.IntegerField(read_only=True)


class BookingSerializer(serializers.ModelSerializer):
    """
    A booking as seen by its buyer.

    join_url stays empty until the booking is confirmed.
    """

    provider_name = serializers.CharField(
        source="provider.display_name", read_only=True
    )

    class Meta:
        model = Booking
        fields = [
            "id",
            "provider",
            "provider_name",
            "status",
            "payment_status",
            "used_credit",
            "amount_cents",
            "currency",
            "notes",
            "session_at",
            "join_url",
            "join_expires_at",
            "confirmed_at",
            "created_at",
        ]
        read_only_fields = fields
