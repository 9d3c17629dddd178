"""
DRF serializers for the payments API.

- OnboardingLinkSerializer: Connect onboarding response
- BalanceSerializer: Seller balance response
"""

from __future__ import annotations

from rest_framework import serializers


class OnboardingLinkSerializer(serializers.Serializer):
    onboarding_url = serializers.CharField(source="url", read_only=True)
    expires_at = serializers.IntegerField(read_only=True, allow_null=True)
    stripe_account_id = serializers.CharField(
        source="account.stripe_account_id", read_only=True
    )
    onboarding_status = serializers.CharField(
        source="account.onboarding_status", read_only=True
    )
    payouts_enabled = serializers.BooleanField(
        source="account.payouts_enabled", read_only=True
    )


class BalanceSerializer(serializers.Serializer):
    """
    Seller balance in cents.

    Example:
        {"available_cents": 4250, "on_hold_cents": 0, "currency": "usd"}
    """

    available_cents = serializers.IntegerField(source="available.cents", read_only=True)
    on_hold_cents = serializers.IntegerField(source="on_hold.cents", read_only=True)
    currency = serializers.CharField(source="available.currency", read_only=True)
