"""
DRF serializers for the disputes API.
"""

from __future__ import annotations

from rest_framework import serializers

from disputes.models import Dispute, DisputeType
from disputes.services import Decision


class OpenDisputeSerializer(serializers.Serializer):
    """
    Example:
        {"booking_id": "7c9e...", "dispute_type": "quality_issue",
         "reason": "Session ended after ten minutes"}

    Exactly one of booking_id and order_id is required.
    """

    booking_id = serializers.UUIDField(required=False, allow_null=True)
    order_id = serializers.UUIDField(required=False, allow_null=True)
    dispute_type = serializers.ChoiceField(choices=DisputeType.choices)
    reason = serializers.CharField()
    amount_cents = serializers.IntegerField(
        required=False, allow_null=True, min_value=0
    )

    def validate(self, attrs):
        if bool(attrs.get("booking_id")) == bool(attrs.get("order_id")):
            raise serializers.ValidationError(
                "Provide exactly one of booking_id or order_id."
            )
        return attrs


class ResolveDisputeSerializer(serializers.Serializer):
    decision = serializers.ChoiceField(choices=Decision.ALL)
    note = serializers.CharField(allow_blank=True, default="")


class DisputeSerializer(serializers.ModelSerializer):
    class Meta:
        model = Dispute
        fields = [
            "id",
            "booking",
            "order",
            "dispute_type",
            "reason",
            "amount_cents",
            "status",
            "resolution_note",
            "resolved_at",
            "created_at",
        ]
        read_only_fields = fields
