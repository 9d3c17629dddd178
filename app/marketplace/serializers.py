"""
DRF serializers for the marketplace API.
"""

from __future__ import annotations

from rest_framework import serializers

from marketplace.models import Fulfillment, Order


class CreateOrderSerializer(serializers.Serializer):
    """
    Example:
        {"listing_id": "2b1f...", "quantity": 2}
    """

    listing_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1, default=1)


class OrderCheckoutSerializer(serializers.Serializer):
    order_id = serializers.UUIDField(read_only=True)
    checkout_url = serializers.CharField(read_only=True)


class ShipOrderSerializer(serializers.Serializer):
    carrier = serializers.CharField(max_length=100)
    tracking_number = serializers.CharField(max_length=255)
    label_url = serializers.URLField(required=False, allow_blank=True, default="")


class FulfillmentSerializer(serializers.ModelSerializer):
    order_status = serializers.CharField(source="order.status", read_only=True)

    class Meta:
        model = Fulfillment
        fields = [
            "order",
            "order_status",
            "carrier",
            "tracking_number",
            "label_url",
            "shipped_at",
        ]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    listing_title = serializers.CharField(source="listing.title", read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "listing",
            "listing_title",
            "kind",
            "quantity",
            "subtotal_cents",
            "shipping_cents",
            "total_cents",
            "currency",
            "status",
            "payment_status",
            "paid_at",
            "created_at",
        ]
        read_only_fields = fields
