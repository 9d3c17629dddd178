"""
Marketplace API views.

Endpoints:
    GET  /api/v1/marketplace/orders/ - Caller's orders
    POST /api/v1/marketplace/orders/ - Buy a listing
    POST /api/v1/marketplace/orders/{id}/ship/ - Seller ships a physical order
"""

from __future__ import annotations

from django.shortcuts import get_object_or_404
from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.generics import ListAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from core.exceptions import BaseApplicationError
from core.views import error_response
from marketplace.models import Order
from marketplace.serializers import (
    CreateOrderSerializer,
    FulfillmentSerializer,
    OrderCheckoutSerializer,
    OrderSerializer,
    ShipOrderSerializer,
)
from marketplace.services import FulfillmentService, OrderCheckoutService


class OrderListCreateView(ListAPIView):
    """List the caller's orders, or start a checkout for a listing."""

    permission_classes = [IsAuthenticated]
    serializer_class = OrderSerializer

    def get_queryset(self):
        return Order.objects.filter(buyer=self.request.user).select_related("listing")

    @extend_schema(
        operation_id="list_orders",
        summary="List my orders",
        tags=["Marketplace"],
    )
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)

    @extend_schema(
        operation_id="create_order",
        summary="Buy a listing",
        request=CreateOrderSerializer,
        responses={
            201: OrderCheckoutSerializer,
            400: OpenApiResponse(description="Own listing or insufficient inventory"),
            404: OpenApiResponse(description="Listing not found"),
            409: OpenApiResponse(description="Seller cannot receive payments"),
            502: OpenApiResponse(description="Payment gateway unavailable"),
        },
        tags=["Marketplace"],
    )
    def post(self, request):
        serializer = CreateOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            checkout = OrderCheckoutService.create_order(
                buyer=request.user,
                listing_id=serializer.validated_data["listing_id"],
                quantity=serializer.validated_data["quantity"],
            )
        except BaseApplicationError as e:
            return error_response(e)

        return Response(
            OrderCheckoutSerializer(checkout).data, status=status.HTTP_201_CREATED
        )


class ShipOrderView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="ship_order",
        summary="Mark an order shipped",
        request=ShipOrderSerializer,
        responses={
            200: FulfillmentSerializer,
            403: OpenApiResponse(description="Caller is not the seller"),
            404: OpenApiResponse(description="Order not found"),
            409: OpenApiResponse(description="Order cannot be shipped"),
        },
        tags=["Marketplace"],
    )
    def post(self, request, order_id):
        order = get_object_or_404(
            Order.objects.select_related("listing", "buyer"), pk=order_id
        )
        serializer = ShipOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            fulfillment = FulfillmentService.mark_shipped(
                order=order,
                seller=request.user,
                **serializer.validated_data,
            )
        except BaseApplicationError as e:
            return error_response(e)

        return Response(FulfillmentSerializer(fulfillment).data)
