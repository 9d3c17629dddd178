"""
Booking API views.

Endpoints:
    GET  /api/v1/bookings/ - Caller's bookings
    POST /api/v1/bookings/ - Book a session (credit or checkout)
    POST /api/v1/bookings/bundles/checkout/ - Start a credit bundle purchase
    GET  /api/v1/bookings/credits/ - Caller's remaining credits per provider
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.generics import ListAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from bookings.models import Booking
from bookings.serializers import (
    BookingIntentSerializer,
    BookingSerializer,
    BundleCheckoutSerializer,
    BundleIntentSerializer,
    CreateBookingSerializer,
    CreditBalanceSerializer,
)
from bookings.services import BookingIntentService, CreditLedger
from core.exceptions import BaseApplicationError
from core.views import error_response


class BookingListCreateView(ListAPIView):
    """List the caller's bookings, or book a new session."""

    permission_classes = [IsAuthenticated]
    serializer_class = BookingSerializer

    def get_queryset(self):
        return Booking.objects.filter(buyer=self.request.user).select_related(
            "provider"
        )

    @extend_schema(
        operation_id="list_bookings",
        summary="List my bookings",
        tags=["Bookings"],
    )
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)

    @extend_schema(
        operation_id="create_booking",
        summary="Book a session",
        description=(
            "Uses a prepaid credit when the caller holds one with this provider; "
            "otherwise returns a checkout URL. With credit_only, returns "
            "needs_purchase instead of starting a checkout."
        ),
        request=CreateBookingSerializer,
        responses={
            201: BookingIntentSerializer,
            200: BookingIntentSerializer,
            400: OpenApiResponse(description="Missing provider or self-booking"),
            404: OpenApiResponse(description="Provider not found"),
            409: OpenApiResponse(description="Provider cannot receive payments"),
            502: OpenApiResponse(description="Payment gateway unavailable"),
        },
        tags=["Bookings"],
    )
    def post(self, request):
        serializer = CreateBookingSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            intent = BookingIntentService.request_booking(
                buyer=request.user,
                provider_id=data["provider_id"],
                notes=data["notes"],
                session_at=data.get("session_at"),
                credit_only=data["credit_only"],
            )
        except BaseApplicationError as e:
            return error_response(e)

        if intent.needs_purchase:
            response_status = status.HTTP_200_OK
        else:
            response_status = status.HTTP_201_CREATED
        return Response(BookingIntentSerializer(intent).data, status=response_status)


class BundleCheckoutView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="create_bundle_checkout",
        summary="Buy a bundle of session credits",
        request=BundleCheckoutSerializer,
        responses={
            201: BundleIntentSerializer,
            400: OpenApiResponse(description="Unsupported bundle size"),
            404: OpenApiResponse(description="Provider not found"),
            409: OpenApiResponse(description="Provider cannot receive payouts"),
            502: OpenApiResponse(description="Payment gateway unavailable"),
        },
        tags=["Bookings"],
    )
    def post(self, request):
        serializer = BundleCheckoutSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            intent = BookingIntentService.request_bundle_purchase(
                buyer=request.user,
                provider_id=serializer.validated_data["provider_id"],
                bundle_size=serializer.validated_data["bundle_size"],
            )
        except BaseApplicationError as e:
            return error_response(e)

        return Response(
            BundleIntentSerializer(intent).data, status=status.HTTP_201_CREATED
        )


class CreditBalanceView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="list_credit_balances",
        summary="List my remaining credits",
        responses={200: CreditBalanceSerializer(many=True)},
        tags=["Bookings"],
    )
    def get(self, request):
        balances = CreditLedger.balances_for(request.user)
        return Response(CreditBalanceSerializer(balances, many=True).data)
