"""
Dispute API views.

Endpoints:
    POST /api/v1/disputes/ - File a dispute (buyer)
    POST /api/v1/disputes/{id}/resolve/ - Refund or reject (staff only)
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAdminUser, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from core.exceptions import BaseApplicationError
from core.views import error_response
from disputes.serializers import (
    DisputeSerializer,
    OpenDisputeSerializer,
    ResolveDisputeSerializer,
)
from disputes.services import DisputeService

RESULT_ERROR_STATUS = {
    "DISPUTE_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "DISPUTE_ALREADY_CLOSED": status.HTTP_409_CONFLICT,
    "NOT_REFUNDABLE": status.HTTP_409_CONFLICT,
}


class DisputeCreateView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="open_dispute",
        summary="File a dispute",
        request=OpenDisputeSerializer,
        responses={
            201: DisputeSerializer,
            400: OpenApiResponse(description="Invalid target or amount"),
            403: OpenApiResponse(description="Caller is not the buyer"),
            404: OpenApiResponse(description="Booking or order not found"),
            409: OpenApiResponse(description="A dispute is already open"),
        },
        tags=["Disputes"],
    )
    def post(self, request):
        serializer = OpenDisputeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            dispute = DisputeService.open_dispute(
                claimant=request.user,
                booking_id=data.get("booking_id"),
                order_id=data.get("order_id"),
                dispute_type=data["dispute_type"],
                reason=data["reason"],
                amount_cents=data.get("amount_cents"),
            )
        except BaseApplicationError as e:
            return error_response(e)

        return Response(DisputeSerializer(dispute).data, status=status.HTTP_201_CREATED)


class ResolveDisputeView(APIView):
    permission_classes = [IsAdminUser]

    @extend_schema(
        operation_id="resolve_dispute",
        summary="Resolve a dispute",
        description="Refund the buyer or reject the claim. Staff only.",
        request=ResolveDisputeSerializer,
        responses={
            200: DisputeSerializer,
            403: OpenApiResponse(description="Caller is not staff"),
            404: OpenApiResponse(description="Dispute not found"),
            409: OpenApiResponse(description="Dispute already closed"),
            502: OpenApiResponse(description="Gateway refund failed"),
        },
        tags=["Disputes"],
    )
    def post(self, request, dispute_id):
        serializer = ResolveDisputeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            result = DisputeService.resolve_dispute(
                dispute_id=dispute_id,
                decision=serializer.validated_data["decision"],
                note=serializer.validated_data["note"],
                resolved_by=request.user,
            )
        except BaseApplicationError as e:
            return error_response(e)

        if not result.success:
            return Response(
                result.to_response(),
                status=RESULT_ERROR_STATUS.get(
                    result.error_code, status.HTTP_400_BAD_REQUEST
                ),
            )
        return Response(DisputeSerializer(result.data).data)
