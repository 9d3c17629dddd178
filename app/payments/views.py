"""
Payment API views.

Endpoints:
    POST /api/v1/payments/connect/onboard/ - Start or continue payout onboarding
    GET  /api/v1/payments/balance/ - Seller ledger balance

The Stripe webhook endpoint lives in payments.webhooks.views.
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from core.views import error_response
from payments.exceptions import GatewayError
from payments.ledger import LedgerService
from payments.serializers import BalanceSerializer, OnboardingLinkSerializer
from payments.services import ConnectService


class ConnectOnboardingView(APIView):
    """Create the caller's connected account if needed and return a link."""

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="start_connect_onboarding",
        summary="Start payout onboarding",
        request=None,
        responses={
            200: OnboardingLinkSerializer,
            502: OpenApiResponse(description="Payment gateway unavailable"),
        },
        tags=["Payments"],
    )
    def post(self, request):
        try:
            onboarding = ConnectService.start_onboarding(request.user)
        except GatewayError as e:
            return error_response(e)

        return Response(OnboardingLinkSerializer(onboarding).data)


class SellerBalanceView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="get_seller_balance",
        summary="Get seller balance",
        responses={200: BalanceSerializer},
        tags=["Payments"],
    )
    def get(self, request):
        balance = LedgerService.balance_for(request.user)
        return Response(BalanceSerializer(balance).data)
