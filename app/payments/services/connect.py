"""
Stripe Connect onboarding for providers and sellers.

Usage:
    from payments.services import ConnectService

    onboarding = ConnectService.start_onboarding(request.user)
    return Response({"onboarding_url": onboarding.url})
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from django.conf import settings
from django.db import IntegrityError

from core.services import BaseService
from payments.adapters import IdempotencyKeyGenerator, StripeAdapter
from payments.models import ConnectedAccount
from payments.state_machines import OnboardingStatus

if TYPE_CHECKING:
    from authentication.models import User


@dataclass
class OnboardingLink:
    account: ConnectedAccount
    url: str
    expires_at: int | None = None


class ConnectService(BaseService):
    """Creates connected accounts and onboarding links."""

    @classmethod
    def start_onboarding(cls, user: User) -> OnboardingLink:
        """
        Create the user's connected account on first call, then return a
        fresh onboarding link.

        Calling again after onboarding finished still returns a link; Stripe
        shows the account's update form in that case.

        Raises:
            GatewayError: Stripe call failed
        """
        logger = cls.get_logger()
        account = ConnectedAccount.objects.filter(user=user).first()

        if account is None:
            result = StripeAdapter.create_connected_account(
                email=user.email,
                idempotency_key=IdempotencyKeyGenerator.generate(
                    "connect_account", user.pk
                ),
            )
            try:
                account = ConnectedAccount.objects.create(
                    user=user,
                    stripe_account_id=result.id,
                    onboarding_status=OnboardingStatus.IN_PROGRESS,
                    payouts_enabled=result.payouts_enabled,
                    charges_enabled=result.charges_enabled,
                )
            except IntegrityError:
                # Same idempotency key, so a concurrent request got the same account
                account = ConnectedAccount.objects.get(user=user)

            logger.info(
                "Connected account created",
                extra={
                    "user_id": user.pk,
                    "stripe_account_id": account.stripe_account_id,
                },
            )

        base = settings.FRONTEND_URL.rstrip("/")
        link = StripeAdapter.create_account_link(
            account_id=account.stripe_account_id,
            return_url=f"{base}/payouts/return",
            refresh_url=f"{base}/payouts/refresh",
        )
        return OnboardingLink(account=account, url=link.url, expires_at=link.expires_at)
