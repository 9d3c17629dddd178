"""
ConnectedAccount model for Stripe Connect integration.

Each provider or seller who receives money has one ConnectedAccount. Its
flags are kept in sync by account.updated webhooks.

Usage:
    from payments.models import ConnectedAccount

    account = ConnectedAccount.objects.filter(user=provider.user).first()
    if account is None:
        raise PayoutDestinationMissing("Provider has not set up payouts")
"""

from __future__ import annotations

from django.conf import settings
from django.db import models

from core.models import BaseModel
from core.model_mixins import UUIDPrimaryKeyMixin

from payments.state_machines import OnboardingStatus


class ConnectedAccount(UUIDPrimaryKeyMixin, BaseModel):
    """
    Represents a Stripe Connected Account for receiving funds.

    Fields:
        user: Owner of the account (provider or seller)
        stripe_account_id: Unique Stripe Account ID (acct_xxx)
        onboarding_status: Current state of Stripe Connect onboarding
        payouts_enabled: Whether Stripe has enabled payouts
        charges_enabled: Whether Stripe has enabled charges
        onboarding_required: Whether Stripe still needs information
        metadata: Requirements snapshot from the last account.updated

    Lifecycle:
        1. Created on the first onboarding request (IN_PROGRESS)
        2. Seller completes the hosted onboarding form
        3. account.updated webhook enables the account (COMPLETE)

    Note:
        The user field uses PROTECT so an account with money history
        cannot vanish with its owner.
    """

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="connected_account",
        help_text="User this connected account belongs to",
    )

    stripe_account_id = models.CharField(
        max_length=255,
        unique=True,
        db_index=True,
        help_text="Stripe Account ID (acct_xxx)",
    )

    onboarding_status = models.CharField(
        max_length=20,
        choices=OnboardingStatus.choices,
        default=OnboardingStatus.NOT_STARTED,
        db_index=True,
        help_text="Current Stripe Connect onboarding status",
    )

    payouts_enabled = models.BooleanField(
        default=False,
        help_text="Whether Stripe has enabled payouts for this account",
    )

    charges_enabled = models.BooleanField(
        default=False,
        help_text="Whether Stripe has enabled charges for this account",
    )

    onboarding_required = models.BooleanField(
        default=True,
        help_text="Whether Stripe has currently due or past due requirements",
    )

    metadata = models.JSONField(
        default=dict,
        blank=True,
        help_text="Requirements snapshot and other Stripe account details",
    )

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Connected Account"
        verbose_name_plural = "Connected Accounts"

    def __str__(self) -> str:
        return f"ConnectedAccount({self.stripe_account_id}, {self.onboarding_status})"

    @property
    def is_ready_for_payouts(self) -> bool:
        """True once onboarding is complete and Stripe enabled payouts."""
        return (
            self.onboarding_status == OnboardingStatus.COMPLETE and self.payouts_enabled
        )

    @property
    def is_fully_enabled(self) -> bool:
        return self.payouts_enabled and self.charges_enabled
