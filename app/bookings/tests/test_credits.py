"""
Tests for the credit ledger.

Tests cover:
- FIFO selection of the bundle to consume
- Conditional decrement and the lost-race conflict
- Idempotent bundle grants
- Per-provider balances
"""

from datetime import timedelta
from unittest.mock import patch

import pytest
from django.db import IntegrityError
from django.utils import timezone

from bookings.models import CreditBundle
from bookings.services.credits import CreditLedger
from bookings.tests.factories import CreditBundleFactory, ProviderFactory
from payments.exceptions import ConcurrencyConflict


# =============================================================================
# Consume
# =============================================================================


@pytest.mark.django_db
class TestConsume:
    def test_returns_none_without_credit(self, buyer, provider):
        assert CreditLedger.consume(buyer, provider) is None

    def test_decrements_by_one(self, buyer, provider):
        bundle = CreditBundleFactory(buyer=buyer, provider=provider, credits_left=3)

        consumed = CreditLedger.consume(buyer, provider)

        assert consumed.pk == bundle.pk
        assert consumed.credits_left == 2
        bundle.refresh_from_db()
        assert bundle.credits_left == 2

    def test_consumes_oldest_bundle_first(self, buyer, provider):
        now = timezone.now()
        newer = CreditBundleFactory(buyer=buyer, provider=provider, purchased_at=now)
        older = CreditBundleFactory(
            buyer=buyer, provider=provider, purchased_at=now - timedelta(days=3)
        )

        consumed = CreditLedger.consume(buyer, provider)

        assert consumed.pk == older.pk
        newer.refresh_from_db()
        assert newer.credits_left == newer.bundle_size

    def test_skips_empty_bundles(self, buyer, provider):
        now = timezone.now()
        CreditBundleFactory(
            buyer=buyer,
            provider=provider,
            credits_left=0,
            purchased_at=now - timedelta(days=3),
        )
        available = CreditBundleFactory(
            buyer=buyer, provider=provider, purchased_at=now
        )

        assert CreditLedger.consume(buyer, provider).pk == available.pk

    def test_ignores_other_providers(self, buyer, provider):
        CreditBundleFactory(buyer=buyer, provider=ProviderFactory())

        assert CreditLedger.consume(buyer, provider) is None

    def test_lost_race_raises_conflict(self, buyer, provider):
        """A bundle emptied between the read and the update is a conflict."""
        bundle = CreditBundleFactory(buyer=buyer, provider=provider, credits_left=1)
        CreditBundle.objects.filter(pk=bundle.pk).update(credits_left=0)

        with patch.object(CreditLedger, "oldest_available", return_value=bundle):
            with pytest.raises(ConcurrencyConflict):
                CreditLedger.consume(buyer, provider)

        bundle.refresh_from_db()
        assert bundle.credits_left == 0

    def test_last_credit_is_consumed_once(self, buyer, provider):
        CreditBundleFactory(buyer=buyer, provider=provider, credits_left=1)

        assert CreditLedger.consume(buyer, provider) is not None
        assert CreditLedger.consume(buyer, provider) is None


# =============================================================================
# Constraints
# =============================================================================


@pytest.mark.django_db
class TestBundleConstraints:
    def test_credits_left_cannot_exceed_bundle_size(self, buyer, provider):
        bundle = CreditBundleFactory(buyer=buyer, provider=provider, bundle_size=3)

        with pytest.raises(IntegrityError):
            CreditBundle.objects.filter(pk=bundle.pk).update(credits_left=4)


# =============================================================================
# Grant
# =============================================================================


@pytest.mark.django_db
class TestGrantBundle:
    def grant(self, buyer, provider, session_id="cs_bundle_grant"):
        return CreditLedger.grant_bundle(
            buyer_id=buyer.pk,
            provider_id=provider.id,
            bundle_size=5,
            price_cents=21250,
            currency="usd",
            stripe_session_id=session_id,
        )

    def test_creates_full_bundle(self, buyer, provider):
        bundle, created = self.grant(buyer, provider)

        assert created is True
        assert bundle.bundle_size == 5
        assert bundle.credits_left == 5
        assert bundle.price_cents == 21250

    def test_replay_returns_existing_bundle(self, buyer, provider):
        first, _ = self.grant(buyer, provider)
        second, created = self.grant(buyer, provider)

        assert created is False
        assert second.pk == first.pk
        assert CreditBundle.objects.filter(buyer=buyer).count() == 1

    def test_different_sessions_create_separate_bundles(self, buyer, provider):
        self.grant(buyer, provider, "cs_one")
        self.grant(buyer, provider, "cs_two")

        assert CreditBundle.objects.filter(buyer=buyer).count() == 2


# =============================================================================
# Balances
# =============================================================================


@pytest.mark.django_db
class TestBalancesFor:
    def test_sums_credits_per_provider(self, buyer):
        ada = ProviderFactory(display_name="Ada")
        bob = ProviderFactory(display_name="Bob")
        CreditBundleFactory(buyer=buyer, provider=ada, credits_left=2)
        CreditBundleFactory(buyer=buyer, provider=ada, credits_left=3)
        CreditBundleFactory(buyer=buyer, provider=bob, credits_left=1)
        CreditBundleFactory(buyer=buyer, provider=bob, credits_left=0)

        balances = CreditLedger.balances_for(buyer)

        assert balances == [
            {"provider_id": ada.id, "provider_name": "Ada", "credits_left": 5},
            {"provider_id": bob.id, "provider_name": "Bob", "credits_left": 1},
        ]

    def test_empty_for_buyer_without_bundles(self, buyer):
        assert CreditLedger.balances_for(buyer) == []
