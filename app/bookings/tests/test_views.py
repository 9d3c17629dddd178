"""
Tests for the bookings API.
"""

import pytest
from rest_framework import status
from rest_framework.test import APIClient

from bookings.tests.factories import BookingFactory, CreditBundleFactory

BOOKINGS_URL = "/api/v1/bookings/"
BUNDLE_URL = "/api/v1/bookings/bundles/checkout/"
CREDITS_URL = "/api/v1/bookings/credits/"


@pytest.fixture
def api_client(buyer):
    client = APIClient()
    client.force_authenticate(user=buyer)
    return client


@pytest.mark.django_db
class TestCreateBooking:
    def test_requires_authentication(self, provider):
        response = APIClient().post(BOOKINGS_URL, {"provider_id": str(provider.id)})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_missing_provider_id(self, api_client):
        response = api_client.post(BOOKINGS_URL, {}, format="json")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "provider_id" in response.data

    def test_credit_booking(self, api_client, buyer, provider):
        CreditBundleFactory(buyer=buyer, provider=provider, credits_left=2)

        response = api_client.post(
            BOOKINGS_URL, {"provider_id": str(provider.id)}, format="json"
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data["used_credit"] is True
        assert response.data["credits_left"] == 1

    def test_checkout_booking(
        self, api_client, payable_provider, mock_create_checkout, checkout_session
    ):
        response = api_client.post(
            BOOKINGS_URL, {"provider_id": str(payable_provider.id)}, format="json"
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data["checkout_url"] == checkout_session.url

    def test_provider_without_payouts_is_conflict(self, api_client, provider):
        response = api_client.post(
            BOOKINGS_URL, {"provider_id": str(provider.id)}, format="json"
        )

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data["error_code"] == "PAYOUT_DESTINATION_MISSING"

    def test_unknown_provider(self, api_client):
        response = api_client.post(
            BOOKINGS_URL,
            {"provider_id": "00000000-0000-0000-0000-000000000000"},
            format="json",
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_credit_only_needs_purchase(self, api_client, provider):
        response = api_client.post(
            BOOKINGS_URL,
            {"provider_id": str(provider.id), "credit_only": True},
            format="json",
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data["needs_purchase"] is True


@pytest.mark.django_db
class TestListBookings:
    def test_lists_only_own_bookings(self, api_client, buyer):
        own = BookingFactory(buyer=buyer)
        BookingFactory()

        response = api_client.get(BOOKINGS_URL)

        assert response.status_code == status.HTTP_200_OK
        results = response.data.get("results", response.data)
        assert [row["id"] for row in results] == [str(own.id)]


@pytest.mark.django_db
class TestBundleCheckout:
    def test_starts_checkout(
        self, api_client, payable_provider, mock_create_checkout, checkout_session
    ):
        response = api_client.post(
            BUNDLE_URL,
            {"provider_id": str(payable_provider.id), "bundle_size": 3},
            format="json",
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data["checkout_url"] == checkout_session.url

    def test_unsupported_size(self, api_client, payable_provider):
        response = api_client.post(
            BUNDLE_URL,
            {"provider_id": str(payable_provider.id), "bundle_size": 7},
            format="json",
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["error_code"] == "UNSUPPORTED_BUNDLE_SIZE"


@pytest.mark.django_db
class TestCreditBalances:
    def test_lists_credits(self, api_client, buyer, provider):
        CreditBundleFactory(buyer=buyer, provider=provider, credits_left=4)

        response = api_client.get(CREDITS_URL)

        assert response.status_code == status.HTTP_200_OK
        assert response.data[0]["credits_left"] == 4
        assert response.data[0]["provider_id"] == str(provider.id)
