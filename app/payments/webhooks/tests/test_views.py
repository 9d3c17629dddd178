"""
Tests for the Stripe webhook view.

Tests cover:
- Stripe signature verification
- Webhook event creation and idempotency
- Synchronous processing and error responses
"""

import json
from unittest.mock import patch

import pytest
from django.test import RequestFactory

from bookings.models import BookingStatus
from payments.exceptions import SignatureVerificationError, WebhookProcessingError
from payments.models import WebhookEvent
from payments.state_machines import WebhookEventStatus
from payments.tests.factories import WebhookEventFactory
from payments.webhooks.views import stripe_webhook

VERIFY = "payments.adapters.stripe_adapter.StripeAdapter.verify_webhook_signature"


# =============================================================================
# Setup
# =============================================================================


@pytest.fixture
def rf():
    return RequestFactory()


def make_webhook_request(rf, payload: dict, signature: str = "test_sig"):
    """Create a POST request to the webhook endpoint."""
    headers = {"HTTP_STRIPE_SIGNATURE": signature} if signature else {}
    return rf.post(
        "/api/v1/payments/webhooks/stripe/",
        data=json.dumps(payload),
        content_type="application/json",
        **headers,
    )


def event_payload(event_id="evt_test_123", event_type="customer.created", obj=None):
    return {
        "id": event_id,
        "type": event_type,
        "data": {"object": obj or {"id": "cus_test_123"}},
    }


# =============================================================================
# Signature Verification Tests
# =============================================================================


@pytest.mark.django_db
class TestStripeWebhookSignature:
    def test_missing_signature_returns_400(self, rf):
        request = make_webhook_request(rf, event_payload(), signature="")

        response = stripe_webhook(request)

        assert response.status_code == 400
        assert not WebhookEvent.objects.exists()

    def test_invalid_signature_returns_400(self, rf):
        request = make_webhook_request(rf, event_payload(), signature="bad_sig")

        with patch(VERIFY, side_effect=SignatureVerificationError("Bad signature")):
            response = stripe_webhook(request)

        assert response.status_code == 400
        assert json.loads(response.content)["error_code"] == "INVALID_SIGNATURE"
        assert not WebhookEvent.objects.exists()

    def test_event_without_type_returns_400(self, rf):
        payload = {"id": "evt_test_123"}
        request = make_webhook_request(rf, payload)

        with patch(VERIFY, return_value=payload):
            response = stripe_webhook(request)

        assert response.status_code == 400
        assert not WebhookEvent.objects.exists()

    def test_get_not_allowed(self, rf):
        response = stripe_webhook(rf.get("/api/v1/payments/webhooks/stripe/"))

        assert response.status_code == 405


# =============================================================================
# Processing Tests
# =============================================================================


@pytest.mark.django_db
class TestStripeWebhookProcessing:
    def test_valid_event_stored_and_processed(self, rf):
        payload = event_payload()
        request = make_webhook_request(rf, payload)

        with patch(VERIFY, return_value=payload):
            response = stripe_webhook(request)

        assert response.status_code == 200
        assert json.loads(response.content) == {"received": True}
        event = WebhookEvent.objects.get(stripe_event_id="evt_test_123")
        assert event.event_type == "customer.created"
        assert event.status == WebhookEventStatus.PROCESSED

    def test_duplicate_event_acknowledged(self, rf):
        WebhookEventFactory(
            stripe_event_id="evt_test_123", status=WebhookEventStatus.PROCESSED
        )
        payload = event_payload()
        request = make_webhook_request(rf, payload)

        with patch(VERIFY, return_value=payload), patch(
            "payments.webhooks.views.WebhookProcessor.process"
        ) as mock_process:
            response = stripe_webhook(request)

        assert response.status_code == 200
        assert json.loads(response.content) == {"received": True, "duplicate": True}
        mock_process.assert_not_called()
        assert WebhookEvent.objects.count() == 1

    def test_processing_failure_returns_500(self, rf):
        payload = event_payload()
        request = make_webhook_request(rf, payload)

        with patch(VERIFY, return_value=payload), patch(
            "payments.webhooks.views.WebhookProcessor.process",
            side_effect=WebhookProcessingError("Handler failed"),
        ):
            response = stripe_webhook(request)

        assert response.status_code == 500
        assert json.loads(response.content)["error_code"] == "WEBHOOK_PROCESSING_FAILED"

    def test_failed_event_reprocessed_on_redelivery(
        self, rf, booking_event, pending_booking, mock_retrieve_charge
    ):
        booking_event.status = WebhookEventStatus.FAILED
        booking_event.retry_count = 1
        booking_event.save()
        request = make_webhook_request(rf, booking_event.payload)

        with patch(VERIFY, return_value=booking_event.payload):
            response = stripe_webhook(request)

        assert response.status_code == 200
        pending_booking.refresh_from_db()
        assert pending_booking.status == BookingStatus.CONFIRMED
        booking_event.refresh_from_db()
        assert booking_event.status == WebhookEventStatus.PROCESSED
