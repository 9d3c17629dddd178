"""
Tests for payments app.

This package contains test modules for:
- test_models.py: ConnectedAccount and WebhookEvent model tests
- test_fees.py: Price, bundle discount and platform fee arithmetic
- test_metadata.py: Checkout metadata encoding and parsing
- test_checkout.py: CheckoutService tests
- test_connect.py: Connect onboarding and payments API tests

Usage:
    pytest payments/tests/
    pytest payments/tests/test_checkout.py
"""
