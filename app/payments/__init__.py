"""
Payments app for Stripe integration.

This app handles:
- Checkout sessions for bookings, credit bundles and marketplace orders
- Stripe Connect accounts for providers and sellers
- Webhook event ingestion, deduplication and dispatch
- Seller ledger entries and balances

Related apps:
    - bookings: Booking confirmation and credit grants on payment
    - marketplace: Order settlement and fulfillment on payment
    - disputes: Refunds through the gateway

Usage:
    from payments.services import CheckoutService

    checkout = CheckoutService.create_session_checkout(booking)
    return {"booking_id": booking.id, "checkout_url": checkout.url}
"""
