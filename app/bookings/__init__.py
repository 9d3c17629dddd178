"""
Bookings app: session providers, bookings and prepaid credits.

This app handles:
- Booking requests funded by a credit or a hosted checkout
- Confirmation of paid bookings (called from the payments webhook)
- Credit bundles granted on bundle checkout
- Join links, session reminders and XP awards

Related apps:
    - payments: Checkout sessions and webhook dispatch
    - disputes: Refunds of confirmed bookings
    - notifications: Confirmation and reminder notifications
"""
