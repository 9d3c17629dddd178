"""
Disputes app: buyer claims against paid bookings and orders.

A dispute is filed by the buyer and resolved by staff, either with a refund
(gateway refund, ledger reversal, target marked refunded) or a rejection.
"""
