"""
Marketplace app: listings, orders and fulfillment.

This app handles:
- Product checkout for digital and physical listings
- Order settlement (called from the payments webhook)
- Digital delivery links and physical shipping records

Related apps:
    - payments: Checkout sessions, webhook dispatch and the seller ledger
    - disputes: Refunds of paid orders
"""
