"""
Payment services.

- CheckoutService: Hosted checkout sessions and payout destination rules
- ConnectService: Connected account onboarding

Usage:
    from payments.services import CheckoutService

    checkout = CheckoutService.create_bundle_checkout(buyer, provider, 5)
    return {"checkout_url": checkout.url}
"""

from payments.services.checkout import CheckoutService
from payments.services.connect import ConnectService, OnboardingLink

__all__ = [
    "CheckoutService",
    "ConnectService",
    "OnboardingLink",
]
