"""
Price and fee arithmetic.

All amounts are integer cents. Rounding rules:
- unit prices: half-up to the cent, floored at MINIMUM_UNIT_AMOUNT_CENTS
- platform fee: floor of amount × PLATFORM_FEE_PERCENT / 100
- bundle prices: single price × size, minus the size's discount, half-up

Usage:
    from payments.fees import platform_fee_cents, unit_amount_cents

    amount = unit_amount_cents(provider.price_cents)
    fee = platform_fee_cents(amount)
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from django.conf import settings

from core.exceptions import ValidationError


def _quantize_half_up(value: Decimal) -> int:
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def unit_amount_cents(price_cents: int | float | Decimal | None) -> int:
    """
    Amount charged for one unit, never below the gateway minimum.

    A missing or non-positive price falls back to the minimum.
    """
    minimum = settings.MINIMUM_UNIT_AMOUNT_CENTS
    if price_cents is None:
        return minimum
    return max(minimum, _quantize_half_up(Decimal(str(price_cents))))


def platform_fee_cents(amount_cents: int) -> int:
    """Platform commission on an amount, rounded down to the cent."""
    if amount_cents <= 0:
        return 0
    return (amount_cents * settings.PLATFORM_FEE_PERCENT) // 100


def bundle_discount_percent(bundle_size: int) -> int:
    """
    Discount for a supported bundle size.

    Raises:
        ValidationError: If the size is not offered
    """
    table = settings.BUNDLE_DISCOUNT_PERCENTS
    if bundle_size not in table:
        raise ValidationError(
            f"Unsupported bundle size: {bundle_size}",
            error_code="UNSUPPORTED_BUNDLE_SIZE",
            details={"bundle_size": bundle_size, "supported": sorted(table)},
        )
    return table[bundle_size]


def bundle_price_cents(single_price_cents: int, bundle_size: int) -> int:
    """
    Total price of a credit bundle.

    Example:
        bundle_price_cents(5000, 5)  # 21250 (15% off 25000)
    """
    discount = bundle_discount_percent(bundle_size)
    gross = Decimal(unit_amount_cents(single_price_cents) * bundle_size)
    total = gross * (Decimal(100 - discount) / Decimal(100))
    return max(settings.MINIMUM_UNIT_AMOUNT_CENTS, _quantize_half_up(total))
