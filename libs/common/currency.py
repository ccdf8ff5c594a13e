"""Currency conversion utilities for the storefront.

Display/storage unit: rupees as two-decimal ``Decimal`` (e.g. Decimal("1499.00")).
Gateway unit: paise, the smallest INR unit (100 paise = ₹1).

Razorpay only ever sees paise; everything else in the service works in rupees.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

PAISE_PER_RUPEE: int = 100
TWO_PLACES = Decimal("0.01")


def quantize_amount(amount: Decimal | int | str) -> Decimal:
    """Round a major-unit amount to two decimals (round half-up)."""
    return Decimal(str(amount)).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def rupees_to_paise(rupees: Decimal | int | str) -> int:
    """Convert rupees to paise. ₹1 = 100 paise."""
    return int(quantize_amount(rupees) * PAISE_PER_RUPEE)


def paise_to_rupees(paise: int) -> Decimal:
    """Convert paise back to a two-decimal rupee amount."""
    return quantize_amount(Decimal(int(paise)) / PAISE_PER_RUPEE)
