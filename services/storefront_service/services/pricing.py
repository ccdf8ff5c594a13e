"""Order pricing shared by every checkout path.

Cart checkout, buy-now and gateway payment orders all price through here so
the shipping rule cannot drift between them.
"""

from decimal import Decimal
from typing import Iterable

from libs.common.config import get_settings
from libs.common.currency import quantize_amount


def line_total(unit_price: Decimal, quantity: int) -> Decimal:
    return quantize_amount(Decimal(unit_price) * quantity)


def subtotal_of(lines: Iterable[tuple[Decimal, int]]) -> Decimal:
    """Sum of unit_price × quantity over (unit_price, quantity) pairs."""
    return quantize_amount(
        sum((line_total(price, qty) for price, qty in lines), Decimal("0"))
    )


def calculate_shipping(subtotal: Decimal) -> Decimal:
    """Free shipping strictly above the threshold, a flat fee otherwise."""
    settings = get_settings()
    if Decimal(subtotal) > settings.FREE_SHIPPING_THRESHOLD:
        return Decimal("0.00")
    return quantize_amount(settings.FLAT_SHIPPING_FEE)


def price_order(
    subtotal: Decimal, *, include_shipping: bool = True
) -> tuple[Decimal, Decimal]:
    """Return (shipping_fee, total) for a subtotal."""
    shipping = calculate_shipping(subtotal) if include_shipping else Decimal("0.00")
    return shipping, quantize_amount(Decimal(subtotal) + shipping)
