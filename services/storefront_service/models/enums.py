"""Enum definitions for storefront models."""

import enum


def enum_values(enum_cls):
    """Return persistent DB values for SAEnum mappings."""
    return [member.value for member in enum_cls]


class OrderStatus(str, enum.Enum):
    PENDING_PAYMENT = "pending_payment"
    COMPLETED = "completed"


class OrderChannel(str, enum.Enum):
    """Which checkout path created an order."""

    CART_CHECKOUT = "cart_checkout"
    GATEWAY = "gateway"
    BUY_NOW = "buy_now"
