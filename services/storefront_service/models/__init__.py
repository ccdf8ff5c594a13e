"""Storefront service models package."""

from services.storefront_service.models.catalog import Product
from services.storefront_service.models.commerce import (
    MAX_LINE_QUANTITY,
    CartItem,
    Order,
    OrderItem,
    PaymentTransaction,
)
from services.storefront_service.models.enums import OrderChannel, OrderStatus

__all__ = [
    "MAX_LINE_QUANTITY",
    "CartItem",
    "Order",
    "OrderChannel",
    "OrderItem",
    "OrderStatus",
    "PaymentTransaction",
    "Product",
]
