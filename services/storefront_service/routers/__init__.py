"""Storefront service routers package."""

from services.storefront_service.routers.account import router as account_router
from services.storefront_service.routers.buy_now import router as buy_now_router
from services.storefront_service.routers.cart import router as cart_router
from services.storefront_service.routers.catalog import router as catalog_router
from services.storefront_service.routers.orders import router as orders_router
from services.storefront_service.routers.payments import router as payments_router

__all__ = [
    "account_router",
    "buy_now_router",
    "cart_router",
    "catalog_router",
    "orders_router",
    "payments_router",
]
