"""
Model factories for creating valid test data.

Every factory produces a valid, insertable SQLAlchemy model instance.
Override any field via kwargs.

Usage:
    product = ProductFactory.create(price=Decimal("1500.00"))
    db_session.add(product)
    await db_session.commit()
"""

import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from jose import jwt

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _now() -> datetime:
    return datetime.now(timezone.utc)


def minutes_ago(minutes: int) -> datetime:
    return _now() - timedelta(minutes=minutes)


def user_id() -> str:
    return f"user-{uuid.uuid4().hex[:8]}"


def session_token(sub: str, **claims) -> str:
    """A session JWT as issued by the identity service."""
    from libs.common.config import get_settings

    payload = {"sub": sub, "exp": _now() + timedelta(hours=1), **claims}
    return jwt.encode(payload, get_settings().SESSION_JWT_SECRET, algorithm="HS256")


def auth_headers(sub: str) -> dict:
    return {"Authorization": f"Bearer {session_token(sub)}"}


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


class ProductFactory:
    @staticmethod
    def create(**overrides):
        from services.storefront_service.models import Product

        defaults = {
            "name": f"Test Product {uuid.uuid4().hex[:6]}",
            "description": "A product for tests",
            "price": Decimal("500.00"),
            "image_url": "https://cdn.example.com/product.jpg",
            "category": "apparel",
            "sizes": ["S", "M", "L"],
            "colors": ["black", "white"],
            "stock_quantity": 10,
            "is_featured": False,
            "created_at": _now(),
            "updated_at": _now(),
        }
        defaults.update(overrides)
        return Product(**defaults)


# ---------------------------------------------------------------------------
# Cart & Orders
# ---------------------------------------------------------------------------


class CartItemFactory:
    @staticmethod
    def create(user_id: str, product_id: int, **overrides):
        from services.storefront_service.models import CartItem

        defaults = {
            "user_id": user_id,
            "product_id": product_id,
            "quantity": 1,
            "size": "",
            "color": "",
            "created_at": _now(),
            "updated_at": _now(),
        }
        defaults.update(overrides)
        return CartItem(**defaults)


class OrderFactory:
    """A pending gateway order with a single line."""

    @staticmethod
    def create(user_id: str, product_id: int = 1, **overrides):
        from services.storefront_service.models import (
            Order,
            OrderChannel,
            OrderItem,
            OrderStatus,
        )

        total = overrides.pop("total_amount", Decimal("699.00"))
        defaults = {
            "user_id": user_id,
            "subtotal_amount": total,
            "shipping_fee": Decimal("0.00"),
            "total_amount": total,
            "status": OrderStatus.PENDING_PAYMENT,
            "channel": OrderChannel.GATEWAY,
            "shipping_address": "Pending - to be updated after payment",
            "phone": "Pending - to be updated after payment",
            "gateway_order_id": f"order_{uuid.uuid4().hex[:14]}",
            "created_at": _now(),
            "updated_at": _now(),
            "items": [
                OrderItem(
                    product_id=product_id,
                    product_name="Test Product",
                    quantity=1,
                    unit_price=total,
                    line_total=total,
                )
            ],
        }
        defaults.update(overrides)
        return Order(**defaults)


# ---------------------------------------------------------------------------
# Payments
# ---------------------------------------------------------------------------


def sign(gateway_order_id: str, gateway_payment_id: str) -> str:
    """Checkout signature as the gateway would compute it."""
    from libs.common.config import get_settings
    from services.storefront_service.razorpay_client import compute_signature

    return compute_signature(
        get_settings().RAZORPAY_KEY_SECRET, gateway_order_id, gateway_payment_id
    )
