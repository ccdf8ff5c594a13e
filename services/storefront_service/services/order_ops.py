"""Order placement (cart checkout, buy-now) and order history."""

from typing import Optional, Sequence

from fastapi import HTTPException, status
from libs.common.config import get_settings
from libs.common.logging import get_logger
from services.storefront_service.models import (
    CartItem,
    Order,
    OrderChannel,
    OrderItem,
    OrderStatus,
    Product,
)
from services.storefront_service.services.cart_ops import (
    normalize_option,
    validate_quantity,
)
from services.storefront_service.services.catalog_ops import get_product
from services.storefront_service.services.pricing import (
    line_total,
    price_order,
    subtotal_of,
)
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

logger = get_logger(__name__)


def snapshot_line(
    product: Product,
    quantity: int,
    size: Optional[str] = None,
    color: Optional[str] = None,
) -> OrderItem:
    """Freeze a product's name and current price into an order line."""
    return OrderItem(
        product_id=product.id,
        product_name=product.name,
        quantity=quantity,
        size=normalize_option(size) or None,
        color=normalize_option(color) or None,
        unit_price=product.price,
        line_total=line_total(product.price, quantity),
    )


async def standard_checkout(
    db: AsyncSession,
    *,
    user_id: str,
    shipping_address: str,
    phone: str,
    billing_address: Optional[str] = None,
) -> Order:
    """Turn the user's cart into a placed order and empty the cart.

    Reading the cart, inserting the order and deleting the cart lines happen in
    one transaction; the cart rows are locked (where the backend supports it)
    so a concurrent cart change cannot slip between the read and the delete.
    No shipping fee is charged on this path.
    """
    try:
        result = await db.execute(
            select(CartItem, Product)
            .join(Product, CartItem.product_id == Product.id)
            .where(CartItem.user_id == user_id)
            .order_by(CartItem.created_at, CartItem.id)
            .with_for_update(of=CartItem)
            .execution_options(populate_existing=True)
        )
        lines = result.all()

        if not lines:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail="Cart is empty"
            )

        subtotal = subtotal_of((product.price, item.quantity) for item, product in lines)
        shipping, total = price_order(subtotal, include_shipping=False)

        order = Order(
            user_id=user_id,
            subtotal_amount=subtotal,
            shipping_fee=shipping,
            total_amount=total,
            status=OrderStatus.COMPLETED,
            channel=OrderChannel.CART_CHECKOUT,
            shipping_address=shipping_address,
            billing_address=billing_address or shipping_address,
            phone=phone,
            items=[
                snapshot_line(product, item.quantity, item.size, item.color)
                for item, product in lines
            ],
        )
        db.add(order)

        # Only the lines that were priced into this order are removed.
        await db.execute(
            delete(CartItem)
            .where(
                CartItem.user_id == user_id,
                CartItem.id.in_([item.id for item, _ in lines]),
            )
            .execution_options(synchronize_session=False)
        )
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info(
        "Cart checked out",
        extra={
            "extra_fields": {
                "order_id": order.id,
                "user_id": user_id,
                "total": str(order.total_amount),
                "lines": len(lines),
            }
        },
    )
    return order


async def buy_now_checkout(
    db: AsyncSession,
    *,
    user_id: str,
    product_id: int,
    quantity: int,
    shipping_address: str,
    phone: str,
    size: Optional[str] = None,
    color: Optional[str] = None,
) -> Order:
    """Place a single-product order that is completed immediately.

    No payment gateway is involved, so the order is not backed by any verified
    payment. Every use is logged as such and the path can be disabled with
    BUY_NOW_ENABLED.
    """
    if not get_settings().BUY_NOW_ENABLED:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Buy now checkout is disabled",
        )
    validate_quantity(quantity)

    product = await get_product(db, product_id)

    subtotal = line_total(product.price, quantity)
    shipping, total = price_order(subtotal)

    order = Order(
        user_id=user_id,
        subtotal_amount=subtotal,
        shipping_fee=shipping,
        total_amount=total,
        status=OrderStatus.COMPLETED,
        channel=OrderChannel.BUY_NOW,
        shipping_address=shipping_address,
        billing_address=shipping_address,
        phone=phone,
        items=[snapshot_line(product, quantity, size, color)],
    )
    db.add(order)
    try:
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.warning(
        "Buy-now order completed without a verified payment",
        extra={
            "extra_fields": {
                "order_id": order.id,
                "user_id": user_id,
                "product_id": product_id,
                "total": str(total),
            }
        },
    )
    return order


async def list_orders(db: AsyncSession, user_id: str) -> Sequence[Order]:
    """The user's orders, newest first, with their line snapshots."""
    result = await db.execute(
        select(Order)
        .where(Order.user_id == user_id)
        .options(selectinload(Order.items))
        .order_by(Order.created_at.desc(), Order.id.desc())
    )
    return result.scalars().all()