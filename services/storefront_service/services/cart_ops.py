"""Cart operations: atomic upsert, scoped delete and in-place quantity update.

Every statement here is keyed by the caller's user id so one user can never
read or mutate another user's cart rows, even with a guessed item id.
"""

from typing import Optional

from fastapi import HTTPException, status
from libs.common.datetime_utils import utc_now
from libs.common.logging import get_logger
from services.storefront_service.models import MAX_LINE_QUANTITY, CartItem, Product
from sqlalchemy import delete, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

_UPSERT_DIALECTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def normalize_option(value: Optional[str]) -> str:
    """Absent and empty size/color both map to "" so they share one cart line."""
    if value is None:
        return ""
    return value.strip()


def validate_quantity(quantity: int) -> None:
    """Reject line quantities outside 1..MAX_LINE_QUANTITY with a 400."""
    if not 1 <= quantity <= MAX_LINE_QUANTITY:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Quantity must be between 1 and {MAX_LINE_QUANTITY}",
        )


async def list_cart(db: AsyncSession, user_id: str) -> list[dict]:
    """Cart lines joined with the live product name, price and image."""
    result = await db.execute(
        select(CartItem, Product.name, Product.price, Product.image_url)
        .join(Product, CartItem.product_id == Product.id)
        .where(CartItem.user_id == user_id)
        .order_by(CartItem.created_at.desc(), CartItem.id.desc())
        .execution_options(populate_existing=True)
    )
    return [
        {
            "id": item.id,
            "user_id": item.user_id,
            "product_id": item.product_id,
            "quantity": item.quantity,
            "size": item.size,
            "color": item.color,
            "name": name,
            "price": price,
            "image_url": image_url,
            "created_at": item.created_at,
            "updated_at": item.updated_at,
        }
        for item, name, price, image_url in result.all()
    ]


async def add_to_cart(
    db: AsyncSession,
    *,
    user_id: str,
    product_id: int,
    quantity: int,
    size: Optional[str] = None,
    color: Optional[str] = None,
) -> None:
    """Insert a cart line or add to the quantity of the matching one.

    A single INSERT ... ON CONFLICT statement against the unique
    (user_id, product_id, size, color) constraint, so concurrent adds of a new
    tuple can never produce duplicate rows.
    """
    validate_quantity(quantity)

    dialect = db.get_bind().dialect.name
    insert = _UPSERT_DIALECTS.get(dialect)
    if insert is None:
        raise RuntimeError(f"Cart upsert is not supported on {dialect}")

    now = utc_now()
    stmt = insert(CartItem).values(
        user_id=user_id,
        product_id=product_id,
        quantity=quantity,
        size=normalize_option(size),
        color=normalize_option(color),
        created_at=now,
        updated_at=now,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=["user_id", "product_id", "size", "color"],
        set_={
            "quantity": CartItem.quantity + stmt.excluded.quantity,
            "updated_at": now,
        },
        where=(CartItem.quantity + stmt.excluded.quantity) <= MAX_LINE_QUANTITY,
    )
    try:
        result = await db.execute(stmt)
    except IntegrityError:
        # Only the product foreign key can fail here; the tuple conflict is handled above.
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Product not found"
        )
    if result.rowcount == 0:
        # The merged quantity would pass the cap, so the conflict update was skipped.
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Quantity must be between 1 and {MAX_LINE_QUANTITY}",
        )
    await db.commit()

    logger.info(
        "Cart line added",
        extra={
            "extra_fields": {
                "user_id": user_id,
                "product_id": product_id,
                "quantity": quantity,
            }
        },
    )


async def update_cart_item_quantity(
    db: AsyncSession, *, user_id: str, item_id: int, quantity: int
) -> None:
    """Set a cart line's quantity in one UPDATE. 404 if the line is not the user's."""
    validate_quantity(quantity)

    result = await db.execute(
        update(CartItem)
        .where(CartItem.id == item_id, CartItem.user_id == user_id)
        .values(quantity=quantity, updated_at=utc_now())
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Cart item not found"
        )
    await db.commit()


async def remove_from_cart(db: AsyncSession, *, user_id: str, item_id: int) -> None:
    """Delete a cart line owned by the user. Deleting a missing line is a no-op."""
    await db.execute(
        delete(CartItem)
        .where(CartItem.id == item_id, CartItem.user_id == user_id)
        .execution_options(synchronize_session=False)
    )
    await db.commit()
