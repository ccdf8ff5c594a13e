"""Store cart router: the signed-in user's working cart."""

from fastapi import APIRouter, Depends
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.db.session import get_async_db
from services.storefront_service.schemas import (
    CartItemCreate,
    CartItemResponse,
    CartItemUpdate,
    SuccessResponse,
)
from services.storefront_service.services import cart_ops
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(tags=["cart"])


@router.get("/cart", response_model=list[CartItemResponse])
async def get_cart(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Get the current user's cart lines with live product details."""
    return await cart_ops.list_cart(db, current_user.user_id)


@router.post("/cart", response_model=SuccessResponse)
async def add_cart_item(
    item_in: CartItemCreate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Add a product to the cart, merging with an identical line."""
    await cart_ops.add_to_cart(
        db,
        user_id=current_user.user_id,
        product_id=item_in.product_id,
        quantity=item_in.quantity,
        size=item_in.size,
        color=item_in.color,
    )
    return SuccessResponse()


@router.patch("/cart/{item_id}", response_model=SuccessResponse)
async def update_cart_item(
    item_id: int,
    item_in: CartItemUpdate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    await cart_ops.update_cart_item_quantity(
        db,
        user_id=current_user.user_id,
        item_id=item_id,
        quantity=item_in.quantity,
    )
    return SuccessResponse()


@router.delete("/cart/{item_id}", response_model=SuccessResponse)
async def remove_cart_item(
    item_id: int,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Remove a cart line. Removing a missing line still succeeds."""
    await cart_ops.remove_from_cart(
        db, user_id=current_user.user_id, item_id=item_id
    )
    return SuccessResponse()
