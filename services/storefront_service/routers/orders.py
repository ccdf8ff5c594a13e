"""Store orders router: cart checkout and order history."""

from fastapi import APIRouter, Depends
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.db.session import get_async_db
from services.storefront_service.schemas import (
    OrderCreate,
    OrderCreatedResponse,
    OrderResponse,
)
from services.storefront_service.services import order_ops
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(tags=["orders"])


@router.post("/orders", response_model=OrderCreatedResponse)
async def checkout_cart(
    order_in: OrderCreate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Place an order from the current cart and empty it."""
    order = await order_ops.standard_checkout(
        db,
        user_id=current_user.user_id,
        shipping_address=order_in.shipping_address,
        phone=order_in.phone,
        billing_address=order_in.billing_address,
    )
    return OrderCreatedResponse(order_id=order.id, total=order.total_amount)


@router.get("/orders", response_model=list[OrderResponse])
async def list_my_orders(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """List the current user's orders, newest first."""
    return await order_ops.list_orders(db, current_user.user_id)
