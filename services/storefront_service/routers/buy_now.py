"""Buy-now router: single-product order placed without the payment gateway."""

from fastapi import APIRouter, Depends
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.db.session import get_async_db
from services.storefront_service.schemas import BuyNowRequest, BuyNowResponse
from services.storefront_service.services import order_ops
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/buy-now", tags=["orders"])


@router.post("/checkout", response_model=BuyNowResponse)
async def buy_now(
    payload: BuyNowRequest,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    order = await order_ops.buy_now_checkout(
        db,
        user_id=current_user.user_id,
        product_id=payload.product_id,
        quantity=payload.quantity,
        size=payload.size,
        color=payload.color,
        shipping_address=payload.shipping_address,
        phone=payload.phone,
    )
    return BuyNowResponse(order_id=order.id, total=order.total_amount)
