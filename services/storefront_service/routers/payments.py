"""Gateway payment router: Razorpay order creation and callback verification."""

from dataclasses import asdict

from fastapi import APIRouter, Depends, Request
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.common.rate_limit import payment_limit
from libs.db.session import get_async_db
from services.storefront_service.razorpay_client import (
    RazorpayClient,
    get_razorpay_client,
)
from services.storefront_service.schemas import (
    PaymentOrderCreate,
    PaymentOrderResponse,
    PaymentVerifyRequest,
    PaymentVerifyResponse,
)
from services.storefront_service.services import payment_ops
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/payment", tags=["payments"])


@router.post("/create-order", response_model=PaymentOrderResponse)
@payment_limit
async def create_payment_order(
    request: Request,
    payload: PaymentOrderCreate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
    gateway: RazorpayClient = Depends(get_razorpay_client),
):
    """Create a pending order and the gateway order the checkout widget pays."""
    handle = await payment_ops.create_payment_order(
        db,
        gateway,
        user_id=current_user.user_id,
        product_id=payload.product_id,
        quantity=payload.quantity,
        size=payload.size,
        color=payload.color,
    )
    return PaymentOrderResponse(**asdict(handle))


@router.post("/verify", response_model=PaymentVerifyResponse)
@payment_limit
async def verify_payment(
    request: Request,
    payload: PaymentVerifyRequest,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
    gateway: RazorpayClient = Depends(get_razorpay_client),
):
    """Verify the signed checkout callback and complete the order."""
    order = await payment_ops.verify_payment(
        db,
        gateway,
        user_id=current_user.user_id,
        razorpay_payment_id=payload.razorpay_payment_id,
        razorpay_order_id=payload.razorpay_order_id,
        signature=payload.razorpay_signature,
        order_id=payload.order_id,
    )
    return PaymentVerifyResponse(
        order_id=order.id,
        payment_id=payload.razorpay_payment_id,
        status=order.status,
    )
