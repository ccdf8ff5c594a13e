"""Gateway payment flow: pending order -> Razorpay order -> verified capture.

An order only becomes ``completed`` through ``finalize_order_payment`` and only
after (a) the checkout signature verified against the key secret and (b) the
gateway itself reported the payment as captured for the right amount. The
unique gateway_payment_id on PaymentTransaction makes finalization idempotent
under duplicate callbacks and the reconciliation sweep.
"""

from dataclasses import dataclass
from typing import Optional

from fastapi import HTTPException, status
from libs.common.config import get_settings
from libs.common.currency import paise_to_rupees, rupees_to_paise
from libs.common.datetime_utils import utc_now
from libs.common.logging import get_logger
from services.storefront_service.models import (
    Order,
    OrderChannel,
    OrderStatus,
    PaymentTransaction,
)
from services.storefront_service.razorpay_client import (
    GatewayPayment,
    RazorpayClient,
    RazorpayError,
    verify_checkout_signature,
)
from services.storefront_service.services.cart_ops import validate_quantity
from services.storefront_service.services.catalog_ops import get_product
from services.storefront_service.services.order_ops import snapshot_line
from services.storefront_service.services.pricing import line_total, price_order
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

# Address and phone are collected by the gateway's checkout widget, not here.
PENDING_DETAILS_PLACEHOLDER = "Pending - to be updated after payment"


@dataclass
class PaymentOrderHandle:
    """What the client needs to open the gateway checkout widget."""

    razorpay_order_id: str
    razorpay_key_id: str
    amount: int  # paise
    currency: str
    order_id: int
    product_name: str


def payment_rejection(order: Order, payment: GatewayPayment) -> Optional[str]:
    """Why a gateway payment cannot complete this order, or None if it can."""
    if not payment.is_captured:
        return f"payment status is {payment.status or 'unknown'}"
    if order.gateway_order_id and payment.order_id != order.gateway_order_id:
        return "payment belongs to a different gateway order"
    expected = rupees_to_paise(order.total_amount)
    if payment.amount != expected:
        return f"amount mismatch: got {payment.amount}, expected {expected}"
    return None


async def create_payment_order(
    db: AsyncSession,
    gateway: RazorpayClient,
    *,
    user_id: str,
    product_id: int,
    quantity: int,
    size: Optional[str] = None,
    color: Optional[str] = None,
) -> PaymentOrderHandle:
    """Create a pending order locally, then its Razorpay counterpart.

    The local order is committed before the gateway is called. If the gateway
    call fails the pending order stays behind without a gateway order id and
    the reconciliation sweep reports it; no money has moved at that point.
    """
    validate_quantity(quantity)
    settings = get_settings()
    product = await get_product(db, product_id)

    subtotal = line_total(product.price, quantity)
    shipping, total = price_order(subtotal)

    order = Order(
        user_id=user_id,
        subtotal_amount=subtotal,
        shipping_fee=shipping,
        total_amount=total,
        status=OrderStatus.PENDING_PAYMENT,
        channel=OrderChannel.GATEWAY,
        shipping_address=PENDING_DETAILS_PLACEHOLDER,
        phone=PENDING_DETAILS_PLACEHOLDER,
        items=[snapshot_line(product, quantity, size, color)],
    )
    db.add(order)
    await db.commit()

    amount_paise = rupees_to_paise(total)
    try:
        gateway_order = await gateway.create_order(
            amount=amount_paise,
            currency=settings.STORE_CURRENCY,
            receipt=order.receipt,
            notes={
                "order_id": str(order.id),
                "user_id": user_id,
                "product_id": str(product_id),
            },
        )
    except RazorpayError as exc:
        logger.error(
            "Gateway order creation failed",
            exc_info=exc,
            extra={
                "extra_fields": {
                    "order_id": order.id,
                    "gateway_status": exc.status_code,
                }
            },
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create payment order",
        )

    order.gateway_order_id = gateway_order.id
    await db.commit()

    logger.info(
        "Payment order created",
        extra={
            "extra_fields": {
                "order_id": order.id,
                "gateway_order_id": gateway_order.id,
                "amount_paise": amount_paise,
            }
        },
    )

    return PaymentOrderHandle(
        razorpay_order_id=gateway_order.id,
        razorpay_key_id=settings.RAZORPAY_KEY_ID,
        amount=amount_paise,
        currency=settings.STORE_CURRENCY,
        order_id=order.id,
        product_name=product.name,
    )


async def finalize_order_payment(
    db: AsyncSession, order: Order, payment: GatewayPayment
) -> bool:
    """Mark the order completed and append its PaymentTransaction.

    Returns False when the payment had already been recorded (a duplicate
    delivery raced us to the unique gateway_payment_id); the order is then left
    as the winning writer stored it.
    """
    order_id = order.id
    order.status = OrderStatus.COMPLETED
    order.paid_at = utc_now()
    db.add(
        PaymentTransaction(
            order_id=order_id,
            gateway_payment_id=payment.id,
            gateway_order_id=payment.order_id or order.gateway_order_id,
            amount=paise_to_rupees(payment.amount),
            status=payment.status,
            payment_method=payment.method or "unknown",
        )
    )
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        logger.info(
            "Payment already recorded; duplicate delivery ignored",
            extra={
                "extra_fields": {
                    "order_id": order_id,
                    "gateway_payment_id": payment.id,
                }
            },
        )
        return False

    logger.info(
        "Order payment finalized",
        extra={
            "extra_fields": {
                "order_id": order_id,
                "gateway_payment_id": payment.id,
                "amount_paise": payment.amount,
                "method": payment.method,
            }
        },
    )
    return True


async def verify_payment(
    db: AsyncSession,
    gateway: RazorpayClient,
    *,
    user_id: str,
    razorpay_payment_id: str,
    razorpay_order_id: str,
    signature: str,
    order_id: int,
) -> Order:
    """Verify a checkout callback and complete the order it pays for."""
    settings = get_settings()

    if not verify_checkout_signature(
        settings.RAZORPAY_KEY_SECRET, razorpay_order_id, razorpay_payment_id, signature
    ):
        logger.warning(
            "Rejected payment callback with invalid signature",
            extra={
                "extra_fields": {
                    "order_id": order_id,
                    "gateway_order_id": razorpay_order_id,
                    "gateway_payment_id": razorpay_payment_id,
                }
            },
        )
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid payment signature",
        )

    # Scoped by user as well as id: a guessed order id of another user is a 404.
    result = await db.execute(
        select(Order).where(Order.id == order_id, Order.user_id == user_id)
    )
    order = result.scalar_one_or_none()
    if order is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Order not found"
        )

    existing = await db.execute(
        select(PaymentTransaction).where(
            PaymentTransaction.gateway_payment_id == razorpay_payment_id
        )
    )
    recorded = existing.scalar_one_or_none()
    if recorded is not None:
        if recorded.order_id != order.id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Payment already applied to another order",
            )
        logger.info(
            "Payment callback replayed for a finalized order",
            extra={"extra_fields": {"order_id": order.id}},
        )
        return order

    if order.status != OrderStatus.PENDING_PAYMENT:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Order is not awaiting payment",
        )

    if order.gateway_order_id and order.gateway_order_id != razorpay_order_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Payment does not match this order",
        )

    try:
        payment = await gateway.fetch_payment(razorpay_payment_id)
    except RazorpayError as exc:
        logger.error(
            "Could not fetch payment from gateway",
            exc_info=exc,
            extra={
                "extra_fields": {
                    "order_id": order.id,
                    "gateway_payment_id": razorpay_payment_id,
                }
            },
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Payment verification failed",
        )

    if order.gateway_order_id is None and payment.order_id != razorpay_order_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Payment does not match this order",
        )

    rejection = payment_rejection(order, payment)
    if rejection is not None:
        logger.warning(
            "Payment not accepted: %s",
            rejection,
            extra={
                "extra_fields": {
                    "order_id": order.id,
                    "gateway_payment_id": payment.id,
                }
            },
        )
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Payment not successful",
        )

    await finalize_order_payment(db, order, payment)
    await db.refresh(order)
    return order
