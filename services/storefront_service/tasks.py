"""Background reconciliation of gateway orders stuck in pending_payment."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from libs.common.config import get_settings
from libs.common.datetime_utils import utc_now
from libs.common.logging import get_logger
from services.storefront_service.models import Order, OrderChannel, OrderStatus
from services.storefront_service.razorpay_client import RazorpayClient, RazorpayError
from services.storefront_service.services.payment_ops import (
    finalize_order_payment,
    payment_rejection,
)
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

SWEEP_BATCH_SIZE = 200


@dataclass
class SweepResult:
    checked: int = 0
    completed: int = 0
    still_pending: int = 0
    duplicates: int = 0
    orphaned: int = 0
    errors: int = 0


async def reconcile_pending_payment_orders(
    db: AsyncSession,
    gateway: RazorpayClient,
    *,
    older_than_minutes: int | None = None,
) -> SweepResult:
    """Complete stale pending orders whose payment the gateway reports captured.

    Orders without a gateway order id never reached the gateway (creation
    failed after the local insert); they are counted as orphaned and left alone.
    """
    if older_than_minutes is None:
        older_than_minutes = get_settings().PENDING_PAYMENT_RECONCILE_AFTER_MINUTES
    cutoff = utc_now() - timedelta(minutes=older_than_minutes)

    result = await db.execute(
        select(Order.id)
        .where(
            Order.status == OrderStatus.PENDING_PAYMENT,
            Order.channel == OrderChannel.GATEWAY,
            Order.created_at <= cutoff,
        )
        .order_by(Order.created_at.asc())
        .limit(SWEEP_BATCH_SIZE)
    )
    order_ids = list(result.scalars().all())
    summary = SweepResult(checked=len(order_ids))

    for order_id in order_ids:
        # Reloaded per order: a concurrent verify may have completed it, and a
        # duplicate-payment rollback expires everything held by the session.
        order = await db.get(Order, order_id, populate_existing=True)
        if order is None or order.status != OrderStatus.PENDING_PAYMENT:
            continue
        if not order.gateway_order_id:
            summary.orphaned += 1
            logger.warning(
                "Pending order never reached the gateway",
                extra={"extra_fields": {"order_id": order_id}},
            )
            continue

        try:
            payments = await gateway.fetch_order_payments(order.gateway_order_id)
        except RazorpayError as exc:
            summary.errors += 1
            logger.warning(
                "Could not list payments for pending order %s: %s", order_id, exc
            )
            continue

        accepted = next(
            (p for p in payments if payment_rejection(order, p) is None), None
        )
        if accepted is None:
            summary.still_pending += 1
            continue

        if await finalize_order_payment(db, order, accepted):
            summary.completed += 1
        else:
            summary.duplicates += 1

    logger.info(
        "Pending payment sweep finished",
        extra={"extra_fields": summary.__dict__},
    )
    return summary
