"""ARQ worker for storefront payment reconciliation.

Run with: arq services.storefront_service.worker.WorkerSettings
"""

from arq import cron
from arq.connections import RedisSettings
from libs.common.config import get_settings
from libs.common.logging import configure_logging, get_logger

logger = get_logger(__name__)


async def task_reconcile_pending_payments(ctx: dict):
    from libs.db.session import session_scope
    from services.storefront_service.razorpay_client import RazorpayClient
    from services.storefront_service.tasks import reconcile_pending_payment_orders

    logger.info("Running: reconcile_pending_payment_orders")
    async with session_scope() as db:
        summary = await reconcile_pending_payment_orders(db, RazorpayClient())
    return summary.__dict__


async def startup(ctx: dict):
    configure_logging()


class WorkerSettings:
    redis_settings = RedisSettings.from_dsn(get_settings().REDIS_URL)

    on_startup = startup

    functions = [task_reconcile_pending_payments]

    cron_jobs = [
        cron(
            task_reconcile_pending_payments,
            minute=set(range(0, 60, 5)),
            run_at_startup=True,
        ),
    ]
