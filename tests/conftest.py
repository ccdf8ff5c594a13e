"""Shared test doubles for the storefront suite."""

import itertools
from typing import AsyncGenerator, Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from services.storefront_service.razorpay_client import (
    CAPTURED,
    GatewayOrder,
    GatewayPayment,
    RazorpayError,
)


class FakeRazorpay:
    """In-memory stand-in for RazorpayClient.

    Orders created through it are recorded; payments are registered by the test
    with ``add_payment`` and then reported back by the fetch methods.
    """

    def __init__(self):
        self._ids = itertools.count(1)
        self.orders: dict[str, GatewayOrder] = {}
        self.payments: dict[str, GatewayPayment] = {}
        self.create_order_calls: list[dict] = []
        self.fail_create = False
        self.fail_fetch = False

    async def create_order(self, *, amount, currency, receipt, notes=None):
        self.create_order_calls.append(
            {"amount": amount, "currency": currency, "receipt": receipt, "notes": notes}
        )
        if self.fail_create:
            raise RazorpayError("Gateway down", status_code=502)
        order = GatewayOrder(
            id=f"order_fake{next(self._ids)}",
            amount=amount,
            currency=currency,
            receipt=receipt,
            status="created",
        )
        self.orders[order.id] = order
        return order

    async def fetch_payment(self, payment_id: str) -> GatewayPayment:
        if self.fail_fetch:
            raise RazorpayError("Gateway down", status_code=502)
        try:
            return self.payments[payment_id]
        except KeyError:
            raise RazorpayError("The id provided does not exist", status_code=400)

    async def fetch_order_payments(self, gateway_order_id: str) -> list[GatewayPayment]:
        if self.fail_fetch:
            raise RazorpayError("Gateway down", status_code=502)
        return [p for p in self.payments.values() if p.order_id == gateway_order_id]

    def add_payment(
        self,
        gateway_order_id: str,
        amount: int,
        *,
        status: str = CAPTURED,
        method: Optional[str] = "upi",
        payment_id: Optional[str] = None,
    ) -> GatewayPayment:
        payment = GatewayPayment(
            id=payment_id or f"pay_fake{next(self._ids)}",
            order_id=gateway_order_id,
            amount=amount,
            currency="INR",
            status=status,
            method=method,
        )
        self.payments[payment.id] = payment
        return payment


@pytest.fixture
def fake_gateway() -> FakeRazorpay:
    return FakeRazorpay()


@pytest_asyncio.fixture
async def client(db_session, fake_gateway) -> AsyncGenerator[AsyncClient, None]:
    """
    Yield an AsyncClient with the DB and payment gateway dependencies overridden.

    Authentication is not overridden: tests send real session tokens.
    """
    from libs.db.session import get_async_db
    from services.storefront_service.app.main import app
    from services.storefront_service.razorpay_client import get_razorpay_client

    app.dependency_overrides[get_async_db] = lambda: db_session
    app.dependency_overrides[get_razorpay_client] = lambda: fake_gateway

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()
