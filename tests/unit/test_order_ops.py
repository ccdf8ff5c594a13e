"""Unit tests for order_ops: cart checkout, buy-now and order history."""

from decimal import Decimal

import pytest
from fastapi import HTTPException
from libs.common.config import get_settings
from services.storefront_service.models import (
    MAX_LINE_QUANTITY,
    CartItem,
    OrderChannel,
    OrderStatus,
)
from services.storefront_service.services.order_ops import (
    buy_now_checkout,
    list_orders,
    standard_checkout,
)
from sqlalchemy import func, select
from tests.factories import CartItemFactory, ProductFactory, user_id

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def _make_product(db, **overrides):
    product = ProductFactory.create(**overrides)
    db.add(product)
    await db.commit()
    return product


async def _fill_cart(db, owner, *lines):
    for product, quantity in lines:
        db.add(CartItemFactory.create(owner, product.id, quantity=quantity))
    await db.commit()


async def _cart_row_count(db, owner: str) -> int:
    result = await db.execute(
        select(func.count()).select_from(CartItem).where(CartItem.user_id == owner)
    )
    return result.scalar_one()


# ---------------------------------------------------------------------------
# standard_checkout
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_checkout_totals_cart_and_clears_it(db_session):
    """Two of a 1250 product check out at 2500 and leave the cart empty."""
    product = await _make_product(db_session, price=Decimal("1250.00"))
    owner = user_id()
    await _fill_cart(db_session, owner, (product, 2))

    order = await standard_checkout(
        db_session, user_id=owner, shipping_address="12 MG Road", phone="9876543210"
    )

    assert order.total_amount == Decimal("2500.00")
    assert order.status == OrderStatus.COMPLETED
    assert order.channel == OrderChannel.CART_CHECKOUT
    assert await _cart_row_count(db_session, owner) == 0


@pytest.mark.asyncio
@pytest.mark.unit
async def test_checkout_sums_mixed_lines(db_session):
    tee = await _make_product(db_session, price=Decimal("500.00"))
    jacket = await _make_product(db_session, price=Decimal("1500.00"))
    owner = user_id()
    await _fill_cart(db_session, owner, (tee, 2), (jacket, 1))

    order = await standard_checkout(
        db_session, user_id=owner, shipping_address="12 MG Road", phone="9876543210"
    )

    assert order.total_amount == Decimal("2500.00")
    assert len(order.items) == 2
    assert await _cart_row_count(db_session, owner) == 0


@pytest.mark.asyncio
@pytest.mark.unit
async def test_checkout_charges_no_shipping(db_session):
    """Cart checkout never adds the flat shipping fee, even below the threshold."""
    product = await _make_product(db_session, price=Decimal("500.00"))
    owner = user_id()
    await _fill_cart(db_session, owner, (product, 1))

    order = await standard_checkout(
        db_session, user_id=owner, shipping_address="12 MG Road", phone="9876543210"
    )

    assert order.shipping_fee == Decimal("0.00")
    assert order.total_amount == Decimal("500.00")


@pytest.mark.asyncio
@pytest.mark.unit
async def test_checkout_billing_defaults_to_shipping(db_session):
    product = await _make_product(db_session)
    owner = user_id()
    await _fill_cart(db_session, owner, (product, 1))

    order = await standard_checkout(
        db_session, user_id=owner, shipping_address="12 MG Road", phone="9876543210"
    )

    assert order.billing_address == "12 MG Road"


@pytest.mark.asyncio
@pytest.mark.unit
async def test_checkout_empty_cart_is_400(db_session):
    with pytest.raises(HTTPException) as exc_info:
        await standard_checkout(
            db_session, user_id=user_id(), shipping_address="x", phone="1"
        )
    assert exc_info.value.status_code == 400
    assert exc_info.value.detail == "Cart is empty"


@pytest.mark.asyncio
@pytest.mark.unit
async def test_checkout_leaves_other_users_cart_alone(db_session):
    product = await _make_product(db_session)
    owner, other = user_id(), user_id()
    await _fill_cart(db_session, owner, (product, 1))
    await _fill_cart(db_session, other, (product, 3))

    await standard_checkout(
        db_session, user_id=owner, shipping_address="12 MG Road", phone="9876543210"
    )

    assert await _cart_row_count(db_session, other) == 1


@pytest.mark.asyncio
@pytest.mark.unit
async def test_order_snapshot_survives_price_change(db_session):
    """Later catalog price changes never alter a placed order."""
    product = await _make_product(db_session, price=Decimal("800.00"))
    owner = user_id()
    await _fill_cart(db_session, owner, (product, 1))
    await standard_checkout(
        db_session, user_id=owner, shipping_address="12 MG Road", phone="9876543210"
    )

    product.price = Decimal("1800.00")
    await db_session.commit()

    orders = await list_orders(db_session, owner)
    assert len(orders) == 1
    assert orders[0].total_amount == Decimal("800.00")
    assert orders[0].items[0].unit_price == Decimal("800.00")
    assert orders[0].items[0].product_name == product.name


# ---------------------------------------------------------------------------
# buy_now_checkout
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_buy_now_adds_shipping_at_threshold(db_session):
    product = await _make_product(db_session, price=Decimal("1000.00"))

    order = await buy_now_checkout(
        db_session,
        user_id=user_id(),
        product_id=product.id,
        quantity=2,
        shipping_address="12 MG Road",
        phone="9876543210",
    )

    assert order.subtotal_amount == Decimal("2000.00")
    assert order.shipping_fee == Decimal("199.00")
    assert order.total_amount == Decimal("2199.00")
    assert order.status == OrderStatus.COMPLETED
    assert order.channel == OrderChannel.BUY_NOW


@pytest.mark.asyncio
@pytest.mark.unit
async def test_buy_now_is_logged_as_unverified(db_session, caplog):
    product = await _make_product(db_session)

    await buy_now_checkout(
        db_session,
        user_id=user_id(),
        product_id=product.id,
        quantity=1,
        shipping_address="12 MG Road",
        phone="9876543210",
    )

    assert "without a verified payment" in caplog.text


@pytest.mark.asyncio
@pytest.mark.unit
async def test_buy_now_disabled_is_403(db_session, monkeypatch):
    product = await _make_product(db_session)
    monkeypatch.setattr(get_settings(), "BUY_NOW_ENABLED", False)

    with pytest.raises(HTTPException) as exc_info:
        await buy_now_checkout(
            db_session,
            user_id=user_id(),
            product_id=product.id,
            quantity=1,
            shipping_address="12 MG Road",
            phone="9876543210",
        )
    assert exc_info.value.status_code == 403


@pytest.mark.asyncio
@pytest.mark.unit
async def test_buy_now_unknown_product_is_404(db_session):
    with pytest.raises(HTTPException) as exc_info:
        await buy_now_checkout(
            db_session,
            user_id=user_id(),
            product_id=4242,
            quantity=1,
            shipping_address="12 MG Road",
            phone="9876543210",
        )
    assert exc_info.value.status_code == 404


@pytest.mark.asyncio
@pytest.mark.unit
async def test_buy_now_past_quantity_cap_is_400(db_session):
    product = await _make_product(db_session)

    with pytest.raises(HTTPException) as exc_info:
        await buy_now_checkout(
            db_session,
            user_id=user_id(),
            product_id=product.id,
            quantity=MAX_LINE_QUANTITY + 1,
            shipping_address="12 MG Road",
            phone="9876543210",
        )
    assert exc_info.value.status_code == 400


@pytest.mark.asyncio
@pytest.mark.unit
async def test_buy_now_snapshot_trims_options(db_session):
    """Line options are stored trimmed, and blank ones as absent, as in the cart."""
    product = await _make_product(db_session)
    owner = user_id()

    await buy_now_checkout(
        db_session,
        user_id=owner,
        product_id=product.id,
        quantity=1,
        shipping_address="12 MG Road",
        phone="9876543210",
        size=" M ",
        color="   ",
    )

    orders = await list_orders(db_session, owner)
    assert orders[0].items[0].size == "M"
    assert orders[0].items[0].color is None


# ---------------------------------------------------------------------------
# list_orders
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_list_orders_is_scoped_and_newest_first(db_session):
    product = await _make_product(db_session)
    owner = user_id()
    first = await buy_now_checkout(
        db_session,
        user_id=owner,
        product_id=product.id,
        quantity=1,
        shipping_address="a",
        phone="1",
    )
    second = await buy_now_checkout(
        db_session,
        user_id=owner,
        product_id=product.id,
        quantity=2,
        shipping_address="b",
        phone="2",
    )
    await buy_now_checkout(
        db_session,
        user_id=user_id(),
        product_id=product.id,
        quantity=1,
        shipping_address="c",
        phone="3",
    )

    orders = await list_orders(db_session, owner)

    assert [o.id for o in orders] == [second.id, first.id]


@pytest.mark.asyncio
@pytest.mark.unit
async def test_list_orders_empty_for_new_user(db_session):
    assert list(await list_orders(db_session, user_id())) == []
