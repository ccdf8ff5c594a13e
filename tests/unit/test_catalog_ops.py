"""Unit tests for catalog_ops."""

import pytest
from fastapi import HTTPException
from services.storefront_service.services.catalog_ops import (
    get_product,
    list_featured,
    list_products,
)
from tests.factories import ProductFactory, minutes_ago


@pytest.mark.asyncio
@pytest.mark.unit
async def test_list_products_newest_first(db_session):
    old = ProductFactory.create(name="Old", created_at=minutes_ago(60))
    new = ProductFactory.create(name="New", created_at=minutes_ago(1))
    db_session.add_all([old, new])
    await db_session.commit()

    products = await list_products(db_session)

    assert [p.name for p in products] == ["New", "Old"]


@pytest.mark.asyncio
@pytest.mark.unit
async def test_list_featured_only_featured_and_capped(db_session):
    """At most six featured products are returned."""
    db_session.add_all(
        [
            ProductFactory.create(is_featured=True, created_at=minutes_ago(i))
            for i in range(8)
        ]
    )
    db_session.add(ProductFactory.create(name="Plain", is_featured=False))
    await db_session.commit()

    featured = await list_featured(db_session)

    assert len(featured) == 6
    assert all(p.is_featured for p in featured)


@pytest.mark.asyncio
@pytest.mark.unit
async def test_get_product_missing_is_404(db_session):
    with pytest.raises(HTTPException) as exc_info:
        await get_product(db_session, 31337)
    assert exc_info.value.status_code == 404
    assert exc_info.value.detail == "Product not found"
