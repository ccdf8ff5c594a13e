"""Read-only catalog queries."""

from typing import Sequence

from fastapi import HTTPException, status
from libs.common.config import get_settings
from services.storefront_service.models import Product
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession


async def list_products(db: AsyncSession) -> Sequence[Product]:
    """All products, newest first. No pagination."""
    result = await db.execute(
        select(Product).order_by(Product.created_at.desc(), Product.id.desc())
    )
    return result.scalars().all()


async def list_featured(db: AsyncSession) -> Sequence[Product]:
    limit = get_settings().FEATURED_PRODUCTS_LIMIT
    result = await db.execute(
        select(Product)
        .where(Product.is_featured.is_(True))
        .order_by(Product.created_at.desc(), Product.id.desc())
        .limit(limit)
    )
    return result.scalars().all()


async def get_product(db: AsyncSession, product_id: int) -> Product:
    """Fetch a product or raise 404."""
    product = await db.get(Product, product_id)
    if product is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Product not found"
        )
    return product
