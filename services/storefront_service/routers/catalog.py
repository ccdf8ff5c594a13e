"""Store catalog router: public product browsing."""

from fastapi import APIRouter, Depends
from libs.db.session import get_async_db
from services.storefront_service.schemas import ProductResponse
from services.storefront_service.services import catalog_ops
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(tags=["catalog"])


@router.get("/products", response_model=list[ProductResponse])
async def list_products(db: AsyncSession = Depends(get_async_db)):
    """List all products, newest first."""
    return await catalog_ops.list_products(db)


# Declared before /products/{product_id} so "featured" is not parsed as an id.
@router.get("/products/featured", response_model=list[ProductResponse])
async def list_featured_products(db: AsyncSession = Depends(get_async_db)):
    return await catalog_ops.list_featured(db)


@router.get("/products/{product_id}", response_model=ProductResponse)
async def get_product(product_id: int, db: AsyncSession = Depends(get_async_db)):
    """Get a single product."""
    return await catalog_ops.get_product(db, product_id)
