"""Public catalog router."""

import uuid

from fastapi import APIRouter, Depends, Query
from libs.db.session import get_async_db
from services.storefront_service.schemas import CatalogResponse, ProductResponse
from services.storefront_service.services.catalog import (
    ALL_CATEGORIES,
    categories,
    filter_products,
    get_product,
    load_products,
)
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(tags=["storefront"])


@router.get("/products", response_model=CatalogResponse)
async def list_products(
    category: str = Query(ALL_CATEGORIES),
    search: str = Query(""),
    db: AsyncSession = Depends(get_async_db),
):
    """Newest-first catalog narrowed by category and a name/description search."""
    products = await load_products(db)
    return CatalogResponse(
        products=[
            ProductResponse.model_validate(p)
            for p in filter_products(products, category, search)
        ],
        categories=categories(products),
        category=category,
        search=search,
    )


@router.get("/products/categories", response_model=list[str])
async def list_categories(db: AsyncSession = Depends(get_async_db)):
    return categories(await load_products(db))


@router.get("/products/{product_id}", response_model=ProductResponse)
async def get_product_detail(
    product_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_db),
):
    return await get_product(db, product_id)
