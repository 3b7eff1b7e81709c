"""Catalog queries and back-office product management."""

import uuid
from typing import Iterable, Optional, Sequence

from fastapi import HTTPException, status
from libs.common.logging import get_logger
from services.storefront_service.models import Product
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

# Sentinel shown first in the category picker; matches every product.
ALL_CATEGORIES = "All"

# Categories offered by the back-office product form.
PRODUCT_CATEGORIES = [
    "Canapé",
    "Table",
    "Chaise",
    "Lit",
    "Armoire",
    "Bureau",
    "Étagère",
    "Autre",
]


# ---------------------------------------------------------------------------
# Storefront queries
# ---------------------------------------------------------------------------


async def load_products(db: AsyncSession) -> list[Product]:
    """Return every product, newest first.

    A data-store failure is logged and yields an empty catalog.
    """
    try:
        result = await db.execute(select(Product).order_by(Product.created_at.desc()))
        return list(result.scalars().all())
    except SQLAlchemyError:
        logger.exception("Failed to load products")
        return []


async def get_product(db: AsyncSession, product_id: uuid.UUID) -> Product:
    product = await db.get(Product, product_id)
    if not product:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
    return product


def categories(products: Iterable[Product]) -> list[str]:
    """Distinct categories in order of first appearance, after the "All" sentinel."""
    seen: list[str] = []
    for product in products:
        if product.category and product.category not in seen:
            seen.append(product.category)
    return [ALL_CATEGORIES, *seen]


def filter_products(
    products: Sequence[Product],
    category: Optional[str] = ALL_CATEGORIES,
    search_term: Optional[str] = "",
) -> list[Product]:
    """Filter by exact category and case-insensitive name/description search.

    Both filters apply together; the input order is preserved.
    """
    filtered = list(products)

    if category and category != ALL_CATEGORIES:
        filtered = [p for p in filtered if p.category == category]

    if search_term:
        needle = search_term.lower()
        filtered = [
            p
            for p in filtered
            if needle in p.name.lower()
            or (p.description is not None and needle in p.description.lower())
        ]

    return filtered


# ---------------------------------------------------------------------------
# Back-office management
# ---------------------------------------------------------------------------


async def create_product(db: AsyncSession, **fields) -> Product:
    product = Product(**fields)
    db.add(product)
    try:
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("Failed to create product %s", fields.get("name"))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Erreur lors de l'enregistrement",
        )
    await db.refresh(product)
    logger.info("Created product %s (%s)", product.id, product.name)
    return product


async def update_product(db: AsyncSession, product_id: uuid.UUID, updates: dict) -> Product:
    product = await get_product(db, product_id)
    for field, value in updates.items():
        setattr(product, field, value)

    try:
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("Failed to update product %s", product_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Erreur lors de l'enregistrement",
        )
    await db.refresh(product)
    return product


async def delete_product(db: AsyncSession, product_id: uuid.UUID) -> Optional[str]:
    """Delete a product row.

    Returns the blob-store path of its uploaded image, if any, so the caller
    can remove it once the row is gone.
    """
    product = await get_product(db, product_id)
    image_path = product.image_path

    await db.delete(product)
    try:
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("Failed to delete product %s", product_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Erreur lors de la suppression",
        )

    logger.info("Deleted product %s", product_id)
    return image_path
