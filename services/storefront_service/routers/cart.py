"""Session cart router.

The cart is kept in the visitor's session slot, so anonymous visitors can
fill one before signing in.
"""

import uuid

from fastapi import APIRouter, Depends, status
from libs.auth.dependencies import get_session
from libs.auth.sessions import SessionContext
from libs.db.session import get_async_db
from services.storefront_service.schemas import (
    CartItemCreate,
    CartItemUpdate,
    CartLineResponse,
    CartResponse,
)
from services.storefront_service.services.cart import (
    Cart,
    ProductSnapshot,
    load_cart,
    save_cart,
)
from services.storefront_service.services.catalog import get_product
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(tags=["storefront-cart"])


def cart_response(cart: Cart) -> CartResponse:
    return CartResponse(
        items=[
            CartLineResponse(
                product_id=line.product.id,
                name=line.product.name,
                category=line.product.category,
                price=line.product.price,
                image_url=line.product.image_url,
                quantity=line.quantity,
                line_total=line.line_total,
            )
            for line in cart.lines
        ],
        count=cart.count,
        total=cart.total,
    )


@router.get("/cart", response_model=CartResponse)
async def get_cart(session: SessionContext = Depends(get_session)):
    return cart_response(load_cart(session))


@router.post("/cart/items", response_model=CartResponse, status_code=status.HTTP_201_CREATED)
async def add_to_cart(
    data: CartItemCreate,
    session: SessionContext = Depends(get_session),
    db: AsyncSession = Depends(get_async_db),
):
    """Add one unit of a catalog product; repeated adds bump the quantity."""
    product = await get_product(db, data.product_id)
    cart = load_cart(session)
    cart.add(ProductSnapshot.model_validate(product))
    await save_cart(session, cart)
    return cart_response(cart)


@router.patch("/cart/items/{product_id}", response_model=CartResponse)
async def update_cart_item(
    product_id: uuid.UUID,
    data: CartItemUpdate,
    session: SessionContext = Depends(get_session),
):
    cart = load_cart(session)
    cart.set_quantity(product_id, data.quantity)
    await save_cart(session, cart)
    return cart_response(cart)


@router.delete("/cart/items/{product_id}", response_model=CartResponse)
async def remove_cart_item(
    product_id: uuid.UUID,
    session: SessionContext = Depends(get_session),
):
    cart = load_cart(session)
    cart.remove(product_id)
    await save_cart(session, cart)
    return cart_response(cart)


@router.delete("/cart", response_model=CartResponse)
async def clear_cart(session: SessionContext = Depends(get_session)):
    cart = load_cart(session)
    cart.clear()
    await save_cart(session, cart)
    return cart_response(cart)
