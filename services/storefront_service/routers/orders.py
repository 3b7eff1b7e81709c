"""Customer orders router: checkout and order history."""

import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from libs.auth.dependencies import get_current_client, get_session
from libs.auth.models import ClientIdentity
from libs.auth.sessions import SessionContext
from libs.db.session import get_async_db
from services.storefront_service.schemas import (
    CheckoutResponse,
    OrderDetailResponse,
    OrderResponse,
)
from services.storefront_service.services.cart import load_cart, save_cart
from services.storefront_service.services.order_lifecycle import (
    create_order,
    drop_unavailable_lines,
    get_order_detail,
    list_for_client,
    products_unavailable,
)
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(tags=["storefront-orders"])

CHECKOUT_MESSAGE = 'Commande confirmée ! Suivez son état dans "Mes commandes".'


@router.post(
    "/checkout", response_model=CheckoutResponse, status_code=status.HTTP_201_CREATED
)
async def checkout(
    session: SessionContext = Depends(get_session),
    client: ClientIdentity = Depends(get_current_client),
    db: AsyncSession = Depends(get_async_db),
):
    """Turn the session cart into a pending order.

    The cart is emptied only once the order is committed; a failed checkout
    leaves it as it was. Products deleted since they were added are dropped
    from the cart and reported with a 409 so the customer can review it.
    """
    cart = load_cart(session)
    removed = await drop_unavailable_lines(db, cart)
    if removed:
        await save_cart(session, cart)
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail=products_unavailable(removed)
        )

    order = await create_order(db, client=client, cart=cart)

    cart.clear()
    await save_cart(session, cart)
    return CheckoutResponse(
        order=OrderDetailResponse.model_validate(order), message=CHECKOUT_MESSAGE
    )


@router.get("/orders", response_model=list[OrderResponse])
async def list_my_orders(
    client: ClientIdentity = Depends(get_current_client),
    db: AsyncSession = Depends(get_async_db),
):
    orders = await list_for_client(db, client.id)
    return [OrderResponse.model_validate(o) for o in orders]


@router.get("/orders/{order_id}", response_model=OrderDetailResponse)
async def get_my_order(
    order_id: uuid.UUID,
    client: ClientIdentity = Depends(get_current_client),
    db: AsyncSession = Depends(get_async_db),
):
    order = await get_order_detail(db, order_id, client_id=client.id)
    return OrderDetailResponse.model_validate(order)
