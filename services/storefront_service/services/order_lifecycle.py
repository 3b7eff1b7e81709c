"""Order lifecycle: checkout, status transitions and order queries.

Orders move strictly forward through ``OrderStatus.lifecycle()``:

    pending -> processing -> ready_for_pickup -> completed

Checkout writes the order, its items and the confirmation notification in a
single transaction. Every later transition writes the status change and the
matching customer notification together.
"""

import uuid
from collections import OrderedDict
from typing import Iterable, Optional

from fastapi import HTTPException, status
from libs.auth.models import ClientIdentity
from libs.common.currency import format_eur
from libs.common.email import send_email
from libs.common.logging import get_logger
from services.storefront_service.models import (
    ORDER_CONFIRMED,
    Order,
    OrderItem,
    OrderStatus,
    Product,
)
from services.storefront_service.services.cart import Cart, CartLine
from services.storefront_service.services.notifications import create_notification
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

logger = get_logger(__name__)

CHECKOUT_FAILED = "Erreur lors de la commande. Veuillez réessayer."
UPDATE_FAILED = "Erreur lors de la mise à jour"
PRODUCTS_UNAVAILABLE = "Produits plus disponibles : {names}"


def next_status(current: OrderStatus) -> Optional[OrderStatus]:
    """The only status an order may move to from ``current`` (None when terminal)."""
    return current.next_status


def products_unavailable(names: Iterable[str]) -> str:
    return PRODUCTS_UNAVAILABLE.format(names=", ".join(names))


# ---------------------------------------------------------------------------
# Checkout
# ---------------------------------------------------------------------------


async def unavailable_lines(db: AsyncSession, cart: Cart) -> list[CartLine]:
    """Cart lines whose product has been deleted from the catalog since it was added."""
    ids = [line.product.id for line in cart.lines]
    if not ids:
        return []
    result = await db.execute(select(Product.id).where(Product.id.in_(ids)))
    existing = set(result.scalars().all())
    return [line for line in cart.lines if line.product.id not in existing]


async def drop_unavailable_lines(db: AsyncSession, cart: Cart) -> list[str]:
    """Remove deleted products from the cart and return their names."""
    stale = await unavailable_lines(db, cart)
    for line in stale:
        cart.remove(line.product.id)
    if stale:
        logger.info("Dropped %d deleted products from a cart", len(stale))
    return [line.product.name for line in stale]


async def create_order(
    db: AsyncSession,
    *,
    client: Optional[ClientIdentity],
    cart: Cart,
) -> Order:
    """Convert a cart into an order, its items and a confirmation notification.

    All rows are committed together; on failure nothing is kept and the caller
    must leave the cart untouched so the customer can retry.
    """
    if client is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Non connecté")
    if cart.is_empty:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cart is empty")

    stale = await unavailable_lines(db, cart)
    if stale:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=products_unavailable(line.product.name for line in stale),
        )

    total = cart.total
    order = Order(
        id=uuid.uuid4(),
        client_id=client.id,
        customer_name=client.name,
        customer_email=client.email,
        status=OrderStatus.PENDING,
        total_price=total,
    )
    order.items = [
        OrderItem(
            product_id=line.product.id,
            quantity=line.quantity,
            price=line.product.price,
        )
        for line in cart.lines
    ]
    db.add(order)

    title, message = ORDER_CONFIRMED.render(order.reference, format_eur(total))
    create_notification(
        db, client_id=client.id, order_id=order.id, title=title, message=message
    )

    try:
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("Checkout failed for client %s", client.id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=CHECKOUT_FAILED
        )

    logger.info(
        "Order %s created for client %s (%d items, total=%s)",
        order.id,
        client.id,
        len(cart.lines),
        total,
    )

    await send_email(
        client.email,
        f"Commande #{order.reference} reçue",
        (
            f"Bonjour {client.name},\n\n"
            f"Votre commande #{order.reference} a été reçue !\n"
            f"Total : {format_eur(total)}\n\n"
            "Nous vous tiendrons informé de son avancement."
        ),
    )

    return await get_order_detail(db, order.id)


# ---------------------------------------------------------------------------
# Status transitions (back-office)
# ---------------------------------------------------------------------------


async def advance_order(
    db: AsyncSession, order_id: uuid.UUID, target: OrderStatus
) -> Order:
    """Move an order to ``target``, which must be its next lifecycle status."""
    order = await db.get(Order, order_id)
    if not order:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found")

    expected = next_status(order.status)
    if target != expected:
        if expected is None:
            detail = f"Order is already {order.status.value}"
        else:
            detail = (
                f"Cannot move order from {order.status.value} to {target.value}; "
                f"next status is {expected.value}"
            )
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=detail)

    previous = order.status
    order.status = target

    template = target.info.notification
    if order.client_id and template:
        title, message = template.render(order.reference, format_eur(order.total_price))
        create_notification(
            db, client_id=order.client_id, order_id=order.id, title=title, message=message
        )

    try:
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("Failed to move order %s to %s", order_id, target.value)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=UPDATE_FAILED
        )

    logger.info("Order %s moved %s -> %s", order.id, previous.value, target.value)

    if target == OrderStatus.READY_FOR_PICKUP:
        await send_email(
            order.customer_email,
            f"Votre commande #{order.reference} est prête",
            (
                f"Bonjour {order.customer_name}, votre commande est prête !\n"
                "Veuillez venir au magasin pour payer et récupérer votre commande."
            ),
        )

    return await get_order_detail(db, order.id)


async def advance_to_next(db: AsyncSession, order_id: uuid.UUID) -> Order:
    order = await db.get(Order, order_id)
    if not order:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found")

    if order.status.is_terminal:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Order is already {order.status.value}",
        )
    return await advance_order(db, order_id, next_status(order.status))


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


async def list_for_client(db: AsyncSession, client_id: uuid.UUID) -> list[Order]:
    query = (
        select(Order)
        .where(Order.client_id == client_id)
        .order_by(Order.created_at.desc())
    )
    result = await db.execute(query)
    return list(result.scalars().all())


async def list_all(db: AsyncSession) -> list[Order]:
    result = await db.execute(select(Order).order_by(Order.created_at.desc()))
    return list(result.scalars().all())


def group_by_status(orders: Iterable[Order]) -> "OrderedDict[OrderStatus, list[Order]]":
    """Bucket orders into one column per status, in lifecycle order."""
    board: OrderedDict[OrderStatus, list[Order]] = OrderedDict(
        (s, []) for s in OrderStatus.lifecycle()
    )
    for order in orders:
        board[order.status].append(order)
    return board


async def get_order_detail(
    db: AsyncSession,
    order_id: uuid.UUID,
    *,
    client_id: Optional[uuid.UUID] = None,
) -> Order:
    """Load an order with its items and their current product rows.

    Always hits the database. With ``client_id`` set, orders belonging to
    anyone else are reported as missing.
    """
    query = (
        select(Order)
        .where(Order.id == order_id)
        .options(selectinload(Order.items).selectinload(OrderItem.product))
        .execution_options(populate_existing=True)
    )
    if client_id is not None:
        query = query.where(Order.client_id == client_id)

    result = await db.execute(query)
    order = result.scalar_one_or_none()
    if not order:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found")
    return order
