"""Integration tests for converting a cart into an order."""

from decimal import Decimal
from unittest.mock import AsyncMock

import pytest
from fastapi import HTTPException
from libs.auth.models import ClientIdentity
from libs.common.currency import format_eur
from services.storefront_service.models import Notification, Order, OrderItem, OrderStatus
from services.storefront_service.services.cart import Cart, ProductSnapshot
from services.storefront_service.services.order_lifecycle import (
    CHECKOUT_FAILED,
    create_order,
    products_unavailable,
)
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from tests.conftest import CLIENT_PASSWORD
from tests.factories import ClientFactory, ProductFactory


async def _count(db, model):
    return (await db.execute(select(func.count()).select_from(model))).scalar_one()


async def _seed(db):
    client = ClientFactory.create(name="Marie Dupont", email="marie@client.fr")
    table = ProductFactory.create(name="Table Oslo", price=Decimal("100.00"))
    chair = ProductFactory.create(name="Chaise Lina", category="Chaise", price=Decimal("50.00"))
    db.add_all([client, table, chair])
    await db.commit()

    cart = Cart()
    cart.add(ProductSnapshot.model_validate(table))
    cart.add(ProductSnapshot.model_validate(table))
    cart.add(ProductSnapshot.model_validate(chair))
    return ClientIdentity.model_validate(client), table, chair, cart


@pytest.mark.asyncio
@pytest.mark.integration
async def test_checkout_creates_pending_order_with_items_and_confirmation(db_session):
    client, table, chair, cart = await _seed(db_session)

    order = await create_order(db_session, client=client, cart=cart)

    assert order.status == OrderStatus.PENDING
    assert order.total_price == Decimal("250.00")
    assert order.client_id == client.id
    assert order.customer_name == "Marie Dupont"
    assert order.customer_email == "marie@client.fr"

    items = {item.product_id: item for item in order.items}
    assert items[table.id].quantity == 2
    assert items[table.id].price == Decimal("100.00")
    assert items[chair.id].quantity == 1
    assert sum(item.line_total for item in order.items) == order.total_price

    notifications = (await db_session.execute(select(Notification))).scalars().all()
    assert len(notifications) == 1
    assert notifications[0].client_id == client.id
    assert notifications[0].order_id == order.id
    assert notifications[0].title == "Commande confirmée"
    assert f"#{str(order.id)[:8]}" in notifications[0].message
    assert format_eur(Decimal("250")) in notifications[0].message
    assert notifications[0].is_read is False


@pytest.mark.asyncio
@pytest.mark.integration
async def test_checkout_uses_cart_prices_not_current_catalog_prices(db_session):
    client, table, _, cart = await _seed(db_session)
    table.price = Decimal("999.00")
    await db_session.commit()

    order = await create_order(db_session, client=client, cart=cart)

    assert order.total_price == Decimal("250.00")


@pytest.mark.asyncio
@pytest.mark.integration
async def test_checkout_requires_client(db_session):
    _, _, _, cart = await _seed(db_session)

    with pytest.raises(HTTPException) as exc:
        await create_order(db_session, client=None, cart=cart)

    assert exc.value.status_code == 401
    assert await _count(db_session, Order) == 0


@pytest.mark.asyncio
@pytest.mark.integration
async def test_checkout_rejects_empty_cart(db_session):
    client, _, _, _ = await _seed(db_session)

    with pytest.raises(HTTPException) as exc:
        await create_order(db_session, client=client, cart=Cart())

    assert exc.value.status_code == 400
    assert await _count(db_session, Order) == 0


@pytest.mark.asyncio
@pytest.mark.integration
async def test_failed_checkout_leaves_no_rows_and_cart_intact(db_session, monkeypatch):
    client, _, _, cart = await _seed(db_session)
    monkeypatch.setattr(
        db_session, "commit", AsyncMock(side_effect=SQLAlchemyError("connection lost"))
    )

    with pytest.raises(HTTPException) as exc:
        await create_order(db_session, client=client, cart=cart)

    assert exc.value.status_code == 500
    assert exc.value.detail == CHECKOUT_FAILED
    assert await _count(db_session, Order) == 0
    assert await _count(db_session, OrderItem) == 0
    assert await _count(db_session, Notification) == 0
    assert cart.count == 3


@pytest.mark.asyncio
@pytest.mark.integration
async def test_checkout_rejects_cart_with_deleted_product(db_session):
    client, _, chair, cart = await _seed(db_session)
    await db_session.delete(chair)
    await db_session.commit()

    with pytest.raises(HTTPException) as exc:
        await create_order(db_session, client=client, cart=cart)

    assert exc.value.status_code == 409
    assert exc.value.detail == products_unavailable(["Chaise Lina"])
    assert await _count(db_session, Order) == 0
    assert await _count(db_session, Notification) == 0


@pytest.mark.asyncio
@pytest.mark.integration
async def test_checkout_drops_deleted_products_then_succeeds(storefront, db_session):
    table = ProductFactory.create(name="Table Oslo", price=Decimal("100.00"))
    chair = ProductFactory.create(name="Chaise Lina", category="Chaise", price=Decimal("50.00"))
    db_session.add_all([table, chair])
    await db_session.commit()
    await storefront.post(
        "/store/auth/register",
        json={
            "email": "marie@client.fr",
            "password": CLIENT_PASSWORD,
            "confirm_password": CLIENT_PASSWORD,
            "name": "Marie Dupont",
        },
    )
    await storefront.post("/store/cart/items", json={"product_id": str(table.id)})
    await storefront.post("/store/cart/items", json={"product_id": str(chair.id)})
    await db_session.delete(chair)
    await db_session.commit()

    response = await storefront.post("/store/checkout")

    assert response.status_code == 409
    assert response.json()["detail"] == products_unavailable(["Chaise Lina"])
    cart = (await storefront.get("/store/cart")).json()
    assert [line["name"] for line in cart["items"]] == ["Table Oslo"]
    assert await _count(db_session, Order) == 0

    retry = await storefront.post("/store/checkout")

    assert retry.status_code == 201, retry.text
    assert Decimal(retry.json()["order"]["total_price"]) == Decimal("100.00")
    assert (await storefront.get("/store/cart")).json()["count"] == 0
