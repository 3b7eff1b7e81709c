"""End-to-end storefront scenario: browse, buy, and follow the order to pickup."""

from decimal import Decimal

import pytest
from libs.auth.dependencies import SESSION_HEADER
from tests.conftest import ADMIN_PASSWORD, CLIENT_PASSWORD
from tests.factories import AdminFactory, ProductFactory

CUSTOMER = {SESSION_HEADER: "customer-browser"}
MANAGER = {SESSION_HEADER: "manager-browser"}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_order_from_cart_to_pickup(app_client, db_session):
    db_session.add(AdminFactory.create(email="gerant@cabellakc.fr", password=ADMIN_PASSWORD))
    sofa = ProductFactory.create(name="Canapé Milano", category="Canapé", price=Decimal("1250.00"))
    chair = ProductFactory.create(name="Chaise Lina", category="Chaise", price=Decimal("89.90"))
    db_session.add_all([sofa, chair])
    await db_session.commit()

    # Customer browses anonymously and fills a cart.
    catalog = await app_client.get("/store/products", params={"category": "Chaise"}, headers=CUSTOMER)
    assert [p["name"] for p in catalog.json()["products"]] == ["Chaise Lina"]
    await app_client.post("/store/cart/items", json={"product_id": str(sofa.id)}, headers=CUSTOMER)
    await app_client.post("/store/cart/items", json={"product_id": str(chair.id)}, headers=CUSTOMER)
    await app_client.patch(
        f"/store/cart/items/{chair.id}", json={"quantity": 4}, headers=CUSTOMER
    )

    # Signing up keeps the anonymous cart.
    register = await app_client.post(
        "/store/auth/register",
        json={
            "email": "marie@client.fr",
            "password": CLIENT_PASSWORD,
            "confirm_password": CLIENT_PASSWORD,
            "name": "Marie Dupont",
        },
        headers=CUSTOMER,
    )
    assert register.status_code == 201
    cart = (await app_client.get("/store/cart", headers=CUSTOMER)).json()
    assert Decimal(cart["total"]) == Decimal("1609.60")

    checkout = await app_client.post("/store/checkout", headers=CUSTOMER)
    assert checkout.status_code == 201, checkout.text
    order_id = checkout.json()["order"]["id"]

    # Manager signs in on another browser and walks the order through the board.
    login = await app_client.post(
        "/admin/store/auth/login",
        json={"email": "gerant@cabellakc.fr", "password": ADMIN_PASSWORD},
        headers=MANAGER,
    )
    assert login.status_code == 200
    board = (await app_client.get("/admin/store/orders/board", headers=MANAGER)).json()
    assert [o["id"] for o in board["columns"][0]["orders"]] == [order_id]

    for expected in ("processing", "ready_for_pickup", "completed"):
        response = await app_client.post(
            f"/admin/store/orders/{order_id}/advance", headers=MANAGER
        )
        assert response.status_code == 200
        assert response.json()["status"] == expected

    # The customer sees one notification per step, newest first.
    feed = (await app_client.get("/store/notifications", headers=CUSTOMER)).json()
    assert feed["unread_count"] == 4
    assert [n["title"] for n in feed["notifications"]] == [
        "Commande terminée",
        "🎉 Commande prête !",
        "Commande en préparation",
        "Commande confirmée",
    ]
    assert all(n["order_status"] == "completed" for n in feed["notifications"])

    read_all = await app_client.post("/store/notifications/read-all", headers=CUSTOMER)
    assert read_all.json() == {"updated": 4, "unread_count": 0}

    orders = (await app_client.get("/store/orders", headers=CUSTOMER)).json()
    assert orders[0]["status"] == "completed"
    assert orders[0]["status_label"] == "Terminée"
