"""Unit tests for session slots and their backends."""

import uuid
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from libs.auth.models import AdminIdentity, ClientIdentity
from libs.auth.sessions import (
    ADMIN_SLOT,
    CART_SLOT,
    CLIENT_SLOT,
    MemorySessionStore,
    RedisSessionStore,
    SessionContext,
    new_session_id,
)
from services.storefront_service.services.cart import (
    Cart,
    ProductSnapshot,
    load_cart,
    save_cart,
)


def _client():
    return ClientIdentity(id=uuid.uuid4(), email="marie@client.fr", name="Marie Dupont")


def _admin():
    return AdminIdentity(id=uuid.uuid4(), email="gerant@cabellakc.fr", name="Gérant")


@pytest.mark.unit
def test_new_session_ids_are_unique():
    assert new_session_id() != new_session_id()


@pytest.mark.asyncio
@pytest.mark.unit
async def test_identity_survives_reload():
    store = MemorySessionStore()
    session = await SessionContext.load(store, "sid")
    client = _client()

    await session.login_client(client)

    reloaded = await SessionContext.load(store, "sid")
    assert reloaded.client == client
    assert reloaded.admin is None


@pytest.mark.asyncio
@pytest.mark.unit
async def test_sessions_are_isolated():
    store = MemorySessionStore()
    first = await SessionContext.load(store, "first")
    await first.login_client(_client())

    second = await SessionContext.load(store, "second")
    assert second.client is None


@pytest.mark.asyncio
@pytest.mark.unit
async def test_client_logout_keeps_admin_slot_and_cart():
    store = MemorySessionStore()
    session = await SessionContext.load(store, "sid")
    admin = _admin()
    await session.login_client(_client())
    await session.login_admin(admin)
    cart = Cart()
    cart.add(ProductSnapshot(id=uuid.uuid4(), name="Lit Sora", category="Lit", price=Decimal("780")))
    await save_cart(session, cart)

    await session.logout_client()

    reloaded = await SessionContext.load(store, "sid")
    assert reloaded.client is None
    assert reloaded.admin == admin
    assert load_cart(reloaded).count == 1


@pytest.mark.asyncio
@pytest.mark.unit
async def test_admin_logout_keeps_client_slot():
    store = MemorySessionStore()
    session = await SessionContext.load(store, "sid")
    client = _client()
    await session.login_client(client)
    await session.login_admin(_admin())

    await session.logout_admin()

    reloaded = await SessionContext.load(store, "sid")
    assert reloaded.admin is None
    assert reloaded.client == client


@pytest.mark.asyncio
@pytest.mark.unit
async def test_unreadable_slot_is_treated_as_empty():
    store = MemorySessionStore()
    await store.set_slot("sid", CLIENT_SLOT, "{not json")
    await store.set_slot("sid", CART_SLOT, '{"lines": [{"quantity": 2}]}')

    session = await SessionContext.load(store, "sid")

    assert session.client is None
    assert load_cart(session).is_empty


@pytest.mark.asyncio
@pytest.mark.unit
async def test_saving_empty_cart_clears_slot():
    store = MemorySessionStore()
    session = await SessionContext.load(store, "sid")
    cart = Cart()
    cart.add(ProductSnapshot(id=uuid.uuid4(), name="Lit Sora", category="Lit", price=Decimal("780")))
    await save_cart(session, cart)

    cart.clear()
    await save_cart(session, cart)

    assert CART_SLOT not in await store.get_slots("sid")


@pytest.mark.asyncio
@pytest.mark.unit
async def test_redis_store_writes_hash_field_and_refreshes_ttl():
    pipe = MagicMock()
    pipe.execute = AsyncMock(return_value=[1, True])
    redis = MagicMock()
    redis.pipeline.return_value.__aenter__.return_value = pipe
    redis.hgetall = AsyncMock(return_value={ADMIN_SLOT: "{}"})
    redis.hdel = AsyncMock(return_value=1)

    store = RedisSessionStore("storefront:session", ttl_seconds=600)
    with patch("libs.auth.sessions.get_redis", AsyncMock(return_value=redis)):
        await store.set_slot("sid", CLIENT_SLOT, '{"id": "x"}')
        slots = await store.get_slots("sid")
        await store.delete_slot("sid", CLIENT_SLOT)

    pipe.hset.assert_called_once_with("storefront:session:sid", CLIENT_SLOT, '{"id": "x"}')
    pipe.expire.assert_called_once_with("storefront:session:sid", 600)
    pipe.execute.assert_awaited_once()
    assert slots == {ADMIN_SLOT: "{}"}
    redis.hdel.assert_awaited_once_with("storefront:session:sid", CLIENT_SLOT)
