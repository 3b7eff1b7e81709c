"""Session slots for storefront visitors.

A browser session (identified by the ``X-Session-ID`` header) owns a few
independent string-keyed slots holding serialized JSON:

- ``client``: the signed-in customer
- ``admin``: the signed-in back-office user
- ``cart``: the shopping cart

Slots are read once per request and written on every change. A stored
identity is trusted until logout.

Usage:
    store = get_session_store()
    session = await SessionContext.load(store, session_id)
    await session.login_client(ClientIdentity.model_validate(client))
"""

import secrets
from typing import Optional, Protocol, Type, TypeVar

from pydantic import BaseModel, ValidationError

from libs.auth.models import AdminIdentity, ClientIdentity
from libs.common.config import get_settings
from libs.common.logging import get_logger
from libs.common.redis import get_redis

logger = get_logger(__name__)

CLIENT_SLOT = "client"
ADMIN_SLOT = "admin"
CART_SLOT = "cart"

ModelT = TypeVar("ModelT", bound=BaseModel)


def new_session_id() -> str:
    return secrets.token_urlsafe(32)


# ============================================================================
# STORAGE BACKENDS
# ============================================================================


class SessionStore(Protocol):
    async def get_slots(self, session_id: str) -> dict[str, str]: ...

    async def set_slot(self, session_id: str, slot: str, value: str) -> None: ...

    async def delete_slot(self, session_id: str, slot: str) -> None: ...


class MemorySessionStore:
    """In-process store for local runs and tests. Not shared between workers."""

    def __init__(self):
        self._sessions: dict[str, dict[str, str]] = {}

    async def get_slots(self, session_id: str) -> dict[str, str]:
        return dict(self._sessions.get(session_id, {}))

    async def set_slot(self, session_id: str, slot: str, value: str) -> None:
        self._sessions.setdefault(session_id, {})[slot] = value

    async def delete_slot(self, session_id: str, slot: str) -> None:
        slots = self._sessions.get(session_id)
        if slots is not None:
            slots.pop(slot, None)
            if not slots:
                del self._sessions[session_id]


class RedisSessionStore:
    """One Redis hash per session; the TTL is refreshed on every write."""

    def __init__(self, key_prefix: str, ttl_seconds: int):
        self.key_prefix = key_prefix
        self.ttl_seconds = ttl_seconds

    def _key(self, session_id: str) -> str:
        return f"{self.key_prefix}:{session_id}"

    async def get_slots(self, session_id: str) -> dict[str, str]:
        redis = await get_redis()
        return await redis.hgetall(self._key(session_id))

    async def set_slot(self, session_id: str, slot: str, value: str) -> None:
        redis = await get_redis()
        key = self._key(session_id)
        async with redis.pipeline(transaction=True) as pipe:
            pipe.hset(key, slot, value)
            pipe.expire(key, self.ttl_seconds)
            await pipe.execute()

    async def delete_slot(self, session_id: str, slot: str) -> None:
        redis = await get_redis()
        await redis.hdel(self._key(session_id), slot)


def build_session_store() -> SessionStore:
    settings = get_settings()
    if settings.SESSION_BACKEND == "redis":
        return RedisSessionStore(settings.SESSION_KEY_PREFIX, settings.SESSION_TTL_SECONDS)
    return MemorySessionStore()


# ============================================================================
# SESSION CONTEXT
# ============================================================================


class SessionContext:
    """The slots of one browser session, loaded once per request."""

    def __init__(self, store: SessionStore, session_id: str, slots: dict[str, str]):
        self.store = store
        self.session_id = session_id
        self._slots = slots

    @classmethod
    async def load(cls, store: SessionStore, session_id: str) -> "SessionContext":
        return cls(store, session_id, await store.get_slots(session_id))

    # ------------------------------------------------------------------
    # Generic slot access
    # ------------------------------------------------------------------

    def read(self, slot: str, model: Type[ModelT]) -> Optional[ModelT]:
        raw = self._slots.get(slot)
        if raw is None:
            return None
        try:
            return model.model_validate_json(raw)
        except ValidationError:
            logger.warning(f"Discarding unreadable '{slot}' slot for session")
            return None

    async def write(self, slot: str, value: BaseModel) -> None:
        raw = value.model_dump_json()
        await self.store.set_slot(self.session_id, slot, raw)
        self._slots[slot] = raw

    async def clear(self, slot: str) -> None:
        await self.store.delete_slot(self.session_id, slot)
        self._slots.pop(slot, None)

    # ------------------------------------------------------------------
    # Identity slots
    # ------------------------------------------------------------------

    @property
    def client(self) -> Optional[ClientIdentity]:
        return self.read(CLIENT_SLOT, ClientIdentity)

    @property
    def admin(self) -> Optional[AdminIdentity]:
        return self.read(ADMIN_SLOT, AdminIdentity)

    async def login_client(self, identity: ClientIdentity) -> None:
        await self.write(CLIENT_SLOT, identity)

    async def logout_client(self) -> None:
        await self.clear(CLIENT_SLOT)

    async def login_admin(self, identity: AdminIdentity) -> None:
        await self.write(ADMIN_SLOT, identity)

    async def logout_admin(self) -> None:
        await self.clear(ADMIN_SLOT)
