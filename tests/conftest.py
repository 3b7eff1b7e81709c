import os
from typing import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock

# Settings are read at import time by libs.db.config; point them at an
# in-memory database before anything from libs/ is imported.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["SESSION_BACKEND"] = "memory"
os.environ["PASSWORD_HASH_ITERATIONS"] = "1000"
os.environ["SMTP_USERNAME"] = ""
os.environ["SMTP_PASSWORD"] = ""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from libs.auth.dependencies import SESSION_HEADER, get_session_store
from libs.auth.sessions import MemorySessionStore
from libs.common.config import get_settings
from libs.db.base import Base
from libs.db.session import get_async_db
from services.storefront_service import models as _storefront_models  # noqa: F401
from services.storefront_service.storage import StorageService, get_storage_service

get_settings.cache_clear()
settings = get_settings()

CLIENT_PASSWORD = "secret123"
ADMIN_PASSWORD = "admin-secret"


@pytest_asyncio.fixture
async def test_engine():
    """
    A fresh in-memory SQLite database per test.
    StaticPool keeps the single connection alive so every session sees the
    same database.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    session_factory = async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    async with session_factory() as session:
        yield session


@pytest.fixture
def session_store() -> MemorySessionStore:
    return MemorySessionStore()


@pytest.fixture
def storage_service() -> MagicMock:
    """
    Blob store double; upload_image/remove are AsyncMocks the tests inspect.
    """
    storage = MagicMock(spec=StorageService)
    storage.upload_image = AsyncMock(
        return_value=(
            "products/1718000000000-abcd1234.jpg",
            "https://cdn.example.com/storage/v1/object/public/products/"
            "products/1718000000000-abcd1234.jpg",
        )
    )
    storage.remove = AsyncMock(return_value=None)
    return storage


@pytest_asyncio.fixture
async def app_client(
    db_session, session_store, storage_service
) -> AsyncGenerator[AsyncClient, None]:
    """
    Yield an AsyncClient bound to the storefront app with the database,
    session store and blob store overridden.
    """
    from services.storefront_service.app.main import app

    async def _override_db():
        yield db_session

    app.dependency_overrides[get_async_db] = _override_db
    app.dependency_overrides[get_session_store] = lambda: session_store
    app.dependency_overrides[get_storage_service] = lambda: storage_service

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def storefront(app_client) -> AsyncClient:
    """Client bound to one visitor session."""
    app_client.headers[SESSION_HEADER] = "visitor-session"
    return app_client


@pytest_asyncio.fixture
async def back_office(db_session, app_client) -> AsyncClient:
    """Client bound to a session where an admin is signed in."""
    from tests.factories import AdminFactory

    admin = AdminFactory.create(email="gerant@cabellakc.fr", password=ADMIN_PASSWORD)
    db_session.add(admin)
    await db_session.commit()

    app_client.headers[SESSION_HEADER] = "back-office-session"
    response = await app_client.post(
        "/admin/store/auth/login",
        json={"email": "gerant@cabellakc.fr", "password": ADMIN_PASSWORD},
    )
    assert response.status_code == 200, response.text
    return app_client
