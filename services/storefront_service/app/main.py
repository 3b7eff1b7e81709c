"""FastAPI application for the Storefront Service."""

from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI

load_dotenv()

from libs.common.config import get_settings
from libs.common.logging import get_logger
from libs.common.middleware import configure_middleware
from libs.common.redis import close_redis
from services.storefront_service.routers import (
    admin_auth_router,
    admin_catalog_router,
    admin_orders_router,
    auth_router,
    cart_router,
    catalog_router,
    notifications_router,
    orders_router,
)

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    logger.info(
        f"Starting {settings.STORE_NAME} storefront "
        f"(env={settings.ENVIRONMENT}, sessions={settings.SESSION_BACKEND})"
    )
    yield
    await close_redis()


def create_app() -> FastAPI:
    """Create and configure the Storefront Service FastAPI app."""
    settings = get_settings()
    app = FastAPI(
        title=f"{settings.STORE_NAME} Storefront Service",
        version="0.1.0",
        description="Furniture storefront - catalog, session cart, checkout, orders, notifications.",
        lifespan=lifespan,
    )

    configure_middleware(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "storefront"}

    # Public storefront routes (catalog, account, cart, checkout, orders, notifications)
    app.include_router(catalog_router, prefix="/store")
    app.include_router(auth_router, prefix="/store")
    app.include_router(cart_router, prefix="/store")
    app.include_router(orders_router, prefix="/store")
    app.include_router(notifications_router, prefix="/store")

    # Back-office routes (login, product management, order board)
    app.include_router(admin_auth_router, prefix="/admin/store")
    app.include_router(admin_catalog_router, prefix="/admin/store")
    app.include_router(admin_orders_router, prefix="/admin/store")

    return app


app = create_app()
