"""Storefront service routers package."""

from services.storefront_service.routers.admin_auth import router as admin_auth_router
from services.storefront_service.routers.admin_catalog import (
    router as admin_catalog_router,
)
from services.storefront_service.routers.admin_orders import router as admin_orders_router
from services.storefront_service.routers.auth import router as auth_router
from services.storefront_service.routers.cart import router as cart_router
from services.storefront_service.routers.catalog import router as catalog_router
from services.storefront_service.routers.notifications import (
    router as notifications_router,
)
from services.storefront_service.routers.orders import router as orders_router

__all__ = [
    "admin_auth_router",
    "admin_catalog_router",
    "admin_orders_router",
    "auth_router",
    "cart_router",
    "catalog_router",
    "notifications_router",
    "orders_router",
]
