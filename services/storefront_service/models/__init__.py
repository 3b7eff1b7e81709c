"""Storefront Service models package."""

from services.storefront_service.models.catalog import Product
from services.storefront_service.models.commerce import Order, OrderItem
from services.storefront_service.models.enums import (
    ORDER_CONFIRMED,
    NotificationTemplate,
    OrderStatus,
    StatusInfo,
)
from services.storefront_service.models.identity import Admin, Client
from services.storefront_service.models.notifications import Notification

__all__ = [
    "ORDER_CONFIRMED",
    "Admin",
    "Client",
    "Notification",
    "NotificationTemplate",
    "Order",
    "OrderItem",
    "OrderStatus",
    "Product",
    "StatusInfo",
]
