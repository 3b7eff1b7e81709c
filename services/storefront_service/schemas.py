"""Pydantic schemas for the storefront service."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from libs.auth.models import AdminIdentity, ClientIdentity
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator
from services.storefront_service.models import OrderStatus
from services.storefront_service.services.catalog import PRODUCT_CATEGORIES
from services.storefront_service.services.identity import MIN_PASSWORD_LENGTH


def _required_text(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("Ce champ est obligatoire")
    return value


def _known_category(value: Optional[str]) -> Optional[str]:
    if value is not None and value not in PRODUCT_CATEGORIES:
        raise ValueError(f"Unknown category '{value}'")
    return value


# ============================================================================
# AUTH SCHEMAS
# ============================================================================


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class ClientRegister(BaseModel):
    email: EmailStr
    password: str
    confirm_password: str
    name: str = Field(..., max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    address: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        return _required_text(v)

    @field_validator("password")
    @classmethod
    def password_long_enough(cls, v: str) -> str:
        if len(v) < MIN_PASSWORD_LENGTH:
            raise ValueError(
                f"Le mot de passe doit contenir au moins {MIN_PASSWORD_LENGTH} caractères"
            )
        return v

    @model_validator(mode="after")
    def passwords_match(self) -> "ClientRegister":
        if self.password != self.confirm_password:
            raise ValueError("Les mots de passe ne correspondent pas")
        return self


class ClientProfileUpdate(BaseModel):
    name: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    address: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: Optional[str]) -> Optional[str]:
        return _required_text(v) if v is not None else v


class ClientResponse(ClientIdentity):
    pass


class AdminResponse(AdminIdentity):
    pass


# ============================================================================
# PRODUCT SCHEMAS
# ============================================================================


class ProductBase(BaseModel):
    name: str = Field(..., max_length=255)
    category: str = Field(..., max_length=100)
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    description: Optional[str] = None
    image_url: Optional[str] = Field(None, max_length=1024)


class ProductCreate(ProductBase):
    image_path: Optional[str] = Field(None, max_length=512)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        return _required_text(v)

    @field_validator("category")
    @classmethod
    def category_known(cls, v: str) -> str:
        return _known_category(v)


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, max_length=255)
    category: Optional[str] = Field(None, max_length=100)
    price: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    description: Optional[str] = None
    image_url: Optional[str] = Field(None, max_length=1024)
    image_path: Optional[str] = Field(None, max_length=512)

    @field_validator("category")
    @classmethod
    def category_known(cls, v: Optional[str]) -> Optional[str]:
        return _known_category(v)


class ProductResponse(ProductBase):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    created_at: datetime


class CatalogResponse(BaseModel):
    products: list[ProductResponse]
    categories: list[str]
    category: str
    search: str


class ImageUploadResponse(BaseModel):
    path: str
    url: str


# ============================================================================
# CART SCHEMAS
# ============================================================================


class CartItemCreate(BaseModel):
    product_id: uuid.UUID


class CartItemUpdate(BaseModel):
    # Values below 1 remove the line.
    quantity: int


class CartLineResponse(BaseModel):
    product_id: uuid.UUID
    name: str
    category: str
    price: Decimal
    image_url: Optional[str] = None
    quantity: int
    line_total: Decimal


class CartResponse(BaseModel):
    items: list[CartLineResponse]
    count: int
    total: Decimal


# ============================================================================
# ORDER SCHEMAS
# ============================================================================


class OrderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    reference: str
    client_id: Optional[uuid.UUID] = None
    customer_name: str
    customer_email: str
    status: OrderStatus
    status_label: str
    next_status: Optional[OrderStatus] = None
    total_price: Decimal
    created_at: datetime

    @model_validator(mode="before")
    @classmethod
    def add_status_metadata(cls, data):
        status = data.get("status") if isinstance(data, dict) else getattr(data, "status", None)
        if status is None:
            return data
        status = OrderStatus(status)
        if not isinstance(data, dict):
            obj = data
            data = {name: getattr(obj, name) for name in _ORDER_FIELDS}
            if "items" in cls.model_fields:
                data["items"] = list(obj.items)
        return {**data, "status_label": status.label, "next_status": status.next_status}


_ORDER_FIELDS = (
    "id",
    "reference",
    "client_id",
    "customer_name",
    "customer_email",
    "status",
    "total_price",
    "created_at",
)


class OrderItemProduct(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    category: str
    price: Decimal
    image_url: Optional[str] = None


class OrderItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    product_id: Optional[uuid.UUID] = None
    quantity: int
    price: Decimal
    line_total: Decimal
    # Current catalog row; None once the product has been deleted.
    product: Optional[OrderItemProduct] = None


class OrderDetailResponse(OrderResponse):
    items: list[OrderItemResponse]


class OrderStatusUpdate(BaseModel):
    status: OrderStatus


class OrderBoardColumn(BaseModel):
    status: OrderStatus
    label: str
    orders: list[OrderResponse]


class OrderBoardResponse(BaseModel):
    columns: list[OrderBoardColumn]


class CheckoutResponse(BaseModel):
    order: OrderDetailResponse
    message: str


# ============================================================================
# NOTIFICATION SCHEMAS
# ============================================================================


class NotificationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    order_id: Optional[uuid.UUID] = None
    title: str
    message: str
    is_read: bool
    created_at: datetime
    # Joined from the parent order for icon selection.
    order_status: Optional[OrderStatus] = None
    order_total_price: Optional[Decimal] = None

    @model_validator(mode="before")
    @classmethod
    def flatten_order(cls, data):
        if isinstance(data, dict):
            return data
        order = getattr(data, "order", None)
        return {
            "id": data.id,
            "order_id": data.order_id,
            "title": data.title,
            "message": data.message,
            "is_read": data.is_read,
            "created_at": data.created_at,
            "order_status": order.status if order else None,
            "order_total_price": order.total_price if order else None,
        }


class NotificationFeedResponse(BaseModel):
    notifications: list[NotificationResponse]
    unread_count: int


class UnreadCountResponse(BaseModel):
    unread_count: int


class MarkAllReadResponse(BaseModel):
    updated: int
    unread_count: int
