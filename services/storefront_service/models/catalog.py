"""Storefront catalog models."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from sqlalchemy import CheckConstraint, DateTime, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column


class Product(Base):
    """Furniture items listed in the storefront."""

    __tablename__ = "products"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    category: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Public URL shown in the storefront; image_path is set only when the
    # image was uploaded to our bucket and can be removed with the product.
    image_url: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    image_path: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    __table_args__ = (CheckConstraint("price >= 0", name="non_negative_price"),)

    def __repr__(self):
        return f"<Product {self.name}>"
