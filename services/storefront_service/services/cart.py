"""Session cart aggregate.

The cart lives only in the visitor's session slot: a list of product
snapshots with quantities. It is never written to the orders tables until
checkout converts it.
"""

import uuid
from decimal import Decimal
from typing import Optional

from libs.auth.sessions import CART_SLOT, SessionContext
from pydantic import BaseModel, ConfigDict, Field


class ProductSnapshot(BaseModel):
    """Product fields copied into the cart when the item is added."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    category: str
    price: Decimal = Field(..., ge=0)
    description: Optional[str] = None
    image_url: Optional[str] = None


class CartLine(BaseModel):
    product: ProductSnapshot
    quantity: int = Field(1, ge=1)

    @property
    def line_total(self) -> Decimal:
        return self.product.price * self.quantity


class Cart(BaseModel):
    lines: list[CartLine] = Field(default_factory=list)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add(self, product: ProductSnapshot) -> CartLine:
        """Add one unit of a product, merging with an existing line."""
        line = self._find(product.id)
        if line:
            line.quantity += 1
            return line

        line = CartLine(product=product, quantity=1)
        self.lines.append(line)
        return line

    def remove(self, product_id: uuid.UUID) -> None:
        self.lines = [line for line in self.lines if line.product.id != product_id]

    def set_quantity(self, product_id: uuid.UUID, quantity: int) -> None:
        """Overwrite a line's quantity; anything below 1 removes the line."""
        if quantity < 1:
            self.remove(product_id)
            return

        line = self._find(product_id)
        if line:
            line.quantity = quantity

    def clear(self) -> None:
        self.lines = []

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------

    @property
    def count(self) -> int:
        return sum(line.quantity for line in self.lines)

    @property
    def total(self) -> Decimal:
        return sum((line.line_total for line in self.lines), Decimal("0"))

    @property
    def is_empty(self) -> bool:
        return not self.lines

    def _find(self, product_id: uuid.UUID) -> Optional[CartLine]:
        return next((line for line in self.lines if line.product.id == product_id), None)


# ---------------------------------------------------------------------------
# Session persistence
# ---------------------------------------------------------------------------


def load_cart(session: SessionContext) -> Cart:
    return session.read(CART_SLOT, Cart) or Cart()


async def save_cart(session: SessionContext, cart: Cart) -> None:
    if cart.is_empty:
        await session.clear(CART_SLOT)
    else:
        await session.write(CART_SLOT, cart)
