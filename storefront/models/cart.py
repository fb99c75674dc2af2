"""
Cart Item Model.

One row per (user, product); repeat adds sum into ``quantity``.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from storefront.models.product import ProductSummary


class CartItem(BaseModel):
    """A ``cart_items`` row with its product embedded."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: Optional[str] = None
    product_id: str
    quantity: int = Field(ge=1)
    product: Optional[ProductSummary] = None
    created_at: Optional[datetime] = None

    @property
    def unit_price(self) -> Decimal:
        return self.product.price if self.product is not None else Decimal("0")

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity
