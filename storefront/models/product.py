"""
Product Models.

Catalogue rows plus the validated input used by the back office and the
bulk importer.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from storefront.models.enums import ProductCategory


class ProductSummary(BaseModel):
    """The slice of a product embedded in cart and order rows."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    price: Decimal
    image_url: Optional[str] = None


class Product(BaseModel):
    """A ``products`` row."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: Optional[str] = None
    price: Decimal
    offer_price: Optional[Decimal] = None
    category: ProductCategory = ProductCategory.OTHER
    image_url: Optional[str] = None
    image_urls: list[str] = Field(default_factory=list)
    features: list[str] = Field(default_factory=list)
    ingredients: Optional[str] = None
    offers: Optional[str] = None
    stock_quantity: int = 0
    is_active: bool = True
    featured: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("image_urls", "features", mode="before")
    @classmethod
    def _none_to_list(cls, value: object) -> object:
        return [] if value is None else value

    @property
    def in_stock(self) -> bool:
        return self.stock_quantity > 0

    @property
    def has_offer(self) -> bool:
        return self.offer_price is not None and self.offer_price < self.price

    def summary(self) -> ProductSummary:
        return ProductSummary(
            id=self.id, name=self.name, price=self.price, image_url=self.image_url,
        )


class ProductInput(BaseModel):
    """Validated create/update payload for a product."""

    name: str = Field(min_length=1)
    description: Optional[str] = None
    price: Decimal = Field(gt=0)
    offer_price: Optional[Decimal] = Field(default=None, gt=0)
    category: ProductCategory = ProductCategory.OTHER
    image_url: Optional[str] = None
    image_urls: list[str] = Field(default_factory=list)
    features: list[str] = Field(default_factory=list)
    ingredients: Optional[str] = None
    offers: Optional[str] = None
    stock_quantity: int = Field(default=0, ge=0)
    is_active: bool = True
    featured: bool = False

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Product name is required.")
        return value


class ImageUploadResult(BaseModel):
    """Outcome of a multi-file product image upload."""

    urls: list[str] = Field(default_factory=list)
    rejected: dict[str, str] = Field(default_factory=dict)
