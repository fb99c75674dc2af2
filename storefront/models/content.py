"""
Content Models.

Reviews, home-page banners and back-office notifications.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from storefront.models.enums import NotificationType


class Review(BaseModel):
    """A ``reviews`` row.  ``product_id`` is ``None`` for brand reviews."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    product_id: Optional[str] = None
    rating: int = Field(ge=1, le=5)
    title: str
    comment: str
    is_verified_purchase: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ReviewInput(BaseModel):
    """Validated review submission."""

    rating: int = Field(ge=1, le=5)
    title: str = Field(min_length=1, max_length=120)
    comment: str = Field(min_length=1, max_length=2000)
    product_id: Optional[str] = None


class Banner(BaseModel):
    """A ``banner_settings`` row for the storefront hero area."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    subtitle: Optional[str] = None
    image_url: Optional[str] = None
    button_text: Optional[str] = None
    button_link: Optional[str] = None
    secondary_button_text: Optional[str] = None
    secondary_button_link: Optional[str] = None
    is_active: bool = True
    is_published: bool = False
    display_order: int = 0


class BannerUpdate(BaseModel):
    """Editable banner fields; ``None`` means leave unchanged."""

    title: Optional[str] = None
    subtitle: Optional[str] = None
    image_url: Optional[str] = None
    button_text: Optional[str] = None
    button_link: Optional[str] = None
    secondary_button_text: Optional[str] = None
    secondary_button_link: Optional[str] = None
    is_active: Optional[bool] = None
    is_published: Optional[bool] = None
    display_order: Optional[int] = None


class AdminNotification(BaseModel):
    """An ``admin_notifications`` row."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    type: str
    title: str
    message: str
    order_id: Optional[str] = None
    user_id: Optional[str] = None
    is_read: bool = False
    created_at: Optional[datetime] = None

    @property
    def is_order(self) -> bool:
        return self.type == NotificationType.NEW_ORDER
