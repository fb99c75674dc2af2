"""
Profile Model.

Extended per-user record keyed by the auth identity id.  Rows are created
lazily the first time the user saves contact or address details, so a
signed-in user may legitimately have no profile at all.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from storefront.models.enums import UserRole


class Profile(BaseModel):
    """A ``profiles`` row."""

    id: str
    email: Optional[str] = None
    full_name: Optional[str] = None
    role: UserRole = UserRole.USER
    address_line_1: Optional[str] = None
    address_line_2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    phone: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}

    @field_validator("role", mode="before")
    @classmethod
    def _coerce_role(cls, value: object) -> UserRole:
        # Null or legacy role strings never grant admin.
        if isinstance(value, str) and value.strip().lower() == UserRole.ADMIN:
            return UserRole.ADMIN
        return UserRole.USER

    @property
    def display_name(self) -> str:
        return self.full_name or self.email or "Customer"

    @property
    def has_address(self) -> bool:
        return bool(
            self.address_line_1 and self.city and self.state and self.postal_code
        )


class ProfileUpdate(BaseModel):
    """Self-service fields a customer may change on their own profile."""

    full_name: Optional[str] = None
    address_line_1: Optional[str] = None
    address_line_2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    phone: Optional[str] = None
