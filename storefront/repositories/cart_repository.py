"""
Cart Repository.

Data access for ``cart_items``.  Every statement filters on ``user_id``
as well as the row id, matching the row policy on the table.  Reads
raise on failure so the cart can report the error instead of silently
showing an empty basket.
"""

from __future__ import annotations

from typing import Optional

from storefront.models.cart import CartItem
from storefront.repositories.base_repository import BaseRepository

_CART_SELECT = (
    "id, user_id, product_id, quantity, created_at, "
    "product:products(id, name, price, image_url)"
)


class CartRepository(BaseRepository):
    """Data access layer for CartItem rows."""

    TABLE = "cart_items"

    def list_for_user(self, user_id: str) -> list[CartItem]:
        response = (
            self._table()
            .select(_CART_SELECT)
            .eq("user_id", user_id)
            .order("created_at")
            .execute()
        )
        return [CartItem(**row) for row in self._rows(response)]

    def find(self, user_id: str, product_id: str) -> Optional[CartItem]:
        """Return the user's row for *product_id*, if one exists."""
        response = (
            self._table()
            .select("id, user_id, product_id, quantity")
            .eq("user_id", user_id)
            .eq("product_id", product_id)
            .maybe_single()
            .execute()
        )
        row = self._row(response)
        return CartItem(**row) if row else None

    def insert(self, user_id: str, product_id: str, quantity: int) -> None:
        self._table().insert(
            {"user_id": user_id, "product_id": product_id, "quantity": quantity}
        ).execute()

    def set_quantity(self, user_id: str, cart_item_id: str, quantity: int) -> None:
        (
            self._table()
            .update({"quantity": quantity})
            .eq("id", cart_item_id)
            .eq("user_id", user_id)
            .execute()
        )

    def delete(self, user_id: str, cart_item_id: str) -> None:
        self._table().delete().eq("id", cart_item_id).eq("user_id", user_id).execute()

    def delete_all(self, user_id: str) -> None:
        self._table().delete().eq("user_id", user_id).execute()
