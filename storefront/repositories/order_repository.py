"""
Order Repository.

Data access for ``orders`` and ``order_items``.  The client never
deletes orders; after checkout only status fields change.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from storefront.models.order import Order, OrderItem, OrderStatusUpdate
from storefront.repositories.base_repository import BaseRepository

_ORDER_SELECT = (
    "*, order_items(id, order_id, product_id, quantity, price, "
    "product:products(name, image_url))"
)


class OrderRepository(BaseRepository):
    """Data access layer for Order and OrderItem rows."""

    TABLE = "orders"
    ITEMS_TABLE = "order_items"

    def create(self, values: dict[str, Any]) -> Order:
        """Insert the order header and return the stored row.

        Raises
        ------
        Exception
            Propagates backend errors.
        """
        response = self._table().insert(self._payload(values)).execute()
        rows = self._rows(response)
        if not rows:
            raise RuntimeError("Order insert returned no row.")
        return Order(**rows[0])

    def add_items(self, order_id: str, items: list[OrderItem]) -> list[OrderItem]:
        """Insert *items* under *order_id* in a single request."""
        payload = [
            self._payload({
                "order_id": order_id,
                "product_id": item.product_id,
                "quantity": item.quantity,
                "price": item.price,
            })
            for item in items
        ]
        response = self.supabase.table(self.ITEMS_TABLE).insert(payload).execute()
        return [OrderItem(**row) for row in self._rows(response)]

    def get_by_id(self, order_id: str) -> Optional[Order]:
        def _query() -> Optional[Order]:
            response = (
                self._table()
                .select(_ORDER_SELECT)
                .eq("id", order_id)
                .maybe_single()
                .execute()
            )
            row = self._row(response)
            return Order(**row) if row else None

        return self._read(_query, default_factory=lambda: None, operation_name="get_by_id (orders)")

    def list_for_user(self, user_id: str) -> list[Order]:
        """Fetch a customer's orders with items, newest first.  Raises on failure."""
        response = (
            self._table()
            .select(_ORDER_SELECT)
            .eq("user_id", user_id)
            .order("created_at", desc=True)
            .execute()
        )
        return [Order(**row) for row in self._rows(response)]

    def list_all(self) -> list[Order]:
        """Fetch every order with items, newest first.  Raises on failure."""
        response = (
            self._table()
            .select(_ORDER_SELECT)
            .order("created_at", desc=True)
            .execute()
        )
        return [Order(**row) for row in self._rows(response)]

    def update_status(self, update: OrderStatusUpdate) -> Optional[Order]:
        """Apply a back-office status change; ``None`` when no row matched."""
        values = update.model_dump(exclude={"order_id"})
        values["updated_at"] = datetime.now(timezone.utc)
        response = (
            self._table()
            .update(self._payload(values))
            .eq("id", update.order_id)
            .execute()
        )
        row = self._row(response)
        return Order(**row) if row else None
