"""
Product Repository.

Data access for the ``products`` catalogue.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from storefront.models.enums import ProductCategory
from storefront.models.product import Product, ProductInput
from storefront.repositories.base_repository import BaseRepository


class ProductRepository(BaseRepository):
    """Data access layer for Product rows."""

    TABLE = "products"

    def find_all(
        self,
        *,
        active_only: bool = True,
        category: Optional[ProductCategory] = None,
        featured_only: bool = False,
    ) -> list[Product]:
        """Fetch products newest first, optionally filtered."""
        def _query() -> list[Product]:
            query = self._table().select("*")
            if active_only:
                query = query.eq("is_active", True)
            if featured_only:
                query = query.eq("featured", True)
            if category is not None:
                query = query.eq("category", str(category))
            response = query.order("created_at", desc=True).execute()
            return [Product(**row) for row in self._rows(response)]

        return self._read(_query, default_factory=list, operation_name="find_all (products)")

    def get_by_id(self, product_id: str) -> Optional[Product]:
        def _query() -> Optional[Product]:
            response = (
                self._table()
                .select("*")
                .eq("id", product_id)
                .maybe_single()
                .execute()
            )
            row = self._row(response)
            return Product(**row) if row else None

        return self._read(_query, default_factory=lambda: None, operation_name="get_by_id (products)")

    def get_many(self, product_ids: list[str]) -> dict[str, Product]:
        """Fetch the given products keyed by id.

        Raises on backend failure: checkout must not price an order from
        a partial catalogue.
        """
        if not product_ids:
            return {}
        response = self._table().select("*").in_("id", product_ids).execute()
        return {row["id"]: Product(**row) for row in self._rows(response)}

    def create(self, data: ProductInput) -> Product:
        response = self._table().insert(self._payload(data.model_dump())).execute()
        return Product(**self._rows(response)[0])

    def create_many(self, items: list[ProductInput]) -> list[Product]:
        """Insert all *items* in a single request."""
        payload = [self._payload(item.model_dump()) for item in items]
        response = self._table().insert(payload).execute()
        return [Product(**row) for row in self._rows(response)]

    def update(self, product_id: str, values: dict[str, Any]) -> Optional[Product]:
        """Patch *values* onto the product; ``None`` when no row matched."""
        payload = {**values, "updated_at": datetime.now(timezone.utc)}
        response = (
            self._table()
            .update(self._payload(payload))
            .eq("id", product_id)
            .execute()
        )
        row = self._row(response)
        return Product(**row) if row else None

    def delete(self, product_id: str) -> bool:
        response = self._table().delete().eq("id", product_id).execute()
        return bool(self._rows(response))
