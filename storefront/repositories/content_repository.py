"""
Content Repositories.

Data access for ``reviews``, ``banner_settings`` and
``admin_notifications``.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from storefront.models.content import AdminNotification, Banner, Review, ReviewInput
from storefront.repositories.base_repository import BaseRepository


class ReviewRepository(BaseRepository):
    """Data access layer for Review rows."""

    TABLE = "reviews"

    def create(self, user_id: str, review: ReviewInput, verified: bool) -> Review:
        payload = {
            "user_id": user_id,
            "product_id": review.product_id,
            "rating": review.rating,
            "title": review.title.strip(),
            "comment": review.comment.strip(),
            "is_verified_purchase": verified,
        }
        response = self._table().insert(payload).execute()
        return Review(**self._rows(response)[0])

    def list_for_product(self, product_id: Optional[str]) -> list[Review]:
        """Reviews of *product_id*, or brand reviews when it is ``None``."""
        def _query() -> list[Review]:
            query = self._table().select("*")
            if product_id is None:
                query = query.is_("product_id", "null")
            else:
                query = query.eq("product_id", product_id)
            response = query.order("created_at", desc=True).execute()
            return [Review(**row) for row in self._rows(response)]

        return self._read(_query, default_factory=list, operation_name="list_for_product (reviews)")

    def list_for_user(self, user_id: str) -> list[Review]:
        def _query() -> list[Review]:
            response = (
                self._table()
                .select("*")
                .eq("user_id", user_id)
                .order("created_at", desc=True)
                .execute()
            )
            return [Review(**row) for row in self._rows(response)]

        return self._read(_query, default_factory=list, operation_name="list_for_user (reviews)")


class BannerRepository(BaseRepository):
    """Data access layer for Banner rows."""

    TABLE = "banner_settings"

    def find_all(self, *, published_only: bool) -> list[Banner]:
        def _query() -> list[Banner]:
            query = self._table().select("*")
            if published_only:
                query = query.eq("is_active", True).eq("is_published", True)
            response = query.order("display_order").execute()
            return [Banner(**row) for row in self._rows(response)]

        return self._read(_query, default_factory=list, operation_name="find_all (banner_settings)")

    def update(self, banner_id: str, values: dict[str, Any]) -> Optional[Banner]:
        payload = {**values, "updated_at": datetime.now(timezone.utc)}
        response = (
            self._table()
            .update(self._payload(payload))
            .eq("id", banner_id)
            .execute()
        )
        row = self._row(response)
        return Banner(**row) if row else None


class NotificationRepository(BaseRepository):
    """Data access layer for AdminNotification rows."""

    TABLE = "admin_notifications"
    _PAGE_SIZE: int = 50

    def list_recent(self) -> list[AdminNotification]:
        """Raises on failure."""
        response = (
            self._table()
            .select("*")
            .order("created_at", desc=True)
            .limit(self._PAGE_SIZE)
            .execute()
        )
        return [AdminNotification(**row) for row in self._rows(response)]

    def mark_read(self, notification_id: str) -> bool:
        response = (
            self._table()
            .update({"is_read": True})
            .eq("id", notification_id)
            .execute()
        )
        return bool(self._rows(response))

    def mark_all_read(self) -> int:
        response = self._table().update({"is_read": True}).eq("is_read", False).execute()
        return len(self._rows(response))
