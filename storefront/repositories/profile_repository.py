"""
Profile Repository.

Data access for ``profiles``.  Profiles are never deleted by the client;
admins may change ``role`` only.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from storefront.models.enums import UserRole
from storefront.models.profile import Profile, ProfileUpdate
from storefront.repositories.base_repository import BaseRepository


class ProfileRepository(BaseRepository):
    """Data access layer for Profile rows."""

    TABLE = "profiles"

    def get_by_id(self, user_id: str) -> Optional[Profile]:
        """Fetch the profile for *user_id*; ``None`` when absent or on failure."""
        def _query() -> Optional[Profile]:
            response = (
                self._table()
                .select("*")
                .eq("id", user_id)
                .maybe_single()
                .execute()
            )
            row = self._row(response)
            return Profile(**row) if row else None

        return self._read(
            _query,
            default_factory=lambda: None,
            operation_name="get_by_id (profiles)",
        )

    def get_many(self, user_ids: list[str]) -> dict[str, Profile]:
        """Fetch profiles for *user_ids*, keyed by id."""
        if not user_ids:
            return {}

        def _query() -> dict[str, Profile]:
            response = (
                self._table()
                .select("id, email, full_name, role, phone")
                .in_("id", user_ids)
                .execute()
            )
            return {row["id"]: Profile(**row) for row in self._rows(response)}

        return self._read(_query, default_factory=dict, operation_name="get_many (profiles)")

    def get_all(self) -> list[Profile]:
        """Fetch every profile, newest first."""
        def _query() -> list[Profile]:
            response = (
                self._table()
                .select("*")
                .order("created_at", desc=True)
                .execute()
            )
            return [Profile(**row) for row in self._rows(response)]

        return self._read(_query, default_factory=list, operation_name="get_all (profiles)")

    def save_details(
        self,
        user_id: str,
        email: Optional[str],
        update: ProfileUpdate,
    ) -> Profile:
        """Create or update the profile's self-service fields.

        Upsert on ``id`` creates the row the first time a customer saves
        details and never touches ``role``.

        Raises
        ------
        Exception
            Propagates backend errors.
        """
        fields = update.model_dump(exclude_none=True)
        payload = {
            "id": user_id,
            "email": email,
            **fields,
            "updated_at": datetime.now(timezone.utc),
        }
        response = self._table().upsert(self._payload(payload)).execute()
        row = self._row(response)
        if row is None:
            raise RuntimeError(f"Profile upsert returned no row for {user_id}.")
        return Profile(**row)

    def update_role(self, user_id: str, role: UserRole) -> Optional[Profile]:
        """Set *role* on the profile; ``None`` when no row matched."""
        response = (
            self._table()
            .update(self._payload({"role": role, "updated_at": datetime.now(timezone.utc)}))
            .eq("id", user_id)
            .execute()
        )
        row = self._row(response)
        return Profile(**row) if row else None
