"""
User Management Service.

Back-office listing of customer profiles and role changes.

A role change takes effect on the affected user's next auth event (sign
in or token refresh) or profile refresh; existing sessions are not
revoked.  Row policies keep enforcing the stored role in the meantime.
"""

from __future__ import annotations

from typing import Optional

from storefront.access import access_denied
from storefront.logger import StructuredLogger
from storefront.models.enums import RouteAccess, UserRole
from storefront.models.profile import Profile
from storefront.models.service_models import ServiceResult
from storefront.repositories.profile_repository import ProfileRepository
from storefront.services.auth_context import AuthContext
from storefront.services.base_service import BaseService
from storefront.utils.audit import log_audit_event


class UserAdminService(BaseService):
    """Service layer for admin user management operations."""

    def __init__(
        self,
        auth: AuthContext,
        repo: ProfileRepository,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(logger)
        self._auth = auth
        self._repo = repo

    def list_users(self) -> ServiceResult[list[Profile]]:
        """All profiles, newest first."""
        denied = access_denied(self._auth.snapshot(), RouteAccess.ADMIN)
        if denied is not None:
            return denied
        return ServiceResult(success=True, data=self._repo.get_all())

    def update_user_role(self, user_id: str, new_role: str) -> ServiceResult[Profile]:
        """
        Change a user's role.

        Args:
            user_id: Profile id of the target user.
            new_role: One of ``'admin'`` or ``'user'``.
        """
        snapshot = self._auth.snapshot()
        denied = access_denied(snapshot, RouteAccess.ADMIN)
        if denied is not None:
            return denied
        assert snapshot.user is not None

        try:
            validated_role = UserRole(str(new_role).strip().lower())
        except ValueError:
            return ServiceResult(
                success=False,
                error=f"Invalid role specified: '{new_role}'. "
                      f"Must be one of: {', '.join(r.value for r in UserRole)}.",
                status_code=400,
            )

        if user_id == snapshot.user.id and validated_role != UserRole.ADMIN:
            return ServiceResult(
                success=False,
                error="You cannot remove your own admin role.",
                status_code=400,
            )

        user: Optional[Profile] = self._repo.get_by_id(user_id)
        if user is None:
            return ServiceResult(success=False, error="User not found.", status_code=404)
        old_role = str(user.role)

        try:
            updated = self._repo.update_role(user_id, validated_role)
        except Exception as exc:
            self._logger.error("Repository update_role failed for %s: %s", user_id, exc)
            return ServiceResult(
                success=False, error=f"Could not update role: {exc}", status_code=500,
            )
        if updated is None:
            return ServiceResult(
                success=False, error="Failed to update role in database.", status_code=500,
            )

        log_audit_event(
            logger=self._logger,
            action="UPDATE_ROLE",
            entity_type="Profile",
            entity_id=user_id,
            user_id=snapshot.user.id,
            details={"old_role": old_role, "new_role": str(validated_role)},
        )
        return ServiceResult(success=True, data=updated)
