"""
Account Service.

Self-service profile details and the phone-verified password reset.
"""

from __future__ import annotations

from storefront.access import access_denied
from storefront.backend import BackendClient
from storefront.config import AppConfig
from storefront.logger import StructuredLogger
from storefront.models.enums import RouteAccess
from storefront.models.profile import Profile, ProfileUpdate
from storefront.models.service_models import ServiceResult
from storefront.repositories.profile_repository import ProfileRepository
from storefront.services.auth_context import AuthContext
from storefront.services.base_service import BaseService

RESET_PASSWORD_FUNCTION = "reset-password"


class AccountService(BaseService):
    """Service layer for the customer's own account."""

    def __init__(
        self,
        auth: AuthContext,
        profiles: ProfileRepository,
        backend: BackendClient,
        config: AppConfig,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(logger)
        self._auth = auth
        self._profiles = profiles
        self._backend = backend
        self._config = config

    def save_profile(self, update: ProfileUpdate) -> ServiceResult[Profile]:
        """Save contact and address fields, creating the profile if needed.

        Blank strings are stored as empty values rather than ignored, so a
        customer can clear a field.  The role is never written here.
        """
        snapshot = self._auth.snapshot()
        denied = access_denied(snapshot, RouteAccess.AUTHENTICATED)
        if denied is not None:
            return denied
        assert snapshot.user is not None

        cleaned = ProfileUpdate(**{
            field: value.strip() if isinstance(value, str) else value
            for field, value in update.model_dump().items()
        })
        try:
            profile = self._profiles.save_details(snapshot.user.id, snapshot.user.email, cleaned)
        except Exception as exc:
            self._logger.error("Profile save failed for %s: %s", snapshot.user.id, exc)
            return ServiceResult(
                success=False, error="Could not save your details.", status_code=500,
            )

        refreshed = self._auth.refresh_profile()
        self._logger.info("Profile saved", extra={"user_id": snapshot.user.id})
        return ServiceResult(success=True, data=refreshed or profile)

    def reset_password(
        self,
        email: str,
        phone: str,
        code: str,
        new_password: str,
    ) -> ServiceResult[None]:
        """Reset a password with the code sent to the account's phone."""
        email, phone, code = (email or "").strip().lower(), (phone or "").strip(), (code or "").strip()
        if not email or not phone or not code or not new_password:
            return ServiceResult(
                success=False,
                error="Email, phone, verification code and new password are all required.",
                status_code=400,
            )
        email_check = self._auth.validate_email(email)
        if not email_check.is_valid:
            return ServiceResult(success=False, error=email_check.error_message, status_code=400)
        min_length = self._config.MIN_RESET_PASSWORD_LENGTH
        if len(new_password) < min_length:
            return ServiceResult(
                success=False,
                error=f"Password must be at least {min_length} characters.",
                status_code=400,
            )

        try:
            self._backend.invoke_function(
                RESET_PASSWORD_FUNCTION,
                {"email": email, "phone": phone, "code": code, "newPassword": new_password},
            )
        except Exception as exc:
            self._logger.warning("Password reset failed for %s: %s", email, exc)
            return ServiceResult(
                success=False,
                error="Could not reset the password. Check the details and try again.",
                status_code=400,
            )

        self._logger.info("Password reset completed", extra={"event": "PASSWORD_RESET"})
        return ServiceResult(success=True)
