"""
Authentication Models.

Pydantic models and enumerations for the auth contracts between
``AuthContext`` and the UI layer: classified errors, the session and
identity projections pushed by the backend, and the immutable snapshot
handed to listeners.
"""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from storefront.models.enums import AuthPhase, UserRole
from storefront.models.profile import Profile


# ---------------------------------------------------------------------------
# Error classification
# ---------------------------------------------------------------------------

class AuthErrorCode(StrEnum):
    """Categories of authentication failure shown on the login form."""

    INVALID_CREDENTIALS = "invalid_credentials"
    EMAIL_NOT_CONFIRMED = "email_not_confirmed"
    EMAIL_ALREADY_EXISTS = "email_already_exists"
    WEAK_PASSWORD = "weak_password"
    NETWORK_ERROR = "network_error"
    RATE_LIMITED = "rate_limited"
    VALIDATION_ERROR = "validation_error"
    UNKNOWN_ERROR = "unknown_error"


# Substrings of Supabase auth error messages/codes, checked in order.
SUPABASE_ERROR_MAP: dict[str, tuple[AuthErrorCode, str]] = {
    "invalid login credentials": (
        AuthErrorCode.INVALID_CREDENTIALS,
        "Incorrect email or password.",
    ),
    "invalid_credentials": (
        AuthErrorCode.INVALID_CREDENTIALS,
        "Incorrect email or password.",
    ),
    "invalid_grant": (
        AuthErrorCode.INVALID_CREDENTIALS,
        "Incorrect email or password.",
    ),
    "email not confirmed": (
        AuthErrorCode.EMAIL_NOT_CONFIRMED,
        "Please verify your email address before signing in.",
    ),
    "email_not_confirmed": (
        AuthErrorCode.EMAIL_NOT_CONFIRMED,
        "Please verify your email address before signing in.",
    ),
    "user already registered": (
        AuthErrorCode.EMAIL_ALREADY_EXISTS,
        "An account with this email already exists. Try signing in.",
    ),
    "user_already_exists": (
        AuthErrorCode.EMAIL_ALREADY_EXISTS,
        "An account with this email already exists. Try signing in.",
    ),
    "weak_password": (
        AuthErrorCode.WEAK_PASSWORD,
        "Password is too weak. Use at least 6 characters.",
    ),
    "rate limit": (
        AuthErrorCode.RATE_LIMITED,
        "Too many attempts. Please wait a moment and try again.",
    ),
    "over_request_rate_limit": (
        AuthErrorCode.RATE_LIMITED,
        "Too many attempts. Please wait a moment and try again.",
    ),
}


class ValidationResult(BaseModel):
    """Result of a single client-side field validation check."""

    is_valid: bool
    error_message: Optional[str] = None


class AuthResult(BaseModel):
    """Outcome of sign-in, sign-up and password-reset calls.

    A successful ``sign_in`` does not mean the auth state has been
    updated yet; that happens when the backend delivers its auth-change
    event.

    Attributes
    ----------
    success:
        ``True`` when the backend accepted the request.
    error_code:
        Structured error category (``None`` on success).
    error_message:
        Human-readable description for the form (``None`` on success).
    user_id:
        Identity id returned by the backend, when available.
    email:
        Normalised email address the request was made for.
    """

    success: bool
    error_code: Optional[AuthErrorCode] = None
    error_message: Optional[str] = None
    user_id: Optional[str] = None
    email: Optional[str] = None


# ---------------------------------------------------------------------------
# Session projections
# ---------------------------------------------------------------------------

class Identity(BaseModel):
    """The bare auth identity, immutable from the client's point of view."""

    model_config = ConfigDict(frozen=True)

    id: str
    email: Optional[str] = None
    user_metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def full_name(self) -> Optional[str]:
        name = self.user_metadata.get("full_name")
        return str(name) if name else None


class SessionInfo(BaseModel):
    """Read-only copy of the backend session."""

    model_config = ConfigDict(frozen=True)

    access_token: str
    refresh_token: Optional[str] = None
    expires_at: Optional[datetime] = None
    user: Identity


class AuthSnapshot(BaseModel):
    """Immutable view of ``AuthContext`` handed to listeners and guards."""

    model_config = ConfigDict(frozen=True)

    phase: AuthPhase = AuthPhase.UNINITIALIZED
    user: Optional[Identity] = None
    session: Optional[SessionInfo] = None
    profile: Optional[Profile] = None

    @property
    def loading(self) -> bool:
        """``True`` until the backend has told us whether a session exists."""
        return self.phase in (AuthPhase.UNINITIALIZED, AuthPhase.LOADING_SESSION)

    @property
    def profile_loading(self) -> bool:
        return self.phase == AuthPhase.PROFILE_LOADING

    @property
    def is_loading(self) -> bool:
        return self.loading or self.profile_loading

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None and self.session is not None

    @property
    def role(self) -> Optional[UserRole]:
        return self.profile.role if self.profile is not None else None

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def display_name(self) -> str:
        if self.profile is not None and self.profile.full_name:
            return self.profile.full_name
        if self.user is not None:
            return self.user.full_name or self.user.email or "Customer"
        return "Guest"
