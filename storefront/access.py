"""
Route Guards and Access Checks.

``evaluate_route`` decides what the shell renders for a route given the
current auth snapshot.  ``ensure_access`` applies the same rule inside
services before admin-only or account-only writes, raising instead of
redirecting.

Usage::

    outcome = evaluate_route(auth.snapshot(), RouteAccess.ADMIN)
    if outcome is GuardOutcome.ALLOW:
        show_admin_view()
"""

from __future__ import annotations

from typing import Any, Optional, assert_never

from storefront.models.auth_models import AuthSnapshot
from storefront.models.enums import GuardOutcome, RouteAccess, UserRole
from storefront.models.service_models import ServiceResult


class AuthenticationError(RuntimeError):
    """Raised when an operation needs a signed-in user and there is none."""


class AuthorizationError(RuntimeError):
    """Raised when the signed-in user's role does not permit an operation."""


def role_grants_admin(role: Optional[UserRole]) -> bool:
    """Exhaustive role check; a missing profile is never an admin."""
    match role:
        case UserRole.ADMIN:
            return True
        case UserRole.USER | None:
            return False
        case _:
            assert_never(role)


def evaluate_route(snapshot: AuthSnapshot, access: RouteAccess) -> GuardOutcome:
    """Return the guard outcome for a route with the given *access* level.

    Protected routes wait for both the session and the profile before
    allowing anything: the role is only known once the profile loads.
    """
    match access:
        case RouteAccess.PUBLIC:
            return GuardOutcome.ALLOW
        case RouteAccess.AUTHENTICATED | RouteAccess.ADMIN:
            pass
        case _:
            assert_never(access)

    if snapshot.is_loading:
        return GuardOutcome.LOADING
    if not snapshot.is_authenticated:
        return GuardOutcome.REDIRECT_LOGIN
    if access is RouteAccess.ADMIN and not role_grants_admin(snapshot.role):
        return GuardOutcome.DENIED
    return GuardOutcome.ALLOW


def ensure_access(snapshot: AuthSnapshot, access: RouteAccess) -> None:
    """Raise unless *snapshot* permits *access*.

    A snapshot that is still loading counts as unauthenticated here:
    services never act on a half-known identity.

    Raises
    ------
    AuthenticationError
        No settled session.
    AuthorizationError
        Signed in, but the role does not permit *access*.
    """
    outcome = evaluate_route(snapshot, access)
    match outcome:
        case GuardOutcome.ALLOW:
            return
        case GuardOutcome.LOADING | GuardOutcome.REDIRECT_LOGIN:
            raise AuthenticationError(
                "Authentication required. Please sign in to continue."
            )
        case GuardOutcome.DENIED:
            raise AuthorizationError("Admin privileges required.")
        case _:
            assert_never(outcome)


def access_denied(snapshot: AuthSnapshot, access: RouteAccess) -> Optional[ServiceResult[Any]]:
    """Return a 401/403 ``ServiceResult`` when *snapshot* lacks *access*, else ``None``.

    Usage::

        denied = access_denied(self._auth.snapshot(), RouteAccess.ADMIN)
        if denied is not None:
            return denied
    """
    try:
        ensure_access(snapshot, access)
    except AuthenticationError as exc:
        return ServiceResult(success=False, error=str(exc), status_code=401)
    except AuthorizationError as exc:
        return ServiceResult(success=False, error=str(exc), status_code=403)
    return None
