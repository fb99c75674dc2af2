"""
Session Store.

Holds the read-only copy of the backend session and its identity, as
pushed by the auth-change stream.  ``AuthContext`` is the only writer;
everything else reads through ``AuthContext.snapshot()``.

Usage::

    store = SessionStore()
    store.set_session(session_from_backend(raw_session))
    store.user_id  # -> "abc-123"
"""

from __future__ import annotations

import threading
from datetime import datetime, timezone
from typing import Any, Optional

from storefront.models.auth_models import Identity, SessionInfo


def session_from_backend(raw: Any) -> Optional[SessionInfo]:
    """Project a Supabase ``Session`` (or ``None``) onto ``SessionInfo``.

    Returns ``None`` for a missing session or one without a user or an
    access token.
    """
    if raw is None:
        return None
    raw_user = getattr(raw, "user", None)
    access_token = getattr(raw, "access_token", None)
    if raw_user is None or not access_token:
        return None

    expires_at_raw = getattr(raw, "expires_at", None)
    expires_at: Optional[datetime] = None
    if isinstance(expires_at_raw, (int, float)):
        expires_at = datetime.fromtimestamp(expires_at_raw, tz=timezone.utc)

    identity = Identity(
        id=str(getattr(raw_user, "id")),
        email=getattr(raw_user, "email", None),
        user_metadata=dict(getattr(raw_user, "user_metadata", None) or {}),
    )
    return SessionInfo(
        access_token=access_token,
        refresh_token=getattr(raw, "refresh_token", None),
        expires_at=expires_at,
        user=identity,
    )


class SessionStore:
    """Thread-safe holder for the current session and identity."""

    def __init__(self) -> None:
        self._lock: threading.RLock = threading.RLock()
        self._session: Optional[SessionInfo] = None

    def set_session(self, session: SessionInfo) -> None:
        """Record *session* and its identity as current."""
        with self._lock:
            self._session = session

    @property
    def session(self) -> Optional[SessionInfo]:
        with self._lock:
            return self._session

    @property
    def user_id(self) -> Optional[str]:
        with self._lock:
            return self._session.user.id if self._session is not None else None

    def clear(self) -> None:
        """Forget the session, ending it locally."""
        with self._lock:
            self._session = None
