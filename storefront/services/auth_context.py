"""
Auth Context.

Single source of truth for who is signed in and what they may do.  It
composes the ``SessionStore`` (fed synchronously by the backend's
auth-change stream), the profile fetch (deferred onto a ``TaskQueue``)
and the derived flags that views and guards read through
:meth:`AuthContext.snapshot`.

Lifecycle::

    uninitialized --init()--> loading-session
    loading-session --no session--> unauthenticated
    loading-session --session--> authenticated-profile-loading
    authenticated-profile-loading --fetch resolves--> authenticated-ready
    any --SIGNED_OUT / sign_out()--> unauthenticated

Every auth-change event re-enters the machine and schedules its own
profile fetch for the user id carried by that event.  A monotonic
generation number guards each fetch: a result is applied only if no
later event arrived in the meantime, so the last event wins and a fetch
that resolves after sign-out cannot bring the profile back.
"""

from __future__ import annotations

import re
import threading
from typing import Any, Callable, Optional

from storefront.backend import BackendClient
from storefront.logger import StructuredLogger
from storefront.models.auth_models import (
    AuthErrorCode,
    AuthResult,
    AuthSnapshot,
    SUPABASE_ERROR_MAP,
    ValidationResult,
)
from storefront.models.enums import AuthEvent, AuthPhase
from storefront.models.profile import Profile
from storefront.repositories.profile_repository import ProfileRepository
from storefront.services.base_service import BaseService
from storefront.services.task_queue import TaskQueue
from storefront.session import SessionStore, session_from_backend
from storefront.utils.audit import log_audit_event

AuthListener = Callable[[AuthSnapshot], None]

_EMAIL_RE: re.Pattern[str] = re.compile(
    r"^[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+"
    r"@[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)+$"
)

_MIN_PASSWORD_LENGTH: int = 6


class AuthContext(BaseService):
    """Reactive auth state with an explicit ``init``/``dispose`` lifecycle.

    Parameters
    ----------
    backend:
        Shared backend client; source of the auth-change stream.
    profiles:
        Repository used for the deferred profile fetch.
    tasks:
        Queue used to hop out of backend callbacks before any backend call.
    store:
        Holder for the current session and identity.
    logger:
        Structured logger instance.
    """

    def __init__(
        self,
        backend: BackendClient,
        profiles: ProfileRepository,
        tasks: TaskQueue,
        store: SessionStore,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(logger)
        self._backend = backend
        self._profiles = profiles
        self._tasks = tasks
        self._store = store

        self._lock: threading.RLock = threading.RLock()
        self._phase: AuthPhase = AuthPhase.UNINITIALIZED
        self._profile: Optional[Profile] = None
        self._generation: int = 0
        self._mounted: bool = False
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._listeners: list[AuthListener] = []

    # ==================================================================
    # Lifecycle
    # ==================================================================

    def init(self) -> None:
        """Subscribe to auth changes and request the current session.

        Calling ``init`` more than once is a no-op.
        """
        with self._lock:
            if self._mounted or self._phase != AuthPhase.UNINITIALIZED:
                return
            self._mounted = True
            self._phase = AuthPhase.LOADING_SESSION

        try:
            self._unsubscribe = self._backend.subscribe_auth_changes(
                self._handle_auth_change
            )
        except Exception as exc:
            self._logger.error("Could not subscribe to auth changes: %s", exc)

        self._notify()
        self._tasks.defer(self._load_initial_session)

    def dispose(self) -> None:
        """Release the subscription; pending deferred work becomes a no-op."""
        with self._lock:
            if not self._mounted:
                return
            self._mounted = False
            self._generation += 1
            unsubscribe, self._unsubscribe = self._unsubscribe, None
            self._listeners.clear()

        if unsubscribe is not None:
            unsubscribe()
        self._logger.info("Auth context disposed.")

    @property
    def is_mounted(self) -> bool:
        with self._lock:
            return self._mounted

    # ==================================================================
    # Observation
    # ==================================================================

    def snapshot(self) -> AuthSnapshot:
        """Return an immutable view of the current auth state."""
        with self._lock:
            session = self._store.session
            return AuthSnapshot(
                phase=self._phase,
                user=session.user if session is not None else None,
                session=session,
                profile=self._profile,
            )

    def add_listener(self, listener: AuthListener) -> Callable[[], None]:
        """Call *listener* with a fresh snapshot after every state change.

        Listeners may run on the backend's callback thread or on the task
        queue worker.  They must not call the backend inline; defer that
        work instead.

        Returns a callable that removes the listener.
        """
        with self._lock:
            self._listeners.append(listener)

        def _remove() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return _remove

    def _notify(self) -> None:
        snapshot = self.snapshot()
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(snapshot)
            except Exception as exc:
                self._logger.error(
                    "Auth listener %r failed: %s", listener, exc, exc_info=True,
                )

    # ==================================================================
    # Auth-change stream
    # ==================================================================

    def _load_initial_session(self) -> None:
        """Deferred: ask the backend for its current session."""
        with self._lock:
            if not self._mounted:
                return
            read_generation = self._generation
        try:
            raw_session = self._backend.supabase.auth.get_session()
        except Exception as exc:
            self._logger.warning("Could not read the current session: %s", exc)
            raw_session = None
        self._apply_auth_event(
            AuthEvent.INITIAL_SESSION, raw_session, read_generation=read_generation,
        )

    def _handle_auth_change(self, event: Any, raw_session: Any) -> None:
        """Apply an auth-change event.

        Runs inside the backend's callback: it updates the session
        synchronously and defers the profile fetch.  It must never call
        the backend itself.
        """
        self._apply_auth_event(event, raw_session)

    def _apply_auth_event(
        self, event: Any, raw_session: Any, read_generation: Optional[int] = None,
    ) -> None:
        # read_generation: generation when the session was read; a newer
        # event since then wins over this one.
        event_name = str(getattr(event, "value", event))
        session = None if event_name == AuthEvent.SIGNED_OUT else session_from_backend(raw_session)

        fetch_user_id: Optional[str] = None
        with self._lock:
            if not self._mounted:
                return
            if read_generation is not None and read_generation != self._generation:
                self._logger.debug("Discarding superseded %s result.", event_name)
                return
            self._generation += 1
            generation = self._generation

            if session is None:
                self._store.clear()
                self._profile = None
                self._phase = AuthPhase.UNAUTHENTICATED
            else:
                previous_user_id = self._store.user_id
                self._store.set_session(session)
                fetch_user_id = session.user.id
                same_user = previous_user_id == fetch_user_id
                if not same_user:
                    self._profile = None
                # The same user with a loaded profile stays ready while the
                # profile refreshes behind the scenes.
                if not (same_user and self._phase == AuthPhase.READY and self._profile is not None):
                    self._phase = AuthPhase.PROFILE_LOADING

        self._logger.info(
            "Auth event %s", event_name,
            extra={"event": event_name, "user_id": fetch_user_id or ""},
        )
        self._notify()

        if fetch_user_id is not None:
            user_id = fetch_user_id
            self._tasks.defer(lambda: self._fetch_profile(user_id, generation))

    def _fetch_profile(self, user_id: str, generation: int) -> None:
        """Deferred: fetch and apply the profile for one auth event."""
        if not self._is_current(user_id, generation):
            self._logger.debug("Skipping superseded profile fetch for %s.", user_id)
            return

        profile = self._profiles.get_by_id(user_id)
        if profile is None:
            self._logger.info(
                "No profile available for %s; continuing without one.", user_id,
            )

        with self._lock:
            if not self._is_current(user_id, generation):
                self._logger.debug("Discarding stale profile for %s.", user_id)
                return
            self._profile = profile
            self._phase = AuthPhase.READY
        self._notify()

    def _is_current(self, user_id: str, generation: int) -> bool:
        with self._lock:
            return (
                self._mounted
                and generation == self._generation
                and self._store.user_id == user_id
            )

    # ==================================================================
    # Operations
    # ==================================================================

    def sign_in(self, email: str, password: str) -> AuthResult:
        """Forward credentials to the backend.

        Success does not update state here; the backend's ``SIGNED_IN``
        event does, asynchronously.
        """
        email_check = self.validate_email(email)
        if not email_check.is_valid:
            return AuthResult(
                success=False,
                error_code=AuthErrorCode.VALIDATION_ERROR,
                error_message=email_check.error_message,
            )
        if not password:
            return AuthResult(
                success=False,
                error_code=AuthErrorCode.VALIDATION_ERROR,
                error_message="Password is required.",
            )

        email = self.normalize_email(email)
        try:
            response = self._backend.supabase.auth.sign_in_with_password(
                {"email": email, "password": password}
            )
        except Exception as exc:
            return self._classify_error(exc, "sign_in")

        user = getattr(response, "user", None)
        user_id = str(user.id) if user is not None else None
        log_audit_event(
            logger=self._logger,
            action="SIGN_IN",
            entity_type="Session",
            entity_id=user_id or email,
            user_id=user_id,
        )
        return AuthResult(success=True, user_id=user_id, email=email)

    def sign_up(
        self,
        email: str,
        password: str,
        full_name: Optional[str] = None,
    ) -> AuthResult:
        """Register a new identity; the backend emails a verification link.

        No profile row is created here.  It appears the first time the
        customer saves their details.
        """
        email_check = self.validate_email(email)
        if not email_check.is_valid:
            return AuthResult(
                success=False,
                error_code=AuthErrorCode.VALIDATION_ERROR,
                error_message=email_check.error_message,
            )
        pw_check = self.validate_password(password)
        if not pw_check.is_valid:
            return AuthResult(
                success=False,
                error_code=AuthErrorCode.VALIDATION_ERROR,
                error_message=pw_check.error_message,
            )

        email = self.normalize_email(email)
        metadata: dict[str, str] = {}
        if full_name and full_name.strip():
            metadata["full_name"] = full_name.strip()

        try:
            response = self._backend.supabase.auth.sign_up({
                "email": email,
                "password": password,
                "options": {"data": metadata},
            })
        except Exception as exc:
            return self._classify_error(exc, "sign_up")

        user = getattr(response, "user", None)
        self._logger.info(
            "Account registered: %s", email, extra={"event": "SIGN_UP"},
        )
        return AuthResult(
            success=True,
            user_id=str(user.id) if user is not None else None,
            email=email,
        )

    def sign_out(self) -> None:
        """Sign out with the backend, then clear local state regardless."""
        user_id = self._store.user_id
        try:
            self._backend.supabase.auth.sign_out()
        except Exception as exc:
            self._logger.warning("Backend sign_out failed: %s", exc)

        with self._lock:
            self._generation += 1
            self._store.clear()
            self._profile = None
            if self._phase != AuthPhase.UNINITIALIZED:
                self._phase = AuthPhase.UNAUTHENTICATED

        log_audit_event(
            logger=self._logger,
            action="SIGN_OUT",
            entity_type="Session",
            entity_id=user_id or "none",
            user_id=user_id,
        )
        self._notify()

    def refresh_profile(self) -> Optional[Profile]:
        """Re-fetch the current user's profile, e.g. after a profile save.

        Runs on the caller's thread; call it from a worker, never from a
        backend callback.
        """
        with self._lock:
            user_id = self._store.user_id
            generation = self._generation
        if user_id is None:
            return None

        profile = self._profiles.get_by_id(user_id)

        with self._lock:
            if not self._is_current(user_id, generation):
                return self._profile
            self._profile = profile
            if self._phase == AuthPhase.PROFILE_LOADING:
                self._phase = AuthPhase.READY
        self._notify()
        return profile

    # ==================================================================
    # Validation helpers
    # ==================================================================

    @staticmethod
    def validate_email(email: str) -> ValidationResult:
        if not email or not email.strip():
            return ValidationResult(
                is_valid=False, error_message="Email address is required.",
            )
        if not _EMAIL_RE.match(email.strip()):
            return ValidationResult(
                is_valid=False, error_message="Please enter a valid email address.",
            )
        return ValidationResult(is_valid=True)

    @staticmethod
    def validate_password(password: str) -> ValidationResult:
        if len(password or "") < _MIN_PASSWORD_LENGTH:
            return ValidationResult(
                is_valid=False,
                error_message=f"Password must be at least {_MIN_PASSWORD_LENGTH} characters.",
            )
        return ValidationResult(is_valid=True)

    @staticmethod
    def normalize_email(email: str) -> str:
        """Strip whitespace and lowercase."""
        return email.strip().lower()

    def _classify_error(self, exc: Exception, operation: str) -> AuthResult:
        """Map a Supabase or network exception to an ``AuthResult``."""
        if isinstance(exc, (ConnectionError, TimeoutError)):
            self._logger.warning(
                "Network error during %s: %s", operation, exc,
                extra={"event": f"{operation.upper()}_NETWORK_ERROR"},
            )
            return AuthResult(
                success=False,
                error_code=AuthErrorCode.NETWORK_ERROR,
                error_message="Cannot reach the server. Check your internet connection.",
            )

        if isinstance(exc, RuntimeError) and not self._backend.is_online:
            return AuthResult(
                success=False,
                error_code=AuthErrorCode.NETWORK_ERROR,
                error_message="The store is offline. Please try again later.",
            )

        error_str = f"{getattr(exc, 'code', '') or ''} {exc}".lower()
        for code_key, (error_code, human_message) in SUPABASE_ERROR_MAP.items():
            if code_key in error_str:
                self._logger.warning(
                    "Auth error during %s (%s): %s", operation, code_key, exc,
                    extra={"event": f"{operation.upper()}_FAILED", "error_code": code_key},
                )
                return AuthResult(
                    success=False, error_code=error_code, error_message=human_message,
                )

        self._logger.warning(
            "Unknown error during %s: %s", operation, exc,
            extra={"event": f"{operation.upper()}_FAILED", "error_code": "unknown"},
        )
        return AuthResult(
            success=False,
            error_code=AuthErrorCode.UNKNOWN_ERROR,
            error_message="An unexpected error occurred. Please try again later.",
        )
