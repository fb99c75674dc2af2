"""
Backend Client.

One ``BackendClient`` per process wraps the Supabase client and is shared
by injection.  It owns the connection only; query logic lives in the
repositories and business rules in the services.

Usage (at application startup)::

    backend = BackendClient(
        supabase_url=config.SUPABASE_URL,
        supabase_key=config.SUPABASE_ANON_KEY.get_secret_value(),
        logger=StructuredLogger(name="storefront.backend"),
    )
"""

from __future__ import annotations

import mimetypes
from pathlib import Path
from typing import Any, Callable, Optional

from supabase import Client as SupabaseClient, create_client

from storefront.logger import StructuredLogger

AuthCallback = Callable[[Any, Any], None]


class BackendClient:
    """Holds the Supabase client and exposes the non-table endpoints.

    When ``supabase_url`` or ``supabase_key`` is empty no client is
    created; every call then raises ``RuntimeError`` from the
    :pyattr:`supabase` property, which the repository and service layers
    already catch and convert to empty results.

    Parameters
    ----------
    supabase_url:
        Project URL (e.g. ``https://xyz.supabase.co``).  May be empty.
    supabase_key:
        Anonymous key.  May be empty.
    logger:
        Structured logger for connection events.
    client:
        A pre-built client.  When given, the URL and key are ignored.
    """

    def __init__(
        self,
        supabase_url: str,
        supabase_key: str,
        logger: StructuredLogger,
        client: Optional[SupabaseClient] = None,
    ) -> None:
        self._logger: StructuredLogger = logger
        self._supabase: Optional[SupabaseClient] = client

        if self._supabase is not None:
            return

        if supabase_url and supabase_key:
            try:
                self._supabase = create_client(supabase_url, supabase_key)
                self._logger.info("Supabase client initialized.")
            except (ValueError, TypeError) as exc:
                self._logger.warning(
                    "Supabase credential format error: %s. Backend unavailable.",
                    exc,
                )
            except Exception as exc:
                self._logger.error(
                    "Unexpected Supabase initialization failure: %s.",
                    exc,
                    exc_info=True,
                )
        else:
            self._logger.warning(
                "Supabase credentials not configured; backend unavailable."
            )

    # ------------------------------------------------------------------
    # Public properties
    # ------------------------------------------------------------------

    @property
    def supabase(self) -> SupabaseClient:
        """Return the initialised Supabase client.

        Raises
        ------
        RuntimeError
            If the client was not initialised.
        """
        if self._supabase is None:
            raise RuntimeError(
                "Supabase client is not initialised. "
                "Set SUPABASE_URL and SUPABASE_ANON_KEY."
            )
        return self._supabase

    @property
    def is_online(self) -> bool:
        """``True`` when the Supabase client is available."""
        return self._supabase is not None

    # ------------------------------------------------------------------
    # Auth stream
    # ------------------------------------------------------------------

    def subscribe_auth_changes(self, callback: AuthCallback) -> Callable[[], None]:
        """Register *callback* for ``(event, session)`` auth-change events.

        Returns a zero-argument callable that releases the subscription.
        The backend invokes *callback* while holding its own auth lock, so
        the callback must not call back into the backend.
        """
        subscription = self.supabase.auth.on_auth_state_change(callback)

        def _unsubscribe() -> None:
            try:
                subscription.unsubscribe()
            except Exception as exc:
                self._logger.warning("Auth unsubscribe failed: %s", exc)

        return _unsubscribe

    # ------------------------------------------------------------------
    # Edge functions and RPC
    # ------------------------------------------------------------------

    def invoke_function(self, name: str, body: dict[str, Any]) -> Any:
        """Invoke edge function *name* with a JSON *body*.

        Raises whatever the client raises; callers decide whether the
        call is best-effort.
        """
        return self.supabase.functions.invoke(name, invoke_options={"body": body})

    def call_rpc(self, name: str, params: dict[str, Any]) -> Any:
        """Call a Postgres function exposed through PostgREST."""
        response = self.supabase.rpc(name, params).execute()
        return response.data if response is not None else None

    # ------------------------------------------------------------------
    # Storage
    # ------------------------------------------------------------------

    def upload_file(self, bucket: str, object_path: str, local_path: Path) -> str:
        """Upload *local_path* to ``bucket/object_path`` and return its public URL."""
        content_type = mimetypes.guess_type(local_path.name)[0] or "application/octet-stream"
        storage = self.supabase.storage.from_(bucket)
        storage.upload(
            object_path,
            local_path.read_bytes(),
            file_options={"content-type": content_type, "upsert": "false"},
        )
        url: str = storage.get_public_url(object_path)
        self._logger.info("Uploaded %s to %s/%s", local_path.name, bucket, object_path)
        return url
