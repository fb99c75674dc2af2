"""
Base Repository.

Shared infrastructure for all repositories: the backend reference, the
logger, and a read helper that turns backend failures into a typed
default.  Write paths let exceptions propagate so services can report
them.
"""

from __future__ import annotations

from typing import Any, Callable, Optional, TypeVar

from supabase import Client as SupabaseClient

from storefront.backend import BackendClient
from storefront.logger import StructuredLogger
from storefront.utils.general import convert_to_json_safe

T = TypeVar("T")

Row = dict[str, Any]


class BaseRepository:
    """Base class for all repositories. Receives dependencies via __init__."""

    TABLE: str = ""

    def __init__(self, backend: BackendClient, logger: StructuredLogger) -> None:
        self._backend = backend
        self._logger = logger

    @property
    def supabase(self) -> SupabaseClient:
        """Returns the Supabase client."""
        return self._backend.supabase

    def _table(self) -> Any:
        return self.supabase.table(self.TABLE)

    @staticmethod
    def _rows(response: Any) -> list[Row]:
        """Return ``response.data`` as a list of rows, tolerating ``None``."""
        if response is None or response.data is None:
            return []
        data = response.data
        return list(data) if isinstance(data, list) else [data]

    @staticmethod
    def _row(response: Any) -> Optional[Row]:
        """Return the single row of a ``maybe_single()`` response, if any."""
        if response is None or not response.data:
            return None
        data = response.data
        if isinstance(data, list):
            return data[0] if data else None
        return data

    @staticmethod
    def _payload(values: Any) -> Any:
        """Convert Decimals, datetimes and enums to JSON-encodable values."""
        return convert_to_json_safe(values)

    def _read(
        self,
        operation: Callable[[], T],
        default_factory: Callable[[], T],
        *,
        operation_name: str,
    ) -> T:
        """Run a read *operation*, returning ``default_factory()`` on failure.

        NOT for write paths: a failed write must reach the caller.

        Parameters
        ----------
        operation:
            Zero-argument callable that performs the query.
        default_factory:
            Produces the typed default when the backend fails.
        operation_name:
            Label for log messages, e.g. ``"get_by_id (profiles)"``.
        """
        try:
            return operation()
        except Exception as exc:
            self._logger.warning(
                "Backend read failed for %s: %s", operation_name, exc
            )
            return default_factory()
