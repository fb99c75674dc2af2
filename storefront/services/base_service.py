"""
Base Service.

Services own the business rules the client enforces before the backend
sees a request, and report failures as ``ServiceResult`` values rather
than exceptions.  The only thing they share is the injected logger.
"""

from __future__ import annotations

from storefront.logger import StructuredLogger


class BaseService:
    """Keeps the injected ``StructuredLogger`` as ``self._logger``."""

    def __init__(self, logger: StructuredLogger) -> None:
        self._logger: StructuredLogger = logger
