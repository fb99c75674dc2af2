"""
Service Layer Result Envelope.

Every service method that can fail returns a ``ServiceResult`` so views
never inspect raw exceptions.
"""

from __future__ import annotations

from typing import Generic, Optional, TypeVar

from pydantic import BaseModel

T = TypeVar("T")

__all__ = ["ServiceResult"]


class ServiceResult(BaseModel, Generic[T]):
    """
    Standard service return envelope.

    ``status_code`` follows HTTP conventions: 400 for validation
    failures, 401 when a session is required, 403 for role denials,
    404 for missing rows and 500 for backend failures.
    """

    success: bool
    data: Optional[T] = None
    error: Optional[str] = None
    status_code: int = 200

    @classmethod
    def ok(cls, data: Optional[T] = None) -> "ServiceResult[T]":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str, status_code: int = 500) -> "ServiceResult[T]":
        return cls(success=False, error=error, status_code=status_code)
