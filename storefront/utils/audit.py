"""
Audit Trail.

Back-office writes (role changes, order status updates, product and
banner edits, bulk imports) and sign-in/sign-out each leave one
``AUDIT:`` log line carrying a validated JSON object.  Services write
the line only after the backend has accepted the change.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from storefront.logger import StructuredLogger

__all__ = ["AuditEvent", "DetailValue", "log_audit_event"]

# Flat scalars only; nested structures belong in their own model.
DetailValue = Union[str, int, float, bool, None]


class AuditEvent(BaseModel):
    """One audit trail entry.

    ``action`` is an upper-snake verb phrase such as ``UPDATE_ROLE``;
    ``user_id`` is the acting user, ``"anonymous"`` for guests.
    """

    model_config = ConfigDict(frozen=True)

    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    action: str = Field(pattern=r"^[A-Z][A-Z_]*$")
    entity_type: str
    entity_id: str
    user_id: str = "anonymous"
    details: dict[str, DetailValue] = Field(default_factory=dict)


def log_audit_event(
    logger: StructuredLogger,
    action: str,
    entity_type: str,
    entity_id: str,
    user_id: Optional[str],
    details: Optional[dict[str, DetailValue]] = None,
) -> AuditEvent:
    """Validate an audit entry, log it and return it.

    Raises
    ------
    pydantic.ValidationError
        If *action* is not upper-snake case or a detail value is not a
        flat scalar.
    """
    event = AuditEvent(
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        user_id=user_id or "anonymous",
        details=details or {},
    )
    logger.info("AUDIT: %s", event.model_dump_json())
    return event
