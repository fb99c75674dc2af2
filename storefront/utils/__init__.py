"""Shared utility functions for the storefront.

Re-exported here so callers can write ``from storefront.utils import
format_money``; the full module paths keep working too.
"""

from storefront.utils.audit import AuditEvent, log_audit_event
from storefront.utils.general import (
    convert_to_json_safe,
    format_money,
    quantize_money,
    safe_decimal,
)

__all__ = [
    "AuditEvent",
    "convert_to_json_safe",
    "format_money",
    "log_audit_event",
    "quantize_money",
    "safe_decimal",
]
