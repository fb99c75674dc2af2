"""Money and payload helpers shared by services, repositories and views."""

from __future__ import annotations

import math
from collections.abc import Mapping
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel

__all__ = ["convert_to_json_safe", "format_money", "quantize_money", "safe_decimal"]


JsonSafeType = Union[
    None,
    str,
    int,
    bool,
    float,
    Dict[str, "JsonSafeType"],
    List["JsonSafeType"],
]
"""The set of types that are natively representable in JSON."""

_CENT = Decimal("0.01")


def convert_to_json_safe(data: Any) -> JsonSafeType:
    """Recursively convert a payload to types the PostgREST client can encode.

    - ``Decimal`` -> plain decimal string, so ``numeric`` money columns
      keep exact cents (non-finite values -> ``None``)
    - ``datetime`` / ``date`` -> ISO-format strings
    - ``StrEnum`` members -> their string value
    - ``float`` NaN / Inf -> ``None``
    - pydantic models, mappings, lists and tuples recursively
    """
    if data is None or isinstance(data, (bool, int)):
        return data

    if isinstance(data, str):
        # str() unwraps StrEnum members.
        return str(data)

    if isinstance(data, float):
        return None if math.isnan(data) or math.isinf(data) else data

    if isinstance(data, Decimal):
        return format(data, "f") if data.is_finite() else None

    # datetime is a subclass of date; both render the same way.
    if isinstance(data, (datetime, date)):
        return data.isoformat()

    if isinstance(data, BaseModel):
        return convert_to_json_safe(data.model_dump())

    if isinstance(data, Mapping):
        return {str(key): convert_to_json_safe(value) for key, value in data.items()}

    if isinstance(data, (list, tuple, set)):
        return [convert_to_json_safe(item) for item in data]

    return str(data)


def quantize_money(amount: Decimal) -> Decimal:
    """Round *amount* to whole cents, half up."""
    return amount.quantize(_CENT, rounding=ROUND_HALF_UP)


def format_money(amount: Optional[Decimal], symbol: str = "₹") -> str:
    """Render *amount* for display, e.g. ``₹1,249.50``."""
    if amount is None:
        return f"{symbol}0.00"
    return f"{symbol}{quantize_money(Decimal(amount)):,.2f}"


def safe_decimal(value: object) -> Optional[Decimal]:
    """Parse a spreadsheet or form cell into ``Decimal``; blanks give ``None``."""
    if value is None:
        return None
    if isinstance(value, Decimal):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return Decimal(str(value))
    text = str(value).strip().replace(",", "")
    if not text:
        return None
    try:
        return Decimal(text)
    except InvalidOperation:
        return None
