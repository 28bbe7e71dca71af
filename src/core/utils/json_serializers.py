"""JSON serialization helper for log records and API payloads."""

from datetime import date, datetime
from decimal import Decimal
from typing import Any


def json_serializer(obj: Any) -> Any:
    """
    ``default=`` hook for json.dumps.

    SQL rows carry datetime/date and DECIMAL columns; keep them typed
    instead of stringifying everything:
    - datetime/date -> ISO 8601 string
    - Decimal -> float
    - Enums -> value
    - Everything else -> string (fallback)
    """
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, Decimal):
        return float(obj)
    if hasattr(obj, "value"):
        return obj.value
    return str(obj)


__all__ = ["json_serializer"]
