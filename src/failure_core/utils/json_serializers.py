"""Shared JSON serialization utilities for failure payloads and log records."""

from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
from typing import Any
from uuid import UUID


def _serialize_known_type(obj: Any) -> tuple[bool, Any]:
    """Try to serialize by known type. Returns (handled, result)."""
    if isinstance(obj, (datetime, date)):
        return True, obj.isoformat()
    if isinstance(obj, Decimal):
        return True, float(obj)
    if isinstance(obj, (Path, UUID)):
        return True, str(obj)
    if isinstance(obj, (set, frozenset)):
        return True, list(obj)
    if isinstance(obj, bytes):
        return True, obj.decode("utf-8", errors="replace")
    return False, None


def json_serializer(obj: Any) -> Any:
    """
    JSON ``default`` hook for values the json module cannot encode.

    - datetime/date → ISO 8601 string
    - Decimal → float
    - Path/UUID → string
    - set/frozenset → list
    - bytes → UTF-8 text (undecodable bytes replaced)
    - Enums → value
    - Objects with attributes → their ``__dict__``
    - Everything else → string (fallback)

    The ``__dict__`` fallback mirrors how structured error payloads are
    stored: an arbitrary raised object is shown by its fields.

    Args:
        obj: Object to serialize

    Returns:
        JSON-serializable representation
    """
    handled, result = _serialize_known_type(obj)
    if handled:
        return result
    if hasattr(obj, "value"):
        return obj.value
    if hasattr(obj, "__dict__"):
        return obj.__dict__
    return str(obj)


__all__ = ["json_serializer"]
