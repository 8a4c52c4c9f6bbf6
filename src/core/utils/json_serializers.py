"""Shared JSON serialization utilities for structured log output."""

from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import Any


def json_serializer(obj: Any) -> Any:
    """
    Fallback serializer for json.dumps(default=...).

    - datetime/date → ISO 8601 string
    - Enum → value
    - Path → string
    - bytes → length marker (payloads are never written to logs)
    - Everything else → string

    Args:
        obj: Object to serialize

    Returns:
        JSON-serializable representation
    """
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, Path):
        return str(obj)
    if isinstance(obj, (bytes, bytearray, memoryview)):
        return f"<{len(obj)} bytes>"
    return str(obj)


__all__ = ["json_serializer"]
