"""JSON encoding shared by validation, id generation and the HTTP sender."""

from __future__ import annotations

import json
from datetime import date
from enum import Enum
from typing import Any


def _json_default(value: Any) -> Any:
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (set, frozenset)):
        return list(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def to_json(obj: Any) -> str:
    """Serialize ``obj``, rendering dates and datetimes as ISO 8601 strings."""
    return json.dumps(obj, default=_json_default, ensure_ascii=False)


def json_byte_length(obj: Any) -> int:
    """UTF-8 byte length of the serialized form (not the character count)."""
    return len(to_json(obj).encode("utf-8"))
