"""Event types and the type tags used to describe event fields.

Events enter the client as plain mappings:

    track:    {"event": "Signed Up", "userId": "u-1", "properties": {...}}
    identify: {"userId": "u-1", "traits": {...}}
    alert:    {"name": "New customer", "message": "Acme signed up"}
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date
from enum import Enum
from typing import Any, Dict


class EventType(str, Enum):
    """Types of calls accepted by the client."""

    TRACK = "track"
    IDENTIFY = "identify"
    ALERT = "alert"  # legacy call shape, takes the distinct id separately


class TypeTag(str, Enum):
    """Structural category of a JSON-compatible value."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    OBJECT = "object"
    ARRAY = "array"
    DATE = "date"
    NULL = "null"
    UNKNOWN = "unknown"


# Required fields per event type, checked after the generic rules.
REQUIRED_FIELDS: Dict[EventType, tuple[str, ...]] = {
    EventType.TRACK: ("event", "userId"),
    EventType.IDENTIFY: ("userId",),
    EventType.ALERT: ("message", "name"),
}


def type_tag(value: Any) -> TypeTag:
    """Return the structural category of ``value``.

    ``bool`` is checked before numbers since it subclasses ``int``, and
    ``datetime`` is covered by its ``date`` base class.
    """
    if value is None:
        return TypeTag.NULL
    if isinstance(value, bool):
        return TypeTag.BOOLEAN
    if isinstance(value, (int, float)):
        return TypeTag.NUMBER
    if isinstance(value, str):
        return TypeTag.STRING
    if isinstance(value, date):
        return TypeTag.DATE
    if isinstance(value, Mapping):
        return TypeTag.OBJECT
    if isinstance(value, (list, tuple)):
        return TypeTag.ARRAY
    return TypeTag.UNKNOWN
