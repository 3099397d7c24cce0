"""Loose validation of events before they are queued.

Generic fields are only checked when present and truthy. Required fields and
the serialized size limit are always enforced.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Dict, FrozenSet, Union

from .events import REQUIRED_FIELDS, EventType, TypeTag, type_tag
from .serialization import json_byte_length
from ..errors import ValidationError

# Messages can be a maximum of 32kb.
MAX_EVENT_SIZE = 32 << 10

GENERIC_RULES: Dict[str, FrozenSet[TypeTag]] = {
    "event": frozenset({TypeTag.STRING}),
    "name": frozenset({TypeTag.STRING}),
    "message": frozenset({TypeTag.STRING}),
    "alias": frozenset({TypeTag.STRING}),
    "type": frozenset({TypeTag.STRING}),
    "messageId": frozenset({TypeTag.STRING}),
    "properties": frozenset({TypeTag.OBJECT}),
    "traits": frozenset({TypeTag.OBJECT}),
    "context": frozenset({TypeTag.OBJECT}),
    "timestamp": frozenset({TypeTag.DATE}),
    "userId": frozenset({TypeTag.STRING, TypeTag.NUMBER}),
    "distinctId": frozenset({TypeTag.STRING, TypeTag.NUMBER}),
}


def coerce_event_type(event_type: Union[EventType, str, None]) -> EventType:
    """Return ``event_type`` as an :class:`EventType` or raise ValidationError."""
    if not event_type:
        raise ValidationError("You must pass an event type.")
    try:
        return EventType(event_type)
    except ValueError:
        raise ValidationError(f'Invalid event type: "{event_type}"') from None


def _describe(tags: FrozenSet[TypeTag]) -> str:
    names = sorted(tag.value for tag in tags)
    article = "an" if names[0] in ("object", "array") else "a"
    return f"{article} {' or '.join(names)}"


def validate_generic_event(event: Any) -> None:
    """Check the object shape, serialized size and generic field types."""
    if type_tag(event) is not TypeTag.OBJECT:
        raise ValidationError("You must pass a message object.")

    try:
        size = json_byte_length(event)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Your message must be JSON serializable: {e}") from e

    if size >= MAX_EVENT_SIZE:
        raise ValidationError("Your message must be < 32kb.")

    for key, allowed in GENERIC_RULES.items():
        value = event.get(key)
        if not value:
            continue
        if type_tag(value) not in allowed:
            raise ValidationError(f'"{key}" must be {_describe(allowed)}.')


def validate_event(event: Mapping[str, Any], event_type: Union[EventType, str]) -> None:
    """Validate ``event`` for the given call type.

    Args:
        event: Raw event mapping supplied by the caller
        event_type: ``track``, ``identify`` or ``alert``

    Raises:
        ValidationError: if the event is malformed, oversized or missing a
            required field
    """
    validate_generic_event(event)
    event_type = coerce_event_type(event_type)

    for field_name in REQUIRED_FIELDS[event_type]:
        if not event.get(field_name):
            raise ValidationError(f'You must pass a "{field_name}".')
