"""Event model, validation and payload building."""

from .events import REQUIRED_FIELDS, EventType, TypeTag, type_tag
from .payload import PayloadBuilder, generate_message_id, utcnow
from .serialization import json_byte_length, to_json
from .validation import GENERIC_RULES, MAX_EVENT_SIZE, validate_event

__all__ = [
    # Event model
    "EventType",
    "TypeTag",
    "type_tag",
    "REQUIRED_FIELDS",
    # Validation
    "validate_event",
    "GENERIC_RULES",
    "MAX_EVENT_SIZE",
    # Payloads
    "PayloadBuilder",
    "generate_message_id",
    "utcnow",
    "to_json",
    "json_byte_length",
]
