"""Builds the canonical wire payload for a validated event."""

from __future__ import annotations

import copy
import hashlib
import platform
import time
import uuid
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional, Union

from loguru import logger

from .events import EventType
from .serialization import to_json
from ..meta import get_library_context


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def generate_message_id() -> str:
    """Short, time-ordered random id."""
    return f"{time.time_ns():x}{uuid.uuid4().hex[:8]}"


class PayloadBuilder:
    """Turns raw events into payloads ready to be queued.

    The input mapping is deep-copied so neither side observes later mutation.
    The only field written after construction is ``sentAt``, which the client
    stamps when the payload is pulled into an outgoing batch.
    """

    def __init__(self, id_generator: Callable[[], str] = generate_message_id):
        self.id_generator = id_generator

    def build(
        self,
        event_type: Union[EventType, str],
        event: Mapping[str, Any],
        distinct_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Build the payload for one event.

        Args:
            event_type: Call type, always wins over any caller-supplied ``type``
            event: Validated raw event
            distinct_id: Distinct id for legacy ``alert`` calls

        Returns:
            New payload dict
        """
        event_type = EventType(event_type)
        payload: Dict[str, Any] = copy.deepcopy(dict(event))

        payload["type"] = event_type.value
        if distinct_id is not None:
            payload["distinctId"] = distinct_id
        payload["timestamp"] = payload.get("timestamp") or utcnow()
        payload["messageId"] = payload.get("messageId") or self.id_generator()
        payload["context"] = {"library": get_library_context()}
        payload["_metadata"] = {"pythonVersion": platform.python_version()}
        payload["sentAt"] = None
        payload["receivedAt"] = None

        if not payload["messageId"]:
            digest = hashlib.md5(to_json(payload).encode("utf-8"), usedforsecurity=False).hexdigest()
            payload["messageId"] = f"python-{digest}-{uuid.uuid4()}"
            logger.debug(f"Id generator returned an empty id, using {payload['messageId']}")

        return payload
