"""Exception types raised by the Sequence client.

Validation and configuration errors are raised synchronously to the caller.
Transport errors never escape a flush: they are handed to callbacks or stored
on the returned future.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .sender.http_sender import TransportResponse


class SequenceError(Exception):
    """Base class for all Sequence client errors."""

    def __init__(self, message: str = "An error occurred in the Sequence client."):
        self.message = message
        super().__init__(self.message)


class ConfigurationError(SequenceError, ValueError):
    """Raised when the client is constructed with unusable settings."""


class ValidationError(SequenceError, ValueError):
    """Raised when an event fails shape or size validation.

    Events that fail validation are never queued and never retried.
    """


class TransportError(SequenceError):
    """Failure to deliver a batch to the ingestion endpoint.

    Args:
        message: Human readable reason. For HTTP errors this is the status text.
        code: Network error code (``ECONNREFUSED``, ``ECONNABORTED``...) when
            no response was received.
        response: The server response, when one was received.
    """

    def __init__(
        self,
        message: str = "Request failed",
        code: Optional[str] = None,
        response: Optional[TransportResponse] = None,
    ):
        self.code = code
        self.response = response
        super().__init__(message)

    @property
    def status(self) -> Optional[int]:
        """HTTP status of the response, if any."""
        return self.response.status if self.response is not None else None

    def __repr__(self) -> str:
        return f"TransportError(message={self.message!r}, code={self.code!r}, status={self.status!r})"
