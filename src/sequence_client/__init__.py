"""Sequence client - buffered, batched event ingestion."""

from loguru import logger

from .client import Client
from .config import ClientConfig, setup_logging
from .errors import ConfigurationError, SequenceError, TransportError, ValidationError
from .meta import __version__
from .sender import TransportResponse

# Library logging is opt-in, see setup_logging().
logger.disable(__name__)

__all__ = [
    "Client",
    "ClientConfig",
    "setup_logging",
    "SequenceError",
    "ConfigurationError",
    "ValidationError",
    "TransportError",
    "TransportResponse",
    "__version__",
]
