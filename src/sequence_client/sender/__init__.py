"""HTTP transport module for sending batches to the ingestion API."""

from .http_sender import BATCH_ENDPOINT, HTTPSender, SenderConfig, TransportResponse
from .retry import backoff_delay, is_error_retryable, is_network_error

__all__ = [
    "HTTPSender",
    "SenderConfig",
    "TransportResponse",
    "BATCH_ENDPOINT",
    "is_error_retryable",
    "is_network_error",
    "backoff_delay",
]
