"""Configuration module for the Sequence client."""

from .logger_config import disable_logging, setup_logging
from .settings import DEFAULT_FLUSH_AT, DEFAULT_FLUSH_INTERVAL_MS, DEFAULT_HOST, DEFAULT_RETRY_COUNT, ClientConfig

__all__ = [
    "ClientConfig",
    "DEFAULT_HOST",
    "DEFAULT_FLUSH_AT",
    "DEFAULT_FLUSH_INTERVAL_MS",
    "DEFAULT_RETRY_COUNT",
    "setup_logging",
    "disable_logging",
]
