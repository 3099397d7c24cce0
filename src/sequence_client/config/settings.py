"""Configuration for the Sequence client.

Settings are fixed once the client is constructed. Values can come from
keyword arguments or from ``SEQUENCE_*`` environment variables.
"""

from __future__ import annotations

import os
from typing import Any, Dict, Optional

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_HOST = "https://e.sequence.com"
DEFAULT_FLUSH_AT = 20
DEFAULT_FLUSH_INTERVAL_MS = 10000
DEFAULT_RETRY_COUNT = 3


class ClientConfig(BaseModel):
    """Client options. Immutable after construction."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    host: str = Field(default=DEFAULT_HOST, description="Base URL of the ingestion API")
    timeout_ms: Optional[int] = Field(default=None, ge=0, description="Per-request timeout in milliseconds, None or 0 for no timeout")
    flush_at: int = Field(default=DEFAULT_FLUSH_AT, description="Maximum events per batch and queue size that triggers a flush")
    flush_interval_ms: Optional[int] = Field(default=DEFAULT_FLUSH_INTERVAL_MS, ge=0, description="Maximum wait before a partial batch is sent, None or 0 disables")
    enable: bool = Field(default=True, description="When False every call is a no-op")
    retry_count: int = Field(default=DEFAULT_RETRY_COUNT, ge=0, description="Retries for a failed request, 0 disables")
    retry_backoff_base: float = Field(default=0.1, ge=0, description="Base backoff delay in seconds")
    retry_backoff_max: float = Field(default=30.0, ge=0, description="Maximum backoff delay in seconds")
    max_workers: int = Field(default=4, gt=0, description="Threads available for concurrent sends")

    @field_validator("host", mode="before")
    @classmethod
    def strip_trailing_slashes(cls, v: Any) -> str:
        """Fall back to the default host and drop trailing slashes."""
        if not v:
            return DEFAULT_HOST
        return str(v).rstrip("/")

    @field_validator("flush_at", mode="before")
    @classmethod
    def default_flush_at(cls, v: Any) -> int:
        """Anything but a positive integer falls back to the default."""
        if v is None:
            return DEFAULT_FLUSH_AT
        if isinstance(v, bool) or not isinstance(v, int) or v < 1:
            logger.warning(f"Invalid flush_at: {v!r}, using {DEFAULT_FLUSH_AT}")
            return DEFAULT_FLUSH_AT
        return v

    @classmethod
    def from_env(cls, **overrides: Any) -> ClientConfig:
        """Build a configuration from environment variables.

        Args:
            **overrides: Values that take precedence over the environment

        Returns:
            Configured ClientConfig instance
        """
        values: Dict[str, Any] = {}

        if host := os.getenv("SEQUENCE_HOST"):
            values["host"] = host

        if timeout_ms := os.getenv("SEQUENCE_TIMEOUT_MS"):
            try:
                values["timeout_ms"] = int(timeout_ms)
            except ValueError:
                logger.warning(f"Invalid timeout: {timeout_ms}")

        if flush_at := os.getenv("SEQUENCE_FLUSH_AT"):
            try:
                values["flush_at"] = int(flush_at)
            except ValueError:
                logger.warning(f"Invalid flush_at: {flush_at}")

        if flush_interval := os.getenv("SEQUENCE_FLUSH_INTERVAL_MS"):
            try:
                values["flush_interval_ms"] = int(flush_interval)
            except ValueError:
                logger.warning(f"Invalid flush interval: {flush_interval}")

        if retry_count := os.getenv("SEQUENCE_RETRY_COUNT"):
            try:
                values["retry_count"] = int(retry_count)
            except ValueError:
                logger.warning(f"Invalid retry count: {retry_count}")

        if enable := os.getenv("SEQUENCE_ENABLE"):
            values["enable"] = enable.strip().lower() not in ("0", "false", "no", "off")

        values.update(overrides)
        return cls(**values)

    def get_sender_config(self) -> dict:
        """Get configuration for the HTTP sender."""
        return {
            "api_base_url": self.host,
            "timeout_ms": self.timeout_ms or None,
            "max_retries": self.retry_count,
            "retry_backoff_base": self.retry_backoff_base,
            "retry_backoff_max": self.retry_backoff_max,
        }
