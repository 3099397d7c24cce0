"""HTTP sender for transmitting event batches to the ingestion API.

Every failure is reported as a :class:`TransportError`. Errors with a server
response carry the response and use its status text as the message. Errors
without one carry a network error code so the retry policy can classify them.
"""

from __future__ import annotations

import errno
import http.client
import json
import socket
import ssl
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime
from http import HTTPStatus
from typing import Any, Dict, Optional
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from loguru import logger

from .retry import CLIENT_ABORT_CODE, backoff_delay, is_error_retryable
from ..core.serialization import to_json
from ..errors import TransportError
from ..meta import get_user_agent

BATCH_ENDPOINT = "/event/batch/"

# OpenSSL verify codes mapped to the names used by the retry policy.
_CERT_ERROR_CODES = {
    2: "UNABLE_TO_GET_ISSUER_CERT",
    9: "CERT_NOT_YET_VALID",
    10: "CERT_HAS_EXPIRED",
    18: "DEPTH_ZERO_SELF_SIGNED_CERT",
    19: "SELF_SIGNED_CERT_IN_CHAIN",
    20: "UNABLE_TO_GET_ISSUER_CERT_LOCALLY",
    21: "UNABLE_TO_VERIFY_LEAF_SIGNATURE",
    23: "CERT_REVOKED",
    62: "HOSTNAME_MISMATCH",
}


@dataclass
class SenderConfig:
    """Configuration for the HTTP sender."""

    api_base_url: str = "https://e.sequence.com"  # Base URL, no trailing slash
    batch_endpoint: str = BATCH_ENDPOINT

    # Authentication
    api_key: str = ""

    # HTTP settings
    # None = wait indefinitely. Applies to each socket operation (connect, each
    # read), not the whole request, so a server trickling bytes can exceed it.
    timeout_ms: Optional[int] = None
    max_retries: int = 3  # Retries after the first attempt
    retry_backoff_base: float = 0.1
    retry_backoff_max: float = 30.0


@dataclass
class TransportResponse:
    """Response received from the ingestion API."""

    status: int
    status_text: str = ""
    headers: Dict[str, str] = field(default_factory=dict)
    data: Any = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class HTTPSender:
    """Sends one batch per call, retrying transient failures."""

    def __init__(self, config: Optional[SenderConfig] = None):
        """Initialize the HTTP sender.

        Args:
            config: Sender configuration
        """
        self.config = config or SenderConfig()
        self._stats_lock = threading.Lock()

        # Statistics
        self._total_batches_sent = 0
        self._total_batches_failed = 0
        self._total_events_sent = 0
        self._total_retries = 0
        self._total_send_time = 0.0
        self._last_successful_send: Optional[datetime] = None
        self._last_error: Optional[str] = None

    @property
    def url(self) -> str:
        return f"{self.config.api_base_url}{self.config.batch_endpoint}"

    def send_batch(self, body: Dict[str, Any]) -> TransportResponse:
        """Send a batch body to the ingestion API.

        Args:
            body: ``{"batch": [...], "sentAt": ...}``

        Returns:
            Response of the successful attempt

        Raises:
            TransportError: once retries are exhausted or the failure is terminal
        """
        start_time = time.time()
        event_count = len(body.get("batch", []))
        data = to_json(body).encode("utf-8")

        try:
            response = self._send_with_retries(self.url, data)
        except TransportError as e:
            with self._stats_lock:
                self._total_batches_failed += 1
                self._total_send_time += time.time() - start_time
                self._last_error = str(e)
            logger.error(f"Failed to send batch of {event_count} events: {e}")
            raise

        send_time = time.time() - start_time
        with self._stats_lock:
            self._total_batches_sent += 1
            self._total_events_sent += event_count
            self._total_send_time += send_time
            self._last_successful_send = datetime.now()
            self._last_error = None

        logger.info(f"Successfully sent batch with {event_count} events in {send_time:.2f}s")
        return response

    def get_stats(self) -> Dict[str, Any]:
        """Get sender statistics.

        Returns:
            Dictionary with sender statistics
        """
        with self._stats_lock:
            attempts = self._total_batches_sent + self._total_batches_failed
            return {
                "total_batches_sent": self._total_batches_sent,
                "total_batches_failed": self._total_batches_failed,
                "total_events_sent": self._total_events_sent,
                "total_retries": self._total_retries,
                "success_rate": self._total_batches_sent / max(1, attempts),
                "average_send_time_seconds": self._total_send_time / max(1, attempts),
                "last_successful_send": self._last_successful_send.isoformat() if self._last_successful_send else None,
                "last_error": self._last_error,
            }

    def _headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "User-Agent": get_user_agent(),
            "Authorization": f"Bearer {self.config.api_key}",
        }

    def _send_with_retries(self, url: str, data: bytes) -> TransportResponse:
        """Send the request, retrying while the failure is retryable.

        Args:
            url: API endpoint URL
            data: Encoded JSON body

        Returns:
            Response of the successful attempt
        """
        for attempt in range(self.config.max_retries + 1):
            try:
                return self._send_request(url, data)
            except TransportError as e:
                if attempt >= self.config.max_retries or not is_error_retryable(e):
                    raise

                delay = backoff_delay(attempt + 1, self.config.retry_backoff_base, self.config.retry_backoff_max)
                with self._stats_lock:
                    self._total_retries += 1
                logger.warning(f"Send attempt {attempt + 1} failed: {e}. Retrying in {delay:.1f}s...")
                time.sleep(delay)

        raise TransportError("No send attempts were made")

    def _send_request(self, url: str, data: bytes) -> TransportResponse:
        """Send a single HTTP request.

        Args:
            url: API endpoint URL
            data: Encoded JSON body

        Returns:
            Response for a 2xx status
        """
        req = Request(url, data=data, headers=self._headers(), method="POST")

        try:
            if self.config.timeout_ms:
                response_ctx = urlopen(req, timeout=self.config.timeout_ms / 1000)
            else:
                response_ctx = urlopen(req)

            with response_ctx as response:
                raw = response.read()
                logger.debug(f"Successful response: {response.status}")
                return TransportResponse(
                    status=response.status,
                    status_text=response.reason or "",
                    headers=dict(response.headers.items()),
                    data=_parse_body(raw),
                )

        except HTTPError as e:
            response = TransportResponse(
                status=e.code,
                status_text=e.reason or _status_phrase(e.code),
                headers=dict(e.headers.items()) if e.headers else {},
                data=_read_error_body(e),
            )
            raise TransportError(response.status_text, response=response) from e

        except URLError as e:
            reason = e.reason if isinstance(e.reason, BaseException) else e
            raise self._network_error(reason) from e

        except (OSError, http.client.HTTPException) as e:
            raise self._network_error(e) from e

        except ValueError as e:
            # Malformed URL; nothing was sent.
            raise TransportError(f"Invalid request: {e}") from e

    def _network_error(self, exc: BaseException) -> TransportError:
        code = self._error_code(exc)
        if code == CLIENT_ABORT_CODE:
            return TransportError(f"timeout of {self.config.timeout_ms}ms exceeded", code=code)
        return TransportError(f"Network error: {exc}", code=code)

    def _error_code(self, exc: BaseException) -> Optional[str]:
        """Name the network failure the way the retry policy expects."""
        if isinstance(exc, (socket.timeout, TimeoutError)):
            return CLIENT_ABORT_CODE if self.config.timeout_ms else "ETIMEDOUT"
        if isinstance(exc, ssl.SSLCertVerificationError):
            return _CERT_ERROR_CODES.get(exc.verify_code, "CERT_UNTRUSTED")
        if isinstance(exc, socket.gaierror):
            return "ENOTFOUND"
        if isinstance(exc, ConnectionRefusedError):
            return "ECONNREFUSED"
        if isinstance(exc, ConnectionResetError):
            return "ECONNRESET"
        if isinstance(exc, BrokenPipeError):
            return "EPIPE"
        if isinstance(exc, OSError) and exc.errno in errno.errorcode:
            return errno.errorcode[exc.errno]
        if isinstance(exc, http.client.HTTPException):
            return "ERR_BAD_RESPONSE"
        return None


def _status_phrase(status: int) -> str:
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return f"Request failed with status code {status}"


def _parse_body(raw: bytes) -> Any:
    if not raw:
        return None
    text = raw.decode("utf-8", errors="replace")
    try:
        return json.loads(text)
    except ValueError:
        return text


def _read_error_body(error: HTTPError) -> Any:
    try:
        return _parse_body(error.read())
    except (OSError, http.client.HTTPException):
        return None
