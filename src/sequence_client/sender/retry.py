"""Retry classification and backoff for ingestion requests."""

from __future__ import annotations

import random
from typing import Any

# Raised when our own request timeout fires. Not retried.
CLIENT_ABORT_CODE = "ECONNABORTED"

# Network error codes that will fail the same way on every attempt.
NON_RETRYABLE_CODES = frozenset(
    {
        "ENOTFOUND",
        "ENETUNREACH",
        "UNABLE_TO_GET_ISSUER_CERT",
        "UNABLE_TO_GET_CRL",
        "UNABLE_TO_DECRYPT_CERT_SIGNATURE",
        "UNABLE_TO_DECRYPT_CRL_SIGNATURE",
        "UNABLE_TO_DECODE_ISSUER_PUBLIC_KEY",
        "CERT_SIGNATURE_FAILURE",
        "CRL_SIGNATURE_FAILURE",
        "CERT_NOT_YET_VALID",
        "CERT_HAS_EXPIRED",
        "CRL_NOT_YET_VALID",
        "CRL_HAS_EXPIRED",
        "DEPTH_ZERO_SELF_SIGNED_CERT",
        "SELF_SIGNED_CERT_IN_CHAIN",
        "UNABLE_TO_GET_ISSUER_CERT_LOCALLY",
        "UNABLE_TO_VERIFY_LEAF_SIGNATURE",
        "CERT_CHAIN_TOO_LONG",
        "CERT_REVOKED",
        "INVALID_CA",
        "PATH_LENGTH_EXCEEDED",
        "INVALID_PURPOSE",
        "CERT_UNTRUSTED",
        "CERT_REJECTED",
        "HOSTNAME_MISMATCH",
    }
)

BACKOFF_JITTER = 0.2


def is_network_error(error: Any) -> bool:
    """True for connection-level failures that are safe to retry."""
    code = getattr(error, "code", None)
    if getattr(error, "response", None) is not None or not code:
        return False
    return code != CLIENT_ABORT_CODE and code not in NON_RETRYABLE_CODES


def is_error_retryable(error: Any) -> bool:
    """Decide whether a failed request should be attempted again.

    Retries network errors, server errors (5xx) and rate limiting (429).
    Errors without a response that are not network errors are not retried,
    since it is unknown whether the batch reached the server.
    """
    if is_network_error(error):
        return True

    response = getattr(error, "response", None)
    if response is None:
        return False

    status = getattr(response, "status", None)
    if status is None:
        return False

    if 500 <= status <= 599:
        return True

    return status == 429


def backoff_delay(retry_number: int, base: float = 0.1, maximum: float = 30.0) -> float:
    """Exponential delay in seconds before retry number ``retry_number`` (1-based)."""
    delay = min(base * (2**retry_number), maximum)
    return delay + delay * BACKOFF_JITTER * random.random()
