"""Library identification sent with every payload and request."""

from __future__ import annotations

SDK_NAME = "sequence-python"
__version__ = "0.3.0"


def get_user_agent() -> str:
    """Value of the ``User-Agent`` header for ingestion requests."""
    return f"{SDK_NAME}/{__version__}"


def get_library_context() -> dict:
    """Library metadata stored under ``context.library`` on each payload."""
    return {"sdk": SDK_NAME, "version": __version__}
