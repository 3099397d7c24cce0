"""Flush scheduling for batched transmission."""

from .flush_scheduler import FlushScheduler

__all__ = ["FlushScheduler"]
