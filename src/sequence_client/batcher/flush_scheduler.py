"""Flush triggers for the client queue.

A flush is triggered on the first enqueue since construction, when the queue
reaches ``flush_at`` items, or when the one-shot interval timer fires. At most
one timer is armed at a time and new events never push it back.
"""

from __future__ import annotations

import threading
from typing import Any, Callable, Dict, Optional

from loguru import logger


class FlushScheduler:
    """Decides when the client should flush."""

    def __init__(
        self,
        flush: Callable[[], Any],
        flush_at: int = 20,
        flush_interval_ms: Optional[int] = 10000,
    ):
        """Initialize the scheduler.

        Args:
            flush: Called whenever a trigger fires
            flush_at: Queue size that triggers an immediate flush
            flush_interval_ms: Delay of the interval trigger, ``None`` or 0 disables it
        """
        self._flush = flush
        self.flush_at = flush_at
        self.flush_interval_ms = flush_interval_ms

        # One-shot latch, set by the first enqueue and never reset.
        self.flushed = False

        self._timer: Optional[threading.Timer] = None
        self._generation = 0
        self._lock = threading.RLock()

        # Statistics
        self._first_flushes = 0
        self._threshold_flushes = 0
        self._interval_flushes = 0

    @property
    def is_armed(self) -> bool:
        with self._lock:
            return self._timer is not None

    def on_enqueue(self, queue_size: int) -> None:
        """Evaluate the triggers after an item was appended.

        Args:
            queue_size: Queue size right after the append
        """
        with self._lock:
            first = not self.flushed
            self.flushed = True

        if first:
            self._first_flushes += 1
            logger.debug("Flushing on first event")
            self._flush()
            return

        if queue_size >= self.flush_at:
            self._threshold_flushes += 1
            logger.debug(f"Flushing, queue reached {queue_size} items (flush_at={self.flush_at})")
            self._flush()
            return

        self.arm()

    def arm(self) -> bool:
        """Arm the interval timer unless it is disabled or already armed.

        Returns:
            True if a new timer was started
        """
        if not self.flush_interval_ms:
            return False

        with self._lock:
            if self._timer is not None:
                return False

            self._generation += 1
            timer = threading.Timer(self.flush_interval_ms / 1000, self._on_timer, args=(self._generation,))
            timer.daemon = True
            self._timer = timer
            timer.start()

        logger.debug(f"Armed flush timer for {self.flush_interval_ms}ms")
        return True

    def cancel(self) -> bool:
        """Disarm the interval timer.

        Returns:
            True if a timer was armed
        """
        with self._lock:
            timer = self._timer
            self._timer = None

        if timer is None:
            return False

        timer.cancel()
        return True

    def get_stats(self) -> Dict[str, Any]:
        """Get scheduler statistics."""
        return {
            "timer_armed": self.is_armed,
            "first_flushes": self._first_flushes,
            "threshold_flushes": self._threshold_flushes,
            "interval_flushes": self._interval_flushes,
            "config": {
                "flush_at": self.flush_at,
                "flush_interval_ms": self.flush_interval_ms,
            },
        }

    def _on_timer(self, generation: int) -> None:
        with self._lock:
            # A flush may have cancelled this timer and armed a new one meanwhile.
            if self._timer is None or generation != self._generation:
                return
            self._timer = None

        self._interval_flushes += 1
        logger.debug("Flushing on interval")

        try:
            self._flush()
        except Exception as e:
            logger.error(f"Error in interval flush: {e}")
