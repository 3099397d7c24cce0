"""In-memory queue of payloads waiting to be flushed.

Items leave the queue only as a prefix slice taken by a flush. Both append and
slice-taking happen under one lock, so concurrent flushes always receive
disjoint batches.
"""

from __future__ import annotations

import threading
from collections import deque
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from loguru import logger

Callback = Callable[[Optional[BaseException], Any], None]


def noop(error: Optional[BaseException] = None, data: Any = None) -> None:
    """Default completion callback."""


@dataclass
class QueueItem:
    """A queued payload paired with its completion callback."""

    payload: Dict[str, Any]
    callback: Callback = noop


class EventQueue:
    """Thread-safe FIFO of queue items."""

    def __init__(self):
        self._queue: deque[QueueItem] = deque()
        self._lock = threading.RLock()

        # Statistics
        self._total_enqueued = 0
        self._total_dequeued = 0

    def push(self, item: QueueItem) -> int:
        """Append an item to the tail.

        Returns:
            Queue size after the append
        """
        with self._lock:
            self._queue.append(item)
            self._total_enqueued += 1
            size = len(self._queue)

        logger.debug(f"Enqueued {item.payload.get('type')} event {item.payload.get('messageId')}, queue size: {size}")
        return size

    def take(self, max_size: int) -> List[QueueItem]:
        """Remove and return up to ``max_size`` items from the head.

        Args:
            max_size: Maximum number of items to return

        Returns:
            List of items, oldest first (may be empty)
        """
        with self._lock:
            count = min(max_size, len(self._queue))
            items = [self._queue.popleft() for _ in range(count)]
            self._total_dequeued += count
            remaining = len(self._queue)

        if items:
            logger.debug(f"Dequeued batch of {len(items)} items, queue size: {remaining}")

        return items

    def size(self) -> int:
        """Return the current queue size."""
        with self._lock:
            return len(self._queue)

    def __len__(self) -> int:
        return self.size()

    def is_empty(self) -> bool:
        """Check if the queue is empty."""
        with self._lock:
            return len(self._queue) == 0

    def snapshot(self) -> List[QueueItem]:
        """Return the queued items without removing them."""
        with self._lock:
            return list(self._queue)

    def get_stats(self) -> dict:
        """Get queue statistics."""
        with self._lock:
            return {
                "current_size": len(self._queue),
                "total_enqueued": self._total_enqueued,
                "total_dequeued": self._total_dequeued,
            }
