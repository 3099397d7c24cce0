"""Tests for the in-memory event queue."""

import threading

from loguru import logger

from sequence_client.queuer import EventQueue, QueueItem


def _item(name):
    return QueueItem(payload={"type": "track", "event": name, "messageId": name})


def test_fifo_prefix_slices():
    """take() returns the oldest items and leaves the rest queued."""
    logger.info("Testing FIFO slices...")

    queue = EventQueue()
    for name in "ABCDE":
        queue.push(_item(name))

    first = queue.take(2)
    assert [item.payload["event"] for item in first] == ["A", "B"]
    assert queue.size() == 3

    rest = queue.take(10)
    assert [item.payload["event"] for item in rest] == ["C", "D", "E"]
    assert queue.is_empty()
    assert queue.take(5) == []

    logger.info("✓ FIFO slices returned")


def test_push_returns_size():
    queue = EventQueue()
    assert queue.push(_item("A")) == 1
    assert queue.push(_item("B")) == 2
    assert len(queue) == 2


def test_concurrent_takes_are_disjoint():
    """Two threads draining the same queue never receive the same item."""
    queue = EventQueue()
    for i in range(1000):
        queue.push(_item(str(i)))

    taken = [[], []]

    def drain(bucket):
        while True:
            items = queue.take(7)
            if not items:
                return
            bucket.extend(item.payload["event"] for item in items)

    threads = [threading.Thread(target=drain, args=(bucket,)) for bucket in taken]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    everything = taken[0] + taken[1]
    assert len(everything) == 1000
    assert len(set(everything)) == 1000, "An item was taken twice"


def test_stats():
    queue = EventQueue()
    for name in "ABC":
        queue.push(_item(name))
    queue.take(1)

    stats = queue.get_stats()
    assert stats == {"current_size": 2, "total_enqueued": 3, "total_dequeued": 1}

    assert [item.payload["event"] for item in queue.snapshot()] == ["B", "C"]
    assert queue.size() == 2, "snapshot() leaves the queue untouched"
