"""Tests for flush triggers."""

import time

from loguru import logger

from sequence_client.batcher import FlushScheduler


class FlushCounter:
    def __init__(self):
        self.calls = 0

    def __call__(self):
        self.calls += 1


def test_first_enqueue_flushes_once():
    flush = FlushCounter()
    scheduler = FlushScheduler(flush, flush_at=5, flush_interval_ms=None)

    scheduler.on_enqueue(1)
    assert flush.calls == 1, "First enqueue should flush"
    assert scheduler.flushed

    scheduler.on_enqueue(1)
    assert flush.calls == 1, "The latch is one-shot"


def test_threshold_flush():
    """A flush fires exactly when the queue reaches flush_at."""
    logger.info("Testing threshold flush...")

    flush = FlushCounter()
    scheduler = FlushScheduler(flush, flush_at=3, flush_interval_ms=None)
    scheduler.flushed = True

    scheduler.on_enqueue(1)
    scheduler.on_enqueue(2)
    assert flush.calls == 0
    scheduler.on_enqueue(3)
    assert flush.calls == 1
    assert not scheduler.is_armed, "Interval flush is disabled"

    logger.info("✓ Threshold flush fired")


def test_interval_flush():
    flush = FlushCounter()
    scheduler = FlushScheduler(flush, flush_at=20, flush_interval_ms=20)
    scheduler.flushed = True

    scheduler.on_enqueue(1)
    assert scheduler.is_armed
    assert flush.calls == 0

    time.sleep(0.2)
    assert flush.calls == 1
    assert not scheduler.is_armed, "Firing clears the handle"


def test_timer_is_not_reset_by_new_events():
    """A second enqueue before the timer fires leaves the deadline alone."""
    logger.info("Testing that the timer is not reset...")

    flush = FlushCounter()
    scheduler = FlushScheduler(flush, flush_at=20, flush_interval_ms=400)
    scheduler.flushed = True

    scheduler.on_enqueue(1)
    time.sleep(0.2)
    assert scheduler.arm() is False, "Timer is already armed"
    scheduler.on_enqueue(2)
    time.sleep(0.3)

    # Fired at ~400ms; a reset would have pushed it to ~600ms.
    assert flush.calls == 1

    time.sleep(0.4)
    assert flush.calls == 1, "One-shot timer fires once"

    logger.info("✓ Timer fired once")


def test_cancel():
    flush = FlushCounter()
    scheduler = FlushScheduler(flush, flush_at=20, flush_interval_ms=30)
    scheduler.flushed = True

    scheduler.on_enqueue(1)
    assert scheduler.cancel() is True
    assert scheduler.cancel() is False

    time.sleep(0.1)
    assert flush.calls == 0


def test_zero_interval_disables_timer():
    scheduler = FlushScheduler(FlushCounter(), flush_at=20, flush_interval_ms=0)
    assert scheduler.arm() is False
    assert not scheduler.is_armed
