"""Event queuing module for the Sequence client."""

from .event_queue import Callback, EventQueue, QueueItem, noop

__all__ = ["EventQueue", "QueueItem", "Callback", "noop"]
