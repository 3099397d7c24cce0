"""Sequence client: validates, queues, batches and sends events.

Event flow:
track/identify/alert → Validator → PayloadBuilder → EventQueue → FlushScheduler → HTTPSender → API

Queue mutation happens on the caller's thread under the queue lock. Sends run
on a worker pool, so ``track`` and ``flush`` never block on the network.
"""

from __future__ import annotations

import threading
from collections.abc import Mapping
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Any, Dict, List, Optional, Union

from loguru import logger
from pydantic import ValidationError as PydanticValidationError

from .batcher import FlushScheduler
from .config import ClientConfig
from .core.events import EventType
from .core.payload import PayloadBuilder, utcnow
from .core.validation import validate_event
from .errors import ConfigurationError, TransportError, ValidationError
from .queuer import Callback, EventQueue, QueueItem, noop
from .sender import HTTPSender, SenderConfig, TransportResponse

Event = Mapping[str, Any]


def _invoke_callback(callback: Callback, error: Optional[BaseException], data: Any) -> None:
    """Run a user callback, logging anything it raises."""
    try:
        callback(error, data)
    except Exception as e:
        logger.error(f"Error in callback {callback!r}: {e}")


def _resolve_config(config: Union[ClientConfig, Mapping[str, Any], None], options: Dict[str, Any]) -> ClientConfig:
    if isinstance(config, ClientConfig) and not options:
        return config

    if isinstance(config, ClientConfig):
        values = config.model_dump()
    else:
        values = dict(config or {})
    values.update(options)

    try:
        return ClientConfig(**values)
    except PydanticValidationError as e:
        raise ConfigurationError(f"Invalid client configuration: {e}") from e


class Client:
    """Client for the Sequence ingestion API.

    Example:
        client = Client("api-key", flush_at=50)
        client.track({"event": "Signed Up", "userId": "u-1"})
        client.flush().result()
    """

    def __init__(
        self,
        api_key: str,
        config: Union[ClientConfig, Mapping[str, Any], None] = None,
        **options: Any,
    ):
        """Initialize the client.

        Args:
            api_key: Project API key, sent as a bearer token
            config: Client configuration, or a mapping of its fields
            **options: Individual configuration fields, override ``config``

        Raises:
            ConfigurationError: if the API key is missing or an option is invalid
        """
        if not api_key:
            raise ConfigurationError("You must pass your Sequence project's api key.")

        self.api_key = api_key
        self.config = _resolve_config(config, options)

        self.queue = EventQueue()
        self.payload_builder = PayloadBuilder()
        self.sender = HTTPSender(SenderConfig(api_key=api_key, **self.config.get_sender_config()))
        self.scheduler = FlushScheduler(
            flush=self._scheduled_flush,
            flush_at=self.config.flush_at,
            flush_interval_ms=self.config.flush_interval_ms,
        )

        self._executor = ThreadPoolExecutor(max_workers=self.config.max_workers, thread_name_prefix="sequence-send")
        self._in_flight: set[Future] = set()
        self._in_flight_lock = threading.Lock()

        logger.info(f"Initialized Sequence client - host: {self.host}, flush_at: {self.flush_at}, flush_interval_ms: {self.flush_interval_ms}, enabled: {self.enable}")

    @property
    def enable(self) -> bool:
        return self.config.enable

    @property
    def host(self) -> str:
        return self.config.host

    @property
    def flush_at(self) -> int:
        return self.config.flush_at

    @property
    def flush_interval_ms(self) -> Optional[int]:
        return self.config.flush_interval_ms

    def track(self, event: Event, callback: Optional[Callback] = None) -> Client:
        """Record an action performed by a user.

        Args:
            event: Mapping with at least ``event`` and ``userId``
            callback: Called with ``(error, response)`` once the event is sent

        Returns:
            The client, for chaining

        Raises:
            ValidationError: if the event is malformed
        """
        validate_event(event, EventType.TRACK)
        self.enqueue(EventType.TRACK, event, callback)
        return self

    def identify(self, event: Event, callback: Optional[Callback] = None) -> Client:
        """Record traits of a user.

        Args:
            event: Mapping with at least ``userId``
            callback: Called with ``(error, response)`` once the event is sent

        Returns:
            The client, for chaining
        """
        validate_event(event, EventType.IDENTIFY)
        self.enqueue(EventType.IDENTIFY, event, callback)
        return self

    def alert(self, distinct_id: Union[str, int], event: Event, callback: Optional[Callback] = None) -> Client:
        """Send an alert (legacy call shape).

        Args:
            distinct_id: Identifier of the user or entity the alert is about
            event: Mapping with at least ``name`` and ``message``
            callback: Called with ``(error, response)`` once the event is sent

        Returns:
            The client, for chaining
        """
        if distinct_id is None or distinct_id == "":
            raise ValidationError('You must pass a "distinctId".')
        validate_event(event, EventType.ALERT)
        self.enqueue(EventType.ALERT, event, callback, distinct_id=distinct_id)
        return self

    def enqueue(
        self,
        event_type: Union[EventType, str],
        event: Event,
        callback: Optional[Callback] = None,
        distinct_id: Optional[Union[str, int]] = None,
    ) -> None:
        """Add an event to the queue and check whether it should be flushed.

        The event must already be validated.
        """
        callback = callback or noop

        if not self.enable:
            self._submit(_invoke_callback, callback, None, None)
            return

        payload = self.payload_builder.build(event_type, event, distinct_id=distinct_id)
        size = self.queue.push(QueueItem(payload=payload, callback=callback))
        self.scheduler.on_enqueue(size)

    def flush(self, callback: Optional[Callback] = None) -> Future:
        """Send up to ``flush_at`` queued events.

        With a callback, the outcome is reported as ``callback(error, response)``
        and the returned future always resolves, to the response or None.
        Without one, ``future.result()`` returns the response or raises the
        transport error.

        Args:
            callback: Optional completion callback

        Returns:
            Future of the send
        """
        future = self._flush()
        if callback is None:
            return future

        adapted: Future = Future()

        def _done(f: Future) -> None:
            error = f.exception()
            response = f.result() if error is None else None
            _invoke_callback(callback, error, response)
            adapted.set_result(response)

        future.add_done_callback(_done)
        return adapted

    def shutdown(self, timeout: Optional[float] = None) -> bool:
        """Flush everything still queued and wait for in-flight sends.

        Args:
            timeout: Maximum seconds to wait, None to wait until done

        Returns:
            True if every send finished within the timeout
        """
        logger.info("Shutting down Sequence client...")

        futures: List[Future] = []
        while not self.queue.is_empty():
            futures.append(self._flush())
        self.scheduler.cancel()

        with self._in_flight_lock:
            futures.extend(self._in_flight)

        done, not_done = wait(futures, timeout=timeout)
        self._executor.shutdown(wait=not not_done)

        if not_done:
            logger.warning(f"{len(not_done)} sends still in flight after shutdown timeout")
        else:
            logger.info(f"Sequence client shut down. Stats - {self.sender.get_stats()}")

        return not not_done

    def get_stats(self) -> Dict[str, Any]:
        """Get queue, scheduler and sender statistics."""
        with self._in_flight_lock:
            in_flight = len(self._in_flight)

        return {
            "enabled": self.enable,
            "in_flight": in_flight,
            "queue": self.queue.get_stats(),
            "scheduler": self.scheduler.get_stats(),
            "sender": self.sender.get_stats(),
        }

    def __enter__(self) -> Client:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()

    def _scheduled_flush(self) -> None:
        self.flush()

    def _flush(self) -> Future:
        """Take one batch off the queue and submit it for sending."""
        future: Future = Future()

        if not self.enable:
            future.set_result(None)
            return future

        self.scheduler.cancel()

        items = self.queue.take(self.flush_at)
        if not items:
            future.set_result(None)
            return future

        # Leftovers wait for the interval trigger.
        if not self.queue.is_empty():
            self.scheduler.arm()

        sent_at = utcnow()
        for item in items:
            item.payload["sentAt"] = sent_at

        body = {"batch": [item.payload for item in items], "sentAt": sent_at}

        with self._in_flight_lock:
            self._in_flight.add(future)
        future.add_done_callback(self._discard_in_flight)

        logger.debug(f"Flushing batch of {len(items)} events")
        self._submit(self._send, items, body, future)
        return future

    def _send(self, items: List[QueueItem], body: Dict[str, Any], future: Future) -> None:
        """Send one batch and resolve every callback exactly once."""
        error: Optional[BaseException] = None
        response: Optional[TransportResponse] = None

        try:
            response = self.sender.send_batch(body)
        except TransportError as e:
            error = e
        except Exception as e:
            logger.error(f"Unexpected error sending batch: {e}")
            error = e

        for item in items:
            _invoke_callback(item.callback, error, response)

        if error is not None:
            future.set_exception(error)
        else:
            future.set_result(response)

    def _submit(self, fn, *args) -> None:
        try:
            self._executor.submit(fn, *args)
        except RuntimeError:
            # Pool already shut down; run on the caller's thread.
            fn(*args)

    def _discard_in_flight(self, future: Future) -> None:
        with self._in_flight_lock:
            self._in_flight.discard(future)
