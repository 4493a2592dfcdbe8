"""Event bus between the sampling engine and the display layer.

The engine never calls into the UI. It publishes events; the menu-bar host
(or a test) subscribes to the ones it cares about. Published events carry
a plain dict payload, for example ``{"summary": "↑ 1.20 KB/s\\n↓ 3.4 MB/s"}``
for SUMMARY_UPDATED and ``{"stats": NetworkStats}`` for STATS_UPDATED.
"""
import queue
import threading
import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Callable, Dict, List, Optional

from config import get_logger

logger = get_logger(__name__)

WORKER_THREAD_NAME = "EventBus-Worker"


class EventType(Enum):
    # Sampling
    STATS_UPDATED = auto()
    SUMMARY_UPDATED = auto()
    PROBE_COMPLETED = auto()
    TOTALS_RESET = auto()
    SAMPLING_STARTED = auto()
    SAMPLING_STOPPED = auto()

    # Bandwidth test
    SPEED_TEST_UPDATED = auto()
    SPEED_TEST_FINISHED = auto()

    # Host
    SETTINGS_CHANGED = auto()
    APP_STOPPING = auto()


@dataclass
class Event:
    event_type: EventType
    data: Dict[str, Any] = field(default_factory=dict)
    created_at: float = field(default_factory=time.time)

    def __str__(self) -> str:
        return f"Event({self.event_type.name}, data={self.data})"


EventHandler = Callable[[Event], None]

# Queued after the last real event to stop the worker
_STOP = object()


class EventBus:
    """Thread-safe publish/subscribe between engine threads and the host.

    With ``async_mode`` (the default) publish() only enqueues; a daemon
    worker delivers events in publish order, so a slow handler never holds
    up a sampling tick. Without it, handlers run inline on the publishing
    thread.

    Handlers are snapshotted per event, so subscribing or unsubscribing
    from inside a handler takes effect from the next event.
    """

    def __init__(self, async_mode: bool = True):
        self._handlers: Dict[EventType, List[EventHandler]] = {}
        self._lock = threading.Lock()
        self._queue: Optional[queue.Queue] = None
        self._worker: Optional[threading.Thread] = None

        if async_mode:
            self._queue = queue.Queue()
            self._worker = threading.Thread(target=self._drain, name=WORKER_THREAD_NAME, daemon=True)
            self._worker.start()

    def _drain(self) -> None:
        while True:
            event = self._queue.get()
            if event is _STOP:
                return
            self._deliver(event)

    def _deliver(self, event: Event) -> None:
        with self._lock:
            handlers = tuple(self._handlers.get(event.event_type, ()))

        for handler in handlers:
            try:
                handler(event)
            except Exception:
                logger.exception(f"{event.event_type.name} handler {handler!r} failed")

    def subscribe(self, event_type: EventType, handler: EventHandler) -> None:
        with self._lock:
            self._handlers.setdefault(event_type, []).append(handler)

    def unsubscribe(self, event_type: EventType, handler: EventHandler) -> bool:
        """Remove ``handler``; False if it was not subscribed."""
        with self._lock:
            handlers = self._handlers.get(event_type, [])
            if handler not in handlers:
                return False
            handlers.remove(handler)
            return True

    def publish(self, event_type: EventType, data: Optional[Dict[str, Any]] = None) -> None:
        event = Event(event_type, dict(data or {}))
        if self._queue is None:
            self._deliver(event)
        else:
            self._queue.put(event)

    def clear_subscribers(self, event_type: Optional[EventType] = None) -> None:
        with self._lock:
            if event_type is None:
                self._handlers.clear()
            else:
                self._handlers.pop(event_type, None)

    def get_subscriber_count(self, event_type: EventType) -> int:
        with self._lock:
            return len(self._handlers.get(event_type, ()))

    def shutdown(self, timeout: float = 1.0) -> None:
        """Deliver what is already queued, then stop the worker."""
        worker, self._worker = self._worker, None
        if worker is None:
            return
        self._queue.put(_STOP)
        worker.join(timeout=timeout)
        if worker.is_alive():
            logger.warning("EventBus worker still busy after shutdown timeout")


_global_bus: Optional[EventBus] = None
_global_bus_lock = threading.Lock()


def get_event_bus() -> EventBus:
    """The process-wide asynchronous bus, created on first use."""
    global _global_bus
    with _global_bus_lock:
        if _global_bus is None:
            _global_bus = EventBus(async_mode=True)
        return _global_bus
