"""Periodic driver for the sampling loop.

Usage:
    from app.timer import PeriodicTimer

    timer = PeriodicTimer(scheduler.tick, interval=1.0)
    timer.start()
    ...
    timer.stop()
"""

import threading
from typing import Callable, Optional

from config import get_logger

logger = get_logger(__name__)


class PeriodicTimer:
    """Calls a function every `interval` seconds on a daemon thread.

    The wait between calls is an Event wait, so stop() takes effect
    immediately instead of after the current sleep. Exceptions raised by
    the callback are logged and the timer keeps firing.

    Attributes:
        interval: Time between ticks in seconds.
    """

    def __init__(self, callback: Callable[[], None], interval: float, name: str = "PeriodicTimer"):
        if interval <= 0:
            raise ValueError("interval must be positive")
        self._callback = callback
        self._interval = interval
        self._name = name
        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()
        self._lock = threading.Lock()

    @property
    def interval(self) -> float:
        return self._interval

    @interval.setter
    def interval(self, value: float) -> None:
        if value <= 0:
            raise ValueError("interval must be positive")
        with self._lock:
            self._interval = value

    @property
    def is_running(self) -> bool:
        thread = self._thread
        return thread is not None and thread.is_alive() and not self._stop_event.is_set()

    def _loop(self, stop_event: threading.Event) -> None:
        while not stop_event.wait(self._interval):
            try:
                self._callback()
            except Exception as e:
                logger.error(f"{self._name} callback failed: {e}", exc_info=True)

    def start(self) -> None:
        """Start ticking. The first call happens one interval from now."""
        with self._lock:
            if self._thread is not None and not self._stop_event.is_set():
                return
            self._stop_event = threading.Event()
            self._thread = threading.Thread(
                target=self._loop, args=(self._stop_event,), daemon=True, name=self._name
            )
            self._thread.start()
        logger.debug(f"{self._name} started with interval {self._interval}s")

    def stop(self, join_timeout: Optional[float] = None) -> None:
        """Stop ticking. A callback already in progress is allowed to finish."""
        with self._lock:
            thread = self._thread
            self._stop_event.set()
            self._thread = None
        if (
            join_timeout is not None
            and thread is not None
            and thread is not threading.current_thread()
        ):
            thread.join(timeout=join_timeout)
        logger.debug(f"{self._name} stopped")
