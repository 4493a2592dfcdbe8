"""Fixed-capacity rolling history for chartable metrics."""

from __future__ import annotations

import threading
from collections import deque
from typing import Deque, Dict, Generic, Iterable, List, TypeVar

from config import THRESHOLDS

T = TypeVar("T")

# Metrics the scheduler keeps one buffer for
HISTORY_METRICS = (
    "signal",
    "noise",
    "ping",
    "router_ping",
    "dns_ping",
    "download",
    "upload",
    "total_traffic",
)


class HistoryBuffer(Generic[T]):
    """FIFO of the most recent samples; the oldest is evicted when full.

    Example:
        >>> buf = HistoryBuffer(capacity=3)
        >>> for v in [1, 2, 3, 4]:
        ...     buf.append(v)
        >>> buf.values()
        [2, 3, 4]
    """

    def __init__(self, capacity: int = THRESHOLDS.HISTORY_SIZE):
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self._items: Deque[T] = deque(maxlen=capacity)
        self._lock = threading.Lock()

    @property
    def capacity(self) -> int:
        return self._items.maxlen

    def append(self, value: T) -> None:
        with self._lock:
            self._items.append(value)

    def extend(self, values: Iterable[T]) -> None:
        with self._lock:
            self._items.extend(values)

    def values(self) -> List[T]:
        """Return a copy of the samples, oldest first."""
        with self._lock:
            return list(self._items)

    def clear(self) -> None:
        with self._lock:
            self._items.clear()

    def __len__(self) -> int:
        return len(self._items)


def create_histories(capacity: int = THRESHOLDS.HISTORY_SIZE) -> Dict[str, HistoryBuffer]:
    """Create one empty buffer per tracked metric."""
    return {name: HistoryBuffer(capacity) for name in HISTORY_METRICS}
