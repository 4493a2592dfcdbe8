"""Per-target latency jitter.

Jitter is the mean absolute difference between consecutive latency samples
over a sliding window (10 samples by default). Each probe target keeps an
independent window.
"""

from __future__ import annotations

import threading
from collections import deque
from typing import Deque, Dict, Optional

from config import THRESHOLDS


class JitterEstimator:
    """Tracks sliding latency windows keyed by target name.

    Example:
        >>> est = JitterEstimator()
        >>> est.observe("router", 0.0)
        0.0
        >>> est.observe("router", 100.0)
        100.0
    """

    def __init__(self, window_size: int = THRESHOLDS.JITTER_WINDOW_SIZE):
        if window_size < 2:
            raise ValueError("window_size must be at least 2")
        self.window_size = window_size
        self._windows: Dict[str, Deque[float]] = {}
        self._lock = threading.Lock()

    @staticmethod
    def _mean_abs_diff(window: Deque[float]) -> float:
        if len(window) < 2:
            return 0.0
        samples = list(window)
        diffs = [abs(b - a) for a, b in zip(samples, samples[1:])]
        return sum(diffs) / len(diffs)

    def observe(self, target: str, latency_ms: float) -> float:
        """Append a latency sample and return the target's updated jitter."""
        with self._lock:
            window = self._windows.get(target)
            if window is None:
                window = deque(maxlen=self.window_size)
                self._windows[target] = window
            window.append(float(latency_ms))
            return self._mean_abs_diff(window)

    def jitter(self, target: str) -> float:
        with self._lock:
            window = self._windows.get(target)
            return self._mean_abs_diff(window) if window else 0.0

    def reset(self, target: Optional[str] = None) -> None:
        """Forget samples for one target, or for all targets."""
        with self._lock:
            if target is None:
                self._windows.clear()
            else:
                self._windows.pop(target, None)
