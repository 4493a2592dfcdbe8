"""Per-interface throughput from cumulative byte counters.

psutil exposes per-NIC counters that only grow (until the interface is reset
or the counters wrap). The reader keeps the previous sample and turns two
consecutive samples into bytes per second.

Example:
    >>> reader = LinkStatsReader()
    >>> reader.read_throughput("en0")   # first call only records a baseline
    Throughput(in_bytes_per_sec=0.0, out_bytes_per_sec=0.0)
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Dict, NamedTuple, Optional

import psutil

from config import THRESHOLDS, get_logger

logger = get_logger(__name__)


class Throughput(NamedTuple):
    """Rates over the last sampling interval, in bytes per second."""
    in_bytes_per_sec: float
    out_bytes_per_sec: float


@dataclass
class _Baseline:
    interface: str
    bytes_recv: int
    bytes_sent: int
    timestamp: float


def _psutil_counters() -> Dict[str, object]:
    return psutil.net_io_counters(pernic=True)


class LinkStatsReader:
    """Turns cumulative per-interface counters into rates.

    Args:
        counters: Callable returning a mapping of interface name to an object
            with bytes_recv/bytes_sent. Defaults to psutil.
        clock: Monotonic clock in seconds.
    """

    def __init__(
        self,
        counters: Optional[Callable[[], Dict[str, object]]] = None,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        self._counters = counters or _psutil_counters
        self._clock = clock or time.monotonic
        self._baseline: Optional[_Baseline] = None

    def _read_counters(self, interface: str) -> Optional[tuple]:
        try:
            per_nic = self._counters()
        except (OSError, RuntimeError) as e:
            logger.warning(f"Could not read interface counters: {e}")
            return None
        entry = per_nic.get(interface) if per_nic else None
        if entry is None:
            return None
        return entry.bytes_recv, entry.bytes_sent

    def read_throughput(self, interface: str) -> Optional[Throughput]:
        """Return rates since the previous call for the same interface.

        Returns:
            Throughput(0, 0) on the first call for an interface or after a
            counter reset; None when the interface has no counters or no
            time has elapsed since the previous sample.
        """
        sample = self._read_counters(interface)
        if sample is None:
            logger.debug(f"No counters for interface {interface}")
            self._baseline = None
            return None

        recv, sent = sample
        now = self._clock()
        previous = self._baseline

        if previous is None or previous.interface != interface:
            if previous is not None:
                logger.info(f"Primary interface changed: {previous.interface} -> {interface}")
            self._baseline = _Baseline(interface, recv, sent, now)
            return Throughput(0.0, 0.0)

        elapsed = now - previous.timestamp
        if elapsed <= THRESHOLDS.MIN_SAMPLE_ELAPSED_SECONDS:
            return None

        if recv < previous.bytes_recv or sent < previous.bytes_sent:
            logger.debug(f"Counter reset on {interface}, re-baselining")
            self._baseline = _Baseline(interface, recv, sent, now)
            return Throughput(0.0, 0.0)

        self._baseline = _Baseline(interface, recv, sent, now)
        return Throughput(
            in_bytes_per_sec=(recv - previous.bytes_recv) / elapsed,
            out_bytes_per_sec=(sent - previous.bytes_sent) / elapsed,
        )

    def reset(self) -> None:
        """Drop the baseline; the next read starts over."""
        self._baseline = None


__all__ = ["LinkStatsReader", "Throughput"]
