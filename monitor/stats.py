"""Snapshot data model shared by the scheduler and the display layer."""

from __future__ import annotations

import copy
import time
from dataclasses import dataclass, field
from typing import Optional


@dataclass
class TargetStats:
    """Reachability of one probe target.

    Attributes:
        ping: Latency in milliseconds. 0 when loss is 100.
        jitter: Mean absolute difference of recent latencies.
        loss: Packet loss percentage in [0, 100].
    """
    ping: float = 0.0
    jitter: float = 0.0
    loss: float = 0.0

    @property
    def unreachable(self) -> bool:
        return self.loss >= 100.0


@dataclass
class NetworkStats:
    """Latest measured state of the network.

    The sampling scheduler is the only writer; readers receive deep copies
    through :meth:`copy`.
    """
    # Wireless identity
    ssid: str = ""
    bssid: str = ""
    band: str = ""
    channel: int = 0
    tx_rate: float = 0.0

    # Signal (dBm)
    rssi: int = 0
    noise: int = 0

    # Reachability
    internet: TargetStats = field(default_factory=TargetStats)
    router: TargetStats = field(default_factory=TargetStats)
    dns: TargetStats = field(default_factory=TargetStats)
    dns_server: str = ""

    # Link (bytes/s)
    interface: str = ""
    upload_speed: float = 0.0
    download_speed: float = 0.0

    @property
    def snr(self) -> int:
        """Signal-to-noise ratio in dB, 0 when there is no Wi-Fi reading."""
        if self.rssi == 0 or self.noise == 0:
            return 0
        return self.rssi - self.noise

    def target(self, name: str) -> TargetStats:
        """Return the TargetStats for 'internet', 'router' or 'dns'."""
        if name not in ("internet", "router", "dns"):
            raise KeyError(name)
        return getattr(self, name)

    def copy(self) -> "NetworkStats":
        return copy.deepcopy(self)


@dataclass
class TrafficTotals:
    """Cumulative traffic since launch_date (epoch seconds)."""
    total_upload: float = 0.0
    total_download: float = 0.0
    launch_date: float = 0.0

    def add(self, upload_bytes: float, download_bytes: float) -> None:
        # Totals never decrease between resets
        self.total_upload += max(0.0, upload_bytes)
        self.total_download += max(0.0, download_bytes)

    def reset(self, now: Optional[float] = None) -> None:
        self.total_upload = 0.0
        self.total_download = 0.0
        self.launch_date = time.time() if now is None else now

    def to_dict(self) -> dict:
        return {
            "total_upload": self.total_upload,
            "total_download": self.total_download,
            "launch_date": self.launch_date,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "TrafficTotals":
        def number(key: str) -> float:
            value = data.get(key, 0.0)
            if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
                return 0.0
            return float(value)

        return cls(
            total_upload=number("total_upload"),
            total_download=number("total_download"),
            launch_date=number("launch_date"),
        )

    def copy(self) -> "TrafficTotals":
        return TrafficTotals(self.total_upload, self.total_download, self.launch_date)
