"""Output grammars of the macOS utilities the engine orchestrates.

Each parser takes the raw text a utility printed and extracts only the
fields the engine needs. They never raise on unexpected input; missing
fields come back as None (or the documented default).

Sample inputs these parsers are written against:

    ping:
        5 packets transmitted, 5 packets received, 0.0% packet loss
        round-trip min/avg/max/stddev = 10.123/12.456/15.789/1.234 ms

    route -n get default:
           route to: default
            gateway: 192.168.1.1

    scutil --dns:
        resolver #1
          nameserver[0] : 192.168.1.1

    networkQuality:
        Uplink capacity: 21.634 Mbps
        Downlink capacity: 312.108 Mbps
        Responsiveness: High (2014 RPM)
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

_LOSS_RE = re.compile(r"(\d+(?:\.\d+)?)%\s+packet\s+loss", re.IGNORECASE)
_SUMMARY_RE = re.compile(r"=\s*[0-9.]+/([0-9.]+)/[0-9.]+/([0-9.]+)")
_SINGLE_TIME_RE = re.compile(r"time[=:]\s*([0-9.]+)")
_DECIMAL_RE = re.compile(r"\d+(?:\.\d+)?")
_RATE_UNIT_RE = re.compile(r"\d+(?:\.\d+)?\s*([kmg])bps", re.IGNORECASE)

_RATE_TO_MBPS = {"k": 1 / 1000.0, "m": 1.0, "g": 1000.0}


@dataclass
class PingReport:
    """Fields extracted from one ping run.

    Attributes:
        loss_percent: Aggregate packet loss, 100.0 when no summary line.
        avg_ms: Average round-trip time from the min/avg/max summary.
        single_ms: A per-reply time= value, only when some reply arrived.
    """
    loss_percent: float = 100.0
    avg_ms: Optional[float] = None
    single_ms: Optional[float] = None

    @property
    def latency_ms(self) -> Optional[float]:
        if self.avg_ms is not None:
            return self.avg_ms
        return self.single_ms


@dataclass
class NetworkQualityReport:
    """Fields extracted from networkQuality text output."""
    download_mbps: Optional[float] = None
    upload_mbps: Optional[float] = None
    responsiveness: Optional[str] = None

    @property
    def has_speeds(self) -> bool:
        return self.download_mbps is not None or self.upload_mbps is not None


def _to_float(text: str) -> Optional[float]:
    try:
        return float(text)
    except ValueError:
        return None


def parse_ping_output(output: str) -> PingReport:
    """Parse ping/ping6 output into loss and latency."""
    report = PingReport()
    if not output:
        return report

    loss_match = _LOSS_RE.search(output)
    if loss_match:
        loss = _to_float(loss_match.group(1))
        if loss is not None:
            report.loss_percent = loss

    summary_match = _SUMMARY_RE.search(output)
    if summary_match:
        report.avg_ms = _to_float(summary_match.group(1))

    if report.avg_ms is None and report.loss_percent < 100.0:
        time_match = _SINGLE_TIME_RE.search(output)
        if time_match:
            report.single_ms = _to_float(time_match.group(1))

    return report


def _value_after_colon(line: str) -> Optional[str]:
    _, sep, value = line.partition(":")
    if not sep:
        return None
    value = value.strip()
    return value or None


def parse_route_gateway(output: str) -> Optional[str]:
    """Return the default gateway from `route -n get default` output."""
    for line in (output or "").splitlines():
        if "gateway:" not in line:
            continue
        gateway = _value_after_colon(line)
        if gateway:
            return gateway
    return None


def parse_scutil_nameserver(output: str) -> Optional[str]:
    """Return the first nameserver[0] address from `scutil --dns` output."""
    for line in (output or "").splitlines():
        if not line.strip().startswith("nameserver[0]"):
            continue
        server = _value_after_colon(line)
        if server:
            return server
    return None


def _extract_mbps(line: str) -> Optional[float]:
    number = _DECIMAL_RE.search(line)
    if not number:
        return None
    value = float(number.group(0))

    unit = _RATE_UNIT_RE.search(line)
    if unit:
        value *= _RATE_TO_MBPS[unit.group(1).lower()]
    return value


def parse_network_quality(output: str) -> NetworkQualityReport:
    """Parse accumulated networkQuality output.

    Later lines win, so partial progress lines are superseded by the final
    summary once it has been printed.
    """
    report = NetworkQualityReport()
    for line in (output or "").splitlines():
        lower = line.lower()
        if "responsiveness" in lower:
            value = _value_after_colon(line)
            if value:
                report.responsiveness = value.split()[0]
        elif "downlink" in lower or "downstream" in lower:
            speed = _extract_mbps(line)
            if speed is not None:
                report.download_mbps = speed
        elif "uplink" in lower or "upstream" in lower:
            speed = _extract_mbps(line)
            if speed is not None:
                report.upload_mbps = speed
    return report
