"""Network measurement components.

This package provides the readers, probes and formatters the sampling
scheduler is built from.

Modules:
    interface: Primary interface, gateway and DNS resolver discovery
    network: Per-interface throughput from psutil counters
    wireless: Wi-Fi signal and identity via CoreWLAN
    probe: ICMP latency/loss with a TCP-connect fallback
    jitter: Sliding-window jitter per probe target
    history: Fixed-capacity metric histories
    parsers: Output grammars of ping, route, scutil and networkQuality
    speed_test: networkQuality bandwidth test runner
    stats: Snapshot data model
    utils: Speed and byte formatting

Example:
    >>> from monitor import LinkStatsReader, ProbeRunner
    >>> reader = LinkStatsReader()
    >>> reader.read_throughput("en0")
    Throughput(in_bytes_per_sec=0.0, out_bytes_per_sec=0.0)
"""
from .history import HistoryBuffer
from .interface import InterfaceResolver
from .jitter import JitterEstimator
from .network import LinkStatsReader, Throughput
from .probe import ProbeResult, ProbeRunner
from .speed_test import BandwidthTestResult, BandwidthTestRunner
from .stats import NetworkStats, TargetStats, TrafficTotals
from .utils import DisplayMode, FixedUnit, UnitType, format_bytes, format_speed
from .wireless import LocationAuthorization, WifiSnapshot, WirelessStatsReader

__all__ = [
    # Readers
    "InterfaceResolver",
    "LinkStatsReader",
    "Throughput",
    "WirelessStatsReader",
    "WifiSnapshot",
    "LocationAuthorization",
    # Probing
    "ProbeRunner",
    "ProbeResult",
    "JitterEstimator",
    # State
    "HistoryBuffer",
    "NetworkStats",
    "TargetStats",
    "TrafficTotals",
    # Bandwidth test
    "BandwidthTestRunner",
    "BandwidthTestResult",
    # Formatting
    "DisplayMode",
    "UnitType",
    "FixedUnit",
    "format_speed",
    "format_bytes",
]
