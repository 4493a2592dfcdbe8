"""Centralized constants and configuration for Net Bar.

This module contains the magic numbers, command paths and file names used by
the sampling engine. Centralizing them keeps the probe and parser code free of
literals and makes the timing behaviour easy to tune.

Usage:
    from config.constants import INTERVALS, THRESHOLDS, NETWORK

    tick = INTERVALS.TICK_SECONDS
    window = THRESHOLDS.JITTER_WINDOW_SIZE
"""
from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class Intervals:
    """Time intervals for the sampling engine (in seconds).

    All interval values are in seconds unless otherwise specified.
    """
    # Sampling loop (fixed 1 Hz by default, user-selectable)
    TICK_SECONDS: float = 1.0
    MIN_TICK_SECONDS: float = 0.25
    MAX_TICK_SECONDS: float = 60.0

    # Data persistence
    SAVE_INTERVAL_SECONDS: float = 30.0

    # Subprocess timeouts
    SUBPROCESS_TIMEOUT_SECONDS: float = 5.0
    PING_PROCESS_TIMEOUT_SECONDS: float = 10.0   # 5 packets at 1s + overhead
    TCP_CONNECT_TIMEOUT_SECONDS: int = 1          # nc -G
    TCP_ATTEMPT_DELAY_SECONDS: float = 0.1

    # Discovery caches (route/scutil change rarely)
    GATEWAY_CACHE_SECONDS: float = 5.0
    DNS_CONFIG_CACHE_SECONDS: float = 10.0

    # Bandwidth test
    SPEED_TEST_COUNTDOWN_SECONDS: int = 50
    SPEED_TEST_TICK_SECONDS: float = 1.0


@dataclass(frozen=True)
class Thresholds:
    """Sizes of the rolling windows kept by the engine."""
    # One minute of samples at 1 Hz
    HISTORY_SIZE: int = 60

    # Jitter sliding window per probe target
    JITTER_WINDOW_SIZE: int = 10

    # Minimum elapsed time for a throughput delta
    MIN_SAMPLE_ELAPSED_SECONDS: float = 0.0


@dataclass(frozen=True)
class NetworkConfig:
    """Probe targets and probe shape."""
    # Internet reachability target
    INTERNET_PROBE_HOST: str = "1.1.1.1"

    # Well-known public resolvers (TCP fallback probes the DNS port)
    PUBLIC_DNS_RESOLVERS: Tuple[str, ...] = ("1.1.1.1", "8.8.8.8")

    # ICMP probe
    PING_COUNT: int = 5
    PING_TIMEOUT_MS: int = 1000

    # TCP-connect fallback
    TCP_PROBE_ATTEMPTS: int = 5
    DNS_PORT: int = 53
    HTTP_PORT: int = 80

    # Worker pool for background probes
    PROBE_WORKERS: int = 32

    # Wireless
    WIFI_PLACEHOLDER_NAME: str = "Wi-Fi"
    HIGHEST_2GHZ_CHANNEL: int = 14


@dataclass(frozen=True)
class Commands:
    """Absolute paths of the macOS utilities the engine orchestrates."""
    PING: str = "/sbin/ping"
    PING6: str = "/sbin/ping6"
    ROUTE: str = "/sbin/route"
    SCUTIL: str = "/usr/sbin/scutil"
    NC: str = "/usr/bin/nc"
    NETWORK_QUALITY: str = "/usr/bin/networkQuality"


@dataclass(frozen=True)
class StorageConfig:
    """Storage and file-related configuration."""
    # Directory and file names
    DATA_DIR_NAME: str = ".netbar"
    TOTALS_FILE: str = "traffic_totals.json"
    SETTINGS_FILE: str = "settings.json"
    LOG_FILE: str = "netbar.log"

    # Log rotation
    LOG_MAX_BYTES: int = 2_000_000  # 2MB
    LOG_BACKUP_COUNT: int = 3


# Global instances - import these
INTERVALS = Intervals()
THRESHOLDS = Thresholds()
NETWORK = NetworkConfig()
COMMANDS = Commands()
STORAGE = StorageConfig()


# Allowed commands for subprocess safety
ALLOWED_SUBPROCESS_COMMANDS = frozenset({
    'ping',
    'ping6',
    'route',
    'scutil',
    'nc',
    'networkQuality',
})
