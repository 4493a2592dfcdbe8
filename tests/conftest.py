"""Pytest configuration and shared fixtures.

This module provides:
- Common test fixtures for data directories and literal utility output
- Pytest markers for test categorization (unit, integration, slow)
- Fakes wired into an EngineDependencies container
"""
import tempfile
from pathlib import Path
from typing import Generator
from unittest.mock import MagicMock

import pytest

from tests.mocks import (
    FakeInterfaceResolver,
    FakeLinkStatsReader,
    FakeProbeRunner,
    FakeWirelessReader,
    ImmediateExecutor,
    ManualTimer,
)


# =============================================================================
# Pytest Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test categorization."""
    config.addinivalue_line("markers", "unit: mark test as a unit test (fast, isolated)")
    config.addinivalue_line("markers", "integration: mark test as an integration test")
    config.addinivalue_line("markers", "slow: mark test as slow running")
    config.addinivalue_line("markers", "macos_only: mark test as requiring macOS")


# =============================================================================
# Directory and Path Fixtures
# =============================================================================


@pytest.fixture
def temp_data_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test data."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


# =============================================================================
# Literal Utility Output
# =============================================================================


@pytest.fixture
def ping_output_ok() -> str:
    return (
        "PING 1.1.1.1 (1.1.1.1): 56 data bytes\n"
        "64 bytes from 1.1.1.1: icmp_seq=0 ttl=57 time=11.208 ms\n"
        "64 bytes from 1.1.1.1: icmp_seq=1 ttl=57 time=12.514 ms\n"
        "64 bytes from 1.1.1.1: icmp_seq=2 ttl=57 time=13.031 ms\n"
        "64 bytes from 1.1.1.1: icmp_seq=3 ttl=57 time=12.900 ms\n"
        "64 bytes from 1.1.1.1: icmp_seq=4 ttl=57 time=12.120 ms\n"
        "\n"
        "--- 1.1.1.1 ping statistics ---\n"
        "5 packets transmitted, 5 packets received, 0.0% packet loss\n"
        "round-trip min/avg/max/stddev = 11.208/12.355/13.031/0.642 ms\n"
    )


@pytest.fixture
def ping_output_total_loss() -> str:
    return (
        "PING 10.0.0.1 (10.0.0.1): 56 data bytes\n"
        "Request timeout for icmp_seq 0\n"
        "Request timeout for icmp_seq 1\n"
        "Request timeout for icmp_seq 2\n"
        "Request timeout for icmp_seq 3\n"
        "\n"
        "--- 10.0.0.1 ping statistics ---\n"
        "5 packets transmitted, 0 packets received, 100.0% packet loss\n"
    )


@pytest.fixture
def route_output() -> str:
    return (
        "   route to: default\n"
        "destination: default\n"
        "       mask: default\n"
        "    gateway: 192.168.1.1\n"
        "  interface: en0\n"
        "      flags: <UP,GATEWAY,DONE,STATIC,PRCLONING,GLOBAL>\n"
    )


@pytest.fixture
def scutil_dns_output() -> str:
    return (
        "DNS configuration\n"
        "\n"
        "resolver #1\n"
        "  search domain[0] : lan\n"
        "  nameserver[0] : 192.168.1.1\n"
        "  nameserver[1] : 1.1.1.1\n"
        "  if_index : 6 (en0)\n"
        "  flags    : Request A records\n"
        "\n"
        "resolver #2\n"
        "  domain   : local\n"
        "  options  : mdns\n"
    )


@pytest.fixture
def network_quality_output() -> str:
    return (
        "==== SUMMARY ====\n"
        "Uplink capacity: 21.634 Mbps\n"
        "Downlink capacity: 312.108 Mbps\n"
        "Responsiveness: High (2014 RPM)\n"
        "Idle Latency: 18.250 milliseconds\n"
    )


# =============================================================================
# Engine Fixtures
# =============================================================================


@pytest.fixture
def mock_event_bus() -> MagicMock:
    """Create a mock event bus for testing event-driven components."""
    mock_bus = MagicMock()
    mock_bus.publish = MagicMock()
    mock_bus.subscribe = MagicMock()
    mock_bus.unsubscribe = MagicMock()
    return mock_bus


@pytest.fixture
def engine_deps(temp_data_dir: Path):
    """EngineDependencies with fakes for everything that touches the OS."""
    from app.dependencies import EngineDependencies
    from app.events import EventBus
    from monitor.jitter import JitterEstimator
    from storage.json_store import TotalsStore
    from storage.settings import SettingsManager

    return EngineDependencies(
        interface_resolver=FakeInterfaceResolver(),
        link_reader=FakeLinkStatsReader(),
        wireless_reader=FakeWirelessReader(),
        probe_runner=FakeProbeRunner(),
        jitter=JitterEstimator(),
        speed_test=MagicMock(),
        totals_store=TotalsStore(data_dir=temp_data_dir, clock=lambda: 1_700_000_000.0),
        settings=SettingsManager(temp_data_dir),
        event_bus=EventBus(async_mode=False),
    )


@pytest.fixture
def scheduler(engine_deps):
    """A scheduler driven by hand: manual timer, probes run inline."""
    from app.scheduler import SamplingScheduler

    sched = SamplingScheduler(
        engine_deps,
        interval=1.0,
        executor=ImmediateExecutor(),
        timer_factory=ManualTimer,
        clock=lambda: 1_800_000_000.0,
    )
    yield sched
    sched.shutdown()
