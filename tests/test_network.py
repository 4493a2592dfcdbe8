"""Tests for monitor/network.py and monitor/interface.py"""

from unittest.mock import patch

import pytest

from config.exceptions import SubprocessError
from monitor.interface import InterfaceResolver
from monitor.network import LinkStatsReader, Throughput
from tests.mocks import FakeClock, FakeCounters, completed


class CounterSource:
    """Mutable per-NIC counters table."""

    def __init__(self, **interfaces):
        self.table = dict(interfaces)

    def __call__(self):
        return dict(self.table)


class TestLinkStatsReader:
    """Tests for the LinkStatsReader class."""

    @pytest.fixture
    def clock(self):
        return FakeClock()

    def test_first_read_is_baseline(self, clock):
        source = CounterSource(en0=FakeCounters(1000, 500))
        reader = LinkStatsReader(counters=source, clock=clock)
        assert reader.read_throughput("en0") == Throughput(0.0, 0.0)

    def test_rate_over_elapsed_time(self, clock):
        source = CounterSource(en0=FakeCounters(1000, 500))
        reader = LinkStatsReader(counters=source, clock=clock)
        reader.read_throughput("en0")

        source.table["en0"] = FakeCounters(1000 + 4096, 500 + 2048)
        clock.advance(2.0)
        result = reader.read_throughput("en0")

        assert result.in_bytes_per_sec == 2048.0
        assert result.out_bytes_per_sec == 1024.0

    def test_missing_interface_returns_none(self, clock):
        reader = LinkStatsReader(counters=CounterSource(en0=FakeCounters()), clock=clock)
        assert reader.read_throughput("en7") is None

    def test_zero_elapsed_returns_none(self, clock):
        source = CounterSource(en0=FakeCounters(1000, 500))
        reader = LinkStatsReader(counters=source, clock=clock)
        reader.read_throughput("en0")
        source.table["en0"] = FakeCounters(2000, 600)
        assert reader.read_throughput("en0") is None

        # The baseline survives, so the next read spans both deltas
        clock.advance(1.0)
        assert reader.read_throughput("en0") == Throughput(1000.0, 100.0)

    def test_counter_reset_rebaselines(self, clock):
        source = CounterSource(en0=FakeCounters(10_000, 10_000))
        reader = LinkStatsReader(counters=source, clock=clock)
        reader.read_throughput("en0")

        source.table["en0"] = FakeCounters(100, 100)
        clock.advance(1.0)
        assert reader.read_throughput("en0") == Throughput(0.0, 0.0)

        source.table["en0"] = FakeCounters(1124, 612)
        clock.advance(1.0)
        assert reader.read_throughput("en0") == Throughput(1024.0, 512.0)

    def test_interface_change_rebaselines(self, clock):
        source = CounterSource(en0=FakeCounters(1000, 1000), en1=FakeCounters(50_000, 50_000))
        reader = LinkStatsReader(counters=source, clock=clock)
        reader.read_throughput("en0")
        clock.advance(1.0)
        assert reader.read_throughput("en1") == Throughput(0.0, 0.0)

    def test_counter_read_error(self, clock):
        def broken():
            raise OSError("sysctl failed")

        reader = LinkStatsReader(counters=broken, clock=clock)
        assert reader.read_throughput("en0") is None


class TestInterfaceResolver:
    """Tests for the InterfaceResolver class."""

    def test_primary_from_dynamic_store(self):
        resolver = InterfaceResolver()
        with patch("monitor.interface._primary_from_dynamic_store", return_value="en0"):
            assert resolver.resolve_primary_interface() == "en0"

    def test_offline_returns_none(self):
        resolver = InterfaceResolver()
        with patch("monitor.interface._primary_from_dynamic_store", return_value=None):
            assert resolver.resolve_primary_interface() is None

    def test_falls_back_to_psutil_without_bindings(self):
        resolver = InterfaceResolver()
        with patch("monitor.interface._primary_from_dynamic_store", side_effect=ImportError), \
             patch("monitor.interface._active_interfaces", return_value=["utun3", "en1", "en0"]):
            assert resolver.resolve_primary_interface() == "en0"
        assert resolver._dynamic_store_available is False

    def test_fallback_with_no_active_interfaces(self):
        resolver = InterfaceResolver()
        resolver._dynamic_store_available = False
        with patch("monitor.interface._active_interfaces", return_value=[]):
            assert resolver.resolve_primary_interface() is None

    def test_dynamic_store_error_returns_none(self):
        resolver = InterfaceResolver()
        with patch("monitor.interface._primary_from_dynamic_store", side_effect=ValueError("bad")):
            assert resolver.resolve_primary_interface() is None
        assert resolver._dynamic_store_available is True

    def test_default_gateway(self, route_output):
        resolver = InterfaceResolver()
        with patch("monitor.interface.cached_run", return_value=completed(route_output)) as mock_run:
            assert resolver.get_default_gateway() == "192.168.1.1"
        cmd = mock_run.call_args.args[0]
        assert cmd[1:] == ["-n", "get", "default"]

    def test_gateway_command_failure(self):
        resolver = InterfaceResolver()
        with patch("monitor.interface.cached_run", return_value=completed("", returncode=1)):
            assert resolver.get_default_gateway() is None

    def test_gateway_timeout(self):
        resolver = InterfaceResolver()
        with patch("monitor.interface.cached_run", side_effect=SubprocessError("timed out")):
            assert resolver.get_default_gateway() is None

    def test_dns_server(self, scutil_dns_output):
        resolver = InterfaceResolver()
        with patch("monitor.interface.cached_run", return_value=completed(scutil_dns_output)):
            assert resolver.get_dns_server() == "192.168.1.1"

    def test_dns_server_missing(self):
        resolver = InterfaceResolver()
        with patch("monitor.interface.cached_run", side_effect=SubprocessError("not found")):
            assert resolver.get_dns_server() is None
