"""Tests for the config module."""
import io
import logging
import subprocess
from unittest.mock import MagicMock, patch

import pytest

from config.constants import ALLOWED_SUBPROCESS_COMMANDS, COMMANDS, INTERVALS, NETWORK, STORAGE, THRESHOLDS
from config.exceptions import (
    ConfigurationError,
    NetBarError,
    StorageError,
    SubprocessError,
)
from config.logging_config import ConsoleFormatter, LogContext, get_logger, log_subprocess_call, setup_logging
from config.subprocess_cache import SubprocessCache, cached_run, get_subprocess_cache, safe_run


class TestConstants:
    """Tests for constants module."""

    def test_intervals_are_positive(self):
        assert INTERVALS.TICK_SECONDS > 0
        assert INTERVALS.SAVE_INTERVAL_SECONDS > 0
        assert INTERVALS.SUBPROCESS_TIMEOUT_SECONDS > 0
        assert INTERVALS.PING_PROCESS_TIMEOUT_SECONDS > INTERVALS.SUBPROCESS_TIMEOUT_SECONDS

    def test_window_sizes(self):
        assert THRESHOLDS.HISTORY_SIZE == 60
        assert THRESHOLDS.JITTER_WINDOW_SIZE == 10

    def test_probe_shape(self):
        assert NETWORK.INTERNET_PROBE_HOST == "1.1.1.1"
        assert NETWORK.PING_COUNT == 5
        assert NETWORK.TCP_PROBE_ATTEMPTS == 5

    def test_every_command_is_allowlisted(self):
        """Each utility path's basename must pass the allowlist."""
        for path in (COMMANDS.PING, COMMANDS.PING6, COMMANDS.ROUTE,
                     COMMANDS.SCUTIL, COMMANDS.NC, COMMANDS.NETWORK_QUALITY):
            assert path.rsplit('/', 1)[-1] in ALLOWED_SUBPROCESS_COMMANDS

    def test_storage_config_has_required_fields(self):
        assert STORAGE.DATA_DIR_NAME == ".netbar"
        assert STORAGE.TOTALS_FILE
        assert STORAGE.SETTINGS_FILE
        assert STORAGE.LOG_FILE


class TestExceptions:
    """Tests for custom exceptions."""

    def test_base_exception(self):
        exc = NetBarError("Test error", {"key": "value"})
        assert exc.message == "Test error"
        assert exc.details == {"key": "value"}
        assert "key" in str(exc)

    def test_exception_without_details(self):
        exc = StorageError("Storage failed")
        assert exc.details == {}
        assert str(exc) == "Storage failed"

    def test_hierarchy(self):
        for cls in (StorageError, ConfigurationError, SubprocessError):
            assert issubclass(cls, NetBarError)

    def test_subprocess_error_truncates_output(self):
        exc = SubprocessError("Command failed", command=["ping"], returncode=2, stdout="x" * 1000)
        assert exc.returncode == 2
        assert len(exc.details["stdout"]) == 500
        assert exc.details["command"] == ["ping"]


class TestLogging:
    """Tests for logging configuration."""

    def test_setup_logging_creates_log_file(self, temp_data_dir):
        logger = setup_logging(data_dir=temp_data_dir, console_output=False)
        logger.info("hello")
        assert (temp_data_dir / STORAGE.LOG_FILE).exists()
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()

    def test_get_logger_is_child_of_netbar(self):
        logger = get_logger("monitor.probe")
        assert logger.name == "netbar.monitor.probe"

    def test_get_logger_keeps_last_two_parts(self):
        assert get_logger("netbar.app.scheduler").name == "netbar.app.scheduler"
        assert get_logger("netbar").name == "netbar.netbar"

    def test_log_context_records_elapsed(self):
        with LogContext(get_logger("tests.context"), "operation") as ctx:
            pass
        assert ctx.elapsed_ms >= 0.0

    def test_console_formatter_plain_without_tty(self):
        stream = io.StringIO()
        formatter = ConsoleFormatter(stream)
        record = logging.LogRecord("netbar", logging.ERROR, __file__, 1, "bad", None, None)
        assert "\033[" not in formatter.format(record)
        assert "ERROR" in formatter.format(record)

    def test_failed_subprocess_logged_at_info(self):
        logger = MagicMock()
        log_subprocess_call(logger, ["/sbin/ping", "-c", "5", "1.1.1.1"], 2, 12.5, success=False)
        level, message = logger.log.call_args.args
        assert level == logging.INFO
        assert message == "ran /sbin/ping -c 5 ... rc=2 in 12.5ms"

    def test_log_context_does_not_swallow(self):
        logger = get_logger("tests.context")
        with pytest.raises(ValueError):
            with LogContext(logger, "operation", level=logging.INFO):
                raise ValueError("boom")


class TestSafeRun:
    """Tests for safe_run and the allowlist."""

    def test_rejects_unlisted_command(self):
        with pytest.raises(SubprocessError, match="allowlist"):
            safe_run(["/bin/rm", "-rf", "/tmp/x"])

    def test_rejects_empty_command(self):
        with pytest.raises(SubprocessError):
            safe_run([])

    def test_runs_allowlisted_by_basename(self):
        with patch("subprocess.run") as mock_run:
            mock_run.return_value = subprocess.CompletedProcess([], 0, "ok", "")
            result = safe_run(["/usr/sbin/scutil", "--dns"])
        assert result.stdout == "ok"
        kwargs = mock_run.call_args.kwargs
        assert kwargs["capture_output"] is True
        assert kwargs["timeout"] == INTERVALS.SUBPROCESS_TIMEOUT_SECONDS
        assert "shell" not in kwargs

    def test_timeout_becomes_subprocess_error(self):
        with patch("subprocess.run", side_effect=subprocess.TimeoutExpired("ping", 1)):
            with pytest.raises(SubprocessError, match="timed out"):
                safe_run(["/sbin/ping", "-c", "1", "1.1.1.1"], timeout=1)

    def test_missing_binary_becomes_subprocess_error(self):
        with patch("subprocess.run", side_effect=FileNotFoundError()):
            with pytest.raises(SubprocessError, match="not found"):
                safe_run(["/usr/bin/networkQuality"])


class TestSubprocessCache:
    """Tests for the TTL cache."""

    def test_caches_successful_results(self):
        cache = SubprocessCache(default_ttl=60)
        with patch("subprocess.run") as mock_run:
            mock_run.return_value = subprocess.CompletedProcess([], 0, "gw", "")
            cache.run(["route", "-n", "get", "default"])
            cache.run(["route", "-n", "get", "default"])
        assert mock_run.call_count == 1
        assert cache.get_stats()["hits"] == 1

    def test_does_not_cache_failures(self):
        cache = SubprocessCache(default_ttl=60)
        with patch("subprocess.run") as mock_run:
            mock_run.return_value = subprocess.CompletedProcess([], 1, "", "err")
            cache.run(["route", "-n", "get", "default"])
            cache.run(["route", "-n", "get", "default"])
        assert mock_run.call_count == 2

    def test_bypass_and_invalidate(self):
        cache = SubprocessCache(default_ttl=60)
        with patch("subprocess.run") as mock_run:
            mock_run.return_value = subprocess.CompletedProcess([], 0, "", "")
            cache.run(["scutil", "--dns"])
            cache.run(["scutil", "--dns"], bypass_cache=True)
            cache.invalidate(["scutil", "--dns"])
            cache.run(["scutil", "--dns"])
        assert mock_run.call_count == 3

    def test_cached_run_checks_allowlist(self):
        with pytest.raises(SubprocessError):
            cached_run(["/usr/bin/curl", "http://example.com"], ttl=5)

    def test_global_cache_is_shared(self):
        assert get_subprocess_cache() is get_subprocess_cache()
