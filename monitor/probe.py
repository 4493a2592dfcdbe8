"""Latency and loss probing with an ICMP-then-TCP fallback chain.

ICMP is tried first with the system ping utility. Networks (and some hosts)
drop ICMP entirely, so a probe that sees 100% loss retries as a series of
TCP connects with nc and times those instead.

Example:
    >>> runner = ProbeRunner()
    >>> result = runner.probe("1.1.1.1")
    >>> print(f"{result.latency_ms:.1f}ms, {result.loss_percent:.0f}% loss via {result.method}")
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, List, Optional

from config import COMMANDS, INTERVALS, NETWORK, get_logger
from config.exceptions import SubprocessError
from config.subprocess_cache import safe_run
from monitor.parsers import parse_ping_output

logger = get_logger(__name__)

METHOD_ICMP = "icmp"
METHOD_TCP = "tcp"
METHOD_NONE = "none"


@dataclass(frozen=True)
class ProbeResult:
    """Outcome of probing one host.

    Attributes:
        latency_ms: Average round-trip (or connect) time; 0 when nothing answered.
        loss_percent: Share of attempts without a reply, 0..100.
        method: Which technique produced the numbers.
    """
    latency_ms: float
    loss_percent: float
    method: str = METHOD_NONE

    @property
    def reachable(self) -> bool:
        return self.loss_percent < 100.0


UNREACHABLE = ProbeResult(0.0, 100.0, METHOD_NONE)


class ProbeRunner:
    """Synchronous, thread-safe prober. Callers run it on a worker pool.

    Args:
        run: Callable with safe_run's signature.
        sleep: Pause between TCP attempts.
        clock: Monotonic clock used to time TCP connects.
    """

    def __init__(
        self,
        run: Optional[Callable[..., object]] = None,
        sleep: Optional[Callable[[float], None]] = None,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        self._run = run or safe_run
        self._sleep = sleep or time.sleep
        self._clock = clock or time.perf_counter

    @staticmethod
    def ping_command(host: str) -> List[str]:
        binary = COMMANDS.PING6 if ":" in host else COMMANDS.PING
        return [
            binary,
            '-c', str(NETWORK.PING_COUNT),
            '-W', str(NETWORK.PING_TIMEOUT_MS),
            host,
        ]

    @staticmethod
    def tcp_port_for(host: str) -> int:
        if host in NETWORK.PUBLIC_DNS_RESOLVERS:
            return NETWORK.DNS_PORT
        return NETWORK.HTTP_PORT

    def probe(self, host: str) -> ProbeResult:
        """Measure latency and loss to host."""
        host = (host or "").strip()
        if not host:
            return UNREACHABLE

        icmp = self._probe_icmp(host)
        if icmp is not None:
            return icmp

        return self._probe_tcp(host)

    def _probe_icmp(self, host: str) -> Optional[ProbeResult]:
        """Return the ICMP result, or None when the TCP fallback should run."""
        try:
            result = self._run(
                self.ping_command(host),
                timeout=INTERVALS.PING_PROCESS_TIMEOUT_SECONDS,
            )
        except SubprocessError as e:
            logger.debug(f"ping {host} could not run: {e}")
            return None

        output = (result.stdout or "") + (result.stderr or "")
        report = parse_ping_output(output)

        if report.loss_percent >= 100.0:
            return None

        latency = report.latency_ms
        return ProbeResult(latency if latency is not None else 0.0, report.loss_percent, METHOD_ICMP)

    def _probe_tcp(self, host: str) -> ProbeResult:
        port = self.tcp_port_for(host)
        cmd = [
            COMMANDS.NC, '-z', '-G', str(INTERVALS.TCP_CONNECT_TIMEOUT_SECONDS),
            host, str(port),
        ]
        attempts = NETWORK.TCP_PROBE_ATTEMPTS
        successes = 0
        total_ms = 0.0

        for attempt in range(attempts):
            start = self._clock()
            try:
                result = self._run(cmd, timeout=INTERVALS.SUBPROCESS_TIMEOUT_SECONDS)
                if result.returncode == 0:
                    total_ms += (self._clock() - start) * 1000.0
                    successes += 1
            except SubprocessError as e:
                logger.debug(f"nc {host}:{port} attempt {attempt + 1} failed: {e}")

            if attempt < attempts - 1:
                self._sleep(INTERVALS.TCP_ATTEMPT_DELAY_SECONDS)

        if successes == 0:
            logger.debug(f"{host} unreachable over ICMP and TCP/{port}")
            return ProbeResult(0.0, 100.0, METHOD_TCP)

        loss = (attempts - successes) / attempts * 100.0
        return ProbeResult(total_ms / successes, loss, METHOD_TCP)


__all__ = ["ProbeRunner", "ProbeResult", "UNREACHABLE", "METHOD_ICMP", "METHOD_TCP", "METHOD_NONE"]
