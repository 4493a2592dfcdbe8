"""Sampling scheduler: the engine's coordinator.

Once per interval the scheduler resolves the primary interface, reads link
throughput and Wi-Fi signal, and hands three reachability probes (internet,
router, DNS resolver) to a worker pool. Every mutation of the shared
snapshot, histories and totals goes through one lock; probe completions
arrive on worker threads and take the same path.

Usage:
    from app.dependencies import create_dependencies
    from app.scheduler import SamplingScheduler

    scheduler = SamplingScheduler(create_dependencies())
    scheduler.start()
    ...
    print(scheduler.summary)
    scheduler.shutdown()
"""
import threading
import time
from concurrent.futures import Executor, ThreadPoolExecutor
from enum import Enum
from typing import Callable, Dict, List, Optional

from app.dependencies import EngineDependencies
from app.events import EventType
from app.summary import compose_summary
from app.timer import PeriodicTimer
from config import NETWORK, get_logger
from config.logging_config import log_exception
from config.exceptions import ConfigurationError, StorageError
from monitor.history import HistoryBuffer, create_histories
from monitor.probe import ProbeResult
from monitor.stats import NetworkStats, TrafficTotals

logger = get_logger(__name__)

# Probe target -> history metric
TARGET_HISTORY = {
    "internet": "ping",
    "router": "router_ping",
    "dns": "dns_ping",
}

INITIAL_SUMMARY = "..."


class SchedulerState(Enum):
    STOPPED = "stopped"
    RUNNING = "running"


class SamplingScheduler:
    """Drives periodic sampling and owns the engine's state.

    The scheduler exclusively owns its timer and worker pool. After
    shutdown() it cannot be restarted and late probe results are dropped.

    Args:
        deps: Engine collaborators.
        interval: Seconds between ticks. Defaults to the update_interval setting.
        executor: Worker pool for probes. Defaults to a ThreadPoolExecutor.
        timer_factory: Builds the periodic driver from (callback, interval).
        clock: Wall clock used for the totals launch date.
    """

    def __init__(
        self,
        deps: EngineDependencies,
        interval: Optional[float] = None,
        executor: Optional[Executor] = None,
        timer_factory: Optional[Callable[..., PeriodicTimer]] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.deps = deps
        self.event_bus = deps.event_bus
        self._clock = clock or time.time
        self._timer_factory = timer_factory or (
            lambda callback, seconds: PeriodicTimer(callback, seconds, name="SamplingTimer")
        )
        self._executor = executor or ThreadPoolExecutor(
            max_workers=NETWORK.PROBE_WORKERS, thread_name_prefix="probe"
        )

        if interval is None:
            interval = deps.settings.settings.update_interval
        self._validate_interval(interval)
        self._interval = float(interval)

        self._lock = threading.Lock()
        self._state = SchedulerState.STOPPED
        self._accepting = True
        self._timer: Optional[PeriodicTimer] = None

        self._stats = NetworkStats()
        self._totals: TrafficTotals = deps.totals_store.load()
        self._histories: Dict[str, HistoryBuffer] = create_histories()
        self._summary = INITIAL_SUMMARY

        logger.info(f"SamplingScheduler initialized (interval={self._interval}s)")

    # === Read-only surface ===

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def stats(self) -> NetworkStats:
        with self._lock:
            return self._stats.copy()

    @property
    def totals(self) -> TrafficTotals:
        with self._lock:
            return self._totals.copy()

    @property
    def summary(self) -> str:
        with self._lock:
            return self._summary

    def history(self, metric: str) -> List[float]:
        """Return a copy of one metric's history, oldest first."""
        try:
            buffer = self._histories[metric]
        except KeyError:
            raise ValueError(f"Unknown history metric: {metric}") from None
        return buffer.values()

    # === Lifecycle ===

    @staticmethod
    def _validate_interval(seconds: float) -> None:
        if isinstance(seconds, bool) or not isinstance(seconds, (int, float)) or seconds <= 0:
            raise ConfigurationError("Sampling interval must be positive", {"value": seconds})

    def start(self) -> None:
        """Begin periodic sampling."""
        with self._lock:
            if not self._accepting:
                logger.warning("start() called after shutdown; ignoring")
                return
            if self._state == SchedulerState.RUNNING:
                return
            self._state = SchedulerState.RUNNING
            self._timer = self._timer_factory(self.tick, self._interval)
            timer = self._timer
        timer.start()
        logger.info(f"Sampling started every {self._interval}s")
        self.event_bus.publish(EventType.SAMPLING_STARTED, {"interval": self._interval})

    def stop(self) -> None:
        """Stop periodic sampling. Probes already dispatched still complete."""
        with self._lock:
            if self._state == SchedulerState.STOPPED:
                return
            self._state = SchedulerState.STOPPED
            timer, self._timer = self._timer, None
        if timer is not None:
            timer.stop()
        logger.info("Sampling stopped")
        self.event_bus.publish(EventType.SAMPLING_STOPPED)

    def set_interval(self, seconds: float) -> None:
        """Change the tick interval, restarting the timer if running.

        Raises:
            ConfigurationError: If seconds is not positive.
        """
        self._validate_interval(seconds)
        was_running = self._state == SchedulerState.RUNNING
        if was_running:
            self.stop()
        self._interval = float(seconds)
        logger.info(f"Sampling interval set to {self._interval}s")
        if was_running:
            self.start()

    def shutdown(self) -> None:
        """Tear down: cancel the timer, release the pool, flush totals."""
        with self._lock:
            if not self._accepting:
                return
            self._accepting = False
            self._state = SchedulerState.STOPPED
            timer, self._timer = self._timer, None

        logger.info("Shutting down sampling scheduler...")
        if timer is not None:
            timer.stop()
        self._executor.shutdown(wait=False, cancel_futures=True)
        self.deps.speed_test.cancel()

        try:
            self.deps.totals_store.flush()
        except StorageError as e:
            logger.error(f"Could not flush totals on shutdown: {e}")

        self.event_bus.publish(EventType.APP_STOPPING)
        logger.info("Sampling scheduler shut down")

    # === Sampling ===

    def tick(self) -> None:
        """Take one sample. Never raises for measurement failures."""
        if not self._accepting or self._state != SchedulerState.RUNNING:
            return

        interface = self.deps.interface_resolver.resolve_primary_interface()
        if interface is None:
            logger.debug("No primary interface, skipping sample")
            return

        throughput = self.deps.link_reader.read_throughput(interface)
        wifi = self.deps.wireless_reader.read_wifi(interface)
        settings = self.deps.settings.settings

        with self._lock:
            if not self._accepting:
                return
            stats = self._stats
            stats.interface = interface

            if throughput is not None:
                stats.download_speed = throughput.in_bytes_per_sec
                stats.upload_speed = throughput.out_bytes_per_sec
                self._totals.add(
                    stats.upload_speed * self._interval,
                    stats.download_speed * self._interval,
                )
                self._histories["download"].append(stats.download_speed)
                self._histories["upload"].append(stats.upload_speed)
                self._histories["total_traffic"].append(
                    stats.download_speed + stats.upload_speed
                )
                self._persist_totals(self._totals)
            else:
                # Unreadable counters report a zero rate, not the last one
                stats.download_speed = 0.0
                stats.upload_speed = 0.0

            if wifi is not None:
                stats.ssid = wifi.ssid
                stats.bssid = wifi.bssid
                stats.rssi = wifi.rssi
                stats.noise = wifi.noise
                stats.tx_rate = wifi.tx_rate
                stats.channel = wifi.channel
                stats.band = wifi.band
                if wifi.associated:
                    self._histories["signal"].append(wifi.rssi)
                    self._histories["noise"].append(wifi.noise)

            self._summary = compose_summary(stats, settings)
            summary = self._summary
            snapshot = stats.copy()

        self._dispatch_probes()

        self.event_bus.publish(EventType.SUMMARY_UPDATED, {"summary": summary})
        self.event_bus.publish(EventType.STATS_UPDATED, {"stats": snapshot})

    def _persist_totals(self, totals: TrafficTotals, force: bool = False) -> None:
        try:
            self.deps.totals_store.save(totals, force=force)
        except StorageError as e:
            logger.warning(f"Could not persist traffic totals: {e}")

    # === Probes ===

    def _dispatch_probes(self) -> None:
        resolver = self.deps.interface_resolver
        self._submit(self._probe_target, "internet", NETWORK.INTERNET_PROBE_HOST)
        self._submit(self._probe_discovered, "router", resolver.get_default_gateway)
        self._submit(self._probe_discovered, "dns", resolver.get_dns_server)

    def _submit(self, fn: Callable, *args) -> None:
        if not self._accepting:
            return
        try:
            self._executor.submit(fn, *args)
        except RuntimeError:
            # Pool already shut down
            logger.debug(f"Probe {args[0]} not dispatched, pool is shut down")

    def _probe_discovered(self, target: str, discover: Callable[[], Optional[str]]) -> None:
        host = discover()
        if not host:
            logger.debug(f"No address for {target} probe, skipping")
            return
        if target == "dns":
            with self._lock:
                if self._accepting:
                    self._stats.dns_server = host
        self._probe_target(target, host)

    def _probe_target(self, target: str, host: str) -> None:
        try:
            result = self.deps.probe_runner.probe(host)
        except Exception as e:
            log_exception(logger, f"Probe of {target} ({host}) failed", e)
            return
        self.apply_probe_result(target, host, result)

    def apply_probe_result(self, target: str, host: str, result: ProbeResult) -> bool:
        """Record a probe outcome. Returns False if it arrived after shutdown."""
        if target not in TARGET_HISTORY:
            raise ValueError(f"Unknown probe target: {target}")

        with self._lock:
            if not self._accepting:
                logger.debug(f"Dropping late {target} probe result")
                return False
            stats = self._stats.target(target)
            stats.loss = result.loss_percent
            stats.ping = result.latency_ms if result.reachable else 0.0
            self._histories[TARGET_HISTORY[target]].append(stats.ping)
            if result.reachable:
                stats.jitter = self.deps.jitter.observe(target, stats.ping)

        self.event_bus.publish(EventType.PROBE_COMPLETED, {
            "target": target,
            "host": host,
            "latency_ms": result.latency_ms,
            "loss_percent": result.loss_percent,
            "method": result.method,
        })
        return True

    # === User actions ===

    def reset_totals(self) -> TrafficTotals:
        """Zero the traffic totals and restart their launch date at now."""
        with self._lock:
            self._totals.reset(self._clock())
            self._persist_totals(self._totals, force=True)
            totals = self._totals.copy()
        logger.info("Traffic totals reset")
        self.event_bus.publish(EventType.TOTALS_RESET, {"totals": totals})
        return totals
