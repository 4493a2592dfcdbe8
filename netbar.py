#!/usr/bin/env python3
"""
Net Bar - macOS Menu Bar Network Monitor
Shows live throughput, Wi-Fi signal and router/DNS/internet latency in the menu bar.
"""
import signal
import time
from pathlib import Path

import rumps

from app.dependencies import create_dependencies
from app.events import EventBus, EventType
from app.scheduler import SamplingScheduler
from config import STORAGE, get_logger, setup_logging
from config.exceptions import NetBarError
from monitor.stats import TargetStats
from monitor.utils import format_bytes, format_duration, format_speed

logger = get_logger(__name__)

TITLE_REFRESH_SECONDS = 1.0

# (setting name, menu label)
PINNABLE_ITEMS = [
    ("show_speed_menu", "Network Speed"),
    ("show_rssi_menu", "Wi-Fi Signal (RSSI)"),
    ("show_router_ping_menu", "Router Ping"),
    ("show_dns_ping_menu", "DNS Ping"),
    ("show_internet_ping_menu", "Internet Ping"),
]


def _target_line(label: str, target: TargetStats) -> str:
    if target.unreachable:
        return f"{label}: ---"
    return f"{label}: {target.ping:.0f}ms (jitter {target.jitter:.1f}ms, loss {target.loss:.0f}%)"


def _speed_test_line(result) -> str:
    if result.is_running:
        partial = f" ↓ {result.download_mbps:.1f} Mbps" if result.download_mbps is not None else ""
        return f"Speed Test: running ({result.seconds_remaining}s){partial}"
    if result.error:
        return f"Speed Test: {result.error}"
    parts = []
    if result.download_mbps is not None:
        parts.append(f"↓ {result.download_mbps:.1f} Mbps")
    if result.upload_mbps is not None:
        parts.append(f"↑ {result.upload_mbps:.1f} Mbps")
    if result.responsiveness:
        parts.append(result.responsiveness)
    return "Speed Test: " + ("  ".join(parts) if parts else "not run")


class NetBarApp(rumps.App):
    """Menu-bar host for the sampling engine."""

    def __init__(self, data_dir: Path):
        super().__init__(name="NetBar", title="...", quit_button=None)

        self._event_bus = EventBus(async_mode=True)
        self._deps = create_dependencies(data_dir=data_dir, event_bus=self._event_bus)
        self.settings = self._deps.settings
        self.scheduler = SamplingScheduler(self._deps)
        self.speed_test = self._deps.speed_test

        self._build_menu()
        self.settings.add_listener(self._on_settings_changed)

        self._deps.wireless_reader.authorization.request()
        self.scheduler.start()

        # Title and menu are only touched from the main thread
        self._refresh_timer = rumps.Timer(self._refresh, TITLE_REFRESH_SECONDS)
        self._refresh_timer.start()
        logger.info("NetBarApp initialized")

    def _build_menu(self):
        self.menu_wifi = rumps.MenuItem("Wi-Fi: --")
        self.menu_router = rumps.MenuItem("Router: --")
        self.menu_dns = rumps.MenuItem("DNS: --")
        self.menu_internet = rumps.MenuItem("Internet: --")
        self.menu_speed = rumps.MenuItem("↑ --  ↓ --")
        self.menu_totals = rumps.MenuItem("Total: ↑ --  ↓ --")
        self.menu_speed_test_status = rumps.MenuItem("Speed Test: not run")

        self.menu_pinned = rumps.MenuItem("Show in Menu Bar")
        self._pinned_items = {}
        current = self.settings.settings
        for name, label in PINNABLE_ITEMS:
            item = rumps.MenuItem(label, callback=lambda sender, n=name: self._toggle_setting(n))
            item.state = int(getattr(current, name))
            self._pinned_items[name] = item
            self.menu_pinned.add(item)

        self.menu = [
            self.menu_speed,
            self.menu_totals,
            rumps.separator,
            self.menu_wifi,
            self.menu_router,
            self.menu_dns,
            self.menu_internet,
            rumps.separator,
            self.menu_speed_test_status,
            rumps.MenuItem("Run Speed Test", callback=self._run_speed_test),
            rumps.MenuItem("Reset Traffic Statistics", callback=self._reset_totals),
            rumps.separator,
            self.menu_pinned,
            rumps.separator,
            rumps.MenuItem("Quit", callback=self._quit),
        ]

    # === Refresh ===

    def _refresh(self, _):
        stats = self.scheduler.stats
        totals = self.scheduler.totals
        settings = self.settings.settings

        self.title = self.scheduler.summary

        up, up_unit = format_speed(stats.upload_speed, settings.units, settings.scale)
        down, down_unit = format_speed(stats.download_speed, settings.units, settings.scale)
        self.menu_speed.title = f"↑ {up} {up_unit}  ↓ {down} {down_unit}"

        total_up, total_up_unit = format_bytes(totals.total_upload)
        total_down, total_down_unit = format_bytes(totals.total_download)
        since = format_duration(max(0.0, time.time() - totals.launch_date))
        self.menu_totals.title = f"Total ({since}): ↑ {total_up} {total_up_unit}  ↓ {total_down} {total_down_unit}"

        if stats.ssid:
            self.menu_wifi.title = (
                f"Wi-Fi: {stats.ssid} ({stats.band}, ch {stats.channel}) "
                f"{stats.rssi} dBm / {stats.noise} dBm"
            )
        else:
            self.menu_wifi.title = f"Interface: {stats.interface or '--'}"
        self.menu_router.title = _target_line("Router", stats.router)
        dns_label = f"DNS {stats.dns_server}" if stats.dns_server else "DNS"
        self.menu_dns.title = _target_line(dns_label, stats.dns)
        self.menu_internet.title = _target_line("Internet", stats.internet)

        self.menu_speed_test_status.title = _speed_test_line(self.speed_test.result)

    # === Actions ===

    def _toggle_setting(self, name: str):
        try:
            value = self.settings.toggle(name)
        except NetBarError as e:
            logger.error(f"Could not change setting {name}: {e}")
            return
        self._pinned_items[name].state = int(value)

    def _on_settings_changed(self, settings):
        if settings.update_interval != self.scheduler.interval:
            self.scheduler.set_interval(settings.update_interval)
        self._event_bus.publish(EventType.SETTINGS_CHANGED, {"settings": settings})

    def _run_speed_test(self, _):
        if not self.speed_test.start():
            rumps.alert(title="Speed Test", message="A speed test is already running.", ok="OK")
            return
        self.menu_speed_test_status.title = "Speed Test: starting..."

    def _reset_totals(self, _):
        response = rumps.alert(
            title="Reset Traffic Statistics",
            message="Reset total upload and download counters?",
            ok="Reset",
            cancel="Cancel"
        )
        if response == 1:
            self.scheduler.reset_totals()

    def shutdown(self):
        self._refresh_timer.stop()
        self.scheduler.shutdown()
        self._event_bus.shutdown()

    def _quit(self, _):
        logger.info("Application shutting down...")
        self.shutdown()
        logger.info("Shutdown complete")
        rumps.quit_application()


def main():
    """Entry point for the application."""
    data_dir = Path.home() / STORAGE.DATA_DIR_NAME
    setup_logging(data_dir=data_dir, debug=False, console_output=True)
    logger.info("Net Bar starting...")

    app = None

    def signal_handler(signum, frame):
        """Handle SIGTERM/SIGINT by shutting the engine down cleanly."""
        logger.info(f"Received signal {signum}, shutting down...")
        if app:
            app.shutdown()
        rumps.quit_application()

    signal.signal(signal.SIGTERM, signal_handler)
    signal.signal(signal.SIGINT, signal_handler)

    try:
        app = NetBarApp(data_dir)
        app.run()
    except Exception as e:
        logger.critical(f"Application crashed: {e}", exc_info=True)
        raise
    finally:
        if app:
            app.scheduler.shutdown()


if __name__ == "__main__":
    main()
