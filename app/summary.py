"""Menu-bar summary text.

The summary is either the pinned items joined by " | ", or (with nothing
pinned) just the speed segments. Stacked speeds use a newline so the host
can render them on two lines.
"""
from typing import List

from monitor.stats import NetworkStats, TargetStats
from monitor.utils import DisplayMode, format_speed
from storage.settings import EngineSettings

UNREACHABLE_TEXT = "---"
PINNED_SEPARATOR = " | "


def _latency_text(target: TargetStats) -> str:
    if target.loss == 100:
        return UNREACHABLE_TEXT
    return f"{target.ping:.0f}ms"


def speed_segments(stats: NetworkStats, settings: EngineSettings) -> List[str]:
    """Upload then download, per display mode."""
    units, scale, mode = settings.units, settings.scale, settings.display
    up_arrow = "↑ " if settings.show_arrows else ""
    down_arrow = "↓ " if settings.show_arrows else ""

    segments = []
    if mode in (DisplayMode.BOTH, DisplayMode.UPLOAD):
        value, unit = format_speed(stats.upload_speed, units, scale)
        segments.append(f"{up_arrow}{value} {unit}")
    if mode in (DisplayMode.BOTH, DisplayMode.DOWNLOAD):
        value, unit = format_speed(stats.download_speed, units, scale)
        segments.append(f"{down_arrow}{value} {unit}")
    return segments


def compose_summary(stats: NetworkStats, settings: EngineSettings) -> str:
    """Render the menu-bar title for the current snapshot."""
    segments = speed_segments(stats, settings)

    pinned: List[str] = []
    if settings.show_speed_menu:
        pinned.append((" " if settings.unstack_network_usage else "\n").join(segments))
    if settings.show_rssi_menu:
        pinned.append(f"RSSI: {stats.rssi}")
    if settings.show_router_ping_menu:
        pinned.append(f"RTR: {_latency_text(stats.router)}")
    if settings.show_dns_ping_menu:
        pinned.append(f"DNS: {_latency_text(stats.dns)}")
    if settings.show_internet_ping_menu:
        pinned.append(f"Ping: {_latency_text(stats.internet)}")

    if pinned:
        return PINNED_SEPARATOR.join(pinned)
    return (PINNED_SEPARATOR if settings.unstack_network_usage else "\n").join(segments)
