"""Dependency injection container for Net Bar.

Collects the collaborators the sampling scheduler needs so they can be
swapped for fakes in tests.

Usage:
    from app.dependencies import create_dependencies

    deps = create_dependencies()
    scheduler = SamplingScheduler(deps)
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from config import STORAGE, get_logger

logger = get_logger(__name__)


@dataclass
class EngineDependencies:
    """Container for all engine dependencies.

    Each field is a component that can be injected.
    """

    # Measurement components
    interface_resolver: "InterfaceResolver"
    link_reader: "LinkStatsReader"
    wireless_reader: "WirelessStatsReader"
    probe_runner: "ProbeRunner"
    jitter: "JitterEstimator"
    speed_test: "BandwidthTestRunner"

    # Storage components
    totals_store: "TotalsStore"
    settings: "SettingsManager"

    # Event bus (shared with the display layer)
    event_bus: "EventBus"


def create_dependencies(
    data_dir: Optional[Path] = None, event_bus: Optional["EventBus"] = None
) -> EngineDependencies:
    """Create and wire the production components.

    Args:
        data_dir: Override the default data directory (~/.netbar).
        event_bus: Provide an existing event bus, or the global one is used.
    """
    # Import here to avoid circular imports
    from app.events import get_event_bus
    from monitor.interface import InterfaceResolver
    from monitor.jitter import JitterEstimator
    from monitor.network import LinkStatsReader
    from monitor.probe import ProbeRunner
    from monitor.speed_test import BandwidthTestRunner
    from monitor.wireless import WirelessStatsReader
    from storage.json_store import TotalsStore
    from storage.settings import get_settings_manager

    logger.info("Creating engine dependencies...")

    if data_dir is None:
        data_dir = Path.home() / STORAGE.DATA_DIR_NAME
    if event_bus is None:
        event_bus = get_event_bus()

    deps = EngineDependencies(
        interface_resolver=InterfaceResolver(),
        link_reader=LinkStatsReader(),
        wireless_reader=WirelessStatsReader(),
        probe_runner=ProbeRunner(),
        jitter=JitterEstimator(),
        speed_test=BandwidthTestRunner(event_bus=event_bus),
        totals_store=TotalsStore(data_dir=data_dir),
        settings=get_settings_manager(data_dir),
        event_bus=event_bus,
    )

    logger.info("All dependencies created successfully")
    return deps
