"""Data persistence components."""

from .json_store import TotalsStore
from .settings import EngineSettings, SettingsManager, get_settings_manager

__all__ = [
    "TotalsStore",
    "EngineSettings",
    "SettingsManager",
    "get_settings_manager",
]
