"""User settings for Net Bar.

Settings are plain values the engine reads on every tick; it never owns or
writes them. The SettingsManager persists them to settings.json and falls
back to defaults for anything missing or invalid.
"""
import json
import threading
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any, Callable, List, Optional

from config import INTERVALS, STORAGE, get_logger
from config.exceptions import ConfigurationError, StorageError
from monitor.utils import DisplayMode, FixedUnit, UnitType

logger = get_logger(__name__)


@dataclass
class EngineSettings:
    """Display and sampling options."""
    display_mode: str = DisplayMode.BOTH.value
    unit_type: str = UnitType.BYTES.value
    fixed_unit: str = FixedUnit.AUTO.value
    show_arrows: bool = True
    unstack_network_usage: bool = False
    update_interval: float = INTERVALS.TICK_SECONDS

    # Items pinned to the menu bar title
    show_speed_menu: bool = True
    show_rssi_menu: bool = False
    show_router_ping_menu: bool = False
    show_dns_ping_menu: bool = False
    show_internet_ping_menu: bool = False

    @property
    def display(self) -> DisplayMode:
        return DisplayMode(self.display_mode)

    @property
    def units(self) -> UnitType:
        return UnitType(self.unit_type)

    @property
    def scale(self) -> FixedUnit:
        return FixedUnit(self.fixed_unit)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> 'EngineSettings':
        """Build settings from stored JSON, ignoring unknown keys and bad values."""
        defaults = cls()
        values = {}
        for f in fields(cls):
            default = getattr(defaults, f.name)
            raw = data.get(f.name, default)
            values[f.name] = raw if _validate(f.name, raw) else default
        return cls(**values)


_ENUM_FIELDS = {
    "display_mode": DisplayMode,
    "unit_type": UnitType,
    "fixed_unit": FixedUnit,
}


def _validate(name: str, value: Any) -> bool:
    if name in _ENUM_FIELDS:
        return value in {member.value for member in _ENUM_FIELDS[name]}
    if name == "update_interval":
        return (
            isinstance(value, (int, float))
            and not isinstance(value, bool)
            and INTERVALS.MIN_TICK_SECONDS <= value <= INTERVALS.MAX_TICK_SECONDS
        )
    return isinstance(value, bool)


SettingsListener = Callable[[EngineSettings], None]


class SettingsManager:
    """Loads, validates and saves EngineSettings."""

    def __init__(self, data_dir: Path):
        self.data_dir = data_dir
        self.settings_file = data_dir / STORAGE.SETTINGS_FILE
        self._lock = threading.Lock()
        self._settings = EngineSettings()
        self._listeners: List[SettingsListener] = []
        self._load()

    def _load(self) -> None:
        if not self.settings_file.exists():
            self._settings = EngineSettings()
            return
        try:
            with open(self.settings_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Could not load settings, using defaults: {e}")
            self._settings = EngineSettings()
            return
        if not isinstance(data, dict):
            logger.warning("Settings file is not a JSON object, using defaults")
            self._settings = EngineSettings()
            return
        self._settings = EngineSettings.from_dict(data)

    def _save(self) -> None:
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            temp_file = self.settings_file.with_suffix('.tmp')
            with open(temp_file, 'w', encoding='utf-8') as f:
                json.dump(self._settings.to_dict(), f, indent=2)
            temp_file.replace(self.settings_file)
        except OSError as e:
            logger.error(f"Error saving settings: {e}")
            raise StorageError(f"Failed to save settings: {e}", {"path": str(self.settings_file)})

    @property
    def settings(self) -> EngineSettings:
        """A copy of the current settings."""
        with self._lock:
            return replace(self._settings)

    def update(self, **changes: Any) -> EngineSettings:
        """Change one or more settings and persist them.

        Raises:
            ConfigurationError: Unknown setting name or invalid value.
            StorageError: The settings file could not be written.
        """
        known = {f.name for f in fields(EngineSettings)}
        for name, value in changes.items():
            if name not in known:
                raise ConfigurationError(f"Unknown setting: {name}")
            if not _validate(name, value):
                raise ConfigurationError(f"Invalid value for {name}", {"value": value})

        with self._lock:
            self._settings = replace(self._settings, **changes)
            self._save()
            current = replace(self._settings)

        logger.info(f"Settings changed: {', '.join(sorted(changes))}")
        for listener in list(self._listeners):
            try:
                listener(current)
            except Exception as e:
                logger.error(f"Settings listener failed: {e}", exc_info=True)
        return current

    def toggle(self, name: str) -> bool:
        """Flip a boolean setting and return its new value."""
        current = getattr(self.settings, name, None)
        if not isinstance(current, bool):
            raise ConfigurationError(f"Not a boolean setting: {name}")
        self.update(**{name: not current})
        return not current

    def add_listener(self, listener: SettingsListener) -> None:
        self._listeners.append(listener)


def get_settings_manager(data_dir: Optional[Path] = None) -> SettingsManager:
    if data_dir is None:
        data_dir = Path.home() / STORAGE.DATA_DIR_NAME
    return SettingsManager(data_dir)
