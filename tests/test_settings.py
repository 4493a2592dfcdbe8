"""Tests for settings management."""

import json

import pytest

from config.exceptions import ConfigurationError
from monitor.utils import DisplayMode, FixedUnit, UnitType
from storage.settings import EngineSettings, SettingsManager


class TestEngineSettings:
    """Tests for EngineSettings dataclass."""

    def test_default_values(self):
        """Test default settings values."""
        settings = EngineSettings()
        assert settings.display == DisplayMode.BOTH
        assert settings.units == UnitType.BYTES
        assert settings.scale == FixedUnit.AUTO
        assert settings.show_arrows is True
        assert settings.show_speed_menu is True
        assert settings.show_rssi_menu is False
        assert settings.update_interval == 1.0

    def test_to_dict(self):
        """Test converting settings to dict."""
        data = EngineSettings(unit_type="bits").to_dict()
        assert data["unit_type"] == "bits"
        assert "show_internet_ping_menu" in data

    def test_from_dict(self):
        """Test creating settings from dict."""
        settings = EngineSettings.from_dict({
            "display_mode": "upload",
            "fixed_unit": "mb",
            "show_dns_ping_menu": True,
            "update_interval": 2,
        })
        assert settings.display == DisplayMode.UPLOAD
        assert settings.scale == FixedUnit.MB
        assert settings.show_dns_ping_menu is True
        assert settings.update_interval == 2

    def test_from_dict_replaces_invalid_values(self):
        """Invalid values fall back to defaults field by field."""
        settings = EngineSettings.from_dict({
            "display_mode": "sideways",
            "unit_type": "bits",
            "show_arrows": "yes",
            "update_interval": 0,
            "unknown_key": 1,
        })
        assert settings.display_mode == "both"
        assert settings.unit_type == "bits"
        assert settings.show_arrows is True
        assert settings.update_interval == 1.0

    def test_bool_is_not_an_interval(self):
        assert EngineSettings.from_dict({"update_interval": True}).update_interval == 1.0


class TestSettingsManager:
    """Tests for SettingsManager."""

    def test_defaults_without_file(self, temp_data_dir):
        manager = SettingsManager(temp_data_dir)
        assert manager.settings == EngineSettings()

    def test_update_persists(self, temp_data_dir):
        manager = SettingsManager(temp_data_dir)
        manager.update(unit_type="bits", show_rssi_menu=True)

        reloaded = SettingsManager(temp_data_dir).settings
        assert reloaded.units == UnitType.BITS
        assert reloaded.show_rssi_menu is True

    def test_update_rejects_unknown_setting(self, temp_data_dir):
        manager = SettingsManager(temp_data_dir)
        with pytest.raises(ConfigurationError):
            manager.update(theme="dark")

    def test_update_rejects_invalid_value(self, temp_data_dir):
        manager = SettingsManager(temp_data_dir)
        with pytest.raises(ConfigurationError):
            manager.update(update_interval=120)
        with pytest.raises(ConfigurationError):
            manager.update(fixed_unit="gb")
        assert manager.settings == EngineSettings()

    def test_toggle(self, temp_data_dir):
        manager = SettingsManager(temp_data_dir)
        assert manager.toggle("show_router_ping_menu") is True
        assert manager.settings.show_router_ping_menu is True
        assert manager.toggle("show_router_ping_menu") is False

    def test_toggle_non_bool(self, temp_data_dir):
        manager = SettingsManager(temp_data_dir)
        with pytest.raises(ConfigurationError):
            manager.toggle("display_mode")

    def test_listeners_notified(self, temp_data_dir):
        manager = SettingsManager(temp_data_dir)
        seen = []
        manager.add_listener(seen.append)
        manager.update(update_interval=5.0)
        assert seen[0].update_interval == 5.0

    def test_failing_listener_does_not_block_update(self, temp_data_dir):
        manager = SettingsManager(temp_data_dir)

        def broken(settings):
            raise RuntimeError("listener bug")

        manager.add_listener(broken)
        manager.update(show_arrows=False)
        assert manager.settings.show_arrows is False

    def test_settings_is_a_copy(self, temp_data_dir):
        manager = SettingsManager(temp_data_dir)
        copy = manager.settings
        copy.show_arrows = False
        assert manager.settings.show_arrows is True

    def test_corrupt_file_uses_defaults(self, temp_data_dir):
        (temp_data_dir / "settings.json").write_text("not json")
        assert SettingsManager(temp_data_dir).settings == EngineSettings()

    def test_partial_file(self, temp_data_dir):
        (temp_data_dir / "settings.json").write_text(json.dumps({"show_arrows": False}))
        settings = SettingsManager(temp_data_dir).settings
        assert settings.show_arrows is False
        assert settings.display_mode == "both"
