"""Tests for monitor/utils.py"""

from monitor.utils import FixedUnit, UnitType, format_bytes, format_duration, format_speed


class TestFormatSpeed:
    """Tests for the format_speed function."""

    def test_below_one_kilobyte(self):
        assert format_speed(1023) == ("1023.00", " B/s")

    def test_exactly_1024_stays_in_bytes(self):
        # Scaling only happens while the value is strictly above 1024
        assert format_speed(1024) == ("1024.00", " B/s")

    def test_megabytes(self):
        assert format_speed(1024 * 1500) == ("1.46", "MB/s")

    def test_zero(self):
        assert format_speed(0) == ("0.00", " B/s")

    def test_bits_multiply_by_eight(self):
        assert format_speed(100, UnitType.BITS) == ("800.00", " bps")
        assert format_speed(1000, UnitType.BITS) == ("7.81", "Kbps")

    def test_fixed_kilobytes_regardless_of_magnitude(self):
        assert format_speed(512, fixed_unit=FixedUnit.KB) == ("0.50", "KB/s")
        assert format_speed(1024 * 1024 * 3, fixed_unit=FixedUnit.KB) == ("3072.00", "KB/s")

    def test_fixed_megabytes(self):
        assert format_speed(1024 * 1024, fixed_unit=FixedUnit.MB) == ("1.00", "MB/s")

    def test_fixed_bits(self):
        assert format_speed(1024, UnitType.BITS, FixedUnit.KB) == ("8.00", "Kbps")

    def test_caps_at_terabytes(self):
        text, unit = format_speed(1024 ** 5 * 2)
        assert unit == "TB/s"
        assert text == "2048.00"


class TestFormatBytes:
    """Tests for the format_bytes function."""

    def test_no_rate_suffix(self):
        assert format_bytes(500) == ("500.00", " B")

    def test_gigabytes(self):
        assert format_bytes(1024 ** 3 * 1.5) == ("1.50", "GB")


class TestFormatDuration:
    def test_seconds(self):
        assert format_duration(45) == "45s"

    def test_minutes(self):
        assert format_duration(150) == "2m 30s"
        assert format_duration(120) == "2m"

    def test_hours(self):
        assert format_duration(3665) == "1h 1m"
