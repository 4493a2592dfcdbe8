"""Speed and unit formatting shared by the engine and the menu-bar host.

Values are always carried internally in bytes per second; conversion to bits
and scaling to KB/MB/... happens only here, at display time.

Example:
    >>> from monitor.utils import format_speed, UnitType
    >>> format_speed(1024 * 1500)
    ('1.46', 'MB/s')
    >>> format_speed(1000, UnitType.BITS)
    ('7.81', 'Kbps')
"""

from __future__ import annotations

from enum import Enum
from typing import Tuple, Union

# Type alias for numeric values
NumericValue = Union[int, float]

BYTE_METRICS = (" B", "KB", "MB", "GB", "TB")
BIT_METRICS = (" b", "Kb", "Mb", "Gb", "Tb")


class DisplayMode(Enum):
    """Which directions the speed segment shows."""
    BOTH = "both"
    DOWNLOAD = "download"
    UPLOAD = "upload"


class UnitType(Enum):
    """Byte or bit units for speeds."""
    BYTES = "bytes"
    BITS = "bits"


class FixedUnit(Enum):
    """Auto-scaling or a pinned scale for speeds."""
    AUTO = "auto"
    KB = "kb"
    MB = "mb"


def _scale(value: float, metrics: Tuple[str, ...]) -> Tuple[float, int]:
    index = 0
    while value > 1024.0 and index < len(metrics) - 1:
        value /= 1024.0
        index += 1
    return value, index


def format_speed(
    speed: NumericValue,
    unit_type: UnitType = UnitType.BYTES,
    fixed_unit: FixedUnit = FixedUnit.AUTO,
) -> Tuple[str, str]:
    """Format a bytes-per-second rate as a (number, unit) pair.

    Bits multiply the value by 8 before scaling. A fixed unit divides by
    1024 (KB) or 1024² (MB) regardless of magnitude; auto keeps dividing by
    1024 while the value is above 1024, up to TB. The number always carries
    exactly two decimals.

    Args:
        speed: Rate in bytes per second.
        unit_type: Bytes ("/s" suffix) or bits ("ps" suffix).
        fixed_unit: AUTO, KB or MB.

    Returns:
        Tuple of (text, unit), e.g. ("1.46", "MB/s") or ("7.81", "Kbps").

    Examples:
        >>> format_speed(1023)
        ('1023.00', ' B/s')
        >>> format_speed(512, fixed_unit=FixedUnit.KB)
        ('0.50', 'KB/s')
    """
    value = float(speed) * 8 if unit_type == UnitType.BITS else float(speed)
    metrics = BIT_METRICS if unit_type == UnitType.BITS else BYTE_METRICS
    suffix = "ps" if unit_type == UnitType.BITS else "/s"

    if fixed_unit == FixedUnit.KB:
        value, index = value / 1024.0, 1
    elif fixed_unit == FixedUnit.MB:
        value, index = value / (1024.0 * 1024.0), 2
    else:
        value, index = _scale(value, metrics)

    return f"{value:.2f}", metrics[index] + suffix


def format_bytes(bytes_value: NumericValue) -> Tuple[str, str]:
    """Format a byte total as a (number, unit) pair with no rate suffix.

    Always uses byte units and auto-scaling; intended for traffic totals.

    Examples:
        >>> format_bytes(0)
        ('0.00', ' B')
        >>> format_bytes(1099511627776)
        ('1024.00', 'GB')
    """
    value, index = _scale(float(bytes_value), BYTE_METRICS)
    return f"{value:.2f}", BYTE_METRICS[index]


def format_duration(seconds: NumericValue) -> str:
    """Format seconds to human-readable duration string.

    Examples:
        >>> format_duration(45)
        '45s'
        >>> format_duration(150)
        '2m 30s'
        >>> format_duration(3665)
        '1h 1m'
    """
    seconds = int(seconds)

    if seconds < 60:
        return f"{seconds}s"
    elif seconds < 3600:
        minutes = seconds // 60
        secs = seconds % 60
        return f"{minutes}m {secs}s" if secs else f"{minutes}m"
    else:
        hours = seconds // 3600
        minutes = (seconds % 3600) // 60
        return f"{hours}h {minutes}m" if minutes else f"{hours}h"


__all__ = [
    "NumericValue",
    "DisplayMode",
    "UnitType",
    "FixedUnit",
    "format_speed",
    "format_bytes",
    "format_duration",
]
