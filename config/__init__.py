"""Configuration module for Net Bar.

Provides centralized configuration, logging, exceptions, and subprocess execution.
"""
from config.constants import (
    ALLOWED_SUBPROCESS_COMMANDS,
    COMMANDS,
    INTERVALS,
    NETWORK,
    STORAGE,
    THRESHOLDS,
    Commands,
    Intervals,
    NetworkConfig,
    StorageConfig,
    Thresholds,
)
from config.exceptions import (
    ConfigurationError,
    NetBarError,
    StorageError,
    SubprocessError,
)
from config.logging_config import get_logger, setup_logging
from config.subprocess_cache import SubprocessCache, cached_run, get_subprocess_cache, safe_run

__all__ = [
    # Constants
    "INTERVALS",
    "THRESHOLDS",
    "NETWORK",
    "COMMANDS",
    "STORAGE",
    "Intervals",
    "Thresholds",
    "NetworkConfig",
    "Commands",
    "StorageConfig",
    "ALLOWED_SUBPROCESS_COMMANDS",
    # Exceptions
    "NetBarError",
    "StorageError",
    "ConfigurationError",
    "SubprocessError",
    # Logging
    "setup_logging",
    "get_logger",
    # Subprocess
    "SubprocessCache",
    "safe_run",
    "cached_run",
    "get_subprocess_cache",
]
