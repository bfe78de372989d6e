"""Configuration module for LAN Device Monitor.

Provides centralized constants, settings, logging, exceptions, and
subprocess execution.
"""
from config.constants import (
    ALLOWED_SUBPROCESS_COMMANDS,
    INTERVALS,
    NETWORK,
    STORAGE,
    Intervals,
    NetworkConfig,
    StorageConfig,
)
from config.exceptions import (
    ConfigurationError,
    DeviceMonitorError,
    ScannerError,
    SubprocessError,
)
from config.logging_config import LogContext, get_logger, setup_logging
from config.settings import MonitorSettings, SettingsManager, get_settings_manager
from config.subprocess_cache import SubprocessCache, get_subprocess_cache, safe_run

__all__ = [
    # Constants
    "INTERVALS",
    "NETWORK",
    "STORAGE",
    "Intervals",
    "NetworkConfig",
    "StorageConfig",
    "ALLOWED_SUBPROCESS_COMMANDS",
    # Exceptions
    "DeviceMonitorError",
    "ScannerError",
    "ConfigurationError",
    "SubprocessError",
    # Logging
    "setup_logging",
    "get_logger",
    "LogContext",
    # Settings
    "MonitorSettings",
    "SettingsManager",
    "get_settings_manager",
    # Subprocess
    "SubprocessCache",
    "safe_run",
    "get_subprocess_cache",
]
