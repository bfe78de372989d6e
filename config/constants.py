"""Centralized constants and configuration for LAN Device Monitor.

Timeouts, capacities and file names used by the discovery engine live
here so that they can be tuned in one place.

Usage:
    from config.constants import INTERVALS, NETWORK, STORAGE

    monitor_interval = INTERVALS.MONITOR_SECONDS
    probe_capacity = NETWORK.MAX_CONCURRENT_PROBES
"""
from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class Intervals:
    """Time intervals for various operations (in seconds)."""
    # Change monitor tick
    MONITOR_SECONDS: float = 5.0

    # Subprocess timeouts
    SUBPROCESS_TIMEOUT_SECONDS: float = 5.0


@dataclass(frozen=True)
class NetworkConfig:
    """Network discovery configuration."""
    # Reachability probing
    PROBE_TIMEOUT_SECONDS: float = 0.1
    MAX_CONCURRENT_PROBES: int = 50
    HOST_RANGE: Tuple[int, int] = (1, 254)  # inclusive host octets of the /24

    # Reverse DNS
    DNS_TIMEOUT_SECONDS: float = 0.5

    # ARP / routing table utilities
    ARP_TIMEOUT_SECONDS: float = 5.0
    ROUTE_TIMEOUT_SECONDS: float = 2.0
    HARDWARE_PORTS_TTL_SECONDS: float = 60.0

    # Placeholders
    UNKNOWN_MAC: str = "Unknown"
    DEFAULT_NETMASK: str = "255.255.255.0"
    FALLBACK_NAME_PREFIX: str = "Device-"


@dataclass(frozen=True)
class StorageConfig:
    """Storage and file-related configuration."""
    DATA_DIR_NAME: str = ".lan-device-monitor"
    SETTINGS_FILE: str = "settings.json"
    LOG_FILE: str = "lan_monitor.log"

    # Log rotation
    LOG_MAX_BYTES: int = 2_000_000  # 2MB
    LOG_BACKUP_COUNT: int = 3


# Global instances - import these
INTERVALS = Intervals()
NETWORK = NetworkConfig()
STORAGE = StorageConfig()


# Allowed commands for subprocess safety
ALLOWED_SUBPROCESS_COMMANDS = frozenset({
    'arp',
    'ip',
    'route',
    'networksetup',
})
