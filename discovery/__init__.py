"""LAN device discovery and monitoring.

Modules:
    models: NetworkContext, DeviceRecord and the enumerations
    network_context: local interface, netmask, gateway and /24 prefix
    arp_table: per-OS ARP table reading and parsing
    classifier: category, signal quality, connection medium, icon
    scanner: bounded-concurrency ICMP sweep of the /24
    change_monitor: periodic scan diffing into change events
    service: NetworkScanner facade for presentation layers

Example:
    >>> from discovery import NetworkScanner
    >>> scanner = NetworkScanner()
    >>> for device in scanner.scan():
    ...     print(device.name, device.device_info)
"""
from .arp_table import ArpPlatform, normalize_mac, parse_arp_output, read_arp_table
from .change_monitor import ChangeMonitor, diff_snapshot
from .classifier import categorize, connection_medium, icon_for, signal_quality
from .models import (
    ChangeKind,
    ConnectionMedium,
    DeviceCategory,
    DeviceChange,
    DeviceRecord,
    DeviceStatus,
    LocalInterface,
    NetworkContext,
    SignalQuality,
)
from .network_context import list_local_interfaces, resolve_network_context
from .scanner import DiscoveryScanner
from .service import NetworkScanner

__all__ = [
    # Models
    "NetworkContext",
    "LocalInterface",
    "DeviceRecord",
    "DeviceChange",
    "DeviceStatus",
    "DeviceCategory",
    "ConnectionMedium",
    "SignalQuality",
    "ChangeKind",
    # Network context
    "resolve_network_context",
    "list_local_interfaces",
    # ARP
    "ArpPlatform",
    "read_arp_table",
    "parse_arp_output",
    "normalize_mac",
    # Classification
    "categorize",
    "signal_quality",
    "connection_medium",
    "icon_for",
    # Scanning and monitoring
    "DiscoveryScanner",
    "ChangeMonitor",
    "diff_snapshot",
    "NetworkScanner",
]
