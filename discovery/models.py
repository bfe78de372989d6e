"""Data model for LAN device discovery.

NetworkContext and DeviceRecord are values created fresh on every scan.
The only long-lived mutable state, the MAC-keyed snapshot, belongs to
ChangeMonitor.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, Iterator, Optional

from config import NETWORK


class DeviceStatus(Enum):
    """Connection state of a device."""
    ACTIVE = "Active"
    DISCONNECTED = "Disconnected"


class DeviceCategory(Enum):
    """Heuristic device categories."""
    PHONE = "Phone"
    TABLET = "Tablet"
    LAPTOP = "Laptop"
    DESKTOP = "Desktop"
    TV = "TV"
    PRINTER = "Printer"
    CAMERA = "Camera"
    SPEAKER = "Speaker"
    WEARABLE = "Wearable"
    UNKNOWN = "Unknown"


class ConnectionMedium(Enum):
    """How a device is (presumed to be) attached to the network."""
    ETHERNET = "Ethernet"
    WIRELESS = "Wireless"


class SignalQuality(Enum):
    """Round-trip latency bucket."""
    EXCELLENT = "Excellent"
    GOOD = "Good"
    FAIR = "Fair"
    POOR = "Poor"


class ChangeKind(Enum):
    """Kinds of transitions reported by the change monitor."""
    CONNECTED = "Connected"
    DISCONNECTED = "Disconnected"
    UPDATED = "Updated"


@dataclass(frozen=True)
class NetworkContext:
    """The local IPv4 network the scanner sweeps.

    Attributes:
        local_ip: IPv4 address of the selected interface.
        subnet_mask: Netmask of that address.
        gateway: Default gateway, or "" if none could be determined.
        prefix: First three octets (e.g. "192.168.1"); empty when no
            interface qualifies and scanning is impossible.
        interface: Name of the selected interface.
    """
    local_ip: str = ""
    subnet_mask: str = ""
    gateway: str = ""
    prefix: str = ""
    interface: str = ""

    @property
    def is_scannable(self) -> bool:
        return bool(self.prefix)

    def host_addresses(self) -> Iterator[str]:
        """Yield every candidate host address of the /24."""
        if not self.prefix:
            return
        first, last = NETWORK.HOST_RANGE
        for octet in range(first, last + 1):
            yield f"{self.prefix}.{octet}"


@dataclass(frozen=True)
class LocalInterface:
    """An IPv4 interface of this machine."""
    name: str
    address: str
    is_up: bool = True
    is_ethernet: bool = False


@dataclass
class DeviceRecord:
    """A device observed during one scan.

    The MAC address is the identity across scans; it is
    NETWORK.UNKNOWN_MAC when the ARP table had no entry for the host.
    """
    name: str
    ip_address: str
    mac_address: str = NETWORK.UNKNOWN_MAC
    status: DeviceStatus = DeviceStatus.ACTIVE
    category: DeviceCategory = DeviceCategory.UNKNOWN
    connection: ConnectionMedium = ConnectionMedium.WIRELESS
    signal: SignalQuality = SignalQuality.POOR
    icon: str = ""
    latency_ms: Optional[float] = None

    @property
    def has_identity(self) -> bool:
        return self.mac_address != NETWORK.UNKNOWN_MAC

    @property
    def snapshot_key(self) -> str:
        """Key used in snapshots.

        Unidentified hosts all share the placeholder MAC, so they are
        keyed by address instead to keep them apart.
        """
        if self.has_identity:
            return self.mac_address
        return f"{NETWORK.UNKNOWN_MAC}@{self.ip_address}"

    @property
    def device_info(self) -> str:
        return f"{self.ip_address} - {self.mac_address}"

    def same_state_as(self, other: DeviceRecord) -> bool:
        """Compare the fields whose change is reported as an update."""
        return (
            self.mac_address == other.mac_address
            and self.status == other.status
            and self.signal == other.signal
        )

    def as_disconnected(self) -> DeviceRecord:
        return replace(self, status=DeviceStatus.DISCONNECTED)


@dataclass(frozen=True)
class DeviceChange:
    """One detected transition."""
    device: DeviceRecord
    kind: ChangeKind


# MAC-keyed device population at one point in time
Snapshot = Dict[str, DeviceRecord]
