"""Single entry point for presentation layers.

NetworkScanner bundles on-demand scanning, network information and the
change-monitor subscription behind one object, so a UI only needs this
class.

Example:
    >>> scanner = NetworkScanner()
    >>> info = scanner.resolve_network_info()
    >>> scanner.start_monitoring(lambda device, kind: print(kind.value, device.name))
    >>> scanner.stop_monitoring()
"""

from __future__ import annotations

from typing import List, Optional

from config import MonitorSettings
from discovery.change_monitor import ChangeCallback, ChangeMonitor
from discovery.models import DeviceChange, DeviceRecord, NetworkContext
from discovery.scanner import DiscoveryScanner


class NetworkScanner:
    """Device discovery and change monitoring for one local network.

    The change listener is called from a background thread; callers that
    update a UI must hand the event over to their own thread.
    """

    def __init__(
        self,
        settings: Optional[MonitorSettings] = None,
        discovery: Optional[DiscoveryScanner] = None,
    ):
        self.settings = settings or MonitorSettings()
        self.settings.validate()
        self._discovery = discovery or DiscoveryScanner(self.settings)
        self._monitor = ChangeMonitor(self._discovery, interval=self.settings.monitor_interval)

    @property
    def is_monitoring(self) -> bool:
        return self._monitor.is_monitoring

    def scan(self) -> List[DeviceRecord]:
        """Scan now and return the responding devices."""
        return self._discovery.scan()

    def resolve_network_info(self) -> NetworkContext:
        """Current local address, netmask, gateway and scan prefix."""
        return self._discovery.resolve_network_info()

    def start_monitoring(self, on_change: ChangeCallback) -> None:
        """Subscribe ``on_change`` to device changes and start the monitor."""
        self._monitor.start(on_change)

    def stop_monitoring(self) -> None:
        self._monitor.stop()

    def run_monitor_cycle(self) -> List[DeviceChange]:
        """One synchronous scan-and-diff cycle against the monitor snapshot."""
        return self._monitor.run_cycle()
