"""Periodic change detection over successive scans.

ChangeMonitor runs the scanner on a fixed interval, diffs each result
against the snapshot retained from the previous cycle and reports one
(device, ChangeKind) event per difference.

Usage:
    from discovery.change_monitor import ChangeMonitor
    from discovery.scanner import DiscoveryScanner

    def on_change(device, kind):
        print(f"{kind.value}: {device.name} ({device.ip_address})")

    monitor = ChangeMonitor(DiscoveryScanner())
    monitor.start(on_change)
    ...
    monitor.stop()
"""

from __future__ import annotations

import threading
import time
from typing import Callable, Iterable, List, Optional, Tuple

from config import INTERVALS, ConfigurationError, get_logger
from discovery.classifier import address_sort_key
from discovery.models import ChangeKind, DeviceChange, DeviceRecord, Snapshot

logger = get_logger(__name__)

# Listener invoked once per detected change, from the monitor thread
ChangeCallback = Callable[[DeviceRecord, ChangeKind], None]


def diff_snapshot(
    previous: Snapshot, devices: Iterable[DeviceRecord]
) -> Tuple[List[DeviceChange], Snapshot]:
    """Compare a fresh scan with the retained snapshot.

    Returns the changes and the snapshot that replaces ``previous``.
    Devices gone from the scan are reported with their retained record,
    marked Disconnected, and are not carried into the new snapshot.
    When two hosts answer with the same MAC, the one with the lowest
    address is kept, whatever order the scan returned them in.
    """
    current: Snapshot = {}
    for device in sorted(devices, key=lambda d: address_sort_key(d.ip_address)):
        key = device.snapshot_key
        if key in current:
            logger.debug(
                f"Duplicate MAC {key} at {device.ip_address}; "
                f"keeping {current[key].ip_address}"
            )
            continue
        current[key] = device

    changes: List[DeviceChange] = []
    for key, device in current.items():
        retained = previous.get(key)
        if retained is None:
            changes.append(DeviceChange(device, ChangeKind.CONNECTED))
        elif not retained.same_state_as(device):
            changes.append(DeviceChange(device, ChangeKind.UPDATED))

    for key, retained in previous.items():
        if key not in current:
            changes.append(DeviceChange(retained.as_disconnected(), ChangeKind.DISCONNECTED))

    return changes, current


class ChangeMonitor:
    """Turns periodic scans into Connected / Disconnected / Updated events.

    Two states: idle (no worker thread) and monitoring. The first tick
    runs as soon as start() is called, then every ``interval`` seconds.
    A tick that overruns the interval delays the next one rather than
    overlapping it.

    stop() does not abort a scan in flight; its result is discarded.

    Attributes:
        interval: Seconds between the starts of consecutive ticks.
    """

    def __init__(self, scanner, interval: Optional[float] = None):
        """Initialize the monitor.

        Args:
            scanner: Object with a scan() -> List[DeviceRecord] method.
            interval: Tick interval in seconds (default INTERVALS.MONITOR_SECONDS).
        """
        interval = INTERVALS.MONITOR_SECONDS if interval is None else interval
        if interval <= 0:
            raise ConfigurationError("Monitor interval must be positive", {"value": interval})

        self.interval = interval
        self._scanner = scanner
        self._snapshot: Snapshot = {}
        self._on_change: Optional[ChangeCallback] = None
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._state_lock = threading.Lock()
        self._cycle_lock = threading.Lock()

    @property
    def is_monitoring(self) -> bool:
        return self._thread is not None

    @property
    def snapshot(self) -> Snapshot:
        """Copy of the retained snapshot."""
        with self._cycle_lock:
            return dict(self._snapshot)

    # ========================================================================
    # Lifecycle
    # ========================================================================

    def start(self, on_change: ChangeCallback) -> None:
        """Begin monitoring, reporting changes to ``on_change``."""
        with self._state_lock:
            if self._thread is not None:
                logger.warning("ChangeMonitor already running; start() ignored")
                return

            self._on_change = on_change
            self._stop_event = threading.Event()
            self._thread = threading.Thread(
                target=self._run_loop,
                args=(self._stop_event,),
                daemon=True,
                name="ChangeMonitor",
            )
            self._thread.start()

        logger.info(f"Monitoring started (interval {self.interval}s)")

    def stop(self) -> None:
        """Stop monitoring. Safe to call when already stopped."""
        with self._state_lock:
            if self._thread is None:
                return
            self._stop_event.set()
            self._thread = None

        logger.info("Monitoring stopped")

    def _run_loop(self, stop_event: threading.Event) -> None:
        next_tick = time.monotonic()
        while not stop_event.is_set():
            self._tick(stop_event)
            next_tick += self.interval
            now = time.monotonic()
            if next_tick < now:
                # Overran: skip the missed ticks instead of bursting
                next_tick = now
            stop_event.wait(next_tick - now)

    def _tick(self, stop_event: threading.Event) -> None:
        try:
            devices = self._scanner.scan()
        except Exception as e:
            logger.error(f"Error monitoring network: {e}", exc_info=True)
            return

        self._process(devices, stop_event)

    # ========================================================================
    # Diffing
    # ========================================================================

    def run_cycle(self) -> List[DeviceChange]:
        """Run one scan-and-diff cycle synchronously and return its changes.

        Changes are also delivered to the listener if one is registered.
        """
        return self._process(self._scanner.scan())

    def _process(
        self,
        devices: Iterable[DeviceRecord],
        stop_event: Optional[threading.Event] = None,
    ) -> List[DeviceChange]:
        """Diff ``devices`` into the snapshot and deliver the changes.

        With a ``stop_event`` (monitor thread ticks), a result that arrives
        after stop() leaves the snapshot untouched, and delivery ends as
        soon as the event is set.
        """
        callback = self._on_change
        with self._cycle_lock:
            if stop_event is not None and stop_event.is_set():
                logger.debug("Monitor stopped during scan; discarding result")
                return []
            changes, self._snapshot = diff_snapshot(self._snapshot, devices)

        if changes:
            logger.info(f"{len(changes)} device change(s) detected")
        for change in changes:
            if stop_event is not None and stop_event.is_set():
                logger.debug("Monitor stopped; remaining changes not delivered")
                break
            self._emit(callback, change)
        return changes

    def _emit(self, callback: Optional[ChangeCallback], change: DeviceChange) -> None:
        if callback is None:
            return
        try:
            callback(change.device, change.kind)
        except Exception as e:
            logger.error(
                f"Error in change listener for {change.kind.name}: {e}", exc_info=True
            )
