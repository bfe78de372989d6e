"""Network device scanner - discovers devices on the local /24.

One scan:
1. Resolve the local network context (interface, prefix, gateway)
2. Read the ARP table once, shared by every probe
3. ICMP-probe hosts .1 to .254 in parallel, at most N probes in flight
4. For each responder: MAC from the ARP table, reverse DNS raced
   against a short timeout, heuristic classification

A host that does not answer is simply absent from the result.
"""

from __future__ import annotations

import socket
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Callable, Dict, List, Optional, Sequence

import ping3

from config import NETWORK, LogContext, MonitorSettings, get_logger
from discovery.arp_table import read_arp_table
from discovery.classifier import categorize, connection_medium, icon_for, signal_quality
from discovery.models import DeviceRecord, DeviceStatus, LocalInterface, NetworkContext
from discovery.network_context import list_local_interfaces, resolve_network_context

logger = get_logger(__name__)

# (ip, timeout_seconds) -> round-trip time in ms, or None when unreachable
ProbeFunc = Callable[[str, float], Optional[float]]
# ip -> hostname; may raise or block
ResolverFunc = Callable[[str], Optional[str]]


def icmp_probe(ip: str, timeout: float) -> Optional[float]:
    """Send one ICMP echo and return the round-trip time in milliseconds.

    ping3 returns None on timeout and False on error; both mean
    unreachable here.
    """
    rtt = ping3.ping(ip, timeout=timeout, unit="ms")
    if rtt is None or rtt is False:
        return None
    return float(rtt)


def reverse_lookup(ip: str) -> Optional[str]:
    """Resolve an address to its hostname via reverse DNS."""
    hostname, _, _ = socket.gethostbyaddr(ip)
    return hostname


def fallback_name(ip: str) -> str:
    """Synthesized display name for hosts without reverse DNS."""
    return f"{NETWORK.FALLBACK_NAME_PREFIX}{ip.rsplit('.', 1)[-1]}"


class DiscoveryScanner:
    """Sweeps the local /24 for responsive devices.

    scan() is single-flight: a lock is held for the whole scan, so
    overlapping callers run one after another instead of sweeping the
    same range twice at once.

    Every collaborator that touches the network or the OS can be
    replaced through the constructor.

    Example:
        >>> scanner = DiscoveryScanner()
        >>> for device in scanner.scan():
        ...     print(device.name, device.ip_address, device.category.value)
    """

    def __init__(
        self,
        settings: Optional[MonitorSettings] = None,
        probe: ProbeFunc = icmp_probe,
        resolver: ResolverFunc = reverse_lookup,
        arp_reader: Callable[[], Dict[str, str]] = read_arp_table,
        context_resolver: Callable[[], NetworkContext] = resolve_network_context,
        interface_lister: Callable[[], List[LocalInterface]] = list_local_interfaces,
    ):
        settings = settings or MonitorSettings()
        settings.validate()

        self.probe_timeout = settings.probe_timeout
        self.dns_timeout = settings.dns_timeout
        self.max_concurrent_probes = settings.max_concurrent_probes

        self._probe = probe
        self._resolver = resolver
        self._arp_reader = arp_reader
        self._context_resolver = context_resolver
        self._interface_lister = interface_lister

        self._scan_lock = threading.Lock()
        self._probe_gate = threading.BoundedSemaphore(self.max_concurrent_probes)
        self.last_context: Optional[NetworkContext] = None

    def resolve_network_info(self) -> NetworkContext:
        """Current network parameters, without scanning."""
        return self._context_resolver()

    # ========================================================================
    # Per-host probing
    # ========================================================================

    def _resolve_name(self, ip: str, dns_pool: ThreadPoolExecutor) -> str:
        """Reverse DNS with a deadline; the first label of the name, or a fallback."""
        future = dns_pool.submit(self._resolver, ip)
        try:
            hostname = future.result(timeout=self.dns_timeout)
        except FutureTimeoutError:
            future.cancel()
            logger.debug(f"Reverse DNS timed out for {ip}")
            return fallback_name(ip)
        except Exception as e:
            logger.debug(f"Reverse DNS failed for {ip}: {e}")
            return fallback_name(ip)

        if not hostname:
            return fallback_name(ip)
        return hostname.split('.')[0] or fallback_name(ip)

    def _probe_host(
        self,
        ip: str,
        arp_table: Dict[str, str],
        interfaces: Sequence[LocalInterface],
        dns_pool: ThreadPoolExecutor,
    ) -> Optional[DeviceRecord]:
        """Probe one address; returns a record for responders, else None.

        Errors propagate to _sweep(), which counts them per host.
        """
        with self._probe_gate:
            rtt_ms = self._probe(ip, self.probe_timeout)
        if rtt_ms is None:
            return None

        mac = arp_table.get(ip, NETWORK.UNKNOWN_MAC)
        name = self._resolve_name(ip, dns_pool)
        category = categorize(name, mac)

        return DeviceRecord(
            name=name,
            ip_address=ip,
            mac_address=mac,
            status=DeviceStatus.ACTIVE,
            category=category,
            connection=connection_medium(ip, interfaces),
            signal=signal_quality(rtt_ms),
            icon=icon_for(category),
            latency_ms=rtt_ms,
        )

    # ========================================================================
    # Main scan
    # ========================================================================

    def scan(self) -> List[DeviceRecord]:
        """Discover the devices currently answering on the local /24.

        Returns an empty list when no interface qualifies. The order of
        the result is arbitrary.
        """
        with self._scan_lock:
            with LogContext(logger, "Network scan"):
                return self._sweep()

    def _sweep(self) -> List[DeviceRecord]:
        context = self._context_resolver()
        self.last_context = context
        if not context.is_scannable:
            logger.info("Skipping scan: no usable network prefix")
            return []

        arp_table = self._arp_reader()
        interfaces = self._interface_lister()
        devices: List[DeviceRecord] = []
        failures = 0
        last_error: Optional[Exception] = None

        dns_pool = ThreadPoolExecutor(
            max_workers=self.max_concurrent_probes, thread_name_prefix="reverse-dns"
        )
        try:
            with ThreadPoolExecutor(
                max_workers=self.max_concurrent_probes, thread_name_prefix="probe"
            ) as pool:
                futures = {
                    pool.submit(self._probe_host, ip, arp_table, interfaces, dns_pool): ip
                    for ip in context.host_addresses()
                }
                for future in as_completed(futures):
                    try:
                        device = future.result()
                    except Exception as e:
                        # One host failing never aborts the sweep
                        logger.debug(f"Error scanning {futures[future]}: {e}")
                        failures += 1
                        last_error = e
                        continue
                    if device is not None:
                        devices.append(device)
        finally:
            # Lookups still blocked in the resolver are abandoned, not awaited
            dns_pool.shutdown(wait=False, cancel_futures=True)

        if futures and failures == len(futures):
            logger.warning(
                f"All {failures} reachability checks failed ("
                f"{type(last_error).__name__}: {last_error}); "
                "ICMP may not be permitted for this user"
            )

        logger.info(
            f"Scan of {context.prefix}.0/24 found {len(devices)} devices "
            f"({len(arp_table)} ARP entries)"
        )
        return devices
