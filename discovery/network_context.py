"""Local network resolution using psutil.

Finds the active IPv4 interface, its netmask and the default gateway,
and derives the /24 prefix the scanner sweeps. Nothing here raises:
when no interface qualifies an empty NetworkContext is returned and the
caller skips the sweep.
"""

from __future__ import annotations

import re
import socket
from typing import Dict, Iterator, List, Optional, Pattern, Tuple

import psutil

from config import NETWORK, SubprocessError, get_logger, get_subprocess_cache
from discovery.arp_table import ArpPlatform, current_platform
from discovery.classifier import address_prefix
from discovery.models import LocalInterface, NetworkContext

logger = get_logger(__name__)

# Default route lookups per platform: (command, pattern capturing the gateway)
GATEWAY_COMMANDS: Dict[ArpPlatform, Tuple[Tuple[str, ...], Pattern[str]]] = {
    # "default via 192.168.1.1 dev wlan0 proto dhcp metric 600"
    ArpPlatform.LINUX: (
        ("ip", "route", "show", "default"),
        re.compile(r'default\s+via\s+(\d+\.\d+\.\d+\.\d+)'),
    ),
    # "    gateway: 192.168.1.1"
    ArpPlatform.MACOS: (
        ("route", "-n", "get", "default"),
        re.compile(r'gateway:\s*(\d+\.\d+\.\d+\.\d+)'),
    ),
    # "          0.0.0.0          0.0.0.0      192.168.1.1    192.168.1.50     25"
    ArpPlatform.WINDOWS: (
        ("route", "print", "0.0.0.0"),
        re.compile(r'^\s*0\.0\.0\.0\s+0\.0\.0\.0\s+(\d+\.\d+\.\d+\.\d+)', re.MULTILINE),
    ),
}

ETHERNET_NAME_PREFIXES = ("eth", "en")
WIRELESS_NAME_PREFIXES = ("wl", "wi-fi", "wifi")


def _is_loopback(name: str, address: str) -> bool:
    return name.startswith('lo') or address.startswith('127.')


def _ipv4_interfaces() -> Iterator[Tuple[str, str, Optional[str]]]:
    """Yield (name, address, netmask) for up, non-loopback IPv4 interfaces."""
    addrs = psutil.net_if_addrs()
    stats = psutil.net_if_stats()

    for iface, addr_list in addrs.items():
        if iface not in stats or not stats[iface].isup:
            continue
        for addr in addr_list:
            if addr.family != socket.AF_INET:
                continue
            if _is_loopback(iface, addr.address):
                break
            yield iface, addr.address, addr.netmask
            break


def _macos_hardware_ports() -> Dict[str, str]:
    """Map device name to hardware port name (e.g. en0 -> Wi-Fi)."""
    ports: Dict[str, str] = {}
    try:
        result = get_subprocess_cache().run(
            ['networksetup', '-listallhardwareports'],
            ttl=NETWORK.HARDWARE_PORTS_TTL_SECONDS,
        )
    except SubprocessError as e:
        logger.debug(f"Hardware port listing unavailable: {e}")
        return ports

    current_port = ""
    for line in result.stdout.splitlines():
        if line.startswith('Hardware Port:'):
            current_port = line.replace('Hardware Port:', '').strip()
        else:
            match = re.match(r'Device:\s*(\S+)', line)
            if match and current_port:
                ports[match.group(1)] = current_port
    return ports


def _is_ethernet(name: str, platform: Optional[ArpPlatform],
                 hardware_ports: Dict[str, str]) -> bool:
    """Best guess at whether an interface is wired."""
    if platform == ArpPlatform.MACOS:
        port = hardware_ports.get(name, "")
        return 'Ethernet' in port or 'LAN' in port

    lowered = name.lower()
    if lowered.startswith(WIRELESS_NAME_PREFIXES) or 'wireless' in lowered:
        return False
    if platform == ArpPlatform.WINDOWS:
        return 'ethernet' in lowered
    return lowered.startswith(ETHERNET_NAME_PREFIXES)


def list_local_interfaces() -> List[LocalInterface]:
    """List up, non-loopback IPv4 interfaces tagged wired or not."""
    platform = current_platform()
    try:
        hardware_ports = _macos_hardware_ports() if platform == ArpPlatform.MACOS else {}
        return [
            LocalInterface(
                name=name,
                address=address,
                is_up=True,
                is_ethernet=_is_ethernet(name, platform, hardware_ports),
            )
            for name, address, _ in _ipv4_interfaces()
        ]
    except Exception as e:
        logger.error(f"Error listing interfaces: {e}", exc_info=True)
        return []


def parse_default_gateway(output: str, platform: ArpPlatform) -> str:
    """Extract the default gateway from routing table output, or ""."""
    _, pattern = GATEWAY_COMMANDS[platform]
    match = pattern.search(output)
    return match.group(1) if match else ""


def default_gateway(platform: Optional[ArpPlatform] = None) -> str:
    """Read the default IPv4 gateway from the routing table, or ""."""
    platform = platform or current_platform()
    if platform is None:
        return ""

    command, _ = GATEWAY_COMMANDS[platform]
    try:
        result = get_subprocess_cache().run(
            list(command), ttl=0, bypass_cache=True, timeout=NETWORK.ROUTE_TIMEOUT_SECONDS
        )
    except SubprocessError as e:
        logger.debug(f"Gateway lookup failed: {e}")
        return ""

    if result.returncode != 0:
        return ""
    return parse_default_gateway(result.stdout, platform)


def resolve_network_context() -> NetworkContext:
    """Describe the first active IPv4 interface.

    Returns an empty NetworkContext (empty prefix) when there is none.
    """
    try:
        for name, address, netmask in _ipv4_interfaces():
            context = NetworkContext(
                local_ip=address,
                subnet_mask=netmask or NETWORK.DEFAULT_NETMASK,
                gateway=default_gateway(),
                prefix=address_prefix(address),
                interface=name,
            )
            logger.debug(f"Network context: {context}")
            return context
    except Exception as e:
        logger.error(f"Error getting network info: {e}", exc_info=True)

    logger.info("No active IPv4 interface; nothing to scan")
    return NetworkContext()
