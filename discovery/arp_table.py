"""ARP table reading for IP to MAC correlation.

Each supported operating system is one ArpPlatform variant with the
read-only commands to try and the pattern that pulls an IP/MAC pair out
of a line of their output. Reading is best-effort: any failure yields an
empty mapping so that hosts are still reported, just without a MAC.

Example:
    >>> parse_arp_output("  192.168.1.10   aa-bb-cc-dd-ee-ff   dynamic", ArpPlatform.WINDOWS)
    {'192.168.1.10': 'AA:BB:CC:DD:EE:FF'}
"""

from __future__ import annotations

import re
import sys
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Pattern, Tuple

from config import NETWORK, ScannerError, SubprocessError, get_logger, safe_run

logger = get_logger(__name__)

# Entries that never identify a real host
IGNORED_MACS = frozenset({"FF:FF:FF:FF:FF:FF", "00:00:00:00:00:00"})


class ArpPlatform(Enum):
    """Operating systems with a known ARP output format."""
    WINDOWS = "windows"
    LINUX = "linux"
    MACOS = "macos"


@dataclass(frozen=True)
class ArpFormat:
    """Commands to run and the line pattern for one platform.

    Commands are tried in order until one exits successfully.
    """
    commands: Tuple[Tuple[str, ...], ...]
    pattern: Pattern[str]


ARP_FORMATS: Dict[ArpPlatform, ArpFormat] = {
    # "  192.168.1.10           aa-bb-cc-dd-ee-ff     dynamic"
    ArpPlatform.WINDOWS: ArpFormat(
        commands=(("arp", "-a"),),
        pattern=re.compile(
            r'(\d+\.\d+\.\d+\.\d+)\s+([0-9a-fA-F]{2}(?:[:-][0-9a-fA-F]{2}){5})'
        ),
    ),
    # "192.168.1.1  ether  aa:bb:cc:dd:ee:ff  C  eth0"
    # "192.168.1.1 dev eth0 lladdr aa:bb:cc:dd:ee:ff REACHABLE" (ip neigh)
    ArpPlatform.LINUX: ArpFormat(
        commands=(("arp", "-n"), ("ip", "neigh", "show")),
        pattern=re.compile(
            r'(\d+\.\d+\.\d+\.\d+).*?([0-9a-fA-F]{2}(?::[0-9a-fA-F]{2}){5})'
        ),
    ),
    # "? (192.168.1.1) at a:b:c:d:e:f on en0 ifscope [ethernet]"
    ArpPlatform.MACOS: ArpFormat(
        commands=(("arp", "-an"),),
        pattern=re.compile(
            r'\((\d+\.\d+\.\d+\.\d+)\)\s+at\s+([0-9a-fA-F]{1,2}(?::[0-9a-fA-F]{1,2}){5})'
        ),
    ),
}


def normalize_mac(mac_address: str) -> str:
    """Normalize MAC address to XX:XX:XX:XX:XX:XX format."""
    mac_clean = mac_address.strip().upper().replace("-", ":").replace(".", ":")
    parts = mac_clean.split(":")
    if len(parts) == 6:
        return ":".join(p.zfill(2) for p in parts)
    return mac_address.upper()


def current_platform() -> Optional[ArpPlatform]:
    """Map sys.platform to an ArpPlatform, or None if unsupported."""
    if sys.platform.startswith("win"):
        return ArpPlatform.WINDOWS
    if sys.platform.startswith("linux"):
        return ArpPlatform.LINUX
    if sys.platform == "darwin":
        return ArpPlatform.MACOS
    return None


def parse_arp_output(output: str, platform: ArpPlatform) -> Dict[str, str]:
    """Extract an IP to MAC mapping from ARP utility output.

    Lines that do not match the platform pattern (headers, incomplete
    entries) are skipped.
    """
    pattern = ARP_FORMATS[platform].pattern
    table: Dict[str, str] = {}

    for line in output.splitlines():
        match = pattern.search(line)
        if not match:
            continue
        mac = normalize_mac(match.group(2))
        if mac in IGNORED_MACS:
            continue
        table[match.group(1)] = mac

    return table


def _run_arp_commands(commands: Tuple[Tuple[str, ...], ...]) -> str:
    """Return stdout of the first command that succeeds.

    Raises:
        ScannerError: If every command is missing or fails.
    """
    for cmd in commands:
        command: List[str] = list(cmd)
        try:
            result = safe_run(command, timeout=NETWORK.ARP_TIMEOUT_SECONDS)
        except SubprocessError as e:
            logger.debug(f"ARP command unavailable: {' '.join(command)} - {e}")
            continue
        if result.returncode == 0:
            return result.stdout
        logger.debug(f"ARP command {' '.join(command)} exited with {result.returncode}")
    raise ScannerError("No ARP command succeeded", {"commands": [" ".join(c) for c in commands]})


def read_arp_table(platform: Optional[ArpPlatform] = None) -> Dict[str, str]:
    """Read the system ARP cache as {ip: MAC}.

    Never raises; returns an empty mapping when the platform is
    unsupported, the utility is missing or fails, or its output cannot
    be parsed.
    """
    platform = platform or current_platform()
    if platform is None:
        logger.warning(f"No ARP reader for platform {sys.platform!r}")
        return {}

    try:
        output = _run_arp_commands(ARP_FORMATS[platform].commands)
        table = parse_arp_output(output, platform)
    except ScannerError as e:
        logger.warning(f"Could not read ARP table; devices will have unknown MACs: {e}")
        return {}
    except Exception as e:
        logger.error(f"ARP table read failed: {e}", exc_info=True)
        return {}

    logger.debug(f"ARP table: {len(table)} entries ({platform.value})")
    return table
