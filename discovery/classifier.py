"""Heuristic device classification.

Pure, deterministic functions mapping what a probe learns about a host
(hostname, MAC, round-trip time, local interfaces) to a category,
connection medium, signal bucket and icon.
"""

from __future__ import annotations

from typing import Dict, Iterable, Optional, Tuple

from discovery.models import (
    ConnectionMedium,
    DeviceCategory,
    LocalInterface,
    SignalQuality,
)


# ============================================================================
# Vendor OUI to Category Mapping
# ============================================================================

_PHONE_OUIS = (
    # Apple
    "00:1A:11", "00:26:B0", "00:50:C2", "A4:D1:8C", "F0:DB:E2", "8C:29:37",
    "DC:2B:2A", "B8:78:2E", "C8:BC:C8", "00:A0:40", "00:0D:93", "00:17:F2",
    "00:1C:B3", "00:1E:C2", "00:1F:5B", "00:21:E9", "00:23:12", "00:23:32",
    "00:23:6C", "00:23:DF", "00:24:8C", "00:25:00", "00:25:4B", "00:25:BC",
    "00:26:08", "00:26:4A", "00:26:BB",
    # Samsung
    "00:07:AB", "00:12:FB", "00:15:B9", "00:16:32", "00:17:C9", "00:18:AF",
    "00:1B:98", "00:1C:43", "00:1D:25", "00:1E:7D", "00:1F:CC", "00:21:19",
    "00:21:4C", "00:23:39", "00:23:D6", "00:26:37", "D0:17:6A", "E8:50:8B",
    "34:23:BA", "A0:0B:BA", "3C:8B:FE",
    # Huawei
    "00:18:82", "00:1E:10", "00:25:68", "00:46:4B", "00:9A:CD", "04:02:1F",
    "10:1F:74", "28:6E:D4", "34:6B:D3", "48:46:FB", "58:2A:F7", "70:72:3C",
    # Xiaomi
    "00:9E:C8", "14:F6:5A", "28:E3:1F", "34:80:B3", "50:8F:4C", "64:09:80",
    "68:DF:DD", "74:51:BA", "78:02:F8", "8C:BE:BE", "98:FA:E3", "F8:A4:5F",
    # OnePlus
    "A8:5E:45", "AC:37:43", "D4:6A:A8",
    # Google Pixel
    "74:E5:F9", "F4:F5:A5",
)

VENDOR_OUI_MAP: Dict[str, DeviceCategory] = {
    oui: DeviceCategory.PHONE for oui in _PHONE_OUIS
}

# Hostname substring rules, checked in order; the first hit wins
NAME_RULES: Tuple[Tuple[Tuple[str, ...], DeviceCategory], ...] = (
    (("iphone", "android", "samsung", "galaxy", "pixel", "oneplus", "huawei",
      "xiaomi", "oppo", "vivo", "realme", "nokia", "motorola", "lg-", "htc"),
     DeviceCategory.PHONE),
    (("ipad", "tablet", "tab-"), DeviceCategory.TABLET),
    (("watch", "band", "fit", "wearable"), DeviceCategory.WEARABLE),
    (("tv", "chromecast", "roku", "firestick", "apple-tv", "shield"), DeviceCategory.TV),
    (("laptop", "macbook", "thinkpad", "latitude", "pavilion", "inspiron",
      "vivobook", "zenbook", "ideapad", "surface", "matebook", "notebook"),
     DeviceCategory.LAPTOP),
    # Bare "desktop" is not listed: Windows names workstations DESKTOP-XXXX
    (("desktop-pc", "workstation", "tower", "optiplex"), DeviceCategory.DESKTOP),
    (("printer", "scanner", "canon", "epson", "hp-", "brother"), DeviceCategory.PRINTER),
    (("camera", "cam", "ring", "nest-cam", "arlo"), DeviceCategory.CAMERA),
    (("speaker", "echo", "homepod", "google-home", "alexa", "sonos"), DeviceCategory.SPEAKER),
)

WINDOWS_HOSTNAME_PREFIX = "desktop-"

# Icon glyphs per category (Segoe MDL2 code points)
DEFAULT_ICON = "\uE167"
CATEGORY_ICONS: Dict[DeviceCategory, str] = {
    DeviceCategory.PHONE: "\uE1E7",
    DeviceCategory.TABLET: "\uE1E7",
    DeviceCategory.LAPTOP: "\uE167",
    DeviceCategory.DESKTOP: "\uE167",
    DeviceCategory.TV: "\uE1E1",
    DeviceCategory.PRINTER: "\uE1E0",
    DeviceCategory.CAMERA: "\uE156",
    DeviceCategory.SPEAKER: "\uE1DB",
    DeviceCategory.WEARABLE: "\uE1E7",
}

# Latency bucket upper bounds (exclusive), in milliseconds
SIGNAL_THRESHOLDS_MS: Tuple[Tuple[float, SignalQuality], ...] = (
    (10, SignalQuality.EXCELLENT),
    (50, SignalQuality.GOOD),
    (100, SignalQuality.FAIR),
)


def address_prefix(ip: Optional[str]) -> str:
    """Return the first three octets of a dotted IPv4 address, or ""."""
    if not ip:
        return ""
    parts = ip.split('.')
    if len(parts) != 4:
        return ""
    return '.'.join(parts[:3])


def address_sort_key(ip: str) -> Tuple[int, ...]:
    """Numeric ordering key for a dotted IPv4 address; malformed ones sort last."""
    try:
        return (0,) + tuple(int(octet) for octet in ip.split('.'))
    except ValueError:
        return (1,)


def oui_prefix(mac: Optional[str]) -> str:
    """Return the vendor prefix (first three octets) of a MAC address."""
    mac = (mac or "").upper().replace('-', ':')
    return mac[:8] if len(mac) >= 8 else ""


def categorize(name: Optional[str], mac: Optional[str]) -> DeviceCategory:
    """Infer a device category from its hostname and MAC address.

    The MAC vendor prefix is checked first and wins over any hostname
    rule. Hostname rules are substring matches tried in NAME_RULES order.
    A Windows-style "desktop-" hostname with no other hint counts as a
    laptop.
    """
    category = VENDOR_OUI_MAP.get(oui_prefix(mac))
    if category is not None:
        return category

    lowered = (name or "").lower()
    for tokens, rule_category in NAME_RULES:
        if any(token in lowered for token in tokens):
            return rule_category

    if lowered.startswith(WINDOWS_HOSTNAME_PREFIX):
        return DeviceCategory.LAPTOP

    return DeviceCategory.UNKNOWN


def signal_quality(round_trip_ms: float) -> SignalQuality:
    """Bucket a round-trip time: <10 Excellent, <50 Good, <100 Fair, else Poor."""
    for upper_bound, quality in SIGNAL_THRESHOLDS_MS:
        if round_trip_ms < upper_bound:
            return quality
    return SignalQuality.POOR


def connection_medium(ip: str, interfaces: Iterable[LocalInterface]) -> ConnectionMedium:
    """Guess the medium of a remote device from the local interfaces.

    Ethernet when an up Ethernet interface sits on the same /24 as the
    device, otherwise Wireless. A bridged network can fool this.
    """
    prefix = address_prefix(ip)
    if not prefix:
        return ConnectionMedium.WIRELESS

    for iface in interfaces:
        if iface.is_up and iface.is_ethernet and address_prefix(iface.address) == prefix:
            return ConnectionMedium.ETHERNET
    return ConnectionMedium.WIRELESS


def icon_for(category: DeviceCategory) -> str:
    """Glyph shown for a category."""
    return CATEGORY_ICONS.get(category, DEFAULT_ICON)
