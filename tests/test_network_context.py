"""Tests for discovery/network_context.py"""

import socket
from unittest.mock import MagicMock, patch

import pytest

from config import SubprocessError
from discovery.arp_table import ArpPlatform
from discovery.models import NetworkContext
from discovery.network_context import (
    _is_ethernet,
    default_gateway,
    list_local_interfaces,
    parse_default_gateway,
    resolve_network_context,
)

LINUX_ROUTE = "default via 192.168.1.1 dev eth0 proto dhcp metric 100\n"

MACOS_ROUTE = """\
   route to: default
destination: default
       mask: default
    gateway: 192.168.1.254
  interface: en0
"""

WINDOWS_ROUTE = """\
IPv4 Route Table
===========================================================================
Active Routes:
Network Destination        Netmask          Gateway       Interface  Metric
          0.0.0.0          0.0.0.0      192.168.0.1    192.168.0.23     25
===========================================================================
"""


class TestParseDefaultGateway:
    """Routing table output for each platform."""

    @pytest.mark.parametrize(
        "platform,output,expected",
        [
            (ArpPlatform.LINUX, LINUX_ROUTE, "192.168.1.1"),
            (ArpPlatform.MACOS, MACOS_ROUTE, "192.168.1.254"),
            (ArpPlatform.WINDOWS, WINDOWS_ROUTE, "192.168.0.1"),
        ],
    )
    def test_parse(self, platform, output, expected):
        assert parse_default_gateway(output, platform) == expected

    @pytest.mark.parametrize("platform", list(ArpPlatform))
    def test_no_default_route(self, platform):
        assert parse_default_gateway("", platform) == ""

    def test_default_gateway_command_failure(self):
        cache = MagicMock()
        cache.run.side_effect = SubprocessError("Command not found: ip", command=["ip"])
        with patch("discovery.network_context.get_subprocess_cache", return_value=cache):
            assert default_gateway(ArpPlatform.LINUX) == ""

    def test_default_gateway_reads_route(self):
        cache = MagicMock()
        cache.run.return_value = MagicMock(returncode=0, stdout=LINUX_ROUTE)
        with patch("discovery.network_context.get_subprocess_cache", return_value=cache):
            assert default_gateway(ArpPlatform.LINUX) == "192.168.1.1"
        assert cache.run.call_args[0][0] == ["ip", "route", "show", "default"]


class TestResolveNetworkContext:
    """Tests for interface selection."""

    def test_first_active_interface(self, mock_network_interface):
        with patch("discovery.network_context.default_gateway", return_value="192.168.1.1"):
            context = resolve_network_context()

        assert context == NetworkContext(
            local_ip="192.168.1.50",
            subnet_mask="255.255.255.0",
            gateway="192.168.1.1",
            prefix="192.168.1",
            interface="eth0",
        )
        assert context.is_scannable

    def test_down_interface_skipped(self, mock_network_interface):
        mock_network_interface.net_if_stats.return_value["eth0"] = MagicMock(isup=False)
        with patch("discovery.network_context.default_gateway", return_value=""):
            context = resolve_network_context()

        assert context.prefix == ""
        assert not context.is_scannable
        assert list(context.host_addresses()) == []

    def test_ipv6_only_interface_skipped(self, mock_network_interface):
        mock_network_interface.net_if_addrs.return_value["eth0"] = [
            MagicMock(family=socket.AF_INET6, address="fe80::1", netmask=None),
        ]
        with patch("discovery.network_context.default_gateway", return_value=""):
            assert resolve_network_context() == NetworkContext()

    def test_missing_netmask_uses_default(self, mock_network_interface):
        mock_network_interface.net_if_addrs.return_value["eth0"] = [
            MagicMock(family=socket.AF_INET, address="10.0.0.7", netmask=None),
        ]
        with patch("discovery.network_context.default_gateway", return_value=""):
            context = resolve_network_context()

        assert context.subnet_mask == "255.255.255.0"
        assert context.prefix == "10.0.0"

    def test_psutil_failure_returns_empty(self, mock_network_interface):
        mock_network_interface.net_if_addrs.side_effect = OSError("no access")
        assert resolve_network_context() == NetworkContext()

    def test_host_addresses_cover_the_24(self, home_context):
        hosts = list(home_context.host_addresses())
        assert len(hosts) == 254
        assert hosts[0] == "192.168.1.1"
        assert hosts[-1] == "192.168.1.254"


class TestLocalInterfaces:
    """Tests for the wired/wireless interface tagging."""

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("eth0", True),
            ("enp3s0", True),
            ("wlan0", False),
            ("wlp2s0", False),
        ],
    )
    def test_linux_names(self, name, expected):
        assert _is_ethernet(name, ArpPlatform.LINUX, {}) is expected

    def test_windows_names(self):
        assert _is_ethernet("Ethernet 2", ArpPlatform.WINDOWS, {}) is True
        assert _is_ethernet("Wi-Fi", ArpPlatform.WINDOWS, {}) is False

    def test_macos_uses_hardware_ports(self):
        ports = {"en0": "Wi-Fi", "en5": "USB 10/100/1000 LAN"}
        assert _is_ethernet("en0", ArpPlatform.MACOS, ports) is False
        assert _is_ethernet("en5", ArpPlatform.MACOS, ports) is True

    def test_list_local_interfaces(self, mock_network_interface):
        with patch("discovery.network_context.current_platform", return_value=ArpPlatform.LINUX):
            interfaces = list_local_interfaces()

        assert len(interfaces) == 1
        assert interfaces[0].name == "eth0"
        assert interfaces[0].address == "192.168.1.50"
        assert interfaces[0].is_ethernet is True
