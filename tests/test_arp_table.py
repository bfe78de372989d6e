"""Tests for discovery/arp_table.py"""

from unittest.mock import MagicMock, patch

import pytest

from config import SubprocessError
from discovery.arp_table import (
    ARP_FORMATS,
    ArpPlatform,
    normalize_mac,
    parse_arp_output,
    read_arp_table,
)

WINDOWS_OUTPUT = """
Interface: 192.168.1.50 --- 0x7
  Internet Address      Physical Address      Type
  192.168.1.1           00-11-22-33-44-55     dynamic
  192.168.1.10           aa-bb-cc-dd-ee-ff     dynamic
  192.168.1.255         ff-ff-ff-ff-ff-ff     static
"""

LINUX_ARP_OUTPUT = """\
Address                  HWtype  HWaddress           Flags Mask            Iface
192.168.1.1              ether   00:11:22:33:44:55   C                     eth0
192.168.1.20             ether   a4:d1:8c:01:02:03   C                     eth0
192.168.1.99                     (incomplete)                              eth0
"""

LINUX_NEIGH_OUTPUT = """\
192.168.1.1 dev eth0 lladdr 00:11:22:33:44:55 REACHABLE
192.168.1.42 dev eth0 FAILED
"""

MACOS_OUTPUT = """\
? (192.168.1.1) at 0:11:22:33:44:55 on en0 ifscope [ethernet]
? (192.168.1.20) at a4:d1:8c:1:2:3 on en0 ifscope [ethernet]
? (192.168.1.33) at (incomplete) on en0 ifscope [ethernet]
? (224.0.0.251) at 1:0:5e:0:0:fb on en0 ifscope permanent [ethernet]
"""


def completed(stdout="", returncode=0):
    return MagicMock(stdout=stdout, returncode=returncode, stderr="")


class TestNormalizeMac:
    """Tests for MAC address normalisation."""

    def test_already_normalized(self):
        assert normalize_mac("AA:BB:CC:DD:EE:FF") == "AA:BB:CC:DD:EE:FF"

    def test_dash_separator(self):
        assert normalize_mac("aa-bb-cc-dd-ee-ff") == "AA:BB:CC:DD:EE:FF"

    def test_no_leading_zeros(self):
        assert normalize_mac("a:b:c:d:e:f") == "0A:0B:0C:0D:0E:0F"


class TestParsers:
    """Each platform format parsed from literal sample text."""

    def test_windows_literal_line(self):
        line = "  192.168.1.10           aa-bb-cc-dd-ee-ff     dynamic"
        assert parse_arp_output(line, ArpPlatform.WINDOWS) == {"192.168.1.10": "AA:BB:CC:DD:EE:FF"}

    def test_windows_table(self):
        table = parse_arp_output(WINDOWS_OUTPUT, ArpPlatform.WINDOWS)
        assert table == {
            "192.168.1.1": "00:11:22:33:44:55",
            "192.168.1.10": "AA:BB:CC:DD:EE:FF",
        }

    def test_linux_arp(self):
        table = parse_arp_output(LINUX_ARP_OUTPUT, ArpPlatform.LINUX)
        assert table == {
            "192.168.1.1": "00:11:22:33:44:55",
            "192.168.1.20": "A4:D1:8C:01:02:03",
        }

    def test_linux_ip_neigh(self):
        table = parse_arp_output(LINUX_NEIGH_OUTPUT, ArpPlatform.LINUX)
        assert table == {"192.168.1.1": "00:11:22:33:44:55"}

    def test_macos_pads_short_octets(self):
        table = parse_arp_output(MACOS_OUTPUT, ArpPlatform.MACOS)
        assert table["192.168.1.1"] == "00:11:22:33:44:55"
        assert table["192.168.1.20"] == "A4:D1:8C:01:02:03"
        assert "192.168.1.33" not in table

    @pytest.mark.parametrize("platform", list(ArpPlatform))
    def test_garbage_yields_empty(self, platform):
        assert parse_arp_output("no entries\n\n???", platform) == {}

    def test_every_platform_has_a_format(self):
        assert set(ARP_FORMATS) == set(ArpPlatform)


class TestReadArpTable:
    """Reading is best-effort and never raises."""

    def test_reads_and_parses(self):
        with patch("discovery.arp_table.safe_run", return_value=completed(WINDOWS_OUTPUT)) as mock_run:
            table = read_arp_table(ArpPlatform.WINDOWS)

        assert table["192.168.1.10"] == "AA:BB:CC:DD:EE:FF"
        args, kwargs = mock_run.call_args
        assert args[0] == ["arp", "-a"]
        assert kwargs["timeout"] > 0

    def test_linux_falls_back_to_ip_neigh(self):
        def fake_run(cmd, timeout=None):
            if cmd[0] == "arp":
                raise SubprocessError("Command not found: arp", command=cmd)
            return completed(LINUX_NEIGH_OUTPUT)

        with patch("discovery.arp_table.safe_run", side_effect=fake_run) as mock_run:
            table = read_arp_table(ArpPlatform.LINUX)

        assert table == {"192.168.1.1": "00:11:22:33:44:55"}
        assert mock_run.call_count == 2

    def test_missing_utility_returns_empty(self):
        with patch(
            "discovery.arp_table.safe_run",
            side_effect=SubprocessError("Command not found: arp", command=["arp", "-an"]),
        ):
            assert read_arp_table(ArpPlatform.MACOS) == {}

    def test_non_zero_exit_returns_empty(self):
        with patch("discovery.arp_table.safe_run", return_value=completed("", returncode=1)):
            assert read_arp_table(ArpPlatform.WINDOWS) == {}

    def test_timeout_returns_empty(self):
        with patch(
            "discovery.arp_table.safe_run",
            side_effect=SubprocessError("Command timed out after 5.0s", command=["arp", "-a"]),
        ):
            assert read_arp_table(ArpPlatform.WINDOWS) == {}

    def test_unexpected_error_returns_empty(self):
        with patch("discovery.arp_table.safe_run", side_effect=ValueError("bad output")):
            assert read_arp_table(ArpPlatform.WINDOWS) == {}

    def test_unsupported_platform_returns_empty(self):
        with patch("discovery.arp_table.current_platform", return_value=None), \
                patch("discovery.arp_table.safe_run") as mock_run:
            assert read_arp_table() == {}
        mock_run.assert_not_called()
