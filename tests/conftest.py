"""Pytest configuration and shared fixtures.

This module provides:
- Common test fixtures for data directories, network contexts and mocks
- Pytest markers for test categorization (unit, integration, slow)
"""
import socket
import tempfile
from pathlib import Path
from typing import Generator
from unittest.mock import MagicMock, patch

import pytest

from discovery.models import LocalInterface, NetworkContext


# =============================================================================
# Pytest Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test categorization."""
    config.addinivalue_line("markers", "unit: mark test as a unit test (fast, isolated)")
    config.addinivalue_line("markers", "integration: mark test as an integration test")
    config.addinivalue_line("markers", "slow: mark test as slow running")


# =============================================================================
# Directory and Path Fixtures
# =============================================================================


@pytest.fixture
def temp_data_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test data."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


# =============================================================================
# Network Fixtures
# =============================================================================


@pytest.fixture
def home_context() -> NetworkContext:
    """A typical home network on 192.168.1.0/24."""
    return NetworkContext(
        local_ip="192.168.1.50",
        subnet_mask="255.255.255.0",
        gateway="192.168.1.1",
        prefix="192.168.1",
        interface="eth0",
    )


@pytest.fixture
def wired_interface() -> LocalInterface:
    return LocalInterface(name="eth0", address="192.168.1.50", is_up=True, is_ethernet=True)


@pytest.fixture
def sample_arp_table() -> dict:
    return {
        "192.168.1.1": "00:11:22:33:44:55",
        "192.168.1.20": "A4:D1:8C:01:02:03",
    }


# =============================================================================
# Mock Fixtures
# =============================================================================


@pytest.fixture
def mock_subprocess() -> Generator[MagicMock, None, None]:
    """Mock subprocess for command execution testing."""
    with patch("config.subprocess_cache.subprocess.run") as mock_run:
        mock_run.return_value = MagicMock(
            returncode=0,
            stdout="",
            stderr="",
        )
        yield mock_run


@pytest.fixture
def mock_network_interface() -> Generator[MagicMock, None, None]:
    """Mock psutil interface enumeration: one LAN interface plus loopback."""
    with patch("discovery.network_context.psutil") as mock_psutil:
        mock_psutil.net_if_addrs.return_value = {
            "lo": [
                MagicMock(family=socket.AF_INET, address="127.0.0.1", netmask="255.0.0.0"),
            ],
            "eth0": [
                MagicMock(family=socket.AF_INET, address="192.168.1.50", netmask="255.255.255.0"),
            ],
        }
        mock_psutil.net_if_stats.return_value = {
            "lo": MagicMock(isup=True),
            "eth0": MagicMock(isup=True),
        }
        yield mock_psutil
