"""User-adjustable monitor settings persisted as JSON.

Defaults come from config.constants; a settings.json in the data
directory may override the tunable subset.
"""
import json
import threading
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Optional

from config.constants import INTERVALS, NETWORK, STORAGE
from config.exceptions import ConfigurationError
from config.logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class MonitorSettings:
    """Tunable discovery and monitoring parameters."""
    monitor_interval: float = INTERVALS.MONITOR_SECONDS
    probe_timeout: float = NETWORK.PROBE_TIMEOUT_SECONDS
    dns_timeout: float = NETWORK.DNS_TIMEOUT_SECONDS
    max_concurrent_probes: int = NETWORK.MAX_CONCURRENT_PROBES

    def validate(self) -> None:
        """Raise ConfigurationError if any value is out of range."""
        for field_name in ("monitor_interval", "probe_timeout", "dns_timeout"):
            value = getattr(self, field_name)
            if not isinstance(value, (int, float)) or value <= 0:
                raise ConfigurationError(
                    f"{field_name} must be a positive number", {"value": value}
                )
        if not isinstance(self.max_concurrent_probes, int) or self.max_concurrent_probes < 1:
            raise ConfigurationError(
                "max_concurrent_probes must be at least 1",
                {"value": self.max_concurrent_probes},
            )

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> 'MonitorSettings':
        defaults = cls()
        return cls(
            monitor_interval=data.get("monitor_interval", defaults.monitor_interval),
            probe_timeout=data.get("probe_timeout", defaults.probe_timeout),
            dns_timeout=data.get("dns_timeout", defaults.dns_timeout),
            max_concurrent_probes=data.get("max_concurrent_probes", defaults.max_concurrent_probes),
        )


class SettingsManager:
    """Loads and saves MonitorSettings in the data directory."""

    def __init__(self, data_dir: Path):
        self.data_dir = data_dir
        self.settings_file = data_dir / STORAGE.SETTINGS_FILE
        self._lock = threading.Lock()
        self._settings = self._load()

    def _load(self) -> MonitorSettings:
        if not self.settings_file.exists():
            return MonitorSettings()
        try:
            with open(self.settings_file, 'r') as f:
                settings = MonitorSettings.from_dict(json.load(f))
            settings.validate()
            return settings
        except (json.JSONDecodeError, OSError, AttributeError, ConfigurationError) as e:
            logger.warning(f"Could not load settings from {self.settings_file}: {e}")
            return MonitorSettings()

    def _save(self) -> None:
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            with open(self.settings_file, 'w') as f:
                json.dump(self._settings.to_dict(), f, indent=2)
        except OSError as e:
            logger.error(f"Error saving settings: {e}")

    @property
    def settings(self) -> MonitorSettings:
        return self._settings

    def update(self, **changes) -> MonitorSettings:
        """Apply and persist changes; invalid values leave settings untouched."""
        with self._lock:
            candidate = MonitorSettings.from_dict({**self._settings.to_dict(), **changes})
            candidate.validate()
            self._settings = candidate
            self._save()
        return self._settings


def get_settings_manager(data_dir: Optional[Path] = None) -> SettingsManager:
    """Create a settings manager for the given (or default) data directory."""
    if data_dir is None:
        data_dir = Path.home() / STORAGE.DATA_DIR_NAME
    return SettingsManager(data_dir)
