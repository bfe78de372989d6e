"""Running the read-only system utilities discovery depends on.

ARP, routing and hardware-port information comes from ``arp``, ``ip``,
``route`` and ``networksetup``. They are only ever run through
SubprocessCache.run(), which checks the command against
ALLOWED_SUBPROCESS_COMMANDS, never uses a shell, always applies a
timeout and turns every failure to start or finish into SubprocessError.
A non-zero exit is not an error here; callers inspect ``returncode``.

Usage:
    from config.subprocess_cache import safe_run, get_subprocess_cache

    # ARP state changes constantly: always run fresh
    result = safe_run(['arp', '-n'], timeout=5.0)

    # Hardware ports rarely change: reuse for a minute
    result = get_subprocess_cache().run(['networksetup', '-listallhardwareports'], ttl=60.0)
"""

# nosec B404 - commands are allow-listed and run without a shell
import subprocess
import threading
import time
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from config.constants import ALLOWED_SUBPROCESS_COMMANDS, INTERVALS
from config.exceptions import SubprocessError
from config.logging_config import get_logger, log_subprocess_call

logger = get_logger(__name__)

# command line -> (monotonic time stored, result)
_Entry = Tuple[float, subprocess.CompletedProcess]


def _check_allowed(cmd: List[str]) -> None:
    if not cmd:
        raise SubprocessError("Empty command", command=cmd)
    program = Path(cmd[0]).name
    if program not in ALLOWED_SUBPROCESS_COMMANDS:
        raise SubprocessError(
            f"Command not in allowlist: {program}",
            command=cmd,
            details={"allowed": sorted(ALLOWED_SUBPROCESS_COMMANDS)},
        )


class SubprocessCache:
    """Allow-listed command runner with a per-command-line result cache.

    Attributes:
        default_ttl: Seconds a cached result stays valid when run() gets no ttl.
    """

    def __init__(self, default_ttl: float = 5.0):
        self.default_ttl = default_ttl
        self._entries: Dict[Tuple[str, ...], _Entry] = {}
        self._lock = threading.Lock()

    def _lookup(self, key: Tuple[str, ...], ttl: float) -> Optional[subprocess.CompletedProcess]:
        with self._lock:
            entry = self._entries.get(key)
        if entry is None:
            return None
        stored_at, result = entry
        if time.monotonic() - stored_at >= ttl:
            return None
        return result

    def run(
        self,
        cmd: List[str],
        ttl: Optional[float] = None,
        bypass_cache: bool = False,
        timeout: Optional[float] = None,
    ) -> subprocess.CompletedProcess:
        """Run ``cmd`` (or return its cached result) with text output captured.

        Args:
            cmd: Program and arguments.
            ttl: Cache lifetime in seconds; defaults to ``default_ttl``.
            bypass_cache: Run fresh and leave the cache untouched.
            timeout: Seconds before the command is killed; defaults to
                INTERVALS.SUBPROCESS_TIMEOUT_SECONDS.

        Raises:
            SubprocessError: Not allow-listed, not installed, timed out or
                could not be started.
        """
        _check_allowed(cmd)
        key = tuple(cmd)

        if not bypass_cache:
            cached = self._lookup(key, self.default_ttl if ttl is None else ttl)
            if cached is not None:
                logger.debug(f"Reusing cached output of {cmd[0]}")
                return cached

        timeout = timeout or INTERVALS.SUBPROCESS_TIMEOUT_SECONDS
        started = time.monotonic()
        try:
            result = subprocess.run(  # nosec B603 - allow-listed, no shell
                cmd, capture_output=True, text=True, timeout=timeout
            )
        except subprocess.TimeoutExpired as e:
            logger.warning(f"{cmd[0]} timed out after {timeout}s")
            raise SubprocessError(
                f"Command timed out after {timeout}s", command=cmd, details={"timeout": timeout}
            ) from e
        except FileNotFoundError as e:
            raise SubprocessError(f"Command not found: {cmd[0]}", command=cmd) from e
        except OSError as e:
            raise SubprocessError(f"Could not run {cmd[0]}: {e}", command=cmd) from e

        log_subprocess_call(logger, cmd, result.returncode, (time.monotonic() - started) * 1000)

        if not bypass_cache:
            with self._lock:
                self._entries[key] = (time.monotonic(), result)
        return result


_global_cache: Optional[SubprocessCache] = None
_global_lock = threading.Lock()


def get_subprocess_cache() -> SubprocessCache:
    """Process-wide SubprocessCache, created on first use."""
    global _global_cache
    with _global_lock:
        if _global_cache is None:
            _global_cache = SubprocessCache()
        return _global_cache


def safe_run(cmd: List[str], timeout: Optional[float] = None) -> subprocess.CompletedProcess:
    """Run an allow-listed command fresh, without touching the cache."""
    return get_subprocess_cache().run(cmd, bypass_cache=True, timeout=timeout)
