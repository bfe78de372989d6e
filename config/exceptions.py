"""Exceptions raised by LAN Device Monitor.

Discovery degrades instead of failing, so these rarely reach a caller.
They are raised where something external goes wrong (a system utility,
a settings file) and caught by the component that knows the fallback.
"""

from typing import Any, Dict, List, Optional

# Captured command output is cut to this many characters in details
OUTPUT_EXCERPT_CHARS = 500


class DeviceMonitorError(Exception):
    """Root of the hierarchy.

    Attributes:
        message: What went wrong.
        details: Extra context such as the offending value or command.
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details: Dict[str, Any] = dict(details or {})

    def __str__(self) -> str:
        if not self.details:
            return self.message
        return f"{self.message} (details: {self.details})"


class ScannerError(DeviceMonitorError):
    """Discovery could not obtain something it needs, e.g. the ARP table.

    Example:
        >>> raise ScannerError("No ARP command succeeded", {"commands": ["arp -n"]})
    """


class ConfigurationError(DeviceMonitorError):
    """A setting is out of range (non-positive interval, capacity below 1).

    Example:
        >>> raise ConfigurationError("monitor_interval must be a positive number", {"value": -5})
    """


class SubprocessError(DeviceMonitorError):
    """An external command was refused, missing, or did not finish in time.

    Attributes:
        command: Program and arguments.
        returncode: Exit status, when the command ran.
        stdout: Captured standard output, when available.
        stderr: Captured standard error, when available.
    """

    def __init__(
        self,
        message: str,
        command: Optional[List[str]] = None,
        returncode: Optional[int] = None,
        stdout: Optional[str] = None,
        stderr: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        context: Dict[str, Any] = dict(details or {})
        if command:
            context["command"] = command
        if returncode is not None:
            context["returncode"] = returncode
        for name, text in (("stdout", stdout), ("stderr", stderr)):
            if text:
                context[name] = text[:OUTPUT_EXCERPT_CHARS]

        super().__init__(message, context)
        self.command = command
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
