"""Logging for LAN Device Monitor.

Every module logs through a child of the ``lanmon`` logger. setup_logging()
attaches a rotating file in the data directory and, optionally, a colored
stderr handler that only shows warnings unless debug is on.

Usage:
    from config.logging_config import setup_logging, get_logger

    setup_logging(debug=True)
    logger = get_logger(__name__)
    logger.info("Scan started")
"""
import logging
import sys
import time
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Dict, List, Optional

from config.constants import STORAGE

ROOT_LOGGER_NAME = 'lanmon'
LOG_FORMAT = '%(asctime)s [%(threadName)s] %(name)s %(levelname)s: %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

_loggers: Dict[str, logging.Logger] = {}
_initialized = False


class ConsoleFormatter(logging.Formatter):
    """Colors the level name when stderr is a terminal."""

    LEVEL_COLORS = {
        logging.DEBUG: '\033[2m',
        logging.INFO: '\033[34m',
        logging.WARNING: '\033[33m',
        logging.ERROR: '\033[31m',
        logging.CRITICAL: '\033[1;31m',
    }
    RESET = '\033[0m'

    def __init__(self, use_colors: bool = True):
        super().__init__(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)
        self.use_colors = use_colors and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        if not self.use_colors:
            return super().format(record)
        # Copy so the file handler never sees escape codes
        colored = logging.makeLogRecord(record.__dict__)
        color = self.LEVEL_COLORS.get(record.levelno, '')
        colored.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(colored)


def _file_handler(data_dir: Path) -> logging.Handler:
    data_dir.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        data_dir / STORAGE.LOG_FILE,
        maxBytes=STORAGE.LOG_MAX_BYTES,
        backupCount=STORAGE.LOG_BACKUP_COUNT,
        encoding='utf-8',
    )
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    return handler


def _console_handler(debug: bool) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(logging.DEBUG if debug else logging.WARNING)
    handler.setFormatter(ConsoleFormatter())
    return handler


def setup_logging(
    data_dir: Optional[Path] = None,
    debug: bool = False,
    console_output: bool = True,
    log_to_file: bool = True,
) -> logging.Logger:
    """Configure the ``lanmon`` logger. Calling it again replaces the handlers.

    Args:
        data_dir: Directory for the log file (default ~/.lan-device-monitor).
        debug: Log at DEBUG level and show debug output on the console.
        console_output: Attach the stderr handler.
        log_to_file: Attach the rotating file handler.

    Returns:
        The ``lanmon`` logger.
    """
    global _initialized

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(logging.DEBUG if debug else logging.INFO)
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    if log_to_file:
        root_logger.addHandler(_file_handler(data_dir or Path.home() / STORAGE.DATA_DIR_NAME))
    if console_output:
        root_logger.addHandler(_console_handler(debug))

    _initialized = True
    root_logger.debug(f"Logging configured (debug={debug}, file={log_to_file})")
    return root_logger


def get_logger(name: str) -> logging.Logger:
    """Logger for a module, e.g. ``lanmon.discovery.scanner``.

    Only the last two dotted parts of ``name`` are kept.
    """
    short_name = '.'.join(name.split('.')[-2:])
    logger = _loggers.get(short_name)
    if logger is None:
        if not _initialized:
            # Library use without setup_logging(): keep warnings visible
            logging.basicConfig(level=logging.WARNING)
        logger = logging.getLogger(f'{ROOT_LOGGER_NAME}.{short_name}')
        _loggers[short_name] = logger
    return logger


def log_subprocess_call(
    logger: logging.Logger,
    command: List[str],
    returncode: int,
    duration_ms: float,
) -> None:
    """Record an external command run; non-zero exits are logged as warnings."""
    shown = ' '.join(command[:3]) + (' ...' if len(command) > 3 else '')
    level = logging.DEBUG if returncode == 0 else logging.WARNING
    logger.log(level, f"Ran `{shown}`: exit {returncode} in {duration_ms:.1f}ms")


class LogContext:
    """Logs how long a block took, or that it failed.

    Example:
        >>> with LogContext(logger, "Network scan"):
        ...     scanner.scan()
        # Logs: "Network scan completed in 1234ms"
    """

    def __init__(self, logger: logging.Logger, operation: str, level: int = logging.DEBUG):
        self.logger = logger
        self.operation = operation
        self.level = level
        self.start_time: Optional[float] = None

    @property
    def elapsed_ms(self) -> float:
        if self.start_time is None:
            return 0.0
        return (time.monotonic() - self.start_time) * 1000

    def __enter__(self):
        self.start_time = time.monotonic()
        self.logger.log(self.level, f"{self.operation} starting...")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type:
            self.logger.error(f"{self.operation} failed after {self.elapsed_ms:.0f}ms: {exc_val}")
        else:
            self.logger.log(self.level, f"{self.operation} completed in {self.elapsed_ms:.0f}ms")
        return False
