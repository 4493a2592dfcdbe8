"""Logging for Net Bar.

Everything logs under the ``netbar`` logger: a rotating file in the data
directory (``~/.netbar/netbar.log`` by default) at DEBUG, and stderr at
WARNING unless debug is on. Modules take a child logger once at import:

    logger = get_logger(__name__)    # "netbar.monitor.probe"
"""
import logging
import sys
import time
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import List, Optional

from config.constants import STORAGE

ROOT_LOGGER_NAME = "netbar"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class ConsoleFormatter(logging.Formatter):
    """Colors the level name when stderr is a terminal."""

    LEVEL_COLORS = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self, stream=None):
        super().__init__(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)
        stream = stream or sys.stderr
        self.colorize = hasattr(stream, "isatty") and stream.isatty()

    def format(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelno) if self.colorize else None
        if not color:
            return super().format(record)
        # Copy so file handlers still see the plain level name
        colored = logging.makeLogRecord(record.__dict__)
        colored.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(colored)


def _file_handler(data_dir: Path) -> logging.Handler:
    data_dir.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        data_dir / STORAGE.LOG_FILE,
        maxBytes=STORAGE.LOG_MAX_BYTES,
        backupCount=STORAGE.LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    return handler


def _console_handler(debug: bool) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(logging.DEBUG if debug else logging.WARNING)
    handler.setFormatter(ConsoleFormatter(sys.stderr))
    return handler


def setup_logging(
    data_dir: Optional[Path] = None,
    debug: bool = False,
    console_output: bool = True,
    log_to_file: bool = True,
) -> logging.Logger:
    """Install handlers on the ``netbar`` logger and return it.

    Safe to call again (e.g. to switch debug on); previous handlers are
    closed and replaced.
    """
    data_dir = data_dir or Path.home() / STORAGE.DATA_DIR_NAME
    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(logging.DEBUG if debug else logging.INFO)

    for old in list(root.handlers):
        root.removeHandler(old)
        old.close()

    handlers: List[logging.Handler] = []
    if log_to_file:
        handlers.append(_file_handler(data_dir))
    if console_output:
        handlers.append(_console_handler(debug))
    for handler in handlers:
        root.addHandler(handler)

    root.info(f"Logging ready (debug={debug}, file={log_to_file}, console={console_output})")
    return root


def get_logger(name: str) -> logging.Logger:
    """Child of ``netbar`` named after the last two parts of ``name``."""
    short_name = ".".join(name.split(".")[-2:])
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{short_name}")


def log_exception(logger: logging.Logger, message: str, exc: BaseException) -> None:
    """Log ``message`` at ERROR with the exception type and traceback."""
    logger.error(f"{message}: {type(exc).__name__}: {exc}", exc_info=exc)


def log_subprocess_call(
    logger: logging.Logger,
    command: list,
    returncode: int,
    duration_ms: float,
    success: bool,
) -> None:
    """One line per finished command; failures are raised to INFO."""
    shown = " ".join(command[:3])
    if len(command) > 3:
        shown += " ..."
    logger.log(
        logging.DEBUG if success else logging.INFO,
        f"ran {shown} rc={returncode} in {duration_ms:.1f}ms",
    )


class LogContext:
    """Times a block and logs how it ended.

    >>> with LogContext(logger, "Bandwidth test"):
    ...     run_test()

    Exceptions are logged at ERROR and re-raised.
    """

    def __init__(self, logger: logging.Logger, operation: str, level: int = logging.DEBUG):
        self.logger = logger
        self.operation = operation
        self.level = level
        self.elapsed_ms = 0.0
        self._started = 0.0

    def __enter__(self) -> "LogContext":
        self._started = time.perf_counter()
        self.logger.log(self.level, f"{self.operation} started")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.elapsed_ms = (time.perf_counter() - self._started) * 1000
        if exc_type is None:
            self.logger.log(self.level, f"{self.operation} finished in {self.elapsed_ms:.0f}ms")
        else:
            self.logger.error(f"{self.operation} failed after {self.elapsed_ms:.0f}ms: {exc_val}")
        return False
