"""
Logging setup: the application log, the per-purpose request logs of the
HTTP transport, and the bridge from Twisted's log events.
"""
import logging
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from twisted.python.log import PythonLoggingObserver

from chatfolders import APP_NAME, config_dir, settings
from chatfolders.util import to_bool

_logging_settings = settings.get("logging", {})

LOGS_PATH = Path(_logging_settings.get("path") or Path(config_dir, "logs"))
LOGGING_ENABLED = to_bool(_logging_settings.get("enabled", "false"))
LOGGING_MAX_BYTES = int(_logging_settings.get("max_bytes", 10_000_000))
LOGGING_BACKUP_COUNT = int(_logging_settings.get("backup_count", 1))

DEFAULT_FORMAT = "%(asctime)s %(levelname)s %(funcName)s %(message)s"


class LogFormatter(logging.Formatter):
    """Stamp records with an ISO 8601 time in UTC."""

    def formatTime(
        self, record: logging.LogRecord, datefmt: Optional[str] = None
    ) -> str:
        return datetime.fromtimestamp(record.created, timezone.utc).isoformat()


def _make_handler(
    filename: str, max_bytes: int, backup_count: int, enabled: bool
) -> logging.Handler:
    if not enabled:
        return logging.NullHandler()
    LOGS_PATH.mkdir(mode=0o700, parents=True, exist_ok=True)
    return RotatingFileHandler(
        Path(LOGS_PATH, filename),
        maxBytes=max_bytes,
        backupCount=backup_count,
    )


def make_file_logger(
    name: Optional[str] = None,
    max_bytes: int = LOGGING_MAX_BYTES,
    backup_count: int = LOGGING_BACKUP_COUNT,
    fmt: Optional[str] = DEFAULT_FORMAT,
    use_null_handler: bool = False,
) -> logging.Logger:
    """
    Return the logger called ``name`` (the root logger if ``None``),
    writing to ``<LOGS_PATH>/<name>.log`` if file logging is enabled.
    """
    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    handler = _make_handler(
        f"{name or APP_NAME}.log",
        max_bytes,
        backup_count,
        LOGGING_ENABLED and not use_null_handler,
    )
    if fmt:
        handler.setFormatter(LogFormatter(fmt=fmt))
    logger.addHandler(handler)
    return logger


def initialize_logger(
    to_stdout: bool = False, use_null_handler: bool = False
) -> logging.Logger:
    logger = make_file_logger(use_null_handler=use_null_handler)
    if to_stdout:
        stdout_handler = logging.StreamHandler(stream=sys.stdout)
        stdout_handler.setFormatter(LogFormatter(fmt=DEFAULT_FORMAT))
        logger.addHandler(stdout_handler)

    # Failed Deferreds and other twisted events end up in the handlers above.
    PythonLoggingObserver().start()
    logging.debug("%s logging initialized", APP_NAME)
    return logger


class MultiFileLogger:
    """
    Keep one log file per purpose next to each other, all named after
    ``basename``; ``log("requests", ...)`` on ``MultiFileLogger("x.api")``
    writes to ``x.api.requests.log``.
    """

    def __init__(self, basename: str) -> None:
        self.basename = basename
        self._loggers: dict[str, logging.Logger] = {}

    def log(self, logger_name: str, message: str) -> None:
        if not LOGGING_ENABLED:
            return
        if logger_name not in self._loggers:
            self._loggers[logger_name] = make_file_logger(
                f"{self.basename}.{logger_name}"
            )
        self._loggers[logger_name].debug(message)


class NullLogger:
    def log(self, logger_name: str, message: str) -> None:
        pass
