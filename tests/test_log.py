from logging import NullHandler
from logging.handlers import RotatingFileHandler
from pathlib import Path

import pytest

from chatfolders import APP_NAME
from chatfolders.log import (
    LOGGING_BACKUP_COUNT,
    LOGGING_ENABLED,
    LOGGING_MAX_BYTES,
    LOGS_PATH,
    MultiFileLogger,
    NullLogger,
    make_file_logger,
)


@pytest.fixture()
def logs_path(tmp_path, monkeypatch):
    monkeypatch.setattr("chatfolders.log.LOGGING_ENABLED", True)
    monkeypatch.setattr("chatfolders.log.LOGS_PATH", tmp_path)
    return tmp_path


@pytest.mark.parametrize(
    "constant, type_",
    [
        (LOGS_PATH, Path),
        (LOGGING_ENABLED, bool),
        (LOGGING_BACKUP_COUNT, int),
        (LOGGING_MAX_BYTES, int),
    ],
)
def test_constant_types(constant, type_):
    """
    The module-level contants exist and are of the expected type
    """
    assert isinstance(constant, type_)


def test_make_file_logger_returns_rotating_file_handler_if_enabled(logs_path):
    logger = make_file_logger("test_rotating_file_handler")
    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0], RotatingFileHandler)


def test_make_file_logger_returns_null_handler_if_use_null_handler_is_true(
    logs_path,
):
    logger = make_file_logger("test_null_handler", use_null_handler=True)
    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0], NullHandler)


def test_make_file_logger_returns_null_handler_if_disabled(monkeypatch):
    monkeypatch.setattr("chatfolders.log.LOGGING_ENABLED", False)
    logger = make_file_logger("test_disabled_handler")
    assert isinstance(logger.handlers[-1], NullHandler)


def test_make_file_logger_uses_app_name_for_log_path_if_name_is_none(
    logs_path,
):
    logger = make_file_logger(None)
    assert Path(logger.handlers[-1].baseFilename).name == f"{APP_NAME}.log"
    logger.removeHandler(logger.handlers[-1])


def test_make_file_logger_max_bytes(logs_path):
    max_bytes = 123456789
    logger = make_file_logger("test_max_bytes", max_bytes=max_bytes)
    assert logger.handlers[0].maxBytes == max_bytes


def test_make_file_logger_backup_count(logs_path):
    backup_count = 123
    logger = make_file_logger("test_backup_count", backup_count=backup_count)
    assert logger.handlers[0].backupCount == backup_count


def test_make_file_logger_fmt(logs_path):
    name = "test_make_file_logger_fmt"
    logger = make_file_logger(name, fmt="FMT %(message)s")
    logger.debug("test")
    log = Path(logs_path, f"{name}.log").read_text("utf-8")
    assert log.strip() == "FMT test"


def test_log_formatter_uses_utc_timezone(logs_path):
    name = "test_log_formatter_uses_utc_timezone"
    logger = make_file_logger(name)
    logger.debug("test")
    log = Path(logs_path, f"{name}.log").read_text("utf-8")
    assert log.split(" ")[0].split("+")[-1] == "00:00"


def test_multi_file_logger_write(logs_path):
    basename = "test_multi_file_logger_write"
    logger = MultiFileLogger(basename)
    logger.log("writer", "write_test_contents")
    p = Path(logs_path, f"{basename}.writer.log")
    assert p.read_text("utf-8").strip().endswith("write_test_contents")


def test_multi_file_logger_reuses_logger_per_purpose(logs_path):
    logger = MultiFileLogger("test_multi_file_logger_reuse")
    logger.log("requests", "first")
    logger.log("requests", "second")
    p = Path(logs_path, "test_multi_file_logger_reuse.requests.log")
    assert p.read_text("utf-8").count("\n") == 2
    assert len(logger._loggers["requests"].handlers) == 1


def test_multi_file_logger_does_nothing_if_disabled(tmp_path, monkeypatch):
    monkeypatch.setattr("chatfolders.log.LOGGING_ENABLED", False)
    monkeypatch.setattr("chatfolders.log.LOGS_PATH", tmp_path)
    MultiFileLogger("test_multi_file_logger_disabled").log("x", "test")
    assert list(tmp_path.iterdir()) == []


def test_null_logger_writes_nothing(logs_path):
    NullLogger().log("null_logger_test", "test")
    assert list(logs_path.iterdir()) == []
