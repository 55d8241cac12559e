"""
Tests for logging setup and log payload sanitizing.
"""
import logging

import pytest

from app.core.logging_config import LOG_FILE_NAME, REDACTED, sanitize_log_data, setup_logging


@pytest.fixture
def restore_root_logger():
    """setup_logging replaces root handlers; put pytest's back afterwards."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


def test_console_only_without_log_dir(restore_root_logger):
    root = setup_logging("DEBUG", "")

    assert root.level == logging.DEBUG
    assert len(root.handlers) == 1
    assert type(root.handlers[0]) is logging.StreamHandler


def test_rotating_file_under_log_dir(restore_root_logger, tmp_path):
    root = setup_logging("info", str(tmp_path / "logs"))

    logging.getLogger("app.test").info("Room created: room_id=r1")
    for handler in root.handlers:
        handler.flush()

    log_file = tmp_path / "logs" / LOG_FILE_NAME
    assert len(root.handlers) == 2
    assert "Room created: room_id=r1" in log_file.read_text()


def test_library_loggers_never_noisier_than_app(restore_root_logger):
    setup_logging("ERROR", "")

    assert logging.getLogger("stripe").level == logging.ERROR
    assert logging.getLogger("googleapiclient.discovery_cache").level == logging.ERROR


def test_unknown_level_falls_back_to_info(restore_root_logger):
    root = setup_logging("chatty", "")

    assert root.level == logging.INFO


def test_sanitize_walks_nested_payloads():
    data = {
        "name": "Demo Room",
        "settings": {"access_code": "1234", "capacity": 10},
        "attendees": [{"email": "a@example.com", "password": "hunter22"}],
    }

    sanitized = sanitize_log_data(data)

    assert sanitized["name"] == "Demo Room"
    assert sanitized["settings"] == {"access_code": REDACTED, "capacity": 10}
    assert sanitized["attendees"] == [{"email": "a@example.com", "password": REDACTED}]
    assert data["settings"]["access_code"] == "1234"
