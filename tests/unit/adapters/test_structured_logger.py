"""
Unit tests for the StructuredLogger implementation.
"""

import json
import logging

import pytest

from chatsync.adapters.loggers import StructuredLogger


def _records(path):
    with open(path, "r", encoding="utf-8") as f:
        return [json.loads(line) for line in f if line.strip()]


@pytest.fixture
def log_path(tmp_path):
    return str(tmp_path / "chatsync.log")


class TestStructuredLogger:
    """Test cases for the StructuredLogger."""

    def test_initialization(self):
        logger = StructuredLogger(name="test_logger")
        assert logger.name == "test_logger"
        assert logger.logger.level == logging.INFO
        assert logger.logger.propagate is False

    def test_log_levels(self):
        """All levels accept structured dicts and plain strings."""
        logger = StructuredLogger(name="test_levels_logger", console_output=False)

        logger.debug({"action": "TEST", "message": "Debug message"})
        logger.info({"action": "TEST", "message": "Info message"})
        logger.warning({"action": "TEST", "message": "Warning message"})
        logger.error({"action": "TEST", "message": "Error message"})
        logger.critical("Critical message")

    def test_log_to_file(self, log_path):
        logger = StructuredLogger(
            name="test_file_logger",
            level="INFO",
            log_file=log_path,
            console_output=False,
        )

        logger.info({"action": "FILE_TEST", "message": "File logging test"})
        logger.debug({"action": "BELOW_LEVEL", "message": "not written"})

        records = _records(log_path)
        assert len(records) == 1
        assert records[0]["action"] == "FILE_TEST"
        assert records[0]["message"] == "File logging test"
        assert records[0]["logger"] == "test_file_logger"
        assert records[0]["level"] == "INFO"
        assert "timestamp" in records[0]

    def test_structured_data(self, log_path):
        logger = StructuredLogger(name="test_data_logger", log_file=log_path, console_output=False)
        data = {"conversation_id": 42, "user_ids": ["u1", "u2"], "meta": {"source": "test"}}

        logger.info({"action": "DATA_TEST", "message": "Testing structured data", "data": data})

        assert _records(log_path)[0]["data"] == data

    def test_exception_logging(self, log_path):
        logger = StructuredLogger(name="test_exception_logger", log_file=log_path, console_output=False)

        try:
            raise ValueError("Test exception")
        except ValueError as e:
            logger.error({"action": "EXCEPTION_TEST", "message": "Testing exception logging", "exception": e})

        record = _records(log_path)[0]
        assert record["exception"] == {"type": "ValueError", "message": "Test exception"}

    def test_plain_string_message(self, log_path):
        logger = StructuredLogger(name="test_string_logger", log_file=log_path, console_output=False)
        logger.warning("just text")

        record = _records(log_path)[0]
        assert record["action"] == "LOG"
        assert record["message"] == "just text"

    def test_handlers_are_added_once_per_name(self, log_path):
        StructuredLogger(name="test_shared_logger", log_file=log_path, console_output=False)
        second = StructuredLogger(name="test_shared_logger", log_file=log_path, console_output=False)

        second.info({"action": "ONCE", "message": "written once"})

        assert len(second.logger.handlers) == 1
        assert len(_records(log_path)) == 1

    def test_from_config(self):
        logger = StructuredLogger.from_config(
            "test_config_logger", {"level": "WARNING", "console_output": False}
        )
        assert logger.logger.level == logging.WARNING
        assert any(isinstance(h, logging.NullHandler) for h in logger.logger.handlers)
