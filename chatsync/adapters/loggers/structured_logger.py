"""
Structured Logger implementation providing well-formatted logs.

This implementation uses Python's built-in logging module to generate structured logs
that include action name, message, source information, and additional data.
Each record is written as a single JSON object.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union

from chatsync.core.interfaces.logger import Logger


class _JSONFormatter(logging.Formatter):
    """Render the structured payload attached to a record as one JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        payload = getattr(record, "structured", None) or {"message": record.getMessage()}
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "action": payload.get("action", "LOG"),
            "message": payload.get("message", ""),
        }
        if payload.get("data"):
            entry["data"] = payload["data"]
        exception = payload.get("exception")
        if exception is not None:
            entry["exception"] = {"type": type(exception).__name__, "message": str(exception)}
        return json.dumps(entry, default=str, ensure_ascii=False)


class StructuredLogger(Logger):
    """Simple structured logger implementation."""

    def __init__(
        self,
        name: str = "chatsync",
        level: Union[str, int] = "INFO",
        log_file: Optional[str] = None,
        console_output: bool = True,
    ):
        """
        Initialize the logger.

        Args:
            name: Logger name, shown in every record
            level: Minimum level (name or number)
            log_file: Optional path; records are appended as JSON lines
            console_output: Whether to also write records to stdout
        """
        self.name = name
        self.logger = logging.getLogger(name)
        self.logger.setLevel(level if isinstance(level, int) else getattr(logging, str(level).upper(), logging.INFO))
        self.logger.propagate = False

        # Handlers are configured once per logger name
        if not self.logger.handlers:
            formatter = _JSONFormatter()
            if console_output:
                stream_handler = logging.StreamHandler(sys.stdout)
                stream_handler.setFormatter(formatter)
                self.logger.addHandler(stream_handler)
            if log_file:
                file_handler = logging.FileHandler(log_file, encoding="utf-8")
                file_handler.setFormatter(formatter)
                self.logger.addHandler(file_handler)
            if not self.logger.handlers:
                self.logger.addHandler(logging.NullHandler())

    @classmethod
    def from_config(cls, name: str, config: Dict[str, Any]) -> "StructuredLogger":
        """Build a logger from the `system.loggers.structured_logger` config section."""
        return cls(
            name=name,
            level=config.get("level", "INFO"),
            log_file=config.get("log_file"),
            console_output=config.get("console_output", True),
        )

    def _log(self, level: int, message: Union[Dict[str, Any], str]) -> None:
        """Internal logging method."""
        if not isinstance(message, dict):
            message = {"message": str(message)}
        self.logger.log(level, message.get("message", ""), extra={"structured": message})

    def debug(self, message: Union[Dict[str, Any], str]) -> None:
        """Log debug message."""
        self._log(logging.DEBUG, message)

    def info(self, message: Union[Dict[str, Any], str]) -> None:
        """Log info message."""
        self._log(logging.INFO, message)

    def warning(self, message: Union[Dict[str, Any], str]) -> None:
        """Log warning message."""
        self._log(logging.WARNING, message)

    def error(self, message: Union[Dict[str, Any], str]) -> None:
        """Log error message."""
        self._log(logging.ERROR, message)

    def critical(self, message: Union[Dict[str, Any], str]) -> None:
        """Log critical message."""
        self._log(logging.CRITICAL, message)
