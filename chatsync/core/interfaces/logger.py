from abc import ABC, abstractmethod
from typing import Any, Dict, Union


class Logger(ABC):
    """
    Interface for logging functionality in the chatsync framework.

    Provides standard methods for logging at different severity levels with a structured format.
    Each log entry should contain: action name, message, and optional data dictionary.
    """

    @abstractmethod
    def debug(self, log_data: Union[Dict[str, Any], str]) -> None:
        """
        Log a debug message with structured data.

        Args:
            log_data: A dictionary with the structure:
                {
                    "action": "ACTION_NAME",     # The action or event being logged
                    "message": "MESSAGE TEXT",   # The log message
                    "data": {}                   # Optional additional data as a dictionary
                }
        """
        pass

    @abstractmethod
    def info(self, log_data: Union[Dict[str, Any], str]) -> None:
        """Log an info message with structured data (same shape as `debug`)."""
        pass

    @abstractmethod
    def warning(self, log_data: Union[Dict[str, Any], str]) -> None:
        """Log a warning message with structured data (same shape as `debug`)."""
        pass

    @abstractmethod
    def error(self, log_data: Union[Dict[str, Any], str]) -> None:
        """
        Log an error message with structured data.

        Args:
            log_data: A dictionary with the structure:
                {
                    "action": "ACTION_NAME",     # The action or event being logged
                    "message": "MESSAGE TEXT",   # The log message
                    "data": {},                  # Optional additional data as a dictionary
                    "exception": Exception       # Optional exception object
                }
        """
        pass

    @abstractmethod
    def critical(self, log_data: Union[Dict[str, Any], str]) -> None:
        """Log a critical message with structured data (same shape as `error`)."""
        pass
