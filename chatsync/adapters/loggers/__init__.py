"""
Logger implementations for the chatsync framework.

This module provides the StructuredLogger implementation of the Logger interface.
"""

from chatsync.adapters.loggers.structured_logger import StructuredLogger

__all__ = ["StructuredLogger"]
