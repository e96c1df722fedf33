"""
Exception hierarchy for the chatsync framework.

This module defines the base exception types for all components, providing
a structured hierarchy for error handling and recovery.
"""

from typing import Optional


class ChatSyncError(Exception):
    """Base exception for all chatsync-related errors."""

    pass


# Transport Errors


class TransportError(ChatSyncError):
    """Raised when the real-time channel cannot be opened or used."""

    pass


# REST Collaborator Errors


class ApiError(ChatSyncError):
    """Raised when a REST collaborator rejects a request or cannot be reached."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


# Local Errors


class ValidationError(ChatSyncError):
    """Raised when user input is rejected before any command is issued."""

    pass


class EventParseError(ChatSyncError):
    """Raised when an inbound event payload is missing required fields."""

    pass


class StoreError(ChatSyncError):
    """Raised when a store update function fails."""

    pass


# Other Errors


class ConfigurationError(ChatSyncError):
    """Raised when configuration is invalid."""

    pass


# Exporting all exception types
__all__ = [
    "ChatSyncError",
    "TransportError",
    "ApiError",
    "ValidationError",
    "EventParseError",
    "StoreError",
    "ConfigurationError",
]
