"""
Core module for the chatsync messaging framework.

This module contains the core interfaces, exceptions and entity types that
define the contract every transport, API client and front end follows.
"""

# Import all exceptions
from chatsync.core.exceptions import (
    ChatSyncError,
    TransportError,
    ApiError,
    ValidationError,
    EventParseError,
    StoreError,
    ConfigurationError,
)

# Import all interfaces
from chatsync.core.interfaces import (
    Logger,
    Transport,
    MessagingAPI,
    Notifier,
    Navigator,
)

# Import entity types
from chatsync.core.models import (
    Attachment,
    ComposeDraft,
    Conversation,
    Message,
    Participant,
    Reaction,
    SenderProfile,
    SessionState,
    User,
)

# Export all interfaces, exceptions and entity types
__all__ = [
    # Interfaces
    "Logger",
    "Transport",
    "MessagingAPI",
    "Notifier",
    "Navigator",
    # Exceptions
    "ChatSyncError",
    "TransportError",
    "ApiError",
    "ValidationError",
    "EventParseError",
    "StoreError",
    "ConfigurationError",
    # Entities
    "Attachment",
    "ComposeDraft",
    "Conversation",
    "Message",
    "Participant",
    "Reaction",
    "SenderProfile",
    "SessionState",
    "User",
]
