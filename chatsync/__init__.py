"""
chatsync

Real-time messaging core: a WebSocket channel to the messaging backend, an
event router that folds server pushes into query-keyed caches, and the
interaction controller behind the messaging screen.
"""

__version__ = "0.1.0"

# Import core interfaces, exceptions and entities
from chatsync.core import (
    # Interfaces
    Logger,
    Transport,
    MessagingAPI,
    Notifier,
    Navigator,
    # Exceptions
    ChatSyncError,
    TransportError,
    ApiError,
    ValidationError,
    EventParseError,
    StoreError,
    ConfigurationError,
    # Entities
    Conversation,
    Message,
    User,
)

# Import utilities
from chatsync.utils import (
    load_config,
    get_component_config,
)

# Import the session last; it pulls in every adapter
from chatsync.core.session import MessagingSession

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
    "Conversation",
    "Message",
    "User",
    # Utilities
    "load_config",
    "get_component_config",
    # Session
    "MessagingSession",
]
