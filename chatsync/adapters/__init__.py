"""
Adapters module for the chatsync framework.

This module contains concrete implementations of the interfaces defined in the core module.
"""

# Import logger implementations
from chatsync.adapters.loggers import StructuredLogger

# Import transport implementations
from chatsync.adapters.transport import WebSocketChannel

# Import REST API implementations
from chatsync.adapters.api import RestMessagingAPI

# Import notifier implementations
from chatsync.adapters.notifiers import InMemoryNotifier

# Import navigator implementations
from chatsync.adapters.navigation import InMemoryNavigator

# Export all implementations
__all__ = [
    "StructuredLogger",
    "WebSocketChannel",
    "RestMessagingAPI",
    "InMemoryNotifier",
    "InMemoryNavigator",
]
