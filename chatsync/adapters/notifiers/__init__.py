"""
Notifier implementations for the chatsync framework.
"""

from chatsync.adapters.notifiers.memory_notifier import InMemoryNotifier, Notification

__all__ = ["InMemoryNotifier", "Notification"]
