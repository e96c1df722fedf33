"""
Navigator implementations for the chatsync framework.
"""

from chatsync.adapters.navigation.memory_navigator import InMemoryNavigator

__all__ = ["InMemoryNavigator"]
