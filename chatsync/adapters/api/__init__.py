"""
REST API clients for the chatsync framework.
"""

from chatsync.adapters.api.rest_client import RestMessagingAPI

__all__ = ["RestMessagingAPI"]
