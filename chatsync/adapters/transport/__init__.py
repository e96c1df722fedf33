"""
Transport implementations for the chatsync framework.
"""

from chatsync.adapters.transport.websocket_channel import WebSocketChannel

__all__ = ["WebSocketChannel"]
