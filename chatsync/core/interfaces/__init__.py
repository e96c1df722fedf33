from chatsync.core.interfaces.logger import Logger
from chatsync.core.interfaces.transport import Transport
from chatsync.core.interfaces.messaging_api import MessagingAPI
from chatsync.core.interfaces.notifier import Notifier
from chatsync.core.interfaces.navigator import Navigator

__all__ = [
    "Logger",
    "Transport",
    "MessagingAPI",
    "Notifier",
    "Navigator",
]
