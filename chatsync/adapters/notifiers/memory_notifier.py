"""
In-memory notifier.

Keeps the active notifications in a list so a front end (or a test) can
render and dismiss them. Each notification is also written to the log.
"""

import itertools
from dataclasses import dataclass
from typing import List, Optional

from chatsync.core.interfaces.notifier import VARIANT_DEFAULT, VARIANT_DESTRUCTIVE, Notifier
from chatsync.adapters.loggers import StructuredLogger


@dataclass(frozen=True)
class Notification:
    id: int
    title: str
    description: str
    variant: str = VARIANT_DEFAULT


class InMemoryNotifier(Notifier):
    def __init__(self, limit: Optional[int] = None, logger_name: str = "notifier"):
        """
        Args:
            limit: Keep at most this many notifications, dropping the oldest
            logger_name: Name for the logger instance
        """
        self.logger = StructuredLogger(name=logger_name)
        self._limit = limit
        self._ids = itertools.count(1)
        self._active: List[Notification] = []

    def notify(self, title: str, description: str, variant: str = VARIANT_DEFAULT) -> int:
        notification = Notification(next(self._ids), title, description, variant)
        self._active.append(notification)
        if self._limit is not None and len(self._active) > self._limit:
            del self._active[: len(self._active) - self._limit]

        log = self.logger.warning if variant == VARIANT_DESTRUCTIVE else self.logger.info
        log({
            "action": "NOTIFICATION",
            "message": f"{title}: {description}",
            "data": {"id": notification.id, "title": title, "variant": variant}
        })
        return notification.id

    def dismiss(self, notification_id: int) -> bool:
        for index, notification in enumerate(self._active):
            if notification.id == notification_id:
                del self._active[index]
                return True
        return False

    @property
    def active(self) -> List[Notification]:
        return list(self._active)

    def clear(self) -> None:
        self._active.clear()
