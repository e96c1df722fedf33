from abc import ABC, abstractmethod
from typing import Any


VARIANT_DEFAULT = "default"
VARIANT_DESTRUCTIVE = "destructive"


class Notifier(ABC):
    """
    Interface for transient, dismissible user notifications.

    Every user-facing failure in the messaging core ends up here instead of
    propagating as an exception.
    """

    @abstractmethod
    def notify(self, title: str, description: str, variant: str = VARIANT_DEFAULT) -> Any:
        """
        Show a notification.

        Args:
            title: Short heading, e.g. "Connection Lost"
            description: One sentence of detail
            variant: "default" or "destructive"

        Returns:
            An implementation-defined handle that can be used to dismiss it
        """
        pass
