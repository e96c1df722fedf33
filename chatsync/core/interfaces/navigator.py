from abc import ABC, abstractmethod


class Navigator(ABC):
    """Interface for the displayed route, e.g. `/messages?id=42`."""

    @property
    @abstractmethod
    def location(self) -> str:
        """The current location, path plus query string."""
        pass

    @abstractmethod
    def navigate(self, location: str) -> None:
        """Replace the current location."""
        pass
