from typing import List

from chatsync.core.interfaces.navigator import Navigator


DEFAULT_HISTORY_LIMIT = 50


class InMemoryNavigator(Navigator):
    """Navigator that keeps the most recent locations it was sent to."""

    def __init__(self, initial: str = "/messages", history_limit: int = DEFAULT_HISTORY_LIMIT):
        self._history_limit = max(1, history_limit)
        self.history: List[str] = [initial]

    @property
    def location(self) -> str:
        return self.history[-1]

    def navigate(self, location: str) -> None:
        self.history.append(location)
        if len(self.history) > self._history_limit:
            del self.history[: len(self.history) - self._history_limit]
