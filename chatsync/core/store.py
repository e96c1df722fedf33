"""
Query-keyed observable store.

The store maps query keys (tuples such as ("messages", 42)) to immutable
values. Writers pass pure functions that map the old value to a new one;
`apply` computes every new value first and only then commits them together,
so a subscriber never sees one key updated without the other.
"""

from types import MappingProxyType
from typing import Any, Callable, Dict, FrozenSet, List, Mapping, Optional, Tuple

from chatsync.core.exceptions import StoreError
from chatsync.adapters.loggers import StructuredLogger


Key = Tuple[Any, ...]
Updater = Callable[[Any], Any]
Listener = Callable[[FrozenSet[Key]], None]
KeyListener = Callable[[Any], None]

CONVERSATIONS_KEY: Key = ("conversations",)
USERS_KEY: Key = ("users",)
SESSION_KEY: Key = ("session",)
DRAFT_KEY: Key = ("draft",)
MESSAGES_PREFIX = "messages"


def messages_key(conversation_id: Any) -> Key:
    return (MESSAGES_PREFIX, conversation_id)


class QueryStore:
    """
    In-memory store shared by the router, the controller and UI subscribers.

    Values must be treated as immutable; the only way to change one is
    through `set`, `update` or `apply`.
    """

    def __init__(self, logger_name: str = "query_store"):
        self.logger = StructuredLogger(name=logger_name)
        self._data: Dict[Key, Any] = {}
        self._listeners: List[Listener] = []
        self._key_listeners: Dict[Key, List[KeyListener]] = {}

    def get(self, key: Key, default: Any = None) -> Any:
        return self._data.get(key, default)

    def has(self, key: Key) -> bool:
        return key in self._data

    def keys(self, prefix: Optional[str] = None) -> List[Key]:
        """Return all keys, or only those whose first element equals `prefix`."""
        if prefix is None:
            return list(self._data)
        return [key for key in self._data if key and key[0] == prefix]

    def snapshot(self) -> Mapping[Key, Any]:
        """Read-only view of the current values."""
        return MappingProxyType(dict(self._data))

    def set(self, key: Key, value: Any) -> Any:
        return self.apply({key: lambda _old: value})[key]

    def update(self, key: Key, updater: Updater) -> Any:
        """
        Replace the value at `key` with `updater(old_value)`.

        Returns:
            The value stored after the update
        """
        return self.apply({key: updater})[key]

    def apply(self, updates: Mapping[Key, Updater]) -> Dict[Key, Any]:
        """
        Atomically apply one updater per key.

        Every updater receives the current value (None when absent). If any
        updater raises, nothing is committed. Listeners are notified once with
        the set of keys whose value actually changed.

        Args:
            updates: Mapping of key to pure update function

        Returns:
            Dict[Key, Any]: The committed value for every key in `updates`

        Raises:
            StoreError: If an update function fails
        """
        new_values: Dict[Key, Any] = {}
        for key, updater in updates.items():
            try:
                new_values[key] = updater(self._data.get(key))
            except Exception as e:
                self.logger.error({
                    "action": "STORE_UPDATE_ERROR",
                    "message": f"Update for {key!r} failed: {str(e)}",
                    "data": {"key": repr(key), "error": str(e), "error_type": type(e).__name__}
                })
                raise StoreError(f"Update for {key!r} failed: {str(e)}") from e

        changed = frozenset(
            key for key, value in new_values.items()
            if key not in self._data or self._data[key] is not value
        )
        if changed:
            data = dict(self._data)
            data.update(new_values)
            self._data = data
            self._notify(changed)
        return new_values

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a listener called with the frozenset of changed keys.

        Returns:
            A callable that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def subscribe_key(self, key: Key, listener: KeyListener) -> Callable[[], None]:
        """Register a listener called with the new value whenever `key` changes."""
        self._key_listeners.setdefault(key, []).append(listener)

        def unsubscribe() -> None:
            listeners = self._key_listeners.get(key, [])
            if listener in listeners:
                listeners.remove(listener)

        return unsubscribe

    def _notify(self, changed: FrozenSet[Key]) -> None:
        # Copies so a listener may (un)subscribe while being notified
        for listener in list(self._listeners):
            self._call(listener, changed)
        for key in changed:
            for listener in list(self._key_listeners.get(key, [])):
                self._call(listener, self._data.get(key))

    def _call(self, listener: Callable[[Any], None], argument: Any) -> None:
        # A failing subscriber must not stop the others from seeing the commit
        try:
            listener(argument)
        except Exception as e:
            self.logger.error({
                "action": "STORE_LISTENER_ERROR",
                "message": f"Store listener raised: {str(e)}",
                "data": {"error": str(e), "error_type": type(e).__name__}
            })
