"""
Unit tests for the QueryStore.
"""

import pytest

from chatsync.core.exceptions import StoreError
from chatsync.core.store import CONVERSATIONS_KEY, QueryStore, messages_key


class TestQueryStore:
    """Test cases for the QueryStore."""

    def test_get_missing_key_returns_default(self):
        store = QueryStore()
        assert store.get(("missing",)) is None
        assert store.get(("missing",), ()) == ()
        assert not store.has(("missing",))

    def test_update_receives_old_value(self):
        store = QueryStore()
        store.set(("count",), 1)
        assert store.update(("count",), lambda old: old + 1) == 2
        assert store.get(("count",)) == 2

    def test_apply_commits_all_keys_together(self):
        """A listener sees both keys already updated in a single notification."""
        store = QueryStore()
        store.set(("a",), 0)
        store.set(("b",), 0)
        seen = []
        store.subscribe(lambda changed: seen.append((set(changed), store.get(("a",)), store.get(("b",)))))

        store.apply({("a",): lambda old: 1, ("b",): lambda old: 2})

        assert seen == [({("a",), ("b",)}, 1, 2)]

    def test_apply_is_all_or_nothing(self):
        store = QueryStore()
        store.set(("a",), "before")
        listener_calls = []
        store.subscribe(listener_calls.append)

        def boom(old):
            raise ValueError("bad update")

        with pytest.raises(StoreError):
            store.apply({("a",): lambda old: "after", ("b",): boom})

        assert store.get(("a",)) == "before"
        assert not store.has(("b",))
        assert listener_calls == []

    def test_unchanged_value_does_not_notify(self):
        store = QueryStore()
        value = ("x",)
        store.set(("k",), value)
        calls = []
        store.subscribe(calls.append)

        store.update(("k",), lambda old: old)

        assert calls == []

    def test_subscribe_key_and_unsubscribe(self):
        store = QueryStore()
        values = []
        unsubscribe = store.subscribe_key(messages_key(42), values.append)

        store.set(messages_key(42), ("m1",))
        store.set(messages_key(7), ("other",))
        unsubscribe()
        store.set(messages_key(42), ("m2",))

        assert values == [("m1",)]

    def test_failing_listener_does_not_block_others(self):
        store = QueryStore()
        received = []

        def broken(changed):
            raise RuntimeError("listener bug")

        store.subscribe(broken)
        store.subscribe(received.append)
        store.set(CONVERSATIONS_KEY, ())

        assert received == [frozenset({CONVERSATIONS_KEY})]

    def test_keys_filtered_by_prefix(self):
        store = QueryStore()
        store.set(CONVERSATIONS_KEY, ())
        store.set(messages_key(1), ())
        store.set(messages_key(2), ())

        assert sorted(store.keys("messages")) == [messages_key(1), messages_key(2)]
        assert len(store.keys()) == 3

    def test_snapshot_is_read_only(self):
        store = QueryStore()
        store.set(("k",), 1)
        snapshot = store.snapshot()
        with pytest.raises(TypeError):
            snapshot[("k",)] = 2
        store.set(("k",), 3)
        assert snapshot[("k",)] == 1
