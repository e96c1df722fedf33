"""
Unit tests for the in-memory notifier and navigator.
"""

from chatsync.adapters.navigation import InMemoryNavigator
from chatsync.adapters.notifiers import InMemoryNotifier, Notification
from chatsync.core.interfaces.notifier import VARIANT_DEFAULT, VARIANT_DESTRUCTIVE


class TestInMemoryNotifier:
    def test_notify_and_dismiss(self):
        notifier = InMemoryNotifier()

        first = notifier.notify("New message", "You have a new message in Grace Hopper")
        second = notifier.notify("Connection Lost", "Unable to reconnect", VARIANT_DESTRUCTIVE)

        assert notifier.active == [
            Notification(first, "New message", "You have a new message in Grace Hopper", VARIANT_DEFAULT),
            Notification(second, "Connection Lost", "Unable to reconnect", VARIANT_DESTRUCTIVE),
        ]
        assert notifier.dismiss(first) is True
        assert notifier.dismiss(first) is False
        assert [n.id for n in notifier.active] == [second]

    def test_limit_drops_oldest(self):
        notifier = InMemoryNotifier(limit=2)
        for index in range(3):
            notifier.notify("Error", f"failure {index}")
        assert [n.description for n in notifier.active] == ["failure 1", "failure 2"]

    def test_clear(self):
        notifier = InMemoryNotifier()
        notifier.notify("Error", "x")
        notifier.clear()
        assert notifier.active == []


def test_navigator_records_history():
    navigator = InMemoryNavigator("/messages")
    navigator.navigate("/messages?id=42")

    assert navigator.location == "/messages?id=42"
    assert navigator.history == ["/messages", "/messages?id=42"]


def test_navigator_history_is_capped():
    navigator = InMemoryNavigator("/messages", history_limit=3)
    for conversation_id in range(10):
        navigator.navigate(f"/messages?id={conversation_id}")

    assert navigator.history == ["/messages?id=7", "/messages?id=8", "/messages?id=9"]
    assert navigator.location == "/messages?id=9"
