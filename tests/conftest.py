"""
Shared fixtures: an in-memory transport, a mocked REST API and a seeded store.
"""

from typing import Any, Dict, List, Tuple
from unittest.mock import AsyncMock, MagicMock

import pytest

from chatsync.adapters.navigation import InMemoryNavigator
from chatsync.adapters.notifiers import InMemoryNotifier
from chatsync.core.controller import InteractionController
from chatsync.core.interfaces.messaging_api import MessagingAPI
from chatsync.core.interfaces.transport import Transport
from chatsync.core.models import ComposeDraft, Conversation, Message, Participant, SessionState
from chatsync.core.router import EventRouter
from chatsync.core.store import CONVERSATIONS_KEY, DRAFT_KEY, SESSION_KEY, QueryStore


class FakeTransport(Transport):
    """Transport that records outbound commands instead of writing them."""

    def __init__(self, connected: bool = True):
        super().__init__(MagicMock())
        self._connected = connected
        self.sent: List[Tuple[str, Dict[str, Any]]] = []
        self.closed = False

    async def connect(self) -> bool:
        self._connected = True
        self._emit_status(True)
        return True

    async def close(self) -> None:
        self.closed = True
        self._connected = False
        self._emit_status(False)

    @property
    def is_connected(self) -> bool:
        return self._connected

    def send(self, command: str, payload: Dict[str, Any]) -> bool:
        if not self._connected:
            return False
        self.sent.append((command, payload))
        return True

    def push(self, event_type: str, payload: Dict[str, Any]) -> None:
        """Simulate an inbound frame."""
        self._deliver(event_type, payload)

    def commands(self, name: str) -> List[Dict[str, Any]]:
        return [payload for command, payload in self.sent if command == name]


def make_conversation(conversation_id: Any, *participant_ids: str, **kwargs) -> Conversation:
    return Conversation(
        id=conversation_id,
        participants=tuple(Participant(user_id=pid) for pid in participant_ids),
        **kwargs,
    )


def make_message(message_id: Any, conversation_id: Any, sender_id: str, content: str = "hi", **kwargs) -> Message:
    return Message(id=message_id, conversation_id=conversation_id, sender_id=sender_id, content=content, **kwargs)


@pytest.fixture
def conversation_factory():
    return make_conversation


@pytest.fixture
def message_factory():
    return make_message


@pytest.fixture
def store():
    """Store seeded for user u1 with conversations 42 (u1/u2) and 7 (u1/u3)."""
    store = QueryStore()
    store.set(SESSION_KEY, SessionState(current_user_id="u1"))
    store.set(DRAFT_KEY, ComposeDraft())
    store.set(CONVERSATIONS_KEY, (
        make_conversation(42, "u1", "u2"),
        make_conversation(7, "u1", "u3"),
    ))
    return store


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def api():
    api = MagicMock(spec=MessagingAPI)
    api.fetch_conversations = AsyncMock(return_value=())
    api.fetch_messages = AsyncMock(return_value=())
    api.fetch_users = AsyncMock(return_value=())
    api.create_conversation = AsyncMock()
    api.search_messages = AsyncMock(return_value=())
    api.close = AsyncMock()
    return api


@pytest.fixture
def notifier():
    return InMemoryNotifier()


@pytest.fixture
def navigator():
    return InMemoryNavigator("/messages")


@pytest.fixture
def router(store, transport, notifier):
    router = EventRouter(store, transport, notifier)
    transport.set_message_handler(router.dispatch)
    return router


@pytest.fixture
def controller(store, transport, api, notifier, navigator):
    controller = InteractionController(
        store, transport, api, notifier, navigator, typing_idle_seconds=0.05
    )
    yield controller
    controller.close()
