"""
Unit tests for the conversation list transforms.
"""

from chatsync.core.conversation_cache import (
    ConversationCache,
    merge_refreshed,
    record_new_message,
    reset_unread,
    set_typing,
    upsert_at_head,
)
from chatsync.core.models import Conversation, Message
from chatsync.core.store import CONVERSATIONS_KEY, QueryStore


def _conversations():
    return (Conversation(id=1), Conversation(id=2), Conversation(id=3, unread_count=4))


def test_new_message_moves_conversation_to_head():
    message = Message(id=10, conversation_id=3, sender_id="u2", content="hello")
    updated = record_new_message(_conversations(), message, is_active=False)

    assert [c.id for c in updated] == [3, 1, 2]
    assert updated[0].last_message is message
    assert updated[0].unread_count == 5


def test_new_message_for_active_conversation_keeps_unread_at_zero():
    conversations = (Conversation(id=1), Conversation(id=2, unread_count=0))
    message = Message(id=10, conversation_id=2, sender_id="u2")

    updated = record_new_message(conversations, message, is_active=True)

    assert updated[0].id == 2
    assert updated[0].unread_count == 0


def test_new_message_for_unknown_conversation_is_noop():
    conversations = _conversations()
    message = Message(id=10, conversation_id=99, sender_id="u2")
    assert record_new_message(conversations, message, is_active=False) is conversations


def test_each_id_appears_once_after_move():
    conversations = _conversations()
    for conversation_id in (2, 2, 1, 3):
        conversations = record_new_message(
            conversations, Message(id=conversation_id, conversation_id=conversation_id, sender_id="u2"), False
        )
    ids = [c.id for c in conversations]
    assert sorted(ids) == [1, 2, 3]
    assert ids[0] == 3


def test_reset_unread_keeps_position():
    updated = reset_unread(_conversations(), 3)
    assert [c.id for c in updated] == [1, 2, 3]
    assert updated[2].unread_count == 0
    assert reset_unread(updated, 3) is updated


def test_set_typing_adds_and_removes_user():
    conversations = set_typing(_conversations(), 1, "u2", True)
    assert conversations[0].typing_users == frozenset({"u2"})
    assert set_typing(conversations, 1, "u2", True) is conversations

    conversations = set_typing(conversations, 1, "u2", False)
    assert conversations[0].typing_users == frozenset()


def test_upsert_at_head_inserts_or_replaces():
    conversations = upsert_at_head(_conversations(), Conversation(id=9, title="New"))
    assert [c.id for c in conversations] == [9, 1, 2, 3]

    conversations = upsert_at_head(conversations, Conversation(id=2, title="Renamed"))
    assert [c.id for c in conversations] == [2, 9, 1, 3]
    assert conversations[0].title == "Renamed"


def test_refresh_keeps_client_owned_fields():
    cached = (Conversation(id=1, unread_count=2, typing_users=frozenset({"u2"})),)
    fetched = [Conversation(id=2), Conversation(id=1, title="Server title")]

    merged = merge_refreshed(cached, fetched)

    assert [c.id for c in merged] == [2, 1]
    assert merged[1].title == "Server title"
    assert merged[1].unread_count == 2
    assert merged[1].typing_users == frozenset({"u2"})


def test_cache_facade_reads_and_writes_store():
    store = QueryStore()
    cache = ConversationCache(store)
    seen = []
    cache.subscribe(seen.append)

    cache.replace_all(_conversations())
    cache.set_typing(2, "u9", True)

    assert cache.index_of(2) == 1
    assert cache.get(2).typing_users == frozenset({"u9"})
    assert cache.get(99) is None
    assert store.get(CONVERSATIONS_KEY) == cache.all()
    assert len(seen) == 2
