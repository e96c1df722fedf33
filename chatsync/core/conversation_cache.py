"""
Conversation Cache.

The conversation list lives in the store under CONVERSATIONS_KEY as a tuple
ordered most-recent-activity first. The module-level functions are pure
(old tuple in, new tuple out) and return the input object itself when nothing
changes, which lets the store skip notifying subscribers.
"""

from dataclasses import replace
from typing import Any, Callable, Iterable, Optional, Tuple

from chatsync.core.models import Conversation, Message
from chatsync.core.store import CONVERSATIONS_KEY, QueryStore


Conversations = Tuple[Conversation, ...]


def find_index(conversations: Optional[Conversations], conversation_id: Any) -> int:
    for index, conversation in enumerate(conversations or ()):
        if conversation.id == conversation_id:
            return index
    return -1


def find_conversation(conversations: Optional[Conversations], conversation_id: Any) -> Optional[Conversation]:
    index = find_index(conversations, conversation_id)
    return conversations[index] if index >= 0 else None


def move_to_head(conversations: Conversations, index: int, updated: Conversation) -> Conversations:
    """Drop position `index` and put `updated` first; the id appears exactly once."""
    rest = conversations[:index] + conversations[index + 1:]
    return (updated,) + rest


def record_new_message(
    conversations: Optional[Conversations], message: Message, is_active: bool
) -> Conversations:
    """
    Apply a new message to the list.

    The owning conversation moves to the head with `last_message` set. Its
    unread count is incremented, unless it is the active conversation, in
    which case it stays at 0. An unknown conversation leaves the list as is.
    """
    conversations = conversations or ()
    index = find_index(conversations, message.conversation_id)
    if index < 0:
        return conversations

    conversation = conversations[index]
    updated = replace(
        conversation,
        last_message=message,
        unread_count=0 if is_active else conversation.unread_count + 1,
    )
    return move_to_head(conversations, index, updated)


def reset_unread(conversations: Optional[Conversations], conversation_id: Any) -> Conversations:
    conversations = conversations or ()
    index = find_index(conversations, conversation_id)
    if index < 0 or conversations[index].unread_count == 0:
        return conversations
    updated = replace(conversations[index], unread_count=0)
    return conversations[:index] + (updated,) + conversations[index + 1:]


def set_typing(
    conversations: Optional[Conversations], conversation_id: Any, user_id: str, is_typing: bool
) -> Conversations:
    conversations = conversations or ()
    index = find_index(conversations, conversation_id)
    if index < 0:
        return conversations

    conversation = conversations[index]
    if is_typing:
        typing_users = conversation.typing_users | {user_id}
    else:
        typing_users = conversation.typing_users - {user_id}
    if typing_users == conversation.typing_users:
        return conversations

    updated = replace(conversation, typing_users=typing_users)
    return conversations[:index] + (updated,) + conversations[index + 1:]


def upsert_at_head(conversations: Optional[Conversations], conversation: Conversation) -> Conversations:
    """Insert a freshly created conversation first, replacing any stale copy."""
    conversations = conversations or ()
    index = find_index(conversations, conversation.id)
    if index < 0:
        return (conversation,) + conversations
    return move_to_head(conversations, index, conversation)


def merge_refreshed(
    conversations: Optional[Conversations], fetched: Iterable[Conversation]
) -> Conversations:
    """
    Replace the list with a server fetch, keeping the server's order.

    Unread counts and typing users are owned by the client, so they are
    carried over for conversations that were already cached.
    """
    previous = {conversation.id: conversation for conversation in conversations or ()}
    merged = []
    for conversation in fetched:
        cached = previous.get(conversation.id)
        if cached is not None:
            conversation = replace(
                conversation,
                unread_count=cached.unread_count,
                typing_users=cached.typing_users,
            )
        merged.append(conversation)
    return tuple(merged)


class ConversationCache:
    """Read and patch access to the conversation list held in a QueryStore."""

    def __init__(self, store: QueryStore):
        self._store = store

    def all(self) -> Conversations:
        return self._store.get(CONVERSATIONS_KEY) or ()

    def get(self, conversation_id: Any) -> Optional[Conversation]:
        return find_conversation(self.all(), conversation_id)

    def index_of(self, conversation_id: Any) -> int:
        return find_index(self.all(), conversation_id)

    def replace_all(self, fetched: Iterable[Conversation]) -> Conversations:
        fetched = tuple(fetched)
        return self._store.update(CONVERSATIONS_KEY, lambda old: merge_refreshed(old, fetched))

    def upsert_at_head(self, conversation: Conversation) -> Conversations:
        return self._store.update(CONVERSATIONS_KEY, lambda old: upsert_at_head(old, conversation))

    def reset_unread(self, conversation_id: Any) -> Conversations:
        return self._store.update(CONVERSATIONS_KEY, lambda old: reset_unread(old, conversation_id))

    def set_typing(self, conversation_id: Any, user_id: str, is_typing: bool) -> Conversations:
        return self._store.update(
            CONVERSATIONS_KEY, lambda old: set_typing(old, conversation_id, user_id, is_typing)
        )

    def subscribe(self, listener: Callable[[Conversations], None]) -> Callable[[], None]:
        return self._store.subscribe_key(CONVERSATIONS_KEY, lambda value: listener(value or ()))
