"""
Message Cache.

Each conversation's messages live under ("messages", conversation_id) as a
tuple in arrival order. As with the conversation cache, every transform is
pure and returns its input unchanged when there is nothing to do.
"""

from dataclasses import replace
from typing import Any, Callable, Iterable, Optional, Tuple

from chatsync.core.models import Message, Reaction
from chatsync.core.store import MESSAGES_PREFIX, QueryStore, messages_key


Messages = Tuple[Message, ...]
Reactions = Tuple[Reaction, ...]


def append_message(messages: Optional[Messages], message: Message) -> Messages:
    """Append `message`; an id already present is not added twice."""
    messages = messages or ()
    if any(existing.id == message.id for existing in messages):
        return messages
    return messages + (message,)


def apply_read_receipt(messages: Optional[Messages], watermark: Any, current_user_id: str) -> Messages:
    """
    Mark own messages up to the watermark as read.

    Only messages sent by `current_user_id` with `id <= watermark` change;
    receipts say the recipient read *our* messages, so other senders'
    messages are never touched.
    """
    messages = messages or ()
    changed = False
    updated = []
    for message in messages:
        if not message.is_read and message.sender_id == current_user_id and _at_or_below(message.id, watermark):
            message = replace(message, is_read=True)
            changed = True
        updated.append(message)
    return tuple(updated) if changed else messages


def _at_or_below(message_id: Any, watermark: Any) -> bool:
    try:
        return message_id <= watermark
    except TypeError:
        return False


def add_reaction_entry(reactions: Reactions, emoji: str, user_id: str) -> Reactions:
    for index, reaction in enumerate(reactions):
        if reaction.emoji == emoji:
            updated = reaction.with_user(user_id)
            if updated is reaction:
                return reactions
            return reactions[:index] + (updated,) + reactions[index + 1:]
    return reactions + (Reaction(emoji=emoji, user_ids=(user_id,)),)


def remove_reaction_entry(reactions: Reactions, emoji: str, user_id: str) -> Reactions:
    for index, reaction in enumerate(reactions):
        if reaction.emoji == emoji:
            updated = reaction.without_user(user_id)
            if updated is reaction:
                return reactions
            if updated.count == 0:
                return reactions[:index] + reactions[index + 1:]
            return reactions[:index] + (updated,) + reactions[index + 1:]
    return reactions


def _patch_reactions(
    messages: Optional[Messages],
    message_id: Any,
    patch: Callable[[Reactions], Reactions],
) -> Messages:
    messages = messages or ()
    for index, message in enumerate(messages):
        if message.id == message_id:
            reactions = patch(message.reactions)
            if reactions is message.reactions:
                return messages
            updated = replace(message, reactions=reactions)
            return messages[:index] + (updated,) + messages[index + 1:]
    return messages


def add_reaction(messages: Optional[Messages], message_id: Any, emoji: str, user_id: str) -> Messages:
    return _patch_reactions(messages, message_id, lambda r: add_reaction_entry(r, emoji, user_id))


def remove_reaction(messages: Optional[Messages], message_id: Any, emoji: str, user_id: str) -> Messages:
    return _patch_reactions(messages, message_id, lambda r: remove_reaction_entry(r, emoji, user_id))


def merge_history(messages: Optional[Messages], fetched: Iterable[Message]) -> Messages:
    """
    Replace cached messages with fetched history.

    Messages pushed while the fetch was in flight are not in the response;
    they are kept after the fetched ones.
    """
    fetched = tuple(fetched)
    fetched_ids = {message.id for message in fetched}
    pushed = tuple(message for message in messages or () if message.id not in fetched_ids)
    return fetched + pushed


class MessageCache:
    """Read and patch access to per-conversation message lists held in a QueryStore."""

    def __init__(self, store: QueryStore):
        self._store = store

    def has(self, conversation_id: Any) -> bool:
        return self._store.has(messages_key(conversation_id))

    def for_conversation(self, conversation_id: Any) -> Messages:
        return self._store.get(messages_key(conversation_id)) or ()

    def replace(self, conversation_id: Any, fetched: Iterable[Message]) -> Messages:
        fetched = tuple(fetched)
        return self._store.update(messages_key(conversation_id), lambda old: merge_history(old, fetched))

    def find_conversation_of(self, message_id: Any) -> Optional[Any]:
        """Return the id of the cached conversation holding `message_id`, if any."""
        for key in self._store.keys(MESSAGES_PREFIX):
            if any(message.id == message_id for message in self._store.get(key) or ()):
                return key[1]
        return None

    def get_message(self, message_id: Any) -> Optional[Message]:
        conversation_id = self.find_conversation_of(message_id)
        if conversation_id is None:
            return None
        for message in self.for_conversation(conversation_id):
            if message.id == message_id:
                return message
        return None

    def subscribe(self, conversation_id: Any, listener: Callable[[Messages], None]) -> Callable[[], None]:
        return self._store.subscribe_key(messages_key(conversation_id), lambda value: listener(value or ()))
