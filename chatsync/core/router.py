"""
Event Router.

Turns each server push into exactly one store update. The router owns no
state; it reads the session (current user, active conversation) from the
store and writes through the pure cache transforms.
"""

from typing import Any, Callable, Dict, Optional

from chatsync.core.conversation_cache import find_conversation, record_new_message, set_typing
from chatsync.core.display import conversation_display_name
from chatsync.core.events import (
    EVENT_CLASSES,
    MessageReadEvent,
    NewMessageEvent,
    ReactionAddedEvent,
    ReactionRemovedEvent,
    ServerErrorEvent,
    TypingIndicatorEvent,
    parse_event,
)
from chatsync.core.exceptions import EventParseError, StoreError
from chatsync.core.interfaces.notifier import VARIANT_DESTRUCTIVE, Notifier
from chatsync.core.interfaces.transport import Transport
from chatsync.core.message_cache import MessageCache, add_reaction, append_message, apply_read_receipt, remove_reaction
from chatsync.core.models import SessionState
from chatsync.core.store import CONVERSATIONS_KEY, SESSION_KEY, USERS_KEY, QueryStore, messages_key
from chatsync.adapters.loggers import StructuredLogger


class EventRouter:
    """
    Dispatches inbound events to cache mutations.

    Handlers run synchronously to completion. Unknown event types and
    malformed payloads are logged and ignored.
    """

    def __init__(
        self,
        store: QueryStore,
        transport: Transport,
        notifier: Optional[Notifier] = None,
        logger_name: str = "event_router",
    ):
        self.logger = StructuredLogger(name=logger_name)
        self._store = store
        self._transport = transport
        self._notifier = notifier
        self._messages = MessageCache(store)

        self._handlers: Dict[type, Callable[[Any], None]] = {
            NewMessageEvent: self._on_new_message,
            MessageReadEvent: self._on_message_read,
            TypingIndicatorEvent: self._on_typing_indicator,
            ReactionAddedEvent: self._on_reaction_added,
            ReactionRemovedEvent: self._on_reaction_removed,
            ServerErrorEvent: self._on_server_error,
        }
        missing = [cls.__name__ for cls in EVENT_CLASSES if cls not in self._handlers]
        if missing:
            raise TypeError(f"EventRouter has no handler for: {', '.join(missing)}")

    def dispatch(self, event_type: str, payload: Any) -> bool:
        """
        Route one inbound `(event_type, payload)` pair.

        Returns:
            bool: True if a handler ran, False if the event was ignored
        """
        try:
            event = parse_event(event_type, payload)
        except EventParseError as e:
            self.logger.warning({
                "action": "EVENT_PARSE_ERROR",
                "message": f"Ignoring malformed '{event_type}' event: {str(e)}",
                "data": {"event_type": event_type, "error": str(e)}
            })
            return False

        if event is None:
            self.logger.debug({
                "action": "EVENT_UNKNOWN",
                "message": f"Ignoring unknown event type '{event_type}'",
                "data": {"event_type": event_type}
            })
            return False

        try:
            self._handlers[type(event)](event)
        except StoreError as e:
            self.logger.error({
                "action": "EVENT_APPLY_ERROR",
                "message": f"Failed to apply '{event_type}': {str(e)}",
                "data": {"event_type": event_type, "error": str(e)}
            })
            return False
        return True

    # ---- Session helpers ----

    def _session(self) -> Optional[SessionState]:
        return self._store.get(SESSION_KEY)

    def _active_conversation_id(self) -> Optional[Any]:
        session = self._session()
        return session.active_conversation_id if session else None

    def _current_user_id(self) -> Optional[str]:
        session = self._session()
        return session.current_user_id if session else None

    # ---- Handlers ----

    def _on_new_message(self, event: NewMessageEvent) -> None:
        message = event.message
        conversation_id = message.conversation_id
        conversation = find_conversation(self._store.get(CONVERSATIONS_KEY), conversation_id)

        if conversation is None:
            # The next conversation-list refresh will bring it in
            self.logger.info({
                "action": "NEW_MESSAGE_DROPPED",
                "message": f"Dropping message {message.id} for unknown conversation {conversation_id}",
                "data": {"conversation_id": conversation_id, "message_id": message.id}
            })
            return

        if any(cached.id == message.id for cached in self._messages.for_conversation(conversation_id)):
            self.logger.debug({
                "action": "NEW_MESSAGE_DUPLICATE",
                "message": f"Ignoring repeated message {message.id}",
                "data": {"conversation_id": conversation_id, "message_id": message.id}
            })
            return

        is_active = self._active_conversation_id() == conversation_id
        self._store.apply({
            messages_key(conversation_id): lambda old: append_message(old, message),
            CONVERSATIONS_KEY: lambda old: record_new_message(old, message, is_active),
        })

        if is_active:
            self._transport.mark_message_read(conversation_id, message.id)
        elif self._notifier is not None and message.sender_id != self._current_user_id():
            name = conversation_display_name(
                conversation, self._store.get(USERS_KEY), self._current_user_id()
            )
            self._notifier.notify("New message", f"You have a new message in {name}")

    def _on_message_read(self, event: MessageReadEvent) -> None:
        active_id = self._active_conversation_id()
        current_user_id = self._current_user_id()
        if active_id is None or current_user_id is None:
            return
        if event.conversation_id is not None and event.conversation_id != active_id:
            return

        self._store.update(
            messages_key(active_id),
            lambda old: apply_read_receipt(old, event.message_id, current_user_id),
        )

    def _on_typing_indicator(self, event: TypingIndicatorEvent) -> None:
        self._store.update(
            CONVERSATIONS_KEY,
            lambda old: set_typing(old, event.conversation_id, event.user_id, event.is_typing),
        )

    def _on_reaction_added(self, event: ReactionAddedEvent) -> None:
        conversation_id = self._locate(event.message_id)
        if conversation_id is None:
            return
        self._store.update(
            messages_key(conversation_id),
            lambda old: add_reaction(old, event.message_id, event.emoji, event.user_id),
        )

    def _on_reaction_removed(self, event: ReactionRemovedEvent) -> None:
        conversation_id = self._locate(event.message_id)
        if conversation_id is None:
            return
        self._store.update(
            messages_key(conversation_id),
            lambda old: remove_reaction(old, event.message_id, event.emoji, event.user_id),
        )

    def _on_server_error(self, event: ServerErrorEvent) -> None:
        self.logger.warning({
            "action": "SERVER_ERROR_EVENT",
            "message": event.message,
        })
        if self._notifier is not None:
            self._notifier.notify("Error", event.message, VARIANT_DESTRUCTIVE)

    def _locate(self, message_id: Any) -> Optional[Any]:
        conversation_id = self._messages.find_conversation_of(message_id)
        if conversation_id is None:
            self.logger.debug({
                "action": "REACTION_TARGET_NOT_CACHED",
                "message": f"Message {message_id} is not in any cached conversation",
                "data": {"message_id": message_id}
            })
        return conversation_id
