"""
Interaction Controller.

The user-facing operations of the messaging screen. This is the only
component that issues outbound commands in response to user actions; it
never patches cached entities to guess the outcome of a command, it only
clears local draft state and waits for the server's echo.
"""

from dataclasses import replace
from typing import Any, Iterable, Optional, Set, Tuple
from urllib.parse import parse_qs, urlsplit

from chatsync.core.conversation_cache import ConversationCache, reset_unread
from chatsync.core.exceptions import ApiError, ValidationError
from chatsync.core.interfaces.messaging_api import MessagingAPI
from chatsync.core.interfaces.navigator import Navigator
from chatsync.core.interfaces.notifier import VARIANT_DESTRUCTIVE, Notifier
from chatsync.core.interfaces.transport import Transport
from chatsync.core.message_cache import MessageCache
from chatsync.core.models import (
    CONTENT_TYPE_RICH,
    CONTENT_TYPE_TEXT,
    Attachment,
    ComposeDraft,
    Conversation,
    Message,
    SessionState,
    User,
    coerce_id,
)
from chatsync.core.store import CONVERSATIONS_KEY, DRAFT_KEY, SESSION_KEY, USERS_KEY, QueryStore
from chatsync.core.typing_debouncer import DEFAULT_IDLE_SECONDS, TypingDebouncer
from chatsync.adapters.loggers import StructuredLogger


DEFAULT_MESSAGES_PATH = "/messages"


class InteractionController:
    """
    Send, reply, react, search, create and switch conversations.

    Validation failures and remote rejections are reported through the
    notifier and never raise out of these methods.
    """

    def __init__(
        self,
        store: QueryStore,
        transport: Transport,
        api: MessagingAPI,
        notifier: Notifier,
        navigator: Navigator,
        typing_idle_seconds: float = DEFAULT_IDLE_SECONDS,
        messages_path: str = DEFAULT_MESSAGES_PATH,
        logger_name: str = "interaction_controller",
    ):
        self.logger = StructuredLogger(name=logger_name)
        self._store = store
        self._transport = transport
        self._api = api
        self._notifier = notifier
        self._navigator = navigator
        self._messages_path = messages_path
        self._conversations = ConversationCache(store)
        self._messages = MessageCache(store)
        self._typing = TypingDebouncer(transport.send_typing_indicator, typing_idle_seconds)
        # Conversations whose history came from the server; pushes alone do not count
        self._history_loaded: Set[Any] = set()

    @property
    def typing_debouncer(self) -> TypingDebouncer:
        return self._typing

    # ---- State helpers ----

    def _session(self) -> SessionState:
        return self._store.get(SESSION_KEY)

    def _draft(self) -> ComposeDraft:
        return self._store.get(DRAFT_KEY) or ComposeDraft()

    @property
    def active_conversation_id(self) -> Optional[Any]:
        session = self._session()
        return session.active_conversation_id if session else None

    def _reject(self, error: ValidationError) -> None:
        self.logger.info({
            "action": "VALIDATION_FAILED",
            "message": str(error),
        })
        self._notifier.notify("Error", str(error), VARIANT_DESTRUCTIVE)

    def _report_api_error(self, action: str, description: str, error: ApiError) -> None:
        self.logger.error({
            "action": action,
            "message": f"{description}: {str(error)}",
            "data": {"error": str(error), "status": error.status}
        })
        self._notifier.notify("Error", description, VARIANT_DESTRUCTIVE)

    def route_for(self, conversation_id: Any) -> str:
        return f"{self._messages_path}?id={conversation_id}"

    # ---- Bootstrap ----

    async def refresh_conversations(self) -> Tuple[Conversation, ...]:
        """
        Reload the conversation list from the server.

        Raises:
            ApiError: If the fetch fails
        """
        fetched = await self._api.fetch_conversations()
        conversations = self._conversations.replace_all(fetched)
        self.logger.info({
            "action": "CONVERSATIONS_REFRESHED",
            "message": f"Loaded {len(conversations)} conversations",
            "data": {"count": len(conversations)}
        })
        return conversations

    async def refresh_messages(self, conversation_id: Any) -> Tuple[Message, ...]:
        """
        Reload one conversation's history, keeping messages pushed meanwhile.

        Raises:
            ApiError: If the fetch fails
        """
        fetched = await self._api.fetch_messages(conversation_id)
        messages = self._messages.replace(conversation_id, fetched)
        self._history_loaded.add(conversation_id)
        return messages

    async def refresh_users(self) -> Tuple[User, ...]:
        """
        Reload the user directory.

        Raises:
            ApiError: If the fetch fails
        """
        users = tuple(await self._api.fetch_users())
        return self._store.set(USERS_KEY, users)

    # ---- Conversations ----

    async def set_active_conversation(self, conversation_id: Any) -> None:
        """
        Make a conversation the active one.

        Joins it on the channel, resets its unread count, clears any pending
        reply or attachment, points the route at it and loads its history if
        it has not been fetched yet.
        """
        previous_id = self.active_conversation_id
        if previous_id is not None and previous_id != conversation_id:
            self._typing.flush(previous_id)

        self._transport.join_conversation(conversation_id)
        self._store.apply({
            SESSION_KEY: lambda old: replace(old, active_conversation_id=conversation_id),
            CONVERSATIONS_KEY: lambda old: reset_unread(old, conversation_id),
            DRAFT_KEY: lambda old: replace(old or ComposeDraft(), reply_to=None, attachment=None),
        })

        route = self.route_for(conversation_id)
        if self._navigator.location != route:
            self._navigator.navigate(route)

        self.logger.info({
            "action": "CONVERSATION_ACTIVATED",
            "message": f"Conversation {conversation_id} is now active",
            "data": {"conversation_id": conversation_id, "previous_id": previous_id}
        })

        if conversation_id not in self._history_loaded:
            try:
                await self.refresh_messages(conversation_id)
            except ApiError as e:
                self._report_api_error("MESSAGES_FETCH_ERROR", "Failed to load messages", e)

    async def handle_location(self, location: str) -> bool:
        """
        Activate the conversation named by the `id` query parameter of a location.

        Returns:
            bool: True if a different conversation was activated
        """
        values = parse_qs(urlsplit(location).query).get("id")
        if not values or not values[0]:
            return False
        conversation_id = coerce_id(values[0])
        if conversation_id == self.active_conversation_id:
            return False
        await self.set_active_conversation(conversation_id)
        return True

    async def create_conversation(
        self,
        participant_ids: Iterable[str],
        title: Optional[str] = None,
        initial_message: Optional[str] = None,
    ) -> Optional[Conversation]:
        """
        Create a conversation and make it active.

        Args:
            participant_ids: At least one user id
            title: Optional conversation name
            initial_message: Optional first message

        Returns:
            The created conversation, or None if validation or the request failed
        """
        participants = [str(pid) for pid in participant_ids]
        if not participants:
            self._reject(ValidationError("Please select at least one participant"))
            return None

        try:
            conversation = await self._api.create_conversation(
                participants, title or None, initial_message or None
            )
        except ApiError as e:
            self._report_api_error("CONVERSATION_CREATE_ERROR", "Failed to create conversation", e)
            return None

        self._conversations.upsert_at_head(conversation)
        self.logger.info({
            "action": "CONVERSATION_CREATED",
            "message": f"Created conversation {conversation.id}",
            "data": {"conversation_id": conversation.id, "participants": participants}
        })
        await self.set_active_conversation(conversation.id)
        return conversation

    # ---- Compose ----

    def compose(self, text: str) -> None:
        """Compose-box change: store the text and signal typing."""
        self._store.update(DRAFT_KEY, lambda old: replace(old or ComposeDraft(), text=text))
        self.typing()

    def start_reply(self, message: Message) -> None:
        self._store.update(DRAFT_KEY, lambda old: replace(old or ComposeDraft(), reply_to=message))

    def cancel_reply(self) -> None:
        self._store.update(DRAFT_KEY, lambda old: replace(old or ComposeDraft(), reply_to=None))

    def attach(self, url: str, name: Optional[str] = None, file_type: Optional[str] = None) -> Attachment:
        attachment = Attachment(url=url, name=name, type=file_type)
        self._store.update(DRAFT_KEY, lambda old: replace(old or ComposeDraft(), attachment=attachment))
        return attachment

    def clear_attachment(self) -> None:
        self._store.update(DRAFT_KEY, lambda old: replace(old or ComposeDraft(), attachment=None))

    def typing(self) -> bool:
        """
        Send "typing" for the active conversation and re-arm its stop timer.

        Returns:
            bool: False when no conversation is active
        """
        conversation_id = self.active_conversation_id
        if conversation_id is None:
            return False
        self._typing.keystroke(conversation_id)
        return True

    def send_message(
        self,
        text: Optional[str] = None,
        reply_to_id: Optional[Any] = None,
        attachment: Optional[Attachment] = None,
    ) -> bool:
        """
        Send a message to the active conversation.

        `text`, `reply_to_id` and `attachment` default to the current draft.
        The draft is cleared as soon as the command is issued; the message
        itself only appears once the server echoes it back.

        Returns:
            bool: True if a send command was issued
        """
        conversation_id = self.active_conversation_id
        if conversation_id is None:
            self._reject(ValidationError("Select a conversation before sending a message"))
            return False

        draft = self._draft()
        content = (draft.text if text is None else text).strip()
        if reply_to_id is None and draft.reply_to is not None:
            reply_to_id = draft.reply_to.id
        if attachment is None:
            attachment = draft.attachment

        if not content and attachment is None:
            self._reject(ValidationError("Cannot send an empty message"))
            return False

        self._transport.send_chat_message(
            conversation_id,
            content,
            content_type=CONTENT_TYPE_RICH if attachment is not None else CONTENT_TYPE_TEXT,
            attachment_url=attachment.url if attachment is not None else None,
            reply_to_id=reply_to_id,
        )
        self._store.set(DRAFT_KEY, ComposeDraft())
        return True

    # ---- Reactions ----

    def react(self, message_id: Any, emoji: str) -> bool:
        return self._transport.add_reaction(message_id, emoji)

    def unreact(self, message_id: Any, emoji: str) -> bool:
        return self._transport.remove_reaction(message_id, emoji)

    def toggle_reaction(self, message_id: Any, emoji: str) -> bool:
        """React, or remove our reaction if the cached message already carries it."""
        message = self._messages.get_message(message_id)
        reaction = message.reaction_for(emoji) if message is not None else None
        if reaction is not None and self._session().current_user_id in reaction.user_ids:
            return self.unreact(message_id, emoji)
        return self.react(message_id, emoji)

    # ---- Search ----

    async def search(self, query: str) -> Tuple[Message, ...]:
        """Full-text search; a blank query returns nothing without a request."""
        if not query or not query.strip():
            return ()
        try:
            return tuple(await self._api.search_messages(query.strip()))
        except ApiError as e:
            self._report_api_error("SEARCH_ERROR", "Search failed", e)
            return ()

    async def select_search_result(self, message: Message) -> None:
        await self.set_active_conversation(message.conversation_id)

    def close(self) -> None:
        self._typing.cancel_all()
