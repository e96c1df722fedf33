from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, Set

from chatsync.core.interfaces.logger import Logger


MessageHandler = Callable[[str, Dict[str, Any]], Any]
StatusListener = Callable[[bool], None]

# Outbound command names on the wire
CMD_AUTHENTICATE = "authenticate"
CMD_JOIN_CONVERSATION = "join_conversation"
CMD_SEND_MESSAGE = "send_message"
CMD_MARK_READ = "mark_read"
CMD_TYPING_INDICATOR = "typing_indicator"
CMD_ADD_REACTION = "add_reaction"
CMD_REMOVE_REACTION = "remove_reaction"


class Transport(ABC):
    """
    Interface for the single bidirectional channel to the messaging backend.

    Implementations provide the connection lifecycle and `send`; the typed
    outbound commands below build the wire payloads on top of `send`, so every
    implementation speaks the same contract.

    Outbound commands are fire-and-forget: they return True when the command
    was handed to an open connection and False when it was dropped because
    the channel is disconnected.
    """

    def __init__(self, logger: Logger):
        self.logger = logger
        self._message_handler: Optional[MessageHandler] = None
        self._status_listeners: List[StatusListener] = []
        self._joined: Set[Any] = set()

    @abstractmethod
    async def connect(self) -> bool:
        """
        Open the channel.

        Returns:
            bool: True when the channel is open. A failed attempt does not raise;
            it leaves `is_connected` False.
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close the channel and stop any reconnection attempts."""
        pass

    @property
    @abstractmethod
    def is_connected(self) -> bool:
        """Whether the channel is currently open."""
        pass

    @abstractmethod
    def send(self, command: str, payload: Dict[str, Any]) -> bool:
        """
        Queue one outbound command.

        Args:
            command: Wire command name
            payload: JSON-serializable payload

        Returns:
            bool: True if queued on an open connection, False if dropped
        """
        pass

    # ---- Inbound ----

    def set_message_handler(self, handler: MessageHandler) -> None:
        """Register the single callback invoked as `handler(event_type, payload)` for every push."""
        self._message_handler = handler

    def add_status_listener(self, listener: StatusListener) -> None:
        self._status_listeners.append(listener)

    def _deliver(self, event_type: str, payload: Dict[str, Any]) -> None:
        if self._message_handler is None:
            self.logger.debug({
                "action": "INBOUND_UNHANDLED",
                "message": f"No handler registered for inbound '{event_type}'",
                "data": {"event_type": event_type}
            })
            return
        # The read loop must survive a failing handler
        try:
            self._message_handler(event_type, payload)
        except Exception as e:
            self.logger.error({
                "action": "INBOUND_HANDLER_ERROR",
                "message": f"Handler failed for '{event_type}': {str(e)}",
                "data": {"event_type": event_type, "error": str(e), "error_type": type(e).__name__}
            })

    def _emit_status(self, connected: bool) -> None:
        for listener in list(self._status_listeners):
            try:
                listener(connected)
            except Exception as e:
                self.logger.error({
                    "action": "STATUS_LISTENER_ERROR",
                    "message": f"Connection status listener raised: {str(e)}",
                    "data": {"error": str(e)}
                })

    # ---- Outbound ----

    @property
    def joined_conversations(self) -> Set[Any]:
        return set(self._joined)

    def join_conversation(self, conversation_id: Any) -> bool:
        """
        Join a conversation so that commands targeting it are delivered.

        Joining an already joined conversation on a live connection is a no-op.
        The join is remembered even while disconnected so that it can be
        replayed when the connection comes back.
        """
        if conversation_id in self._joined and self.is_connected:
            return True
        self._joined.add(conversation_id)
        return self.send(CMD_JOIN_CONVERSATION, {"conversationId": conversation_id})

    def send_chat_message(
        self,
        conversation_id: Any,
        content: str,
        content_type: str = "text",
        attachment_url: Optional[str] = None,
        reply_to_id: Optional[Any] = None,
    ) -> bool:
        payload: Dict[str, Any] = {
            "conversationId": conversation_id,
            "content": content,
            "contentType": content_type,
        }
        if attachment_url is not None:
            payload["attachmentUrl"] = attachment_url
        if reply_to_id is not None:
            payload["replyToId"] = reply_to_id
        return self.send(CMD_SEND_MESSAGE, payload)

    def mark_message_read(self, conversation_id: Any, message_id: Any) -> bool:
        return self.send(CMD_MARK_READ, {"conversationId": conversation_id, "messageId": message_id})

    def send_typing_indicator(self, conversation_id: Any, is_typing: bool) -> bool:
        return self.send(CMD_TYPING_INDICATOR, {"conversationId": conversation_id, "isTyping": is_typing})

    def add_reaction(self, message_id: Any, emoji: str) -> bool:
        return self.send(CMD_ADD_REACTION, {"messageId": message_id, "emoji": emoji})

    def remove_reaction(self, message_id: Any, emoji: str) -> bool:
        return self.send(CMD_REMOVE_REACTION, {"messageId": message_id, "emoji": emoji})
