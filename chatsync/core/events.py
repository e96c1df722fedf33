"""
Inbound server events.

Every server push is parsed into one member of the `InboundEvent` union. The
router keys its handler table on these classes, so a new event type needs a
class here, an entry in `EVENT_CLASSES` and a handler, or the router refuses
to start.
"""

from dataclasses import dataclass
from typing import Any, Callable, ClassVar, Dict, Optional, Tuple, Union

from chatsync.core.exceptions import EventParseError
from chatsync.core.models import Message, coerce_id


def _field(payload: Dict[str, Any], key: str, event_type: str) -> Any:
    value = payload.get(key)
    if value is None:
        raise EventParseError(f"'{event_type}' payload is missing '{key}'")
    return value


@dataclass(frozen=True)
class NewMessageEvent:
    event_type: ClassVar[str] = "new_message"

    message: Message

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "NewMessageEvent":
        return cls(message=Message.from_payload(payload))


@dataclass(frozen=True)
class MessageReadEvent:
    """Read watermark: every own message with id <= message_id has been read."""

    event_type: ClassVar[str] = "message_read"

    message_id: Any
    conversation_id: Optional[Any] = None
    user_id: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "MessageReadEvent":
        user_id = payload.get("userId")
        return cls(
            message_id=coerce_id(_field(payload, "messageId", cls.event_type)),
            conversation_id=coerce_id(payload.get("conversationId")),
            user_id=str(user_id) if user_id is not None else None,
        )


@dataclass(frozen=True)
class TypingIndicatorEvent:
    event_type: ClassVar[str] = "typing_indicator"

    conversation_id: Any
    user_id: str
    is_typing: bool

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "TypingIndicatorEvent":
        return cls(
            conversation_id=coerce_id(_field(payload, "conversationId", cls.event_type)),
            user_id=str(_field(payload, "userId", cls.event_type)),
            is_typing=bool(payload.get("isTyping", False)),
        )


@dataclass(frozen=True)
class ReactionAddedEvent:
    event_type: ClassVar[str] = "message_reaction_added"

    message_id: Any
    emoji: str
    user_id: str

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "ReactionAddedEvent":
        return cls(
            message_id=coerce_id(_field(payload, "messageId", cls.event_type)),
            emoji=_field(payload, "reaction", cls.event_type),
            user_id=str(_field(payload, "userId", cls.event_type)),
        )


@dataclass(frozen=True)
class ReactionRemovedEvent:
    event_type: ClassVar[str] = "message_reaction_removed"

    message_id: Any
    emoji: str
    user_id: str

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "ReactionRemovedEvent":
        return cls(
            message_id=coerce_id(_field(payload, "messageId", cls.event_type)),
            emoji=_field(payload, "reaction", cls.event_type),
            user_id=str(_field(payload, "userId", cls.event_type)),
        )


@dataclass(frozen=True)
class ServerErrorEvent:
    """The server rejected one of our commands (failed send, failed reaction)."""

    event_type: ClassVar[str] = "error"

    message: str

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "ServerErrorEvent":
        return cls(message=str(payload.get("message") or "The messaging server reported an error"))


InboundEvent = Union[
    NewMessageEvent,
    MessageReadEvent,
    TypingIndicatorEvent,
    ReactionAddedEvent,
    ReactionRemovedEvent,
    ServerErrorEvent,
]

EVENT_CLASSES: Tuple[type, ...] = (
    NewMessageEvent,
    MessageReadEvent,
    TypingIndicatorEvent,
    ReactionAddedEvent,
    ReactionRemovedEvent,
    ServerErrorEvent,
)

_PARSERS: Dict[str, Callable[[Dict[str, Any]], InboundEvent]] = {
    cls.event_type: cls.from_payload for cls in EVENT_CLASSES
}


def parse_event(event_type: str, payload: Any) -> Optional[InboundEvent]:
    """
    Parse a raw `(type, payload)` pair.

    Args:
        event_type: The `type` field of the wire envelope
        payload: The `payload` field of the wire envelope

    Returns:
        The parsed event, or None when the type is not one we know

    Raises:
        EventParseError: If the type is known but the payload is malformed
    """
    parser = _PARSERS.get(event_type)
    if parser is None:
        return None
    if not isinstance(payload, dict):
        raise EventParseError(f"'{event_type}' payload must be an object, got {type(payload).__name__}")
    return parser(payload)
