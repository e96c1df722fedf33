"""
Entity types held by the conversation and message caches.

All entities are frozen dataclasses so that a cached value can be shared with
any number of readers; every change produces a new instance via
`dataclasses.replace`. Wire payloads use camelCase keys and are converted here.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Dict, FrozenSet, Iterable, Optional, Tuple

from chatsync.core.exceptions import EventParseError
from chatsync.utils.datetime_utils import parse_wire_datetime


CONTENT_TYPE_TEXT = "text"
CONTENT_TYPE_RICH = "rich"


def coerce_id(value: Any) -> Any:
    """Numeric strings become ints; everything else is returned untouched."""
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return value


def _require(payload: Dict[str, Any], key: str, entity: str) -> Any:
    value = payload.get(key)
    if value is None:
        raise EventParseError(f"{entity} payload is missing '{key}'")
    return value


def _unique(values: Iterable[Any]) -> Tuple[Any, ...]:
    seen = []
    for value in values:
        if value not in seen:
            seen.append(value)
    return tuple(seen)


@dataclass(frozen=True)
class Reaction:
    """
    Per-emoji aggregate on a message.

    The count is derived from `user_ids`, so the two can never disagree.
    """

    emoji: str
    user_ids: Tuple[str, ...] = ()

    @property
    def count(self) -> int:
        return len(self.user_ids)

    def with_user(self, user_id: str) -> "Reaction":
        if user_id in self.user_ids:
            return self
        return replace(self, user_ids=self.user_ids + (user_id,))

    def without_user(self, user_id: str) -> "Reaction":
        if user_id not in self.user_ids:
            return self
        return replace(self, user_ids=tuple(uid for uid in self.user_ids if uid != user_id))

    def to_dict(self) -> Dict[str, Any]:
        return {"emoji": self.emoji, "count": self.count, "userIds": list(self.user_ids)}

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "Reaction":
        emoji = payload.get("emoji") or payload.get("reaction")
        if not emoji:
            raise EventParseError("Reaction payload is missing 'emoji'")
        user_ids = _unique(str(uid) for uid in payload.get("userIds") or [])
        return cls(emoji=emoji, user_ids=user_ids)


@dataclass(frozen=True)
class Attachment:
    """Uploaded file reference; url, name and type travel together."""

    url: str
    name: Optional[str] = None
    type: Optional[str] = None


@dataclass(frozen=True)
class SenderProfile:
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "SenderProfile":
        return cls(
            first_name=payload.get("firstName"),
            last_name=payload.get("lastName"),
            profile_image_url=payload.get("profileImageUrl"),
        )


@dataclass(frozen=True)
class Message:
    """A chat message. `is_read` means read by the recipient, not by the current user."""

    id: Any
    conversation_id: Any
    sender_id: str
    content: str = ""
    content_type: str = CONTENT_TYPE_TEXT
    attachment: Optional[Attachment] = None
    reply_to_id: Optional[Any] = None
    is_read: bool = False
    reactions: Tuple[Reaction, ...] = ()
    sent_at: Optional[datetime] = None
    is_edited: bool = False
    sender: Optional[SenderProfile] = None

    @property
    def attachment_url(self) -> Optional[str]:
        return self.attachment.url if self.attachment else None

    @property
    def attachment_name(self) -> Optional[str]:
        return self.attachment.name if self.attachment else None

    @property
    def attachment_type(self) -> Optional[str]:
        return self.attachment.type if self.attachment else None

    def reaction_for(self, emoji: str) -> Optional[Reaction]:
        for reaction in self.reactions:
            if reaction.emoji == emoji:
                return reaction
        return None

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "Message":
        """
        Build a message from a wire object.

        Raises:
            EventParseError: If `id`, `conversationId` or `senderId` is missing
        """
        if not isinstance(payload, dict):
            raise EventParseError(f"Message payload must be an object, got {type(payload).__name__}")

        attachment = None
        if payload.get("attachmentUrl"):
            attachment = Attachment(
                url=payload["attachmentUrl"],
                name=payload.get("attachmentName"),
                type=payload.get("attachmentType"),
            )

        sender = payload.get("sender")
        reactions = (Reaction.from_payload(r) for r in payload.get("reactions") or [])
        return cls(
            id=coerce_id(_require(payload, "id", "Message")),
            conversation_id=coerce_id(_require(payload, "conversationId", "Message")),
            sender_id=str(_require(payload, "senderId", "Message")),
            content=payload.get("content") or "",
            content_type=payload.get("contentType") or CONTENT_TYPE_TEXT,
            attachment=attachment,
            reply_to_id=coerce_id(payload.get("replyToId")),
            is_read=bool(payload.get("isRead", False)),
            reactions=tuple(r for r in reactions if r.count > 0),
            sent_at=parse_wire_datetime(payload.get("sentAt")),
            is_edited=bool(payload.get("isEdited", False)),
            sender=SenderProfile.from_payload(sender) if isinstance(sender, dict) else None,
        )


@dataclass(frozen=True)
class Participant:
    user_id: str
    is_admin: bool = False
    last_read_message_id: Optional[Any] = None

    @classmethod
    def from_payload(cls, payload: Any) -> "Participant":
        # The list endpoint sends participant rows; some callers send bare ids
        if not isinstance(payload, dict):
            return cls(user_id=str(payload))
        return cls(
            user_id=str(_require(payload, "userId", "Participant")),
            is_admin=bool(payload.get("isAdmin", False)),
            last_read_message_id=coerce_id(payload.get("lastReadMessageId")),
        )


@dataclass(frozen=True)
class Conversation:
    """
    A direct or group conversation as shown in the conversation list.

    `unread_count` and `typing_users` are client-owned; a refresh from the
    server does not overwrite them for conversations already cached.
    """

    id: Any
    title: Optional[str] = None
    is_group: bool = False
    participants: Tuple[Participant, ...] = ()
    last_message: Optional[Message] = None
    unread_count: int = 0
    typing_users: FrozenSet[str] = field(default_factory=frozenset)
    course_id: Optional[Any] = None

    @property
    def participant_ids(self) -> Tuple[str, ...]:
        return tuple(p.user_id for p in self.participants)

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "Conversation":
        if not isinstance(payload, dict):
            raise EventParseError(f"Conversation payload must be an object, got {type(payload).__name__}")

        last_message = payload.get("lastMessage")
        is_group = payload.get("isGroup")
        if is_group is None:
            is_group = payload.get("type") == "group"

        return cls(
            id=coerce_id(_require(payload, "id", "Conversation")),
            title=payload.get("title") or None,
            is_group=bool(is_group),
            participants=tuple(Participant.from_payload(p) for p in payload.get("participants") or []),
            last_message=Message.from_payload(last_message) if isinstance(last_message, dict) else None,
            unread_count=max(0, int(payload.get("unreadCount") or 0)),
            typing_users=frozenset(str(uid) for uid in payload.get("typingUsers") or []),
            course_id=payload.get("courseId"),
        )


@dataclass(frozen=True)
class User:
    """Directory entry used for participant selection and display names."""

    id: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    profile_image_url: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "User":
        if not isinstance(payload, dict):
            raise EventParseError(f"User payload must be an object, got {type(payload).__name__}")
        return cls(
            id=str(_require(payload, "id", "User")),
            first_name=payload.get("firstName"),
            last_name=payload.get("lastName"),
            email=payload.get("email"),
            profile_image_url=payload.get("profileImageUrl"),
        )


@dataclass(frozen=True)
class ComposeDraft:
    """Compose-box state. One draft per screen, not per conversation."""

    text: str = ""
    reply_to: Optional[Message] = None
    attachment: Optional[Attachment] = None


@dataclass(frozen=True)
class SessionState:
    current_user_id: str
    active_conversation_id: Optional[Any] = None
    is_connected: bool = False
