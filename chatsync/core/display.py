"""Display names for users and conversations."""

from typing import Iterable, Optional

from chatsync.core.models import Conversation, User


UNKNOWN_USER = "Unknown User"
DEFAULT_CONVERSATION_NAME = "Conversation"


def user_display_name(user_id: str, users: Optional[Iterable[User]]) -> str:
    for user in users or ():
        if user.id == user_id:
            full_name = f"{user.first_name or ''} {user.last_name or ''}".strip()
            return full_name or user.email or UNKNOWN_USER
    return UNKNOWN_USER


def conversation_display_name(
    conversation: Conversation, users: Optional[Iterable[User]], current_user_id: Optional[str]
) -> str:
    """
    Title if set; for a direct conversation, the first participant who is not
    the current user; otherwise a generic label.
    """
    if conversation.title:
        return conversation.title

    if not conversation.is_group:
        for participant in conversation.participants:
            if participant.user_id != current_user_id:
                return user_display_name(participant.user_id, users)

    return DEFAULT_CONVERSATION_NAME


def typing_summary(
    conversation: Conversation, users: Optional[Iterable[User]], current_user_id: Optional[str]
) -> str:
    """Short status line such as 'Ada Lovelace is typing...'; empty when nobody is."""
    users = tuple(users or ())
    names = sorted(
        user_display_name(user_id, users)
        for user_id in conversation.typing_users
        if user_id != current_user_id
    )
    if not names:
        return ""
    if len(names) == 1:
        return f"{names[0]} is typing..."
    return f"{', '.join(names[:-1])} and {names[-1]} are typing..."
