"""
Unit tests for display-name helpers.
"""

from chatsync.core.display import (
    DEFAULT_CONVERSATION_NAME,
    UNKNOWN_USER,
    conversation_display_name,
    typing_summary,
    user_display_name,
)
from chatsync.core.models import Conversation, Participant, User


USERS = (
    User(id="u1", first_name="Ada", last_name="Lovelace"),
    User(id="u2", first_name="Grace", last_name="Hopper"),
    User(id="u3", email="alan@example.com"),
)


def test_user_display_name():
    assert user_display_name("u2", USERS) == "Grace Hopper"
    assert user_display_name("u3", USERS) == "alan@example.com"
    assert user_display_name("u9", USERS) == UNKNOWN_USER
    assert user_display_name("u1", None) == UNKNOWN_USER


def test_title_wins():
    conversation = Conversation(id=1, title="Course chat", participants=(Participant("u2"),))
    assert conversation_display_name(conversation, USERS, "u1") == "Course chat"


def test_direct_conversation_uses_other_participant():
    conversation = Conversation(id=1, participants=(Participant("u1"), Participant("u2")))
    assert conversation_display_name(conversation, USERS, "u1") == "Grace Hopper"


def test_untitled_group_uses_default():
    conversation = Conversation(id=1, is_group=True, participants=(Participant("u1"), Participant("u2")))
    assert conversation_display_name(conversation, USERS, "u1") == DEFAULT_CONVERSATION_NAME


def test_typing_summary():
    conversation = Conversation(id=1, typing_users=frozenset({"u1", "u2"}))
    assert typing_summary(conversation, USERS, "u1") == "Grace Hopper is typing..."

    conversation = Conversation(id=1, typing_users=frozenset({"u2", "u3"}))
    assert typing_summary(conversation, USERS, "u1") == "Grace Hopper and alan@example.com are typing..."

    assert typing_summary(Conversation(id=1), USERS, "u1") == ""
