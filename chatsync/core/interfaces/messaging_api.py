from abc import ABC, abstractmethod
from typing import Any, List, Optional, Tuple

from chatsync.core.models import Conversation, Message, User


class MessagingAPI(ABC):
    """
    Interface for the REST collaborators used to bootstrap the caches.

    None of these calls is part of the real-time contract; they seed the
    caches that the event stream then keeps current.
    """

    @abstractmethod
    async def fetch_conversations(self) -> Tuple[Conversation, ...]:
        """
        Fetch the current user's conversation list.

        Returns:
            Tuple[Conversation, ...]: Conversations, most recent activity first

        Raises:
            ApiError: If the request fails or the response is malformed
        """
        pass

    @abstractmethod
    async def fetch_messages(self, conversation_id: Any) -> Tuple[Message, ...]:
        """
        Fetch the message history of one conversation, oldest first.

        Raises:
            ApiError: If the request fails or the response is malformed
        """
        pass

    @abstractmethod
    async def fetch_users(self) -> Tuple[User, ...]:
        """
        Fetch the user directory used for participant selection.

        Raises:
            ApiError: If the request fails or the response is malformed
        """
        pass

    @abstractmethod
    async def create_conversation(
        self,
        participant_ids: List[str],
        title: Optional[str] = None,
        initial_message: Optional[str] = None,
    ) -> Conversation:
        """
        Create a conversation.

        Args:
            participant_ids: Users to add besides the current user
            title: Optional display name (group conversations)
            initial_message: Optional first message

        Returns:
            Conversation: The created record, used to seed the cache

        Raises:
            ApiError: If the server rejects the request
        """
        pass

    @abstractmethod
    async def search_messages(self, query: str) -> Tuple[Message, ...]:
        """
        Full-text search over the current user's messages.

        Raises:
            ApiError: If the request fails or the response is malformed
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release any HTTP resources."""
        pass
