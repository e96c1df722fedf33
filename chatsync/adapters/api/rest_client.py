"""
REST collaborators for the messaging backend, using aiohttp.
"""

import asyncio
from typing import Any, Callable, Dict, List, Optional, Tuple, TypeVar

import aiohttp

from chatsync.core.exceptions import ApiError, EventParseError
from chatsync.core.interfaces.messaging_api import MessagingAPI
from chatsync.core.models import Conversation, Message, User
from chatsync.adapters.loggers import StructuredLogger
from chatsync.utils.config import require_keys


DEFAULT_REQUEST_TIMEOUT = 30

T = TypeVar("T")


class RestMessagingAPI(MessagingAPI):
    """
    aiohttp client for the conversation, message, user and search endpoints.

    Required config parameters:
    - base_url: Server origin, e.g. http://localhost:5000

    Optional config parameters:
    - request_timeout: Timeout for HTTP requests in seconds (default 30)
    - headers: Extra request headers (e.g. a session cookie)
    """

    def __init__(
        self,
        base_url: str,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
        headers: Optional[Dict[str, str]] = None,
        session: Optional[aiohttp.ClientSession] = None,
        logger_name: str = "rest_messaging_api",
    ):
        self.logger = StructuredLogger(name=logger_name)
        self._base_url = base_url.rstrip("/")
        self._request_timeout = request_timeout
        self._headers = headers or {}
        self._session = session
        self._owns_session = session is None

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "RestMessagingAPI":
        """
        Build a client from the `messaging.api` config section.

        Raises:
            ConfigurationError: If `base_url` is missing
        """
        require_keys(config, ["base_url"], "messaging.api")
        return cls(
            base_url=config["base_url"],
            request_timeout=float(config.get("request_timeout", DEFAULT_REQUEST_TIMEOUT)),
            headers=config.get("headers") or None,
        )

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(headers=self._headers)
            self._owns_session = True
        return self._session

    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, str]] = None,
        json_body: Optional[Dict[str, Any]] = None,
    ) -> Any:
        url = f"{self._base_url}{path}"
        timeout = aiohttp.ClientTimeout(total=self._request_timeout)
        try:
            async with self._get_session().request(
                method, url, params=params, json=json_body, timeout=timeout
            ) as response:
                if response.status >= 400:
                    error_text = await response.text()
                    self.logger.error({
                        "action": "API_REQUEST_FAILED",
                        "message": f"{method} {path} returned {response.status}",
                        "data": {"status_code": response.status, "error_text": error_text[:500]}
                    })
                    raise ApiError(
                        f"{method} {path} failed: Status code {response.status}, Response: {error_text}",
                        status=response.status,
                    )
                return await response.json(content_type=None)
        except aiohttp.ClientError as e:
            self.logger.error({
                "action": "API_CONNECTION_ERROR",
                "message": f"Error calling {method} {path}: {str(e)}",
                "data": {"url": url, "error": str(e)}
            })
            raise ApiError(f"Error calling {method} {path}: {str(e)}") from e
        except asyncio.TimeoutError as e:
            self.logger.error({
                "action": "API_TIMEOUT",
                "message": f"{method} {path} timed out after {self._request_timeout}s",
                "data": {"url": url, "timeout": self._request_timeout}
            })
            raise ApiError(f"{method} {path} timed out") from e
        except ValueError as e:
            # Undecodable JSON body
            raise ApiError(f"Invalid JSON from {method} {path}: {str(e)}") from e

    def _parse_list(self, data: Any, parser: Callable[[Dict[str, Any]], T], what: str) -> Tuple[T, ...]:
        if not isinstance(data, list):
            raise ApiError(f"Expected a list of {what}, got {type(data).__name__}")
        try:
            return tuple(parser(item) for item in data)
        except EventParseError as e:
            raise ApiError(f"Malformed {what} in response: {str(e)}") from e

    async def fetch_conversations(self) -> Tuple[Conversation, ...]:
        data = await self._request("GET", "/api/messages/conversations")
        return self._parse_list(data, Conversation.from_payload, "conversations")

    async def fetch_messages(self, conversation_id: Any) -> Tuple[Message, ...]:
        data = await self._request("GET", f"/api/messages/conversations/{conversation_id}")
        return self._parse_list(data, Message.from_payload, "messages")

    async def fetch_users(self) -> Tuple[User, ...]:
        data = await self._request("GET", "/api/users")
        return self._parse_list(data, User.from_payload, "users")

    async def create_conversation(
        self,
        participant_ids: List[str],
        title: Optional[str] = None,
        initial_message: Optional[str] = None,
    ) -> Conversation:
        body: Dict[str, Any] = {"participantIds": list(participant_ids)}
        if title:
            body["title"] = title
        if initial_message:
            body["initialMessage"] = initial_message

        data = await self._request("POST", "/api/messages/conversations", json_body=body)
        try:
            return Conversation.from_payload(data)
        except EventParseError as e:
            raise ApiError(f"Malformed conversation in response: {str(e)}") from e

    async def search_messages(self, query: str) -> Tuple[Message, ...]:
        data = await self._request("GET", "/api/messages/search", params={"query": query})
        return self._parse_list(data, Message.from_payload, "messages")

    async def close(self) -> None:
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None
