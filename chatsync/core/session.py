"""
MessagingSession: wires configuration, store, transport, REST API, router and
controller into one running messaging screen.
"""

from dataclasses import replace
from typing import Any, Dict, Optional

from chatsync.core.controller import DEFAULT_MESSAGES_PATH, InteractionController
from chatsync.core.conversation_cache import ConversationCache
from chatsync.core.exceptions import ChatSyncError, ConfigurationError, TransportError
from chatsync.core.interfaces.messaging_api import MessagingAPI
from chatsync.core.interfaces.navigator import Navigator
from chatsync.core.interfaces.notifier import Notifier
from chatsync.core.interfaces.transport import Transport
from chatsync.core.message_cache import MessageCache
from chatsync.core.models import ComposeDraft, SessionState
from chatsync.core.router import EventRouter
from chatsync.core.store import DRAFT_KEY, SESSION_KEY, QueryStore
from chatsync.core.typing_debouncer import DEFAULT_IDLE_SECONDS
from chatsync.adapters.api import RestMessagingAPI
from chatsync.adapters.loggers import StructuredLogger
from chatsync.adapters.navigation import InMemoryNavigator
from chatsync.adapters.notifiers import InMemoryNotifier
from chatsync.adapters.transport import WebSocketChannel
from chatsync.utils.config import get_section, load_config, require_keys, resolve_config_path
from chatsync.utils.load_env import load_env


class MessagingSession:
    """
    Owns one store and the components that read and write it.

    Collaborators not passed in are built from the config file: a
    `WebSocketChannel`, a `RestMessagingAPI`, an `InMemoryNotifier` and an
    `InMemoryNavigator`.
    """

    def __init__(
        self,
        config_path: Optional[str] = None,
        transport: Optional[Transport] = None,
        api: Optional[MessagingAPI] = None,
        notifier: Optional[Notifier] = None,
        navigator: Optional[Navigator] = None,
        logger_name: str = "messaging_session",
    ):
        self.logger = StructuredLogger(name=logger_name)
        self._logger_name = logger_name
        self._config_path = resolve_config_path(config_path)
        self._config: Dict[str, Any] = {}
        self._is_initialized = False

        self._transport = transport
        self._api = api
        self._notifier = notifier
        self._navigator = navigator

        self._store = QueryStore()
        self._router: Optional[EventRouter] = None
        self._controller: Optional[InteractionController] = None

    # ---- Accessors ----

    @property
    def is_initialized(self) -> bool:
        return self._is_initialized

    @property
    def store(self) -> QueryStore:
        return self._store

    @property
    def conversations(self) -> ConversationCache:
        return ConversationCache(self._store)

    @property
    def messages(self) -> MessageCache:
        return MessageCache(self._store)

    @property
    def session_state(self) -> Optional[SessionState]:
        return self._store.get(SESSION_KEY)

    @property
    def transport(self) -> Transport:
        self._require_initialized()
        return self._transport

    @property
    def api(self) -> MessagingAPI:
        self._require_initialized()
        return self._api

    @property
    def notifier(self) -> Notifier:
        self._require_initialized()
        return self._notifier

    @property
    def navigator(self) -> Navigator:
        self._require_initialized()
        return self._navigator

    @property
    def router(self) -> EventRouter:
        self._require_initialized()
        return self._router

    @property
    def controller(self) -> InteractionController:
        self._require_initialized()
        return self._controller

    def _require_initialized(self) -> None:
        if not self._is_initialized:
            raise ChatSyncError("MessagingSession is not initialized; call initialize() first")

    # ---- Lifecycle ----

    async def initialize(self, env_file: Optional[str] = None) -> None:
        """
        Load configuration, build the components and bootstrap the caches.

        Raises:
            ConfigurationError: If the configuration is missing or invalid
            ApiError: If the initial conversation or user fetch fails
            TransportError: If `messaging.transport.require_connection` is set
                            and the first connection attempt fails
        """
        if self._is_initialized:
            return

        load_env(env_file)
        self._config = load_config(self._config_path)

        logger_config = get_section(self._config, "system.loggers.structured_logger")
        if logger_config:
            self.logger = StructuredLogger.from_config(self._logger_name, logger_config)

        self.logger.info({
            "action": "SESSION_INIT_START",
            "message": "Initializing messaging session",
            "data": {"config_path": self._config_path}
        })

        messaging_config = get_section(self._config, "messaging")
        require_keys(messaging_config, ["current_user_id"], "messaging")
        current_user_id = str(messaging_config["current_user_id"])
        transport_config = get_section(self._config, "messaging.transport")
        typing_config = get_section(self._config, "messaging.typing")
        routes_config = get_section(self._config, "messaging.routes")

        if self._notifier is None:
            self._notifier = InMemoryNotifier()
        if self._navigator is None:
            self._navigator = InMemoryNavigator(routes_config.get("messages_path", DEFAULT_MESSAGES_PATH))
        if self._transport is None:
            self._transport = WebSocketChannel.from_config(transport_config, current_user_id, self._notifier)
        if self._api is None:
            self._api = RestMessagingAPI.from_config(get_section(self._config, "messaging.api"))

        try:
            idle_seconds = float(typing_config.get("idle_seconds", DEFAULT_IDLE_SECONDS))
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"messaging.typing.idle_seconds must be a number: {str(e)}") from e

        self._store.set(SESSION_KEY, SessionState(current_user_id=current_user_id))
        self._store.set(DRAFT_KEY, ComposeDraft())

        self._router = EventRouter(self._store, self._transport, self._notifier)
        self._transport.set_message_handler(self._router.dispatch)
        self._transport.add_status_listener(self._on_connection_status)

        self._controller = InteractionController(
            self._store,
            self._transport,
            self._api,
            self._notifier,
            self._navigator,
            typing_idle_seconds=idle_seconds,
            messages_path=routes_config.get("messages_path", DEFAULT_MESSAGES_PATH),
        )

        try:
            await self._controller.refresh_conversations()
            await self._controller.refresh_users()

            connected = await self._transport.connect()
            if not connected and transport_config.get("require_connection", False):
                raise TransportError("Could not open the messaging channel")
        except Exception as e:
            self.logger.error({
                "action": "SESSION_INIT_ERROR",
                "message": f"Messaging session failed to start: {str(e)}",
                "data": {"error": str(e), "error_type": type(e).__name__}
            })
            # __aexit__ does not run when __aenter__ raises
            await self.close()
            raise

        self._is_initialized = True
        await self._controller.handle_location(self._navigator.location)

        self.logger.info({
            "action": "SESSION_INIT_SUCCESS",
            "message": "Messaging session initialized",
            "data": {"current_user_id": current_user_id, "connected": connected}
        })

    def _on_connection_status(self, connected: bool) -> None:
        self._store.update(
            SESSION_KEY,
            lambda old: old if old.is_connected == connected else replace(old, is_connected=connected),
        )

    async def close(self) -> None:
        """Cancel typing timers, close the channel and release HTTP resources."""
        if self._controller is not None:
            self._controller.close()
        if self._transport is not None:
            await self._transport.close()
        if self._api is not None:
            await self._api.close()
        self._is_initialized = False
        self.logger.info({
            "action": "SESSION_CLOSED",
            "message": "Messaging session closed",
        })

    async def __aenter__(self) -> "MessagingSession":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
