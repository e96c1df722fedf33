"""
WebSocket Transport Channel built on aiohttp.

One persistent connection carries JSON envelopes `{"type": ..., "payload": ...}`
in both directions. Outbound commands are queued synchronously and written in
order by a single writer task; inbound frames are handed to the registered
message handler from a single reader task.
"""

import asyncio
import json
from typing import Any, Dict, Optional

import aiohttp

from chatsync.core.interfaces.notifier import VARIANT_DESTRUCTIVE, Notifier
from chatsync.core.interfaces.transport import CMD_AUTHENTICATE, CMD_JOIN_CONVERSATION, Transport
from chatsync.adapters.loggers import StructuredLogger
from chatsync.utils.config import require_keys


DEFAULT_RECONNECT_ATTEMPTS = 5
DEFAULT_RECONNECT_DELAY = 3.0
DEFAULT_HEARTBEAT = 20.0


class WebSocketChannel(Transport):
    """
    Transport over a single aiohttp WebSocket.

    Required config parameters:
    - url: WebSocket endpoint, e.g. ws://localhost:5000/ws

    Optional config parameters:
    - reconnect_attempts: Retries after an unexpected close (default 5)
    - reconnect_delay: Seconds between retries (default 3)
    - heartbeat: Ping interval in seconds (default 20)
    - headers: Extra handshake headers (e.g. a session cookie)
    """

    def __init__(
        self,
        url: str,
        user_id: str,
        reconnect_attempts: int = DEFAULT_RECONNECT_ATTEMPTS,
        reconnect_delay: float = DEFAULT_RECONNECT_DELAY,
        heartbeat: Optional[float] = DEFAULT_HEARTBEAT,
        headers: Optional[Dict[str, str]] = None,
        notifier: Optional[Notifier] = None,
        session: Optional[aiohttp.ClientSession] = None,
        logger_name: str = "websocket_channel",
    ):
        super().__init__(StructuredLogger(name=logger_name))
        self._url = url
        self._user_id = user_id
        self._reconnect_attempts = reconnect_attempts
        self._reconnect_delay = reconnect_delay
        self._heartbeat = heartbeat
        self._headers = headers or {}
        self._notifier = notifier

        self._session = session
        self._owns_session = session is None
        self._ws: Optional[aiohttp.ClientWebSocketResponse] = None
        self._outbound: Optional[asyncio.Queue] = None
        self._reader_task: Optional[asyncio.Task] = None
        self._writer_task: Optional[asyncio.Task] = None
        self._reconnect_task: Optional[asyncio.Task] = None
        self._attempts = 0
        self._connected = False
        self._closing = False

    @classmethod
    def from_config(
        cls, config: Dict[str, Any], user_id: str, notifier: Optional[Notifier] = None
    ) -> "WebSocketChannel":
        """
        Build a channel from the `messaging.transport` config section.

        Raises:
            ConfigurationError: If `url` is missing
        """
        require_keys(config, ["url"], "messaging.transport")
        return cls(
            url=config["url"],
            user_id=user_id,
            reconnect_attempts=int(config.get("reconnect_attempts", DEFAULT_RECONNECT_ATTEMPTS)),
            reconnect_delay=float(config.get("reconnect_delay", DEFAULT_RECONNECT_DELAY)),
            heartbeat=config.get("heartbeat", DEFAULT_HEARTBEAT),
            headers=config.get("headers") or None,
            notifier=notifier,
        )

    @property
    def is_connected(self) -> bool:
        return self._connected

    def _set_connected(self, connected: bool) -> None:
        if connected == self._connected:
            return
        self._connected = connected
        self._emit_status(connected)

    # ---- Lifecycle ----

    async def connect(self) -> bool:
        """
        Open the WebSocket, authenticate and re-join known conversations.

        A failed attempt schedules a reconnect (up to `reconnect_attempts` times)
        instead of raising.
        """
        self._closing = False
        if self._connected:
            return True

        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(headers=self._headers)
            self._owns_session = True

        try:
            ws = await self._session.ws_connect(self._url, heartbeat=self._heartbeat)
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as e:
            self.logger.warning({
                "action": "WS_CONNECT_FAILED",
                "message": f"Could not connect to {self._url}: {str(e)}",
                "data": {"url": self._url, "attempt": self._attempts, "error": str(e)}
            })
            self._schedule_reconnect()
            return False

        self._ws = ws
        self._attempts = 0
        self._outbound = asyncio.Queue()
        self._set_connected(True)

        # Queued before any caller command so the server sees them first
        self.send(CMD_AUTHENTICATE, {"userId": self._user_id})
        for conversation_id in sorted(self._joined, key=str):
            self.send(CMD_JOIN_CONVERSATION, {"conversationId": conversation_id})

        self._writer_task = asyncio.create_task(self._write_loop(ws, self._outbound))
        self._reader_task = asyncio.create_task(self._read_loop(ws))

        self.logger.info({
            "action": "WS_CONNECTED",
            "message": f"Connected to {self._url}",
            "data": {"url": self._url, "rejoined": len(self._joined)}
        })
        return True

    async def close(self) -> None:
        self._closing = True

        if self._reconnect_task is not None:
            self._reconnect_task.cancel()
            self._reconnect_task = None

        ws = self._ws
        self._ws = None
        self._outbound = None
        self._set_connected(False)

        if self._writer_task is not None:
            self._writer_task.cancel()
            self._writer_task = None
        if ws is not None and not ws.closed:
            await ws.close()
        if self._reader_task is not None:
            self._reader_task.cancel()
            try:
                await self._reader_task
            except asyncio.CancelledError:
                pass
            self._reader_task = None

        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()

        self.logger.info({
            "action": "WS_CLOSED",
            "message": "WebSocket channel closed",
            "data": {"url": self._url}
        })

    # ---- Outbound ----

    def send(self, command: str, payload: Dict[str, Any]) -> bool:
        if not self._connected or self._outbound is None:
            self.logger.warning({
                "action": "OUTBOUND_DROPPED",
                "message": f"Dropping '{command}' while disconnected",
                "data": {"command": command}
            })
            return False

        self._outbound.put_nowait(json.dumps({"type": command, "payload": payload}))
        self.logger.debug({
            "action": "OUTBOUND_QUEUED",
            "message": f"Queued '{command}'",
            "data": {"command": command}
        })
        return True

    async def _write_loop(self, ws: aiohttp.ClientWebSocketResponse, queue: asyncio.Queue) -> None:
        while True:
            frame = await queue.get()
            try:
                await ws.send_str(frame)
            except (aiohttp.ClientError, ConnectionResetError, RuntimeError) as e:
                self.logger.warning({
                    "action": "OUTBOUND_SEND_FAILED",
                    "message": f"Failed to write frame: {str(e)}",
                    "data": {"error": str(e), "unsent": queue.qsize()}
                })
                # Take the connection down now so send() stops accepting frames
                if ws is self._ws:
                    self._writer_task = None
                    await self._handle_disconnect(ws)
                if not ws.closed:
                    await ws.close()
                return

    # ---- Inbound ----

    async def _read_loop(self, ws: aiohttp.ClientWebSocketResponse) -> None:
        try:
            async for msg in ws:
                if msg.type == aiohttp.WSMsgType.TEXT:
                    self._handle_frame(msg.data)
                elif msg.type == aiohttp.WSMsgType.ERROR:
                    self.logger.error({
                        "action": "WS_ERROR",
                        "message": f"WebSocket error: {ws.exception()}",
                        "data": {"error": str(ws.exception())}
                    })
                    self._notify(
                        "Connection Error",
                        "There was an error with the messaging connection",
                    )
                    break
        finally:
            await self._handle_disconnect(ws)

    def _handle_frame(self, raw: str) -> None:
        try:
            envelope = json.loads(raw)
        except json.JSONDecodeError as e:
            self.logger.warning({
                "action": "INBOUND_PARSE_ERROR",
                "message": f"Error parsing WebSocket message: {str(e)}",
                "data": {"error": str(e)}
            })
            return

        if not isinstance(envelope, dict) or not envelope.get("type"):
            self.logger.warning({
                "action": "INBOUND_INVALID_ENVELOPE",
                "message": "Ignoring frame without a 'type'",
            })
            return

        self._deliver(envelope["type"], envelope.get("payload") or {})

    async def _handle_disconnect(self, ws: aiohttp.ClientWebSocketResponse) -> None:
        # A newer connection may already have replaced this one
        if ws is not self._ws:
            return

        self._ws = None
        self._outbound = None
        if self._writer_task is not None:
            self._writer_task.cancel()
            self._writer_task = None
        self._set_connected(False)

        self.logger.info({
            "action": "WS_DISCONNECTED",
            "message": "WebSocket disconnected",
            "data": {"url": self._url, "closing": self._closing}
        })
        if not self._closing:
            self._schedule_reconnect()

    # ---- Reconnect ----

    def _schedule_reconnect(self) -> None:
        if self._closing:
            return
        if self._reconnect_task is not None and not self._reconnect_task.done():
            return
        if self._attempts >= self._reconnect_attempts:
            self.logger.error({
                "action": "WS_RECONNECT_EXHAUSTED",
                "message": f"Giving up after {self._attempts} reconnect attempts",
                "data": {"url": self._url, "attempts": self._attempts}
            })
            self._notify("Connection Lost", "Unable to reconnect to the messaging service")
            return
        self._reconnect_task = asyncio.create_task(self._reconnect_after_delay())

    async def _reconnect_after_delay(self) -> None:
        await asyncio.sleep(self._reconnect_delay)
        self._attempts += 1
        self.logger.info({
            "action": "WS_RECONNECTING",
            "message": f"Attempting to reconnect ({self._attempts}/{self._reconnect_attempts})",
            "data": {"attempt": self._attempts, "max_attempts": self._reconnect_attempts}
        })
        # Cleared first so a failed connect() can schedule the next attempt
        self._reconnect_task = None
        await self.connect()

    def _notify(self, title: str, description: str) -> None:
        if self._notifier is not None:
            self._notifier.notify(title, description, VARIANT_DESTRUCTIVE)
