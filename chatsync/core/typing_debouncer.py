"""
Per-conversation typing-indicator debouncer.

Each keystroke sends "typing" and (re)arms a single "stopped typing" timer for
that conversation. At most one timer handle exists per conversation; arming a
new one cancels the previous.
"""

import asyncio
from typing import Any, Callable, Dict, Optional

from chatsync.adapters.loggers import StructuredLogger


DEFAULT_IDLE_SECONDS = 2.0

SendIndicator = Callable[[Any, bool], Any]


class TypingDebouncer:
    """Owns the stop-typing timer handles, keyed by conversation id."""

    def __init__(
        self,
        send_indicator: SendIndicator,
        idle_seconds: float = DEFAULT_IDLE_SECONDS,
        logger_name: str = "typing_debouncer",
    ):
        """
        Args:
            send_indicator: Called as `send_indicator(conversation_id, is_typing)`
            idle_seconds: Quiet period after the last keystroke before "stopped typing" is sent
            logger_name: Name for the logger instance
        """
        self.logger = StructuredLogger(name=logger_name)
        self._send_indicator = send_indicator
        self._idle_seconds = idle_seconds
        self._handles: Dict[Any, asyncio.TimerHandle] = {}

    @property
    def idle_seconds(self) -> float:
        return self._idle_seconds

    def is_pending(self, conversation_id: Any) -> bool:
        return conversation_id in self._handles

    def keystroke(self, conversation_id: Any, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        """
        Record a compose-box change.

        Must be called from within the running event loop unless `loop` is given.
        """
        loop = loop or asyncio.get_running_loop()
        self._send_indicator(conversation_id, True)

        previous = self._handles.pop(conversation_id, None)
        if previous is not None:
            previous.cancel()
        self._handles[conversation_id] = loop.call_later(
            self._idle_seconds, self._expire, conversation_id
        )

    def flush(self, conversation_id: Any) -> bool:
        """
        Send "stopped typing" now if a timer is pending for the conversation.

        Returns:
            bool: True if a pending timer was flushed
        """
        handle = self._handles.pop(conversation_id, None)
        if handle is None:
            return False
        handle.cancel()
        self._send_indicator(conversation_id, False)
        return True

    def cancel_all(self) -> None:
        """Drop every pending timer without sending anything (shutdown)."""
        for handle in self._handles.values():
            handle.cancel()
        if self._handles:
            self.logger.debug({
                "action": "TYPING_TIMERS_CANCELLED",
                "message": f"Cancelled {len(self._handles)} pending typing timers",
                "data": {"conversation_ids": list(self._handles)}
            })
        self._handles.clear()

    def _expire(self, conversation_id: Any) -> None:
        self._handles.pop(conversation_id, None)
        self._send_indicator(conversation_id, False)
