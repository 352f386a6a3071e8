"""Session implementations.

This module provides:
- EventSession: Session base with a local event registry and emit()
- NullSession: Offline session that records commands instead of sending them

Adapters for a real server subclass EventSession, implement send() and
close(), and call emit() from their packet callbacks.

Example:
    >>> from minebot.session.base import NullSession
    >>> session = NullSession()
    >>> session.on("health", lambda payload: print(payload["health"]))
    >>> session.emit("health", {"health": 12})
    12
"""

from __future__ import annotations

import logging
from collections import defaultdict, deque
from typing import Any

from minebot.interfaces.session import EventHandler, Session, SessionEvent, SessionFault

logger = logging.getLogger(__name__)


class EventSession(Session):
    """Session base class that keeps subscribed handlers per event name."""

    def __init__(self) -> None:
        self._handlers: dict[str, list[EventHandler]] = defaultdict(list)
        self._closed = False

    def on(self, event: SessionEvent | str, handler: EventHandler) -> None:
        """Subscribe a handler to an inbound event."""
        self._handlers[str(event)].append(handler)

    def emit(self, event: SessionEvent | str, payload: dict[str, Any] | None = None) -> None:
        """Dispatch an inbound event to every subscribed handler.

        A failing handler is logged and does not stop the others.
        """
        for handler in list(self._handlers.get(str(event), ())):
            try:
                handler(payload or {})
            except Exception as e:
                logger.warning(f"Session handler for {event!s} failed: {e}")

    @property
    def connected(self) -> bool:
        return not self._closed

    def close(self) -> None:
        """Mark the session closed. Safe to call repeatedly."""
        self._closed = True


class NullSession(EventSession):
    """Session that talks to nothing.

    Commands are logged at debug level and kept in a bounded list so
    tests and dry runs can inspect them.

    Attributes:
        sent: Recently sent (command, payload) pairs, oldest first.
    """

    def __init__(self, max_recorded: int = 1000) -> None:
        super().__init__()
        self.sent: deque[tuple[str, dict[str, Any]]] = deque(maxlen=max_recorded)

    def send(self, command: str, payload: dict[str, Any]) -> None:
        """Record a command.

        Raises:
            SessionFault: If the session was closed.
        """
        if self._closed:
            raise SessionFault(f"Session closed; cannot send {command}")
        logger.debug(f"NullSession.send({command!r}, {payload!r})")
        self.sent.append((command, payload))

    def commands(self, name: str | None = None) -> list[str]:
        """Names of recorded commands, optionally filtered by name."""
        return [cmd for cmd, _ in self.sent if name is None or cmd == name]
