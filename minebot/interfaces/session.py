"""Game session interface.

The core never sees wire packets. A session adapter translates between
the game's protocol and this narrow surface: fire-and-forget commands out,
named events in.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from enum import StrEnum
from typing import Any

from minebot.errors import MinebotError

EventHandler = Callable[[dict[str, Any]], None]


class SessionEvent(StrEnum):
    """Inbound events a session adapter may emit.

    Payload shapes:
        spawn: {"entity_id", "position": {x, y, z}, "rotation": {yaw, pitch}}
        position: {"position": {x, y, z}, "rotation": {yaw, pitch}}
        health: {"health", "hunger"?}
        inventory: {"items": [{"name", "count"}, ...]}
        time: {"time": world ticks}
        chat: {"source", "message"}
        disconnect: {"reason"}
        error: {"message"}
    """

    SPAWN = "spawn"
    POSITION = "position"
    HEALTH = "health"
    INVENTORY = "inventory"
    TIME = "time"
    CHAT = "chat"
    DISCONNECT = "disconnect"
    ERROR = "error"


class SessionFault(MinebotError):
    """Disconnect or transport failure from the session.

    Not recoverable by the agent loop; stops it and is surfaced to the
    process boundary.
    """

    pass


class Session(ABC):
    """Abstract game session capability."""

    @abstractmethod
    def send(self, command: str, payload: dict[str, Any]) -> None:
        """Queue a command for the server. Fire-and-forget.

        Args:
            command: Command name, e.g. 'move_player'.
            payload: Command body.

        Raises:
            SessionFault: If the transport is gone.
        """
        ...

    @abstractmethod
    def on(self, event: SessionEvent | str, handler: EventHandler) -> None:
        """Subscribe a handler to an inbound event.

        Args:
            event: Event name.
            handler: Called with the event payload.
        """
        ...

    @abstractmethod
    def close(self) -> None:
        """Release the session. Must be idempotent."""
        ...

    @property
    def connected(self) -> bool:
        """Whether the session is currently usable."""
        return True
