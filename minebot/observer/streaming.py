"""Action/event streaming service for observer WebSocket delivery."""

from __future__ import annotations

import logging
import threading
from collections import deque
from datetime import datetime
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_MAX_EVENTS = 500


class ActionStreamingService:
    """Thread-safe bounded event stream for action/decision observability."""

    def __init__(self, max_events: int = DEFAULT_MAX_EVENTS) -> None:
        self._max_events = max(1, max_events)
        self._lock = threading.Lock()
        self._events: deque[dict[str, Any]] = deque(maxlen=self._max_events)
        self._next_id = 1

    @property
    def max_events(self) -> int:
        return self._max_events

    def push_event(self, payload: dict[str, Any]) -> int:
        """Push an event payload and return its assigned event id."""
        with self._lock:
            event_id = self._next_id
            self._next_id += 1
            event = {
                "id": event_id,
                "timestamp": datetime.now().isoformat(),
                "payload": payload,
            }
            self._events.append(event)
            return event_id

    def get_events_since(self, last_event_id: int) -> list[dict[str, Any]]:
        """Get events with id greater than `last_event_id`."""
        with self._lock:
            return [event for event in self._events if int(event["id"]) > last_event_id]

    def recent(self, limit: int) -> list[dict[str, Any]]:
        """The last `limit` retained events, oldest first."""
        with self._lock:
            if limit <= 0:
                return []
            return list(self._events)[-limit:]


class StreamingLogHandler(logging.Handler):
    """Logging handler that mirrors log records into an event stream.

    Lets /ws/logs subscribers see the same lines the console shows.
    """

    def __init__(self, service: ActionStreamingService, level: int = logging.INFO) -> None:
        super().__init__(level=level)
        self._service = service

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self._service.push_event(
                {
                    "event": "log",
                    "level": record.levelname,
                    "logger": record.name,
                    "message": record.getMessage(),
                }
            )
        except Exception:
            self.handleError(record)
