"""Observer package: status API, manual commands and event log streaming."""

from minebot.observer.server import create_app
from minebot.observer.streaming import ActionStreamingService, StreamingLogHandler

__all__ = ["ActionStreamingService", "StreamingLogHandler", "create_app"]
