"""Runtime container used by CLI commands."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from minebot.actions.executor import ActionExecutor
from minebot.cli.helpers import _emit_observer_event, _start_observer_server, _UvicornObserverServer
from minebot.config.loader import Config
from minebot.core.loop import AgentLoop, CycleReport, LoopState
from minebot.core.metrics import MetricsCollector
from minebot.core.state import StateStore
from minebot.interfaces.reasoning import ReasoningClient
from minebot.interfaces.session import Session
from minebot.observer.server import create_app
from minebot.observer.streaming import ActionStreamingService, StreamingLogHandler

logger = logging.getLogger(__name__)


@dataclass
class AgentRuntime:
    """Runtime wrapper for an assembled agent session."""

    config: Config
    session: Session
    store: StateStore
    executor: ActionExecutor
    loop: AgentLoop
    reasoning: ReasoningClient
    metrics: MetricsCollector
    action_streaming_service: ActionStreamingService | None = None
    observer_server: _UvicornObserverServer | None = None
    _log_handler: StreamingLogHandler | None = field(default=None, init=False, repr=False)

    async def run(self, max_cycles: int | None = None) -> int:
        """Run the agent loop, with the dashboard when enabled.

        Returns:
            Number of completed cycles.

        Raises:
            SessionFault: If the game session faulted.
        """
        self.loop.set_callbacks(
            on_cycle_complete=self._publish_cycle,
            on_error=self._publish_error,
            on_state_change=self._publish_loop_state,
            on_state_sync=self._publish_state,
        )
        try:
            if self.action_streaming_service is not None:
                await self._start_observer()
            await self.loop.run(max_cycles=max_cycles)
        finally:
            await self.shutdown()
        return self.loop.cycle_count

    async def _start_observer(self) -> None:
        assert self.action_streaming_service is not None
        host = self.config.observer.host
        port = self.config.observer.port
        app = create_app(
            store=self.store,
            executor=self.executor,
            metrics=self.metrics,
            action_streaming_service=self.action_streaming_service,
            session=self.session,
            on_fault=self.loop.fail,
        )
        self.observer_server = await _start_observer_server(host, port, app)
        self._log_handler = StreamingLogHandler(self.action_streaming_service)
        logging.getLogger().addHandler(self._log_handler)
        logger.info("[OBSERVER] live page: http://%s:%s/live", host, port)
        _emit_observer_event(
            self.action_streaming_service,
            {"event": "observer_started", "host": host, "port": port},
        )

    def _publish_cycle(self, report: CycleReport) -> None:
        result = report.result
        _emit_observer_event(
            self.action_streaming_service,
            {
                "event": "cycle_complete",
                "cycle": report.cycle,
                "action": report.plan.action,
                "source": report.plan.source.value,
                "success": result.success if result is not None else None,
                "message": result.message if result is not None else None,
                "duration_ms": round(report.duration_ms, 1),
            },
        )

    def _publish_error(self, error: Exception) -> None:
        _emit_observer_event(
            self.action_streaming_service,
            {"event": "cycle_error", "error_type": type(error).__name__, "error": str(error)},
        )

    def _publish_loop_state(self, state: LoopState) -> None:
        _emit_observer_event(self.action_streaming_service, {"event": "loop_state", "state": state.value})

    def _publish_state(self, summary: dict[str, Any]) -> None:
        _emit_observer_event(self.action_streaming_service, {"event": "state_sync", "state": summary})

    async def shutdown(self) -> None:
        """Shutdown runtime resources."""
        self.loop.stop()
        try:
            await self.reasoning.aclose()
        except Exception as e:
            logger.warning("Error closing reasoning client: %s", e)
        if self.observer_server is not None:
            await self.observer_server.stop()
            self.observer_server = None
        if self._log_handler is not None:
            logging.getLogger().removeHandler(self._log_handler)
            self._log_handler = None
