"""FastAPI dashboard: status, state, history, manual commands and event log."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from fastapi import FastAPI, Request, WebSocket, WebSocketDisconnect
from fastapi.responses import HTMLResponse, JSONResponse

from minebot.core.metrics import MetricsCollector
from minebot.interfaces.session import SessionFault
from minebot.models.plans import Plan, PlanSource, Priority
from minebot.observer.streaming import ActionStreamingService

if TYPE_CHECKING:
    from minebot.actions.executor import ActionExecutor
    from minebot.core.state import StateStore
    from minebot.interfaces.session import Session

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 20
MANUAL_REASONING = "Manual command"
MANUAL_ESTIMATED_DURATION = 30.0

LIVE_PAGE_HTML = """<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8" />
  <title>Minebot Live</title>
  <style>
    body { font-family: sans-serif; margin: 0; padding: 1rem; background: #111; color: #eee; }
    .grid { display: grid; grid-template-columns: 1fr 2fr; gap: 1rem; }
    .panel { background: #1a1a1a; border: 1px solid #2f2f2f; border-radius: 8px; padding: 0.75rem; }
    pre { white-space: pre-wrap; max-height: 70vh; overflow-y: auto; font-size: 12px; }
    input { width: 70%; }
  </style>
</head>
<body>
  <h2>Minebot Live Observer</h2>
  <div class="grid">
    <div class="panel">
      <h3>Status</h3>
      <pre id="status"></pre>
      <form id="command">
        <input id="action" placeholder="move north 5" />
        <button type="submit">Send</button>
      </form>
      <pre id="result"></pre>
    </div>
    <div class="panel">
      <h3>Event Log</h3>
      <pre id="logs"></pre>
    </div>
  </div>
  <script>
    const statusEl = document.getElementById("status");
    const logsEl = document.getElementById("logs");
    const resultEl = document.getElementById("result");

    async function refresh() {
      const res = await fetch("/");
      statusEl.textContent = JSON.stringify(await res.json(), null, 2);
    }
    setInterval(refresh, 2000);
    refresh();

    document.getElementById("command").onsubmit = async (ev) => {
      ev.preventDefault();
      const action = document.getElementById("action").value;
      const res = await fetch("/command", {
        method: "POST",
        headers: { "Content-Type": "application/json" },
        body: JSON.stringify({ action }),
      });
      resultEl.textContent = JSON.stringify(await res.json());
    };

    const proto = location.protocol === "https:" ? "wss" : "ws";
    const logsWs = new WebSocket(`${proto}://${location.host}/ws/logs`);
    logsWs.onmessage = (ev) => {
      const data = JSON.parse(ev.data);
      logsEl.textContent = `${JSON.stringify(data)}\\n` + logsEl.textContent;
    };
  </script>
</body>
</html>
"""


def create_app(
    store: StateStore,
    executor: ActionExecutor,
    metrics: MetricsCollector | None = None,
    action_streaming_service: ActionStreamingService | None = None,
    session: Session | None = None,
    on_fault: Callable[[SessionFault], None] | None = None,
) -> FastAPI:
    """Create the dashboard app.

    Args:
        store: State store read by the status, state and history routes.
        executor: Executor manual commands are routed through, sharing
            its busy guard with the agent loop.
        metrics: Metrics collector. A new one is created if None.
        action_streaming_service: Shared event stream for /ws/logs.
        session: Game session, used to report connectivity.
        on_fault: Receives a SessionFault raised by a manual command, so the
            agent loop stops the same way it does for a disconnect.
    """
    app = FastAPI(title="Minebot Observer", version="2.0.0")
    app.state.store = store
    app.state.executor = executor
    app.state.metrics = metrics or MetricsCollector()
    app.state.action_streaming_service = action_streaming_service or ActionStreamingService()
    started_at = time.time()

    @app.get("/")
    async def status() -> dict[str, Any]:
        world = store.state
        return {
            "status": "online",
            "uptime": f"{int(time.time() - started_at)}s",
            "bot": {
                "connected": session.connected if session is not None else False,
                "phase": world.game_phase.value,
                "position": world.position.model_dump(),
                "health": world.health,
                "current_goal": world.current_goal,
                "busy": executor.is_busy,
            },
            "stats": app.state.metrics.get_metrics().model_dump(mode="json"),
        }

    @app.get("/state")
    async def state() -> dict[str, Any]:
        return store.summary()

    @app.get("/history")
    async def history() -> dict[str, Any]:
        return {
            "actions": [e.model_dump(mode="json") for e in store.recent_history(HISTORY_LIMIT)],
            "total": len(store.history),
        }

    @app.post("/command")
    async def command(request: Request) -> JSONResponse:
        try:
            body = await request.json()
        except ValueError:
            body = None
        action = body.get("action") if isinstance(body, dict) else None
        if not isinstance(action, str) or not action.strip():
            return JSONResponse(status_code=400, content={"error": "Missing action"})

        plan = Plan(
            action=action.strip(),
            reasoning=MANUAL_REASONING,
            priority=Priority.HIGH,
            estimated_duration=MANUAL_ESTIMATED_DURATION,
            source=PlanSource.MANUAL,
        )
        logger.info("Manual command: %s", plan.action)
        app.state.action_streaming_service.push_event(
            {"event": "manual_command", "action": plan.action}
        )

        try:
            result = await executor.execute(plan)
        except SessionFault as e:
            logger.error("Manual command failed: %s", e)
            if on_fault is not None:
                on_fault(e)
            return JSONResponse(status_code=500, content={"error": str(e)})
        return JSONResponse(content=result.model_dump(mode="json"))

    @app.get("/live")
    async def live_page() -> HTMLResponse:
        return HTMLResponse(LIVE_PAGE_HTML)

    @app.websocket("/ws/logs")
    async def logs_stream(websocket: WebSocket) -> None:
        await websocket.accept()
        service: ActionStreamingService = app.state.action_streaming_service
        last_event_id = 0
        try:
            while True:
                events = service.get_events_since(last_event_id)
                for event in events:
                    await websocket.send_json(event)
                    last_event_id = int(event["id"])
                await asyncio.sleep(0.1)
        except WebSocketDisconnect:
            logger.debug("Logs WebSocket client disconnected")
        except Exception as e:
            logger.warning("Logs stream error: %s", e)

    return app
