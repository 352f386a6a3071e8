"""Binding of inbound session events to StateStore updates.

Session adapters emit protocol-neutral events (see SessionEvent). This
module subscribes to them and folds each payload into the shared state.
A disconnect or transport error is turned into a SessionFault and handed
to `on_fault`, which the agent loop uses to stop.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from minebot.core.state import StateStore
from minebot.interfaces.session import Session, SessionEvent, SessionFault
from minebot.models.world import ItemStack, Position, Rotation

logger = logging.getLogger(__name__)

TICKS_PER_DAY = 24000
DAYLIGHT_TICKS = 12000

FaultCallback = Callable[[SessionFault], None]


def is_daytime(ticks: int) -> bool:
    """Whether a world time (in ticks) falls in the daylight half of the cycle."""
    return ticks % TICKS_PER_DAY < DAYLIGHT_TICKS


def _pose(payload: dict[str, Any]) -> dict[str, Any]:
    update: dict[str, Any] = {}
    if payload.get("position") is not None:
        update["position"] = Position.model_validate(payload["position"])
    if payload.get("rotation") is not None:
        update["rotation"] = Rotation.model_validate(payload["rotation"])
    return update


def bind_session_events(
    session: Session,
    store: StateStore,
    on_fault: FaultCallback | None = None,
) -> None:
    """Subscribe state-updating handlers to a session.

    Args:
        session: Session emitting inbound events.
        store: Store receiving the updates.
        on_fault: Called with a SessionFault on disconnect or transport error.
    """

    def on_spawn(payload: dict[str, Any]) -> None:
        update = _pose(payload)
        if payload.get("entity_id") is not None:
            update["entity_id"] = int(payload["entity_id"])
        store.update(**update)
        logger.info(f"Spawned at {store.state.position.formatted()}")

    def on_position(payload: dict[str, Any]) -> None:
        update = _pose(payload)
        if update:
            store.update(**update)

    def on_health(payload: dict[str, Any]) -> None:
        update = {key: payload[key] for key in ("health", "hunger") if key in payload}
        if update:
            store.update(**update)

    def on_inventory(payload: dict[str, Any]) -> None:
        items = [ItemStack.model_validate(item) for item in payload.get("items") or []]
        store.update(inventory=items)

    def on_time(payload: dict[str, Any]) -> None:
        if "time" in payload:
            store.update(is_day=is_daytime(int(payload["time"])))

    def on_chat(payload: dict[str, Any]) -> None:
        source = payload.get("source") or "server"
        logger.info(f"[CHAT] <{source}> {payload.get('message', '')}")

    def on_disconnect(payload: dict[str, Any]) -> None:
        reason = payload.get("reason") or "unknown reason"
        logger.error(f"Disconnected: {reason}")
        if on_fault is not None:
            on_fault(SessionFault(f"Disconnected: {reason}"))

    def on_error(payload: dict[str, Any]) -> None:
        message = payload.get("message") or "unknown error"
        logger.error(f"Session error: {message}")
        if on_fault is not None:
            on_fault(SessionFault(f"Session error: {message}"))

    session.on(SessionEvent.SPAWN, on_spawn)
    session.on(SessionEvent.POSITION, on_position)
    session.on(SessionEvent.HEALTH, on_health)
    session.on(SessionEvent.INVENTORY, on_inventory)
    session.on(SessionEvent.TIME, on_time)
    session.on(SessionEvent.CHAT, on_chat)
    session.on(SessionEvent.DISCONNECT, on_disconnect)
    session.on(SessionEvent.ERROR, on_error)
