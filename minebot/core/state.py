"""State store for the agent's world snapshot and action history.

This module provides the StateStore class that:
- Owns the single WorldState instance for the process
- Merges partial updates from session events and handlers
- Keeps a bounded, FIFO action-history log
- Derives the game phase from inventory contents
- Produces read-only DecisionSnapshot projections for the decision engine

Example:
    >>> from minebot.core.state import StateStore
    >>> from minebot.models import HistoryOutcome, ItemStack
    >>>
    >>> store = StateStore(history_size=50)
    >>> store.update(inventory=[ItemStack(name="iron_ingot", count=3)])
    >>> store.state.game_phase
    <GamePhase.MID: 'mid'>
    >>> store.add_to_history("mine iron", HistoryOutcome.SUCCESS, "Mining iron")
    >>> store.snapshot_for_decision().recent_actions
    ['mine iron: success']
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Callable, Iterable
from datetime import datetime
from typing import Any

from minebot.models.world import (
    MAX_HEALTH,
    MAX_HUNGER,
    ActionHistoryEntry,
    DecisionSnapshot,
    GamePhase,
    HistoryOutcome,
    ItemStack,
    WorldState,
)

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_SIZE = 50
SNAPSHOT_RECENT_ACTIONS = 5
SURVIVAL_THRESHOLD = 5

# Checked most advanced tier first.
PHASE_MARKERS: tuple[tuple[GamePhase, tuple[str, ...]], ...] = (
    (GamePhase.ENDGAME, ("elytra", "dragon")),
    (GamePhase.LATE, ("diamond", "netherite")),
    (GamePhase.MID, ("iron",)),
)

StateCallback = Callable[[WorldState], None]


def determine_game_phase(inventory: Iterable[ItemStack | dict[str, Any]]) -> GamePhase:
    """Classify progression from inventory item names.

    Args:
        inventory: Item stacks (or raw dicts with a "name" key).

    Returns:
        The most advanced phase whose marker appears in any item name.
    """
    names = []
    for item in inventory:
        name = item.get("name") if isinstance(item, dict) else item.name
        names.append((name or "").lower())

    for phase, markers in PHASE_MARKERS:
        if any(marker in name for name in names for marker in markers):
            return phase
    return GamePhase.EARLY


class StateStore:
    """Owner of the process-wide WorldState.

    Updates are not coordinated with readers: a snapshot taken between two
    session events may mix old and new fields.

    Attributes:
        state: The live WorldState. Treat as read-only outside this class.
    """

    def __init__(
        self,
        state: WorldState | None = None,
        history_size: int = DEFAULT_HISTORY_SIZE,
    ) -> None:
        """Initialize the store.

        Args:
            state: Initial state. Defaults to a fresh WorldState.
            history_size: Maximum history entries kept.

        Raises:
            ValueError: If history_size is not positive.
        """
        if history_size < 1:
            raise ValueError(f"history_size must be positive, got {history_size}")

        self._state = state or WorldState()
        self._history: deque[ActionHistoryEntry] = deque(maxlen=history_size)
        self._subscribers: list[StateCallback] = []
        self._state.game_phase = determine_game_phase(self._state.inventory)

    @property
    def state(self) -> WorldState:
        return self._state

    @property
    def history_size(self) -> int:
        return self._history.maxlen or 0

    @property
    def history(self) -> list[ActionHistoryEntry]:
        """All retained history entries, oldest first."""
        return list(self._history)

    def subscribe(self, callback: StateCallback) -> None:
        """Call `callback` with the state after every update."""
        self._subscribers.append(callback)

    def unsubscribe(self, callback: StateCallback) -> None:
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    def update(self, **partial: Any) -> None:
        """Merge fields into the current state.

        An inventory change recomputes game_phase. game_phase itself cannot
        be set here.

        Args:
            **partial: WorldState field values.

        Raises:
            ValueError: If a key is not a WorldState field.
            ValidationError: If a value has the wrong shape. Nothing is
                applied in that case.
        """
        if "game_phase" in partial:
            logger.warning("Ignoring direct game_phase update; it is derived from inventory")
            partial.pop("game_phase")

        unknown = set(partial) - set(WorldState.model_fields)
        if unknown:
            raise ValueError(f"Unknown state fields: {sorted(unknown)}")

        candidate = WorldState.model_validate({**self._state.model_dump(), **partial})
        for key in partial:
            setattr(self._state, key, getattr(candidate, key))

        if "inventory" in partial:
            phase = determine_game_phase(self._state.inventory)
            if phase != self._state.game_phase:
                logger.info(f"Game phase: {self._state.game_phase.value} -> {phase.value}")
            self._state.game_phase = phase

        self._state.last_update = datetime.now()
        self._notify()

    def determine_game_phase(self) -> GamePhase:
        """Phase implied by the current inventory."""
        return determine_game_phase(self._state.inventory)

    def record_decision_error(self) -> int:
        """Increment the consecutive reasoning-error counter."""
        self._state.consecutive_errors += 1
        return self._state.consecutive_errors

    def reset_decision_errors(self) -> None:
        """Reset the consecutive reasoning-error counter after a success."""
        if self._state.consecutive_errors:
            logger.info(
                f"Reasoning service recovered after {self._state.consecutive_errors} errors"
            )
        self._state.consecutive_errors = 0

    def add_to_history(
        self,
        action: str,
        outcome: HistoryOutcome,
        detail: str = "",
    ) -> ActionHistoryEntry:
        """Append an entry tagged with the current phase and position.

        The oldest entry is evicted when the log is full.
        """
        entry = ActionHistoryEntry(
            action=action,
            outcome=outcome,
            detail=detail,
            phase=self._state.game_phase,
            position=self._state.position,
        )
        self._history.append(entry)
        return entry

    def recent_history(self, limit: int) -> list[ActionHistoryEntry]:
        """Most recent `limit` entries, oldest first."""
        if limit <= 0:
            return []
        return list(self._history)[-limit:]

    def snapshot_for_decision(self) -> DecisionSnapshot:
        """Build the read-only projection used for prompting."""
        state = self._state
        return DecisionSnapshot(
            position=state.position.formatted(),
            health=state.health,
            hunger=state.hunger,
            health_fraction=state.health / MAX_HEALTH,
            hunger_fraction=state.hunger / MAX_HUNGER,
            inventory_count=len(state.inventory),
            recent_actions=[e.short() for e in self.recent_history(SNAPSHOT_RECENT_ACTIONS)],
            has_items=len(state.inventory) > 0,
            can_survive=state.health > SURVIVAL_THRESHOLD and state.hunger > SURVIVAL_THRESHOLD,
            game_phase=state.game_phase,
            current_goal=state.current_goal,
            is_day=state.is_day,
            consecutive_errors=state.consecutive_errors,
        )

    def summary(self) -> dict[str, Any]:
        """JSON-friendly summary for the dashboard."""
        state = self._state
        return {
            "position": state.position.model_dump(),
            "rotation": state.rotation.model_dump(),
            "health": state.health,
            "hunger": state.hunger,
            "inventory_count": len(state.inventory),
            "inventory": [item.model_dump() for item in state.inventory],
            "is_day": state.is_day,
            "current_goal": state.current_goal,
            "game_phase": state.game_phase.value,
            "consecutive_errors": state.consecutive_errors,
            "recent_actions": [
                e.model_dump(mode="json") for e in self.recent_history(SNAPSHOT_RECENT_ACTIONS)
            ],
            "last_update": state.last_update.isoformat(),
        }

    def _notify(self) -> None:
        for subscriber in self._subscribers:
            try:
                subscriber(self._state)
            except Exception as e:
                logger.warning(f"State subscriber error: {e}")
