"""Shared data models for minebot.

All models use Pydantic for validation and serialization.
"""

from minebot.models.commands import KNOWN_VERBS, CommandKind
from minebot.models.plans import DecisionTrace, ExecutionResult, Plan, PlanSource, Priority
from minebot.models.world import (
    MAX_HEALTH,
    MAX_HUNGER,
    ActionHistoryEntry,
    DecisionSnapshot,
    GamePhase,
    HistoryOutcome,
    ItemStack,
    Position,
    Rotation,
    WorldState,
)

__all__ = [
    "MAX_HEALTH",
    "MAX_HUNGER",
    "KNOWN_VERBS",
    "ActionHistoryEntry",
    "CommandKind",
    "DecisionSnapshot",
    "DecisionTrace",
    "ExecutionResult",
    "GamePhase",
    "HistoryOutcome",
    "ItemStack",
    "Plan",
    "PlanSource",
    "Position",
    "Priority",
    "Rotation",
    "WorldState",
]
