"""World state models for representing what the agent knows about the game."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Annotated

from pydantic import BaseModel, Field, field_validator

MAX_HEALTH = 20
MAX_HUNGER = 20


class GamePhase(StrEnum):
    """Coarse progression tier inferred from inventory contents."""

    EARLY = "early"
    MID = "mid"
    LATE = "late"
    ENDGAME = "endgame"


class HistoryOutcome(StrEnum):
    """Outcome recorded for an executed action."""

    SUCCESS = "success"
    FAILURE = "failure"
    ERROR = "error"


class Position(BaseModel):
    """A position in world coordinates (blocks)."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    model_config = {"frozen": True}

    def formatted(self) -> str:
        """Render as a rounded coordinate triple."""
        return f"({self.x:.0f}, {self.y:.0f}, {self.z:.0f})"

    def offset(self, dx: float = 0.0, dy: float = 0.0, dz: float = 0.0) -> Position:
        """Return a new position moved by the given deltas."""
        return Position(x=self.x + dx, y=self.y + dy, z=self.z + dz)


class Rotation(BaseModel):
    """Look direction in degrees."""

    yaw: float = 0.0
    pitch: float = 0.0

    model_config = {"frozen": True}


class ItemStack(BaseModel):
    """An inventory slot."""

    name: str = Field(..., description="Item identifier, e.g. 'iron_pickaxe'")
    count: int = Field(default=1, ge=0, description="Stack size")

    model_config = {"frozen": True}


def _clamp_stat(value: int) -> int:
    return max(0, min(MAX_HEALTH, int(value)))


class WorldState(BaseModel):
    """Mutable snapshot of the agent's world.

    Owned by the StateStore. Other components read snapshots or go
    through StateStore.update().
    """

    position: Position = Field(default_factory=Position)
    rotation: Rotation = Field(default_factory=Rotation)
    health: int = Field(default=MAX_HEALTH, description="Health points, clamped to [0, 20]")
    hunger: int = Field(default=MAX_HUNGER, description="Food points, clamped to [0, 20]")
    inventory: list[ItemStack] = Field(default_factory=list)
    entity_id: int | None = Field(default=None, description="Opaque runtime entity handle")
    is_day: bool = Field(default=True)
    consecutive_errors: Annotated[int, Field(ge=0)] = 0
    game_phase: GamePhase = Field(default=GamePhase.EARLY)
    current_goal: str | None = Field(default=None)
    last_update: datetime = Field(default_factory=datetime.now)

    model_config = {"validate_assignment": True}

    @field_validator("health", "hunger", mode="before")
    @classmethod
    def _clamp(cls, value: int | float) -> int:
        return _clamp_stat(value)


class ActionHistoryEntry(BaseModel):
    """One executed action, immutable once appended."""

    timestamp: datetime = Field(default_factory=datetime.now)
    action: str
    outcome: HistoryOutcome
    detail: str = ""
    phase: GamePhase
    position: Position

    model_config = {"frozen": True}

    def short(self) -> str:
        """Compact rendering used in prompts."""
        return f"{self.action}: {self.outcome.value}"


class DecisionSnapshot(BaseModel):
    """Read-only projection of WorldState consumed by the decision engine.

    Fields may be mutually stale: the snapshot is taken without any
    coordination with inbound session events.
    """

    position: str
    health: int
    hunger: int
    health_fraction: float
    hunger_fraction: float
    inventory_count: int
    recent_actions: list[str] = Field(default_factory=list)
    has_items: bool
    can_survive: bool
    game_phase: GamePhase
    current_goal: str | None = None
    is_day: bool = True
    consecutive_errors: int = 0

    model_config = {"frozen": True}
