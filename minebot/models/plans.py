"""Plan and execution models produced each decision cycle."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, Field


class Priority(StrEnum):
    """Urgency hint attached to a plan."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class PlanSource(StrEnum):
    """Where a plan came from."""

    REASONING = "reasoning"
    FALLBACK = "fallback"
    CIRCUIT_BREAKER = "circuit_breaker"
    MANUAL = "manual"


class Plan(BaseModel):
    """One proposed next action plus its justification."""

    action: str = Field(..., min_length=1, description="Command string, e.g. 'move north 10'")
    reasoning: str = Field(default="", description="Why this action was chosen")
    priority: Priority | None = Field(default=None)
    estimated_duration: float | None = Field(default=None, ge=0, description="Seconds")
    source: PlanSource = Field(default=PlanSource.REASONING)
    timestamp: datetime = Field(default_factory=datetime.now)

    model_config = {"frozen": True}

    @property
    def command(self) -> str:
        """Leading command token, lowercased."""
        tokens = self.action.split()
        return tokens[0].lower() if tokens else ""

    @property
    def arguments(self) -> list[str]:
        """Tokens after the command, case preserved."""
        return self.action.split()[1:]


class ExecutionResult(BaseModel):
    """Terminal value of one executor call."""

    success: bool
    message: str = ""
    duration_ms: float = Field(default=0.0, ge=0.0)

    model_config = {"frozen": True}


class DecisionTrace(BaseModel):
    """Prompt/response/plan triple kept for prompt continuity and debugging."""

    prompt: str
    response: str | None = None
    plan: Plan
    timestamp: datetime = Field(default_factory=datetime.now)

    model_config = {"frozen": True}
