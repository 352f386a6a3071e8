"""Decision engine: from a state snapshot to one next action.

This module provides the DecisionEngine class that:
- Builds a deterministic prompt from a DecisionSnapshot
- Queries the reasoning service once per cycle (no synchronous retry)
- Parses the free-text reply with a graceful-degradation ladder
- Counts consecutive service failures on the shared state
- Opens a circuit breaker at the error ceiling and serves deterministic
  fallback plans, probing the service again after a cooldown

Example:
    >>> from minebot.core.decision import DecisionEngine
    >>> from minebot.core.state import StateStore
    >>>
    >>> engine = DecisionEngine(store=StateStore(), reasoning=client)
    >>> plan = await engine.decide()
    >>> print(f"Action: {plan.action} ({plan.source.value})")
"""

from __future__ import annotations

import logging
import time
from collections import deque
from dataclasses import dataclass
from typing import TYPE_CHECKING

from minebot.core.parsing import extract_goal, parse_plan
from minebot.core.prompts import DecisionPrompts
from minebot.interfaces.reasoning import ReasoningServiceError
from minebot.models.plans import DecisionTrace, Plan, PlanSource, Priority
from minebot.models.world import DecisionSnapshot, GamePhase

if TYPE_CHECKING:
    from minebot.core.state import StateStore
    from minebot.interfaces.reasoning import ReasoningClient

logger = logging.getLogger(__name__)

HOLDING_ACTION = "wait"
GATHER_ACTION = "mine wood"
EXPLORE_ACTION = "explore"


@dataclass
class DecisionConfig:
    """Configuration for the decision engine.

    Attributes:
        max_consecutive_errors: Error count at which the breaker opens.
        breaker_cooldown_cycles: Cycles served from fallback before one
            probe call is let through. 0 probes on every cycle.
        trace_size: Maximum prompt/response traces kept.
        recent_actions: History entries included in the prompt.
        low_health_threshold: Health at or below which fallback waits.
    """

    max_consecutive_errors: int = 5
    breaker_cooldown_cycles: int = 3
    trace_size: int = 20
    recent_actions: int = 5
    low_health_threshold: int = 5


class DecisionEngine:
    """Turns snapshots into plans, shielding the loop from service failures.

    decide() never raises for service or parse failures: a failed call
    yields a holding plan, an unparseable reply yields an exploratory plan.

    Attributes:
        traces: Recent DecisionTrace records, oldest first.
        breaker_open: Whether reasoning calls are currently being bypassed.
    """

    def __init__(
        self,
        store: StateStore,
        reasoning: ReasoningClient,
        config: DecisionConfig | None = None,
        prompts: DecisionPrompts | None = None,
    ) -> None:
        """Initialize the decision engine.

        Args:
            store: State store holding the shared error counter.
            reasoning: Reasoning service client.
            config: Engine configuration. Uses defaults if None.
            prompts: Prompt templates. Uses defaults if None.
        """
        self._store = store
        self._reasoning = reasoning
        self._config = config or DecisionConfig()
        self._prompts = prompts or DecisionPrompts()
        self._traces: deque[DecisionTrace] = deque(maxlen=self._config.trace_size)
        self._bypassed_cycles = 0

        logger.debug(
            f"DecisionEngine initialized: model={reasoning.model_name}, "
            f"error_ceiling={self._config.max_consecutive_errors}"
        )

    @property
    def traces(self) -> list[DecisionTrace]:
        return list(self._traces)

    @property
    def breaker_open(self) -> bool:
        return self._store.state.consecutive_errors >= self._config.max_consecutive_errors

    async def decide(self, snapshot: DecisionSnapshot | None = None) -> Plan:
        """Choose the next action.

        Args:
            snapshot: State projection. Taken from the store if None.

        Returns:
            The plan for this cycle.
        """
        start_time = time.time()
        snapshot = snapshot or self._store.snapshot_for_decision()

        if self.breaker_open:
            if self._bypassed_cycles < self._config.breaker_cooldown_cycles:
                self._bypassed_cycles += 1
                plan = self.fallback_plan(snapshot)
                logger.info(
                    f"Circuit breaker open ({self._store.state.consecutive_errors} errors); "
                    f"fallback {plan.action!r} "
                    f"[{self._bypassed_cycles}/{self._config.breaker_cooldown_cycles}]"
                )
                return plan
            self._bypassed_cycles = 0
            logger.info("Circuit breaker half-open; probing reasoning service")

        prompt = self._prompts.build_decision_prompt(
            snapshot,
            recent_limit=self._config.recent_actions,
            previous_action=self._traces[-1].plan.action if self._traces else None,
        )

        try:
            response = await self._reasoning.complete(prompt)
        except ReasoningServiceError as e:
            errors = self._store.record_decision_error()
            logger.warning(f"Reasoning call failed ({errors} consecutive): {e}")
            plan = self.holding_plan(f"Reasoning service unavailable: {e.message}")
            self._traces.append(DecisionTrace(prompt=prompt, response=None, plan=plan))
            return plan

        self._store.reset_decision_errors()
        self._bypassed_cycles = 0

        plan = parse_plan(response)
        goal = extract_goal(response)
        if goal and goal != self._store.state.current_goal:
            self._store.update(current_goal=goal)

        self._traces.append(DecisionTrace(prompt=prompt, response=response, plan=plan))

        duration_ms = (time.time() - start_time) * 1000
        logger.debug(f"Decision made in {duration_ms:.1f}ms: {plan.action!r}")
        return plan

    def holding_plan(self, reason: str) -> Plan:
        """Low-cost plan used right after a failed reasoning call."""
        return Plan(
            action=HOLDING_ACTION,
            reasoning=reason,
            priority=Priority.LOW,
            source=PlanSource.FALLBACK,
        )

    def fallback_plan(self, snapshot: DecisionSnapshot) -> Plan:
        """Deterministic plan keyed on health and phase.

        Args:
            snapshot: Current state projection.

        Returns:
            wait when health is low, basic gathering in the early phase,
            exploration otherwise.
        """
        if snapshot.health <= self._config.low_health_threshold:
            action, reasoning, priority = HOLDING_ACTION, "Low health; waiting to recover", Priority.HIGH
        elif snapshot.game_phase == GamePhase.EARLY:
            action, reasoning, priority = GATHER_ACTION, "Basic resource gathering", Priority.MEDIUM
        else:
            action, reasoning, priority = EXPLORE_ACTION, "Searching for resources and structures", Priority.MEDIUM

        return Plan(
            action=action,
            reasoning=f"Fallback: {reasoning}",
            priority=priority,
            source=PlanSource.CIRCUIT_BREAKER,
        )
