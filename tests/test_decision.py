"""Tests for the decision engine.

These tests verify:
- Prompt building from a snapshot
- Reply parsing and goal tracking
- Holding plans on reasoning failures
- Circuit breaker opening and half-open probing
- Deterministic fallback plans
"""

from __future__ import annotations

import asyncio

import pytest

from minebot.core.decision import DecisionConfig, DecisionEngine
from minebot.core.prompts import PROMPT_VERSION, DecisionPrompts
from minebot.core.state import StateStore
from minebot.interfaces.reasoning import ReasoningClient, ReasoningServiceError
from minebot.models import GamePhase, HistoryOutcome, ItemStack, PlanSource, Priority

GOOD_REPLY = "REASONING: Trees nearby.\nGOAL: get wood\nPRIORITY: high\nTIME: 10\nACTION: mine wood"


class ScriptedReasoning(ReasoningClient):
    """Reasoning client that replays scripted replies or errors."""

    def __init__(self, *replies: str | Exception) -> None:
        self.replies = list(replies)
        self.prompts: list[str] = []

    async def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        reply = self.replies.pop(0) if self.replies else GOOD_REPLY
        if isinstance(reply, Exception):
            raise reply
        return reply

    @property
    def model_name(self) -> str:
        return "scripted"


def _failing(n: int) -> list[Exception]:
    return [ReasoningServiceError("upstream down", status=503) for _ in range(n)]


@pytest.fixture
def store() -> StateStore:
    return StateStore()


class TestDecisionConfig:
    """Tests for DecisionConfig."""

    def test_defaults(self):
        """Should have the documented defaults."""
        config = DecisionConfig()

        assert config.max_consecutive_errors == 5
        assert config.breaker_cooldown_cycles == 3
        assert config.recent_actions == 5


class TestDecisionPrompts:
    """Tests for DecisionPrompts."""

    def test_prompt_contains_state(self, store: StateStore):
        store.update(health=12, hunger=8, is_day=False, current_goal="find iron")
        store.add_to_history("mine stone", HistoryOutcome.SUCCESS)

        prompt = DecisionPrompts().build_decision_prompt(store.snapshot_for_decision())

        assert "Health: 12/20, Hunger: 8/20" in prompt
        assert "Time of day: night" in prompt
        assert "Current Goal: find iron" in prompt
        assert "mine stone: success" in prompt
        assert "ACTION:" in prompt

    def test_prompt_is_deterministic(self, store: StateStore):
        prompts = DecisionPrompts()
        snapshot = store.snapshot_for_decision()

        first = prompts.build_decision_prompt(snapshot, previous_action="explore")
        second = prompts.build_decision_prompt(snapshot, previous_action="explore")

        assert first == second
        assert "Your previous choice: explore" in first

    def test_recent_limit(self, store: StateStore):
        for i in range(4):
            store.add_to_history(f"wait {i}", HistoryOutcome.SUCCESS)

        prompt = DecisionPrompts().build_decision_prompt(
            store.snapshot_for_decision(), recent_limit=1
        )

        assert "wait 3: success" in prompt
        assert "wait 2" not in prompt

    def test_version(self):
        assert DecisionPrompts().version == PROMPT_VERSION


class TestDecide:
    """Tests for DecisionEngine.decide()."""

    def test_successful_reply(self, store: StateStore):
        """Should parse the reply and update the current goal."""
        engine = DecisionEngine(store, ScriptedReasoning(GOOD_REPLY))

        plan = asyncio.run(engine.decide())

        assert plan.action == "mine wood"
        assert plan.priority == Priority.HIGH
        assert plan.source == PlanSource.REASONING
        assert store.state.current_goal == "get wood"
        assert len(engine.traces) == 1

    def test_unparseable_reply_explores(self, store: StateStore):
        engine = DecisionEngine(store, ScriptedReasoning("I am not sure what to do."))

        plan = asyncio.run(engine.decide())

        assert plan.action == "explore"
        assert store.state.consecutive_errors == 0

    def test_failure_returns_holding_plan(self, store: StateStore):
        """Should wait and count the error instead of raising."""
        engine = DecisionEngine(store, ScriptedReasoning(*_failing(1)))

        plan = asyncio.run(engine.decide())

        assert plan.action == "wait"
        assert plan.source == PlanSource.FALLBACK
        assert "upstream down" in plan.reasoning
        assert store.state.consecutive_errors == 1
        assert engine.traces[-1].response is None

    def test_success_resets_error_count(self, store: StateStore):
        engine = DecisionEngine(store, ScriptedReasoning(*_failing(2), GOOD_REPLY))

        async def run():
            for _ in range(3):
                await engine.decide()

        asyncio.run(run())

        assert store.state.consecutive_errors == 0

    def test_previous_action_included_in_next_prompt(self, store: StateStore):
        reasoning = ScriptedReasoning(GOOD_REPLY, GOOD_REPLY)
        engine = DecisionEngine(store, reasoning)

        async def run():
            await engine.decide()
            await engine.decide()

        asyncio.run(run())

        assert "Your previous choice" not in reasoning.prompts[0]
        assert "Your previous choice: mine wood" in reasoning.prompts[1]


class TestCircuitBreaker:
    """Tests for the consecutive-error circuit breaker."""

    def test_breaker_bypasses_service(self, store: StateStore):
        """After five failures the sixth cycle should not call the service."""
        reasoning = ScriptedReasoning(*_failing(5))
        engine = DecisionEngine(store, reasoning)

        async def run():
            plans = []
            for _ in range(6):
                plans.append(await engine.decide())
            return plans

        plans = asyncio.run(run())

        assert len(reasoning.prompts) == 5
        assert engine.breaker_open is True
        assert plans[-1].source == PlanSource.CIRCUIT_BREAKER
        assert plans[-1].action == "mine wood"

    def test_probe_after_cooldown_closes_breaker(self, store: StateStore):
        reasoning = ScriptedReasoning(*_failing(5), GOOD_REPLY)
        engine = DecisionEngine(store, reasoning, DecisionConfig(breaker_cooldown_cycles=1))

        async def run():
            plans = []
            for _ in range(7):
                plans.append(await engine.decide())
            return plans

        plans = asyncio.run(run())

        assert plans[5].source == PlanSource.CIRCUIT_BREAKER
        assert plans[6].source == PlanSource.REASONING
        assert len(reasoning.prompts) == 6
        assert engine.breaker_open is False
        assert store.state.consecutive_errors == 0

    def test_failed_probe_keeps_breaker_open(self, store: StateStore):
        reasoning = ScriptedReasoning(*_failing(6))
        engine = DecisionEngine(store, reasoning, DecisionConfig(breaker_cooldown_cycles=1))

        async def run():
            plans = []
            for _ in range(8):
                plans.append(await engine.decide())
            return plans

        plans = asyncio.run(run())

        assert plans[6].source == PlanSource.FALLBACK
        assert plans[7].source == PlanSource.CIRCUIT_BREAKER
        assert store.state.consecutive_errors == 6

    def test_zero_cooldown_probes_every_cycle(self, store: StateStore):
        reasoning = ScriptedReasoning(*_failing(7))
        engine = DecisionEngine(store, reasoning, DecisionConfig(breaker_cooldown_cycles=0))

        async def run():
            for _ in range(7):
                await engine.decide()

        asyncio.run(run())

        assert len(reasoning.prompts) == 7


class TestFallbackPlan:
    """Tests for deterministic fallback plans."""

    def test_low_health_waits(self, store: StateStore):
        store.update(health=5, inventory=[ItemStack(name="diamond")])
        engine = DecisionEngine(store, ScriptedReasoning())

        plan = engine.fallback_plan(store.snapshot_for_decision())

        assert plan.action == "wait"
        assert plan.priority == Priority.HIGH

    def test_early_phase_gathers(self, store: StateStore):
        engine = DecisionEngine(store, ScriptedReasoning())

        plan = engine.fallback_plan(store.snapshot_for_decision())

        assert plan.action == "mine wood"
        assert plan.reasoning.startswith("Fallback:")

    def test_later_phase_explores(self, store: StateStore):
        store.update(inventory=[ItemStack(name="iron_ingot")])
        engine = DecisionEngine(store, ScriptedReasoning())

        snapshot = store.snapshot_for_decision()
        plan = engine.fallback_plan(snapshot)

        assert snapshot.game_phase == GamePhase.MID
        assert plan.action == "explore"
        assert plan.source == PlanSource.CIRCUIT_BREAKER
