"""Tests for shared data models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from minebot.models import (
    KNOWN_VERBS,
    CommandKind,
    ExecutionResult,
    ItemStack,
    Plan,
    PlanSource,
    Position,
    WorldState,
)


class TestPosition:
    """Tests for Position."""

    def test_offset_returns_new_position(self) -> None:
        start = Position(x=1, y=64, z=-3)

        moved = start.offset(dz=-10)

        assert moved == Position(x=1, y=64, z=-13)
        assert start.z == -3

    def test_formatted_rounds_coordinates(self) -> None:
        assert Position(x=1.4, y=63.6, z=-0.2).formatted() == "(1, 64, -0)"

    def test_is_frozen(self) -> None:
        with pytest.raises(ValidationError):
            Position().x = 5  # type: ignore[misc]


class TestWorldState:
    """Tests for WorldState validation."""

    def test_defaults(self) -> None:
        state = WorldState()

        assert state.health == 20
        assert state.hunger == 20
        assert state.inventory == []
        assert state.is_day is True
        assert state.consecutive_errors == 0

    def test_health_is_clamped_on_construction(self) -> None:
        assert WorldState(health=35).health == 20
        assert WorldState(health=-4).health == 0

    def test_hunger_is_clamped_on_assignment(self) -> None:
        state = WorldState()
        state.hunger = 99
        assert state.hunger == 20

    def test_negative_stack_count_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ItemStack(name="dirt", count=-1)


class TestPlan:
    """Tests for Plan."""

    def test_command_is_lowercased_first_token(self) -> None:
        plan = Plan(action="Move north 10")

        assert plan.command == "move"
        assert plan.arguments == ["north", "10"]

    def test_arguments_keep_case(self) -> None:
        assert Plan(action="chat Hello World").arguments == ["Hello", "World"]

    def test_empty_action_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Plan(action="")

    def test_defaults_to_reasoning_source(self) -> None:
        assert Plan(action="explore").source == PlanSource.REASONING

    def test_negative_duration_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Plan(action="wait", estimated_duration=-1)


class TestCommandKind:
    """Tests for the command vocabulary."""

    def test_from_token_is_case_insensitive(self) -> None:
        assert CommandKind.from_token("MINE") == CommandKind.MINE
        assert CommandKind.from_token(" jump ") == CommandKind.JUMP

    def test_unknown_token(self) -> None:
        assert CommandKind.from_token("teleport") is None

    def test_known_verbs_follow_declaration_order(self) -> None:
        assert KNOWN_VERBS[:3] == ("mine", "craft", "move")
        assert set(KNOWN_VERBS) == {kind.value for kind in CommandKind}


class TestExecutionResult:
    """Tests for ExecutionResult."""

    def test_duration_defaults_to_zero(self) -> None:
        assert ExecutionResult(success=True).duration_ms == 0.0
