"""Tests for interaction handlers."""

from __future__ import annotations

import asyncio

import pytest

from minebot.actions import ExecutorConfig, InteractionController
from minebot.core.state import StateStore
from minebot.models import Position
from minebot.session import NullSession


@pytest.fixture
def session() -> NullSession:
    return NullSession()


@pytest.fixture
def store() -> StateStore:
    return StateStore()


@pytest.fixture
def interaction(session: NullSession, store: StateStore) -> InteractionController:
    return InteractionController(session, store, ExecutorConfig(interaction_delay=0.0))


class TestMine:
    """Tests for mining."""

    def test_mine_sequence(self, interaction: InteractionController, session: NullSession, store: StateStore):
        """Should look down, start breaking, swing three times and stop."""
        store.update(position=Position(x=1.5, y=64, z=-2.5))

        result = asyncio.run(interaction.mine(["stone"]))

        assert result.message == "Mining stone"
        assert session.commands() == [
            "look",
            "player_action",
            "animate",
            "animate",
            "animate",
            "player_action",
        ]
        start = session.sent[1][1]
        assert start["action"] == "start_break"
        assert start["position"] == {"x": 1, "y": 63, "z": -3}
        assert session.sent[-1][1]["action"] == "stop_break"
        assert store.state.rotation.pitch == 90.0

    def test_mine_without_block_name(self, interaction: InteractionController):
        assert asyncio.run(interaction.mine([])).message == "Mining block"


class TestAttack:
    """Tests for attacking."""

    def test_default_target(self, interaction: InteractionController, session: NullSession):
        result = asyncio.run(interaction.attack([]))

        assert result.message == "Attacking nearest_hostile"
        assert session.commands() == ["look", "animate", "attack", "animate", "attack"]
        assert session.sent[2][1] == {"target": "nearest_hostile"}


class TestCraftAndBuild:
    """Tests for crafting and building."""

    def test_craft(self, interaction: InteractionController, session: NullSession):
        result = asyncio.run(interaction.craft(["wooden", "pickaxe"]))

        assert result.success is True
        assert session.sent[-1] == ("crafting_event", {"type": "craft", "recipe": "wooden pickaxe"})

    def test_craft_requires_item(self, interaction: InteractionController, session: NullSession):
        result = asyncio.run(interaction.craft([]))

        assert result.success is False
        assert result.message == "Craft requires an item"
        assert list(session.sent) == []

    def test_build_places_four_blocks(self, interaction: InteractionController, session: NullSession):
        result = asyncio.run(interaction.build([]))

        assert result.message == "Building shelter"
        placed = [payload["position"] for cmd, payload in session.sent if cmd == "place_block"]
        assert len(placed) == 4
        assert {"x": 1, "y": 0, "z": 0} in placed
        assert {"x": 0, "y": 0, "z": -1} in placed


class TestSurvival:
    """Tests for eat, sleep, chat and wait."""

    def test_eat(self, interaction: InteractionController, session: NullSession):
        result = asyncio.run(interaction.eat(["bread"]))

        assert result.message == "Eating bread"
        assert session.sent[-1] == ("use_item", {"action": "consume", "item": "bread"})

    def test_sleep_refused_during_day(self, interaction: InteractionController, session: NullSession):
        result = asyncio.run(interaction.sleep([]))

        assert result.success is False
        assert result.message == "Cannot sleep during the day"
        assert list(session.sent) == []

    def test_sleep_at_night(self, interaction: InteractionController, session: NullSession, store: StateStore):
        store.update(is_day=False)

        result = asyncio.run(interaction.sleep([]))

        assert result.success is True
        assert session.sent[-1] == ("use_item", {"action": "sleep"})

    def test_chat(self, interaction: InteractionController, session: NullSession):
        result = asyncio.run(interaction.chat(["hello", "there"]))

        assert result.message == "Said: hello there"
        assert session.sent[-1] == ("text", {"type": "chat", "message": "hello there"})

    def test_chat_requires_message(self, interaction: InteractionController):
        assert asyncio.run(interaction.chat([])).success is False

    @pytest.mark.parametrize("args,message", [(["0"], "Waited 0s"), (["-3"], "Waited 0s"), ([], "Waited 0s")])
    def test_wait(self, session: NullSession, store: StateStore, args, message):
        interaction = InteractionController(session, store, ExecutorConfig(default_wait=0.0))

        assert asyncio.run(interaction.wait(args)).message == message

    def test_wait_rejects_non_numeric(self, interaction: InteractionController):
        result = asyncio.run(interaction.wait(["soon"]))

        assert result.success is False
        assert result.message == "Invalid wait duration: soon"
