"""Tests for session event binding."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from minebot.core.events import bind_session_events, is_daytime
from minebot.core.state import StateStore
from minebot.interfaces.session import SessionFault
from minebot.models import GamePhase, ItemStack, Position, Rotation
from minebot.session import NullSession


@pytest.fixture
def store() -> StateStore:
    return StateStore()


@pytest.fixture
def session(store: StateStore) -> NullSession:
    session = NullSession()
    bind_session_events(session, store)
    return session


class TestIsDaytime:
    """Tests for is_daytime()."""

    @pytest.mark.parametrize(
        "ticks,expected",
        [(0, True), (11999, True), (12000, False), (23999, False), (24000, True), (36500, False)],
    )
    def test_day_boundaries(self, ticks, expected):
        assert is_daytime(ticks) is expected


class TestBinding:
    """Tests for event-to-state folding."""

    def test_spawn(self, session: NullSession, store: StateStore):
        session.emit(
            "spawn",
            {
                "entity_id": "17",
                "position": {"x": 10, "y": 70, "z": -5},
                "rotation": {"yaw": 45, "pitch": 0},
            },
        )

        assert store.state.entity_id == 17
        assert store.state.position == Position(x=10, y=70, z=-5)
        assert store.state.rotation == Rotation(yaw=45, pitch=0)

    def test_position_without_rotation(self, session: NullSession, store: StateStore):
        store.update(rotation=Rotation(yaw=30))

        session.emit("position", {"position": {"x": 1, "y": 2, "z": 3}})

        assert store.state.position == Position(x=1, y=2, z=3)
        assert store.state.rotation.yaw == 30

    def test_health_is_clamped(self, session: NullSession, store: StateStore):
        session.emit("health", {"health": 25, "hunger": 6})

        assert store.state.health == 20
        assert store.state.hunger == 6

    def test_health_without_hunger(self, session: NullSession, store: StateStore):
        session.emit("health", {"health": 9})

        assert store.state.health == 9
        assert store.state.hunger == 20

    def test_inventory_recomputes_phase(self, session: NullSession, store: StateStore):
        session.emit("inventory", {"items": [{"name": "diamond_sword", "count": 1}]})

        assert store.state.inventory == [ItemStack(name="diamond_sword", count=1)]
        assert store.state.game_phase == GamePhase.LATE

    def test_time_sets_day_flag(self, session: NullSession, store: StateStore):
        session.emit("time", {"time": 18000})
        assert store.state.is_day is False

        session.emit("time", {"time": 1000})
        assert store.state.is_day is True

    def test_chat_does_not_touch_state(self, session: NullSession, store: StateStore):
        before = store.state.model_dump(exclude={"last_update"})

        session.emit("chat", {"source": "Steve", "message": "hi"})

        assert store.state.model_dump(exclude={"last_update"}) == before

    def test_malformed_payload_is_contained(self, session: NullSession, store: StateStore):
        session.emit("position", {"position": {"x": "north"}})

        assert store.state.position == Position()


class TestDisconnect:
    """Tests for disconnect handling."""

    def test_disconnect_reports_fault(self, store: StateStore):
        session = NullSession()
        on_fault = MagicMock()
        bind_session_events(session, store, on_fault=on_fault)

        session.emit("disconnect", {"reason": "kicked"})

        fault = on_fault.call_args.args[0]
        assert isinstance(fault, SessionFault)
        assert str(fault) == "Disconnected: kicked"

    def test_disconnect_without_callback(self, session: NullSession):
        session.emit("disconnect", {})


class TestError:
    """Tests for transport error handling."""

    def test_error_reports_fault(self, store: StateStore):
        session = NullSession()
        on_fault = MagicMock()
        bind_session_events(session, store, on_fault=on_fault)

        session.emit("error", {"message": "connection reset"})

        on_fault.assert_called_once()
        fault = on_fault.call_args.args[0]
        assert isinstance(fault, SessionFault)
        assert str(fault) == "Session error: connection reset"

    def test_error_without_message(self, store: StateStore):
        session = NullSession()
        on_fault = MagicMock()
        bind_session_events(session, store, on_fault=on_fault)

        session.emit("error", {})

        assert str(on_fault.call_args.args[0]) == "Session error: unknown error"
