"""Tests for session implementations and adapter loading."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from minebot.config.loader import SessionConfig
from minebot.interfaces.session import Session, SessionEvent, SessionFault
from minebot.session import EventSession, NullSession, SessionAdapterError, load_session


class TestNullSession:
    """Tests for the offline session."""

    def test_records_commands(self):
        session = NullSession()

        session.send("text", {"message": "hi"})
        session.send("animate", {"action": "swing_arm"})

        assert session.commands() == ["text", "animate"]
        assert session.commands("text") == ["text"]
        assert session.sent[0] == ("text", {"message": "hi"})

    def test_recording_is_bounded(self):
        session = NullSession(max_recorded=2)

        for i in range(5):
            session.send("animate", {"n": i})

        assert [payload["n"] for _, payload in session.sent] == [3, 4]

    def test_send_after_close_faults(self):
        session = NullSession()
        session.close()
        session.close()

        assert session.connected is False
        with pytest.raises(SessionFault, match="cannot send look"):
            session.send("look", {})

    def test_is_a_session(self):
        assert isinstance(NullSession(), Session)


class TestEventSession:
    """Tests for local event dispatch."""

    def test_emit_reaches_all_handlers(self):
        session = NullSession()
        first, second = MagicMock(), MagicMock()
        session.on(SessionEvent.HEALTH, first)
        session.on("health", second)

        session.emit("health", {"health": 12})

        first.assert_called_once_with({"health": 12})
        second.assert_called_once_with({"health": 12})

    def test_failing_handler_does_not_block_others(self):
        session = NullSession()
        after = MagicMock()
        session.on("chat", MagicMock(side_effect=KeyError("message")))
        session.on("chat", after)

        session.emit("chat")

        after.assert_called_once_with({})

    def test_emit_without_handlers(self):
        NullSession().emit(SessionEvent.TIME, {"time": 0})

    def test_subclass_contract(self):
        class RecordingSession(EventSession):
            def __init__(self):
                super().__init__()
                self.sent = []

            def send(self, command, payload):
                self.sent.append(command)

        session = RecordingSession()
        session.send("look", {})

        assert session.sent == ["look"]
        assert session.connected is True


class TestLoadSession:
    """Tests for adapter resolution."""

    def test_null_adapter(self):
        assert isinstance(load_session(SessionConfig(adapter="null")), NullSession)

    def test_module_factory(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        module = tmp_path / "fake_bedrock_adapter.py"
        module.write_text(
            "from minebot.session import NullSession\n"
            "\n"
            "def build(config):\n"
            "    session = NullSession()\n"
            "    session.target = (config.host, config.port)\n"
            "    return session\n"
        )
        monkeypatch.syspath_prepend(str(tmp_path))

        session = load_session(
            SessionConfig(adapter="fake_bedrock_adapter:build", host="play.example.net", port=19133)
        )

        assert session.target == ("play.example.net", 19133)

    @pytest.mark.parametrize("adapter", ["bedrock", "module:", ":factory"])
    def test_malformed_adapter(self, adapter):
        with pytest.raises(SessionAdapterError, match="Invalid session adapter"):
            load_session(SessionConfig(adapter=adapter))

    def test_missing_module(self):
        with pytest.raises(SessionAdapterError, match="Cannot import"):
            load_session(SessionConfig(adapter="minebot_no_such_adapter:build"))

    def test_non_callable_factory(self):
        with pytest.raises(SessionAdapterError, match="not a callable"):
            load_session(SessionConfig(adapter="minebot.session.base:logger"))

    def test_factory_must_return_session(self):
        with pytest.raises(SessionAdapterError, match="expected a Session"):
            load_session(SessionConfig(adapter="builtins:dict"))
