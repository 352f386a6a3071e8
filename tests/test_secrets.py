"""Tests for secure secret loading from .env files."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from minebot.config.secrets import load_environment_secrets, resolve_api_key


class TestSecretsLoader:
    """Secret loading behavior for .env files."""

    def test_loads_gemini_api_key_with_override(
        self,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        env_file = tmp_path / ".env"
        env_file.write_text("GEMINI_API_KEY=from-dotenv\n")
        os.chmod(env_file, 0o600)
        monkeypatch.setenv("GEMINI_API_KEY", "stale")

        loaded = load_environment_secrets(env_file=env_file, override=True)

        assert loaded == env_file
        assert os.environ.get("GEMINI_API_KEY") == "from-dotenv"

    def test_does_not_override_existing_environment_value(
        self,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        env_file = tmp_path / ".env"
        env_file.write_text("OPENAI_API_KEY=from-dotenv\n")
        os.chmod(env_file, 0o600)
        monkeypatch.setenv("OPENAI_API_KEY", "already-set")

        load_environment_secrets(env_file=env_file)

        assert os.environ.get("OPENAI_API_KEY") == "already-set"

    def test_env_file_variable_is_used(
        self,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        env_file = tmp_path / "keys.env"
        env_file.write_text("ANTHROPIC_API_KEY=via-variable\n")
        os.chmod(env_file, 0o600)
        monkeypatch.setenv("MINEBOT_ENV_FILE", str(env_file))
        monkeypatch.setenv("ANTHROPIC_API_KEY", "")

        loaded = load_environment_secrets(override=True)

        assert loaded == env_file
        assert os.environ.get("ANTHROPIC_API_KEY") == "via-variable"

    @pytest.mark.skipif(os.name == "nt", reason="POSIX permission bits differ on Windows")
    def test_rejects_group_or_world_readable_env_file(
        self,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        env_file = tmp_path / ".env"
        env_file.write_text("OPENAI_API_KEY=from-dotenv\n")
        os.chmod(env_file, 0o644)
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)

        with pytest.raises(PermissionError):
            load_environment_secrets(env_file=env_file)

        assert os.environ.get("OPENAI_API_KEY") is None

    def test_missing_env_file_returns_none(self, tmp_path: Path) -> None:
        missing = tmp_path / ".env"

        loaded = load_environment_secrets(env_file=missing, strict=False)

        assert loaded is None

    def test_missing_env_file_raises_when_strict(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_environment_secrets(env_file=tmp_path / ".env")

    def test_directory_env_path_has_actionable_error(self, tmp_path: Path) -> None:
        env_dir = tmp_path / ".env"
        env_dir.mkdir()

        with pytest.raises(ValueError, match="not a regular file"):
            load_environment_secrets(env_file=env_dir)


class TestResolveApiKey:
    """Provider key lookup."""

    def test_explicit_key_wins(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GEMINI_API_KEY", "from-env")

        assert resolve_api_key("gemini", explicit="explicit") == "explicit"

    def test_environment_key(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ANTHROPIC_API_KEY", "  sk-ant-123  ")

        assert resolve_api_key("anthropic") == "sk-ant-123"

    @pytest.mark.parametrize("value", ["", "your_openai_api_key_here", "CHANGEME"])
    def test_placeholders_are_ignored(self, monkeypatch: pytest.MonkeyPatch, value: str) -> None:
        monkeypatch.setenv("OPENAI_API_KEY", value)

        assert resolve_api_key("openai") is None

    def test_unknown_provider(self) -> None:
        assert resolve_api_key("llama") is None
