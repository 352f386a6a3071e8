"""Configuration loader for minebot.

Loads configuration from YAML files and environment variables.
Environment variables override YAML values using the MINEBOT_ prefix.
Nested keys use double underscores: MINEBOT_AGENT__PLAN_INTERVAL=5
"""

from __future__ import annotations

import contextlib
import logging
import os
from collections.abc import Callable
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class AgentConfig(BaseModel):
    """Control loop settings."""

    plan_interval: float = Field(default=15.0, ge=0.0, le=600.0, description="Seconds between cycles")
    error_cooldown: float = Field(default=5.0, ge=0.0, le=600.0, description="Seconds after a failed cycle")
    state_sync_interval: float = Field(default=30.0, ge=0.0, le=3600.0, description="0 disables state sync")


class DecisionSettings(BaseModel):
    """Decision engine settings."""

    max_consecutive_errors: int = Field(default=5, ge=1, le=100)
    breaker_cooldown_cycles: int = Field(default=3, ge=0, le=1000)
    trace_size: int = Field(default=20, ge=1, le=1000)
    recent_actions: int = Field(default=5, ge=0, le=50)


class ExecutorSettings(BaseModel):
    """Action executor settings."""

    action_timeout: float = Field(default=30.0, gt=0.0, le=600.0, description="Seconds per action")
    move_step_delay: float = Field(default=0.1, ge=0.0, le=10.0)
    max_move_steps: int = Field(default=20, ge=1, le=1000)
    default_move_distance: float = Field(default=10.0, gt=0.0, le=256.0)
    max_move_distance: float = Field(default=64.0, gt=0.0, le=1024.0)
    interaction_delay: float = Field(default=0.5, ge=0.0, le=10.0)
    default_wait: float = Field(default=2.0, ge=0.0, le=300.0)


class StateSettings(BaseModel):
    """State store settings."""

    history_size: int = Field(default=50, ge=1, le=1000)


class LLMConfig(BaseModel):
    """Reasoning provider settings."""

    provider: str = Field(default="gemini", pattern="^(gemini|anthropic|openai)$")
    model: str | None = Field(default=None)
    max_tokens: int = Field(default=500, ge=1, le=100000)
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    request_timeout: float = Field(default=20.0, gt=0.0, le=300.0)


class SessionConfig(BaseModel):
    """Game session settings."""

    adapter: str = Field(default="null", description="'null' or 'module:factory'")
    host: str = Field(default="localhost")
    port: int = Field(default=19132, ge=1, le=65535)
    username: str = Field(default="MinebotAI")
    offline: bool = Field(default=True)


class ObserverConfig(BaseModel):
    """Observer/web dashboard settings."""

    host: str = Field(default="0.0.0.0")
    port: int = Field(default=10000, ge=1, le=65535)
    max_events: int = Field(default=500, ge=1, le=100000)


class LoggingConfig(BaseModel):
    """Logging settings."""

    level: str = Field(default="INFO", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")


class Config(BaseModel):
    """Root configuration model."""

    agent: AgentConfig = Field(default_factory=AgentConfig)
    decision: DecisionSettings = Field(default_factory=DecisionSettings)
    executor: ExecutorSettings = Field(default_factory=ExecutorSettings)
    state: StateSettings = Field(default_factory=StateSettings)
    llm: LLMConfig = Field(default_factory=LLMConfig)
    session: SessionConfig = Field(default_factory=SessionConfig)
    observer: ObserverConfig = Field(default_factory=ObserverConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def _get_env_value(key: str) -> str | None:
    """Get environment variable with MINEBOT_ prefix."""
    env_key = f"MINEBOT_{key.upper()}"
    return os.environ.get(env_key)


def _apply_env_overrides(data: dict[str, Any], prefix: str = "") -> dict[str, Any]:
    """Apply environment variable overrides to config data.

    Environment variables use MINEBOT_ prefix with double underscores for nesting.
    Example: MINEBOT_EXECUTOR__ACTION_TIMEOUT=10 sets executor.action_timeout to 10
    """
    result = data.copy()

    for key, value in result.items():
        env_key = f"{prefix}__{key}" if prefix else key

        if isinstance(value, dict):
            result[key] = _apply_env_overrides(value, env_key)
        else:
            env_value = _get_env_value(env_key)
            if env_value is not None:
                if isinstance(value, bool):
                    result[key] = env_value.lower() in ("true", "1", "yes")
                elif isinstance(value, int):
                    result[key] = int(env_value)
                elif isinstance(value, float):
                    result[key] = float(env_value)
                else:
                    result[key] = env_value

    return result


def default_config_path() -> Path:
    """Path of the bundled default.yaml."""
    project_root = Path(__file__).parent.parent.parent
    return project_root / "configs" / "default.yaml"


def load_config(config_path: str | Path | None = None) -> Config:
    """Load configuration from YAML file with environment variable overrides.

    Keys missing from the file still get an environment override when the
    matching MINEBOT_ variable is set, because overrides are applied on top
    of the full default tree.

    Args:
        config_path: Path to YAML config file. If None, uses the bundled
            default.yaml, or built-in defaults when that file is absent.

    Returns:
        Validated Config object.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ValidationError: If config values are invalid.
    """
    if config_path is None:
        config_path = default_config_path()
        if not config_path.exists():
            logger.warning(f"Bundled config not found at {config_path}; using built-in defaults")
            return Config.model_validate(_apply_env_overrides(Config().model_dump()))
    else:
        config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        data = yaml.safe_load(f) or {}

    merged = _deep_merge(Config().model_dump(), data)
    merged = _apply_env_overrides(merged)

    return Config.model_validate(merged)


def get_default_config() -> Config:
    """Get default configuration without loading from file."""
    return Config()


def _deep_merge(base: dict[str, Any], updates: dict[str, Any]) -> dict[str, Any]:
    """Deep merge updates into a copy of base."""
    result = base.copy()

    for key, value in updates.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result


ConfigCallback = Callable[[Config], None]


class ConfigManager:
    """Manages configuration with runtime update support.

    Example:
        >>> manager = ConfigManager(load_config())
        >>> manager.subscribe(lambda c: print(c.agent.plan_interval))
        >>> manager.update({"agent": {"plan_interval": 8}})
        8.0
    """

    def __init__(self, config: Config) -> None:
        self._config = config
        self._subscribers: list[ConfigCallback] = []

    @property
    def config(self) -> Config:
        """Get the current configuration."""
        return self._config

    def subscribe(self, callback: ConfigCallback) -> None:
        """Subscribe to configuration changes."""
        self._subscribers.append(callback)

    def unsubscribe(self, callback: ConfigCallback) -> None:
        """Unsubscribe from configuration changes."""
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    def update(self, updates: dict[str, Any]) -> Config:
        """Update configuration at runtime.

        Merges updates into current config, validates, and notifies subscribers.

        Args:
            updates: Dictionary of updates. Can be nested.

        Returns:
            Updated Config object.

        Raises:
            ValidationError: If updates result in invalid configuration.
        """
        merged = _deep_merge(self._config.model_dump(), updates)
        new_config = Config.model_validate(merged)
        self._config = new_config

        for subscriber in self._subscribers:
            try:
                subscriber(new_config)
            except Exception as e:
                logger.warning(f"Config subscriber error: {e}")

        return new_config

    def reset(self) -> Config:
        """Reset configuration to defaults."""
        self._config = Config()

        for subscriber in self._subscribers:
            with contextlib.suppress(Exception):
                subscriber(self._config)

        return self._config
