"""Shared helper utilities for CLI runtime orchestration."""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import json
import logging
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

import uvicorn
from fastapi import FastAPI

from minebot.cli.options import LLMRuntimeConfig, LogFormat
from minebot.config.loader import Config, ConfigManager, LLMConfig
from minebot.config.secrets import PROVIDER_ENV_KEYS, resolve_api_key
from minebot.interfaces.reasoning import ReasoningClient
from minebot.observer.streaming import ActionStreamingService
from minebot.reasoning.clients import (
    DEFAULT_MODELS,
    UnavailableReasoningClient,
    create_reasoning_client,
)

logger = logging.getLogger(__name__)

_PROVIDER_FALLBACK_ORDER: tuple[str, ...] = ("gemini", "anthropic", "openai")
_MODEL_MARKERS: dict[str, tuple[str, ...]] = {
    "gemini": ("gemini",),
    "anthropic": ("claude",),
    "openai": ("gpt", "o1", "o3", "o4"),
}


class _JSONLogFormatter(logging.Formatter):
    """Compact JSON formatter for machine-readable logs."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        return json.dumps(payload, separators=(",", ":"), ensure_ascii=True)


class _EmbeddedUvicornServer(uvicorn.Server):
    """uvicorn server that leaves signal handling to the agent process."""

    def install_signal_handlers(self) -> None:
        return None

    @contextlib.contextmanager
    def capture_signals(self) -> Iterator[None]:
        yield


@dataclass
class _UvicornObserverServer:
    """uvicorn server running as a task on the agent's event loop."""

    server: uvicorn.Server
    task: asyncio.Task[None]

    async def stop(self) -> None:
        self.server.should_exit = True
        try:
            await asyncio.wait_for(self.task, timeout=5.0)
        except TimeoutError:
            logger.warning("Observer server did not stop within timeout")
            self.task.cancel()


def _configure_logging(
    level: str = "INFO",
    log_format: str = LogFormat.READABLE.value,
    quiet_uvicorn: bool = True,
) -> None:
    """Configure process-wide logging with stable launch-friendly defaults."""
    normalized_level = level.upper()
    resolved_level = getattr(logging, normalized_level, logging.INFO)
    root = logging.getLogger()
    root.handlers = [h for h in root.handlers if not getattr(h, "_minebot_handler", False)]

    handler = logging.StreamHandler()
    handler._minebot_handler = True  # type: ignore[attr-defined]
    if log_format == LogFormat.JSON.value:
        formatter: logging.Formatter = _JSONLogFormatter(datefmt="%Y-%m-%dT%H:%M:%S")
    else:
        formatter = logging.Formatter(
            fmt="%(asctime)s | %(levelname)s | %(message)s",
            datefmt="%H:%M:%S",
        )
    handler.setFormatter(formatter)
    root.addHandler(handler)
    root.setLevel(resolved_level)

    if quiet_uvicorn:
        logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
        logging.getLogger("uvicorn.error").setLevel(logging.INFO)
    # Third-party HTTP transport logs are noisy at INFO during loop execution.
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("openai").setLevel(logging.WARNING)
    logging.getLogger("anthropic").setLevel(logging.WARNING)


def _apply_cli_overrides(config: Config, args: argparse.Namespace) -> Config:
    """Layer explicit command-line values over the loaded configuration."""
    overrides: dict[str, dict[str, Any]] = {
        "session": {
            "host": getattr(args, "host", None),
            "port": getattr(args, "port", None),
            "username": getattr(args, "username", None),
            "adapter": getattr(args, "session_adapter", None),
        },
        "llm": {
            "provider": getattr(args, "provider", None),
            "model": getattr(args, "model", None),
        },
        "observer": {
            "host": getattr(args, "observer_host", None),
            "port": getattr(args, "observer_port", None),
        },
    }
    updates = {
        section: {key: value for key, value in values.items() if value is not None}
        for section, values in overrides.items()
    }
    updates = {section: values for section, values in updates.items() if values}
    if not updates:
        return config
    return ConfigManager(config).update(updates)


def _model_matches_provider(provider: str, model: str) -> bool:
    """Validate basic provider/model compatibility."""
    lowered = model.strip().lower()
    return any(marker in lowered for marker in _MODEL_MARKERS.get(provider, ()))


def _normalize_runtime_model(provider: str, configured_model: str | None) -> str:
    """Normalize model so provider/model pairs are valid by default."""
    fallback = DEFAULT_MODELS[provider]
    if configured_model is None:
        return fallback

    if _model_matches_provider(provider, configured_model):
        return configured_model

    logger.warning(
        "Configured model '%s' does not look compatible with provider '%s'; using '%s' instead.",
        configured_model,
        provider,
        fallback,
    )
    return fallback


def _resolve_llm_runtime(
    configured_provider: str,
    configured_model: str | None,
) -> LLMRuntimeConfig:
    """Resolve provider/model/api-key for runtime execution.

    Falls back to another provider with a usable key when the configured
    one has none; with no key at all, api_key is None.
    """
    provider = configured_provider.strip().lower()
    if provider not in PROVIDER_ENV_KEYS:
        raise ValueError(f"Unsupported LLM provider: {configured_provider}")

    primary_key = resolve_api_key(provider)
    if primary_key:
        model = _normalize_runtime_model(provider, configured_model)
        return LLMRuntimeConfig(provider=provider, model=model, api_key=primary_key)

    for fallback_provider in _PROVIDER_FALLBACK_ORDER:
        if fallback_provider == provider:
            continue
        fallback_key = resolve_api_key(fallback_provider)
        if fallback_key:
            logger.warning(
                "Configured provider '%s' is missing %s; falling back to '%s'.",
                provider,
                PROVIDER_ENV_KEYS[provider],
                fallback_provider,
            )
            return LLMRuntimeConfig(
                provider=fallback_provider,
                model=_normalize_runtime_model(fallback_provider, configured_model),
                api_key=fallback_key,
            )

    logger.warning(
        "No reasoning API key found (%s). Running on fallback plans only.",
        ", ".join(PROVIDER_ENV_KEYS.values()),
    )
    return LLMRuntimeConfig(
        provider=provider,
        model=_normalize_runtime_model(provider, configured_model),
        api_key=None,
    )


def _build_reasoning_client(runtime: LLMRuntimeConfig, llm_config: LLMConfig) -> ReasoningClient:
    """Create the reasoning client for a resolved runtime."""
    if runtime.api_key is None:
        return UnavailableReasoningClient(runtime.provider)
    config = llm_config.model_copy(update={"provider": runtime.provider, "model": runtime.model})
    return create_reasoning_client(config, api_key=runtime.api_key)


async def _start_observer_server(host: str, port: int, app: FastAPI) -> _UvicornObserverServer:
    """Serve the observer app as a task on the running event loop."""
    config = uvicorn.Config(
        app=app,
        host=host,
        port=port,
        log_level="warning",
        access_log=False,
    )
    server = _EmbeddedUvicornServer(config)
    task = asyncio.create_task(server.serve(), name="observer-server")
    # Best-effort brief wait for initial bind.
    await asyncio.sleep(0.1)
    return _UvicornObserverServer(server=server, task=task)


def _emit_observer_event(
    action_streaming_service: ActionStreamingService | None,
    payload: dict[str, object],
) -> None:
    """Emit a best-effort observer event."""
    if action_streaming_service is None:
        return
    action_streaming_service.push_event(payload)
