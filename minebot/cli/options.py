"""CLI option models and parser helpers."""

from __future__ import annotations

import argparse
from dataclasses import dataclass
from enum import StrEnum


class LogFormat(StrEnum):
    """CLI log formatter mode."""

    READABLE = "readable"
    JSON = "json"


@dataclass(frozen=True)
class LLMRuntimeConfig:
    """Resolved reasoning provider settings for this process."""

    provider: str
    model: str
    api_key: str | None


def build_arg_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(prog="minebot", description="Autonomous Minecraft Bedrock agent")
    subparsers = parser.add_subparsers(dest="command")

    run_parser = subparsers.add_parser("run", help="Run the agent")
    run_parser.add_argument(
        "--max-cycles",
        type=int,
        default=None,
        help="Stop after N decide-execute cycles (default: run until interrupted)",
    )
    run_parser.add_argument("--config", type=str, default=None, help="Path to a YAML config file")
    run_parser.add_argument("--host", type=str, default=None, help="Game server host override")
    run_parser.add_argument("--port", type=int, default=None, help="Game server port override")
    run_parser.add_argument("--username", type=str, default=None, help="Bot username override")
    run_parser.add_argument(
        "--session-adapter",
        type=str,
        default=None,
        help="Session adapter: 'null' or 'module:factory'",
    )
    run_parser.add_argument(
        "--provider",
        type=str,
        default=None,
        choices=["gemini", "anthropic", "openai"],
        help="Reasoning provider override",
    )
    run_parser.add_argument("--model", type=str, default=None, help="Reasoning model override")
    run_parser.add_argument("--observe", action="store_true", help="Enable the web dashboard")
    run_parser.add_argument("--observer-host", type=str, default=None, help="Observer host override")
    run_parser.add_argument("--observer-port", type=int, default=None, help="Observer port override")
    run_parser.add_argument(
        "--log-format",
        type=str,
        default=LogFormat.READABLE.value,
        choices=[fmt.value for fmt in LogFormat],
        help="Terminal log format",
    )

    return parser
