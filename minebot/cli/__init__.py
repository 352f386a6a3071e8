"""CLI entrypoint for running minebot sessions."""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import logging
import signal
import sys

from minebot.actions.executor import ActionExecutor, ExecutorConfig
from minebot.cli.helpers import (
    _apply_cli_overrides,
    _build_reasoning_client,
    _configure_logging,
    _resolve_llm_runtime,
)
from minebot.cli.options import LogFormat, build_arg_parser
from minebot.cli.runtime import AgentRuntime
from minebot.config.loader import load_config
from minebot.config.secrets import load_environment_secrets
from minebot.core.decision import DecisionConfig, DecisionEngine
from minebot.core.events import bind_session_events
from minebot.core.loop import AgentLoop, LoopConfig
from minebot.core.metrics import MetricsCollector
from minebot.core.state import StateStore
from minebot.interfaces.session import SessionFault
from minebot.observer.streaming import ActionStreamingService
from minebot.session.loader import load_session

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_SESSION_FAULT = 2


def _create_runtime(args: argparse.Namespace) -> AgentRuntime:
    """Create and wire a runtime from CLI arguments."""
    config = _apply_cli_overrides(load_config(args.config), args)
    _configure_logging(
        level=str(config.logging.level),
        log_format=str(getattr(args, "log_format", LogFormat.READABLE.value)),
        quiet_uvicorn=True,
    )

    llm_runtime = _resolve_llm_runtime(
        configured_provider=str(config.llm.provider),
        configured_model=str(config.llm.model) if config.llm.model else None,
    )
    reasoning = _build_reasoning_client(llm_runtime, config.llm)
    logger.info("[BOOT] reasoning: %s/%s", llm_runtime.provider, reasoning.model_name)

    session = load_session(config.session)
    logger.info(
        "[BOOT] session: %s (%s:%s as %s)",
        type(session).__name__,
        config.session.host,
        config.session.port,
        config.session.username,
    )

    store = StateStore(history_size=config.state.history_size)
    metrics = MetricsCollector()
    executor = ActionExecutor(session, store, ExecutorConfig(**config.executor.model_dump()))
    engine = DecisionEngine(store, reasoning, DecisionConfig(**config.decision.model_dump()))
    loop = AgentLoop(
        store=store,
        decision_engine=engine,
        action_executor=executor,
        session=session,
        metrics=metrics,
        config=LoopConfig(**config.agent.model_dump()),
    )
    bind_session_events(session, store, on_fault=loop.fail)

    action_service = None
    if bool(getattr(args, "observe", False)):
        action_service = ActionStreamingService(max_events=config.observer.max_events)

    return AgentRuntime(
        config=config,
        session=session,
        store=store,
        executor=executor,
        loop=loop,
        reasoning=reasoning,
        metrics=metrics,
        action_streaming_service=action_service,
    )


def _install_signal_handlers(runtime: AgentRuntime) -> None:
    """Stop the loop gracefully on SIGINT/SIGTERM."""
    event_loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        # Not available on Windows event loops.
        with contextlib.suppress(NotImplementedError, RuntimeError):
            event_loop.add_signal_handler(sig, runtime.loop.stop)


async def _run_async(args: argparse.Namespace) -> int:
    runtime = _create_runtime(args)
    _install_signal_handlers(runtime)
    cycles = await runtime.run(max_cycles=args.max_cycles)
    logger.info("[BOOT] finished after %d cycles", cycles)
    return EXIT_OK


def run_command(args: argparse.Namespace) -> int:
    """Execute the `run` command."""
    if args.command != "run":
        raise ValueError(f"Unsupported command: {args.command}")
    return asyncio.run(_run_async(args))


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint function."""
    parser = build_arg_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return EXIT_ERROR

    # Configure a sane bootstrap logger before config loading.
    _configure_logging(
        level="INFO",
        log_format=str(getattr(args, "log_format", LogFormat.READABLE.value)),
        quiet_uvicorn=True,
    )

    try:
        if args.command == "run":
            load_environment_secrets()
            return run_command(args)
        raise ValueError(f"Unsupported command: {args.command}")
    except SessionFault as exc:
        logger.error("[SESSION] session fault: %s", exc)
        return EXIT_SESSION_FAULT
    except Exception as exc:
        logger.error("[BOOT] CLI execution failed: %s", exc)
        return EXIT_ERROR


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
