"""Main agent loop implementation.

This module provides the AgentLoop class that orchestrates:
- State store snapshots
- Decision engine
- Action executor

The loop follows the pattern: Snapshot → Decide → Execute → Sleep → Repeat

Features:
- Configurable planning interval
- Interruptible sleeps for prompt shutdown
- Error cooldown for per-cycle failures
- Stop on session faults (disconnects), surfaced to the caller
- Periodic state-sync publishing
- Metrics collection

Example:
    >>> from minebot.core.loop import AgentLoop, LoopConfig
    >>>
    >>> loop = AgentLoop(store, engine, executor, session, config=LoopConfig(plan_interval=5))
    >>> await loop.run(max_cycles=10)
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel

from minebot.core.metrics import MetricsCollector
from minebot.interfaces.session import SessionFault
from minebot.models.plans import ExecutionResult, Plan

if TYPE_CHECKING:
    from minebot.actions.executor import ActionExecutor
    from minebot.core.decision import DecisionEngine
    from minebot.core.state import StateStore
    from minebot.interfaces.session import Session

logger = logging.getLogger(__name__)


class LoopState(StrEnum):
    """Possible states of the agent loop."""

    STOPPED = "stopped"
    IDLE = "idle"
    DECIDING = "deciding"
    EXECUTING = "executing"
    SLEEPING = "sleeping"
    STOPPING = "stopping"
    ERROR = "error"


@dataclass
class LoopConfig:
    """Configuration for the agent loop.

    Attributes:
        plan_interval: Seconds slept between cycles.
        error_cooldown: Seconds slept after a failed cycle.
        state_sync_interval: Seconds between state-sync publications.
            0 disables the sync task.
    """

    plan_interval: float = 15.0
    error_cooldown: float = 5.0
    state_sync_interval: float = 30.0


class CycleReport(BaseModel):
    """Outcome of one snapshot-decide-execute cycle."""

    cycle: int
    plan: Plan
    result: ExecutionResult | None = None
    duration_ms: float = 0.0

    model_config = {"frozen": True}


class AgentLoop:
    """Main agent loop that drives decide-execute cycles.

    Exceptions inside a cycle are logged and followed by the error
    cooldown. A SessionFault, raised by a handler or delivered through
    fail(), stops the loop and is re-raised from run().

    Attributes:
        state: Current loop state.
        metrics: Metrics collector instance.
        running: Whether run() is active and has not been asked to stop.
    """

    def __init__(
        self,
        store: StateStore,
        decision_engine: DecisionEngine,
        action_executor: ActionExecutor,
        session: Session,
        metrics: MetricsCollector | None = None,
        config: LoopConfig | None = None,
    ) -> None:
        """Initialize the agent loop.

        Args:
            store: Shared state store.
            decision_engine: Engine producing plans.
            action_executor: Executor running plans.
            session: Game session, closed when the loop stops.
            metrics: Metrics collector. Creates new one if None.
            config: Loop configuration. Uses defaults if None.
        """
        self._store = store
        self._decision_engine = decision_engine
        self._action_executor = action_executor
        self._session = session
        self._metrics = metrics or MetricsCollector()
        self._config = config or LoopConfig()

        self._state = LoopState.STOPPED
        self._running = False
        self._active = False
        self._fault: SessionFault | None = None
        self._wake = asyncio.Event()
        self._sync_task: asyncio.Task[None] | None = None
        self._cycle_count = 0
        self._last_report: CycleReport | None = None

        self._on_cycle_complete: Callable[[CycleReport], None] | None = None
        self._on_error: Callable[[Exception], None] | None = None
        self._on_state_change: Callable[[LoopState], None] | None = None
        self._on_state_sync: Callable[[dict[str, Any]], None] | None = None

        logger.debug(f"AgentLoop initialized: plan_interval={self._config.plan_interval}s")

    @property
    def state(self) -> LoopState:
        return self._state

    @property
    def running(self) -> bool:
        return self._running

    @property
    def metrics(self) -> MetricsCollector:
        return self._metrics

    @property
    def cycle_count(self) -> int:
        return self._cycle_count

    @property
    def last_report(self) -> CycleReport | None:
        """Report of the last completed cycle (for debugging)."""
        return self._last_report

    def set_callbacks(
        self,
        on_cycle_complete: Callable[[CycleReport], None] | None = None,
        on_error: Callable[[Exception], None] | None = None,
        on_state_change: Callable[[LoopState], None] | None = None,
        on_state_sync: Callable[[dict[str, Any]], None] | None = None,
    ) -> None:
        """Set optional callbacks.

        Args:
            on_cycle_complete: Called after each cycle with its report.
            on_error: Called when a cycle fails.
            on_state_change: Called when the loop state changes.
            on_state_sync: Called with a state summary every sync interval.
        """
        self._on_cycle_complete = on_cycle_complete
        self._on_error = on_error
        self._on_state_change = on_state_change
        self._on_state_sync = on_state_sync

    def _set_state(self, new_state: LoopState) -> None:
        old_state = self._state
        self._state = new_state

        if old_state != new_state:
            logger.debug(f"Loop state: {old_state.value} -> {new_state.value}")
            self._invoke(self._on_state_change, new_state)

    def _invoke(self, callback: Callable[[Any], None] | None, value: Any) -> None:
        if callback is None:
            return
        try:
            callback(value)
        except Exception as e:
            logger.warning(f"Loop callback error: {e}")

    def fail(self, fault: SessionFault) -> None:
        """Deliver a session fault from outside the loop (e.g. a disconnect event).

        The loop stops at its next checkpoint and run() re-raises the fault.
        """
        if self._fault is None:
            self._fault = fault
        self._running = False
        self._wake.set()

    def _raise_if_faulted(self) -> None:
        if self._fault is not None:
            raise self._fault

    async def run(self, max_cycles: int | None = None) -> None:
        """Run cycles until stopped, faulted, or `max_cycles` is reached.

        Args:
            max_cycles: Upper bound on cycles. None runs until stopped.

        Raises:
            RuntimeError: If the loop is already running.
            SessionFault: If the session faulted.
        """
        if self._active:
            raise RuntimeError(f"Loop is already {self._state.value}")

        self._active = True
        self._running = True
        self._wake = asyncio.Event()
        self._metrics.start()
        self._set_state(LoopState.IDLE)
        if self._config.state_sync_interval > 0:
            self._sync_task = asyncio.create_task(self._state_sync(), name="state-sync")
        logger.info("Agent loop running")

        cycles = 0
        try:
            while self._running:
                try:
                    await self._run_cycle()
                    delay = self._config.plan_interval
                except SessionFault:
                    raise
                except Exception as e:
                    self._handle_cycle_error(e)
                    delay = self._config.error_cooldown

                cycles += 1
                if max_cycles is not None and cycles >= max_cycles:
                    logger.info(f"Reached max cycles ({max_cycles})")
                    break
                if not self._running:
                    break

                self._set_state(LoopState.SLEEPING)
                await self._sleep(delay)

            self._raise_if_faulted()
        except SessionFault as e:
            logger.error(f"Session fault, stopping loop: {e}")
            self._metrics.record_error(type(e).__name__, recovered=False)
            self._set_state(LoopState.ERROR)
            raise
        finally:
            self._running = False
            self._active = False
            self._cancel_sync()
            self._close_session()
            if self._state != LoopState.ERROR:
                self._set_state(LoopState.STOPPED)
            logger.info(f"Agent loop exited after {cycles} cycles")

    async def run_once(self) -> CycleReport:
        """Run a single cycle manually.

        Returns:
            The cycle report.

        Raises:
            RuntimeError: If the loop is currently running.
        """
        if self._active:
            raise RuntimeError("Cannot run_once while loop is running")
        return await self._run_cycle()

    def stop(self) -> None:
        """Ask the loop to stop.

        The current sleep is interrupted and the state-sync task cancelled.
        An in-flight action is not aborted; the session is closed once
        run() unwinds, or immediately if the loop is not running.
        """
        if self._active:
            self._running = False
            self._set_state(LoopState.STOPPING)
            self._wake.set()
            self._cancel_sync()
            logger.info("Agent loop stopping")
        else:
            self._close_session()

    async def _run_cycle(self) -> CycleReport:
        self._raise_if_faulted()
        cycle_start = time.time()
        cycle = self._cycle_count + 1

        self._set_state(LoopState.DECIDING)
        snapshot = self._store.snapshot_for_decision()
        decision_start = time.time()
        plan = await self._decision_engine.decide(snapshot)
        decision_ms = (time.time() - decision_start) * 1000
        self._metrics.record_decision(decision_ms, plan.source)
        self._raise_if_faulted()

        result: ExecutionResult | None = None
        if self._running or not self._active:
            self._set_state(LoopState.EXECUTING)
            result = await self._action_executor.execute(plan)
            self._metrics.record_action(result.success, result.duration_ms)

        duration_ms = (time.time() - cycle_start) * 1000
        self._cycle_count = cycle
        self._metrics.record_cycle(duration_ms)
        report = CycleReport(cycle=cycle, plan=plan, result=result, duration_ms=duration_ms)
        self._last_report = report

        outcome = "skipped" if result is None else ("ok" if result.success else "failed")
        logger.info(
            f"Cycle #{cycle}: {plan.action!r} [{plan.source.value}] -> {outcome} "
            f"(total={duration_ms:.0f}ms, decide={decision_ms:.0f}ms)"
        )
        self._invoke(self._on_cycle_complete, report)
        return report

    def _handle_cycle_error(self, error: Exception) -> None:
        logger.exception(f"Cycle error: {error}")
        self._metrics.record_error(type(error).__name__, recovered=True)
        self._invoke(self._on_error, error)

    async def _sleep(self, seconds: float) -> None:
        """Sleep that returns early when stop() or fail() is called."""
        if seconds <= 0:
            return
        try:
            await asyncio.wait_for(self._wake.wait(), timeout=seconds)
        except TimeoutError:
            pass

    async def _state_sync(self) -> None:
        interval = self._config.state_sync_interval
        while self._running:
            await asyncio.sleep(interval)
            summary = self._store.summary()
            logger.debug(
                f"State sync: pos={summary['position']}, health={summary['health']}, "
                f"phase={summary['game_phase']}"
            )
            self._invoke(self._on_state_sync, summary)

    def _cancel_sync(self) -> None:
        if self._sync_task is not None and not self._sync_task.done():
            self._sync_task.cancel()
        self._sync_task = None

    def _close_session(self) -> None:
        try:
            self._session.close()
        except Exception as e:
            logger.warning(f"Error closing session: {e}")
