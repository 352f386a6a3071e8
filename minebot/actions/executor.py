"""Action executor implementation.

This module provides the ActionExecutor class that:
- Dispatches a plan's command token to its handler
- Enforces at most one in-flight action (busy guard)
- Bounds every handler by a timeout
- Records one history entry per attempted action

Handlers translate a command into session commands:
    move_player, look, player_action, animate, attack,
    crafting_event, place_block, use_item, text

Example:
    >>> from minebot.actions.executor import ActionExecutor
    >>> from minebot.core.state import StateStore
    >>> from minebot.models import Plan
    >>> from minebot.session import NullSession
    >>>
    >>> executor = ActionExecutor(NullSession(), StateStore())
    >>> result = await executor.execute(Plan(action="move north 10"))
    >>> print(f"Success: {result.success} ({result.message})")
"""

from __future__ import annotations

import asyncio
import logging
import random
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from minebot.actions.interaction import InteractionController
from minebot.actions.movement import MovementController
from minebot.core.state import StateStore
from minebot.errors import ExecutionTimeout, UnknownCommand
from minebot.interfaces.session import Session, SessionFault
from minebot.models.commands import CommandKind
from minebot.models.plans import ExecutionResult, Plan
from minebot.models.world import HistoryOutcome

logger = logging.getLogger(__name__)

ActionHandler = Callable[[list[str]], Awaitable[ExecutionResult]]
ResultCallback = Callable[[Plan, ExecutionResult], None]

BUSY_MESSAGE = "Busy"


@dataclass
class ExecutorConfig:
    """Configuration for action execution.

    Attributes:
        action_timeout: Seconds a single handler may run.
        move_step_delay: Seconds between movement steps.
        max_move_steps: Upper bound on interpolation steps per move.
        default_move_distance: Blocks moved when no distance is given.
        max_move_distance: Requested distances are clamped to this.
        interaction_delay: Seconds between swings and placements.
        default_wait: Seconds waited when no duration is given.
    """

    action_timeout: float = 30.0
    move_step_delay: float = 0.1
    max_move_steps: int = 20
    default_move_distance: float = 10.0
    max_move_distance: float = 64.0
    interaction_delay: float = 0.5
    default_wait: float = 2.0


class ActionExecutor:
    """Runs one plan at a time against the game session.

    execute() never raises for handler failures or timeouts; they become
    failed ExecutionResults. SessionFault is the exception: it is recorded
    and re-raised so the loop can stop.

    Attributes:
        is_busy: True while a handler is running.
        consecutive_failures: Failed or errored executions since the last success.
    """

    def __init__(
        self,
        session: Session,
        store: StateStore,
        config: ExecutorConfig | None = None,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize the executor.

        Args:
            session: Game session commands are sent through.
            store: State store for optimistic updates and history.
            config: Execution settings. Uses defaults if None.
            rng: Random source for exploration headings.
        """
        self._session = session
        self._store = store
        self._config = config or ExecutorConfig()
        self._movement = MovementController(session, store, self._config, rng)
        self._interaction = InteractionController(session, store, self._config)

        self._handlers: dict[CommandKind, ActionHandler] = {
            CommandKind.MINE: self._interaction.mine,
            CommandKind.CRAFT: self._interaction.craft,
            CommandKind.MOVE: self._movement.move,
            CommandKind.JUMP: self._movement.jump,
            CommandKind.EXPLORE: self._movement.explore,
            CommandKind.ATTACK: self._interaction.attack,
            CommandKind.COMBAT: self._interaction.attack,
            CommandKind.BUILD: self._interaction.build,
            CommandKind.EAT: self._interaction.eat,
            CommandKind.SLEEP: self._interaction.sleep,
            CommandKind.CHAT: self._interaction.chat,
            CommandKind.WAIT: self._interaction.wait,
        }
        missing = set(CommandKind) - set(self._handlers)
        if missing:
            raise RuntimeError(f"No handler for commands: {sorted(missing)}")

        self._busy = False
        self._consecutive_failures = 0
        self._current_plan: Plan | None = None
        self._last_result: ExecutionResult | None = None
        self._result_callbacks: list[ResultCallback] = []

        logger.debug(f"ActionExecutor initialized with {type(session).__name__}")

    @property
    def is_busy(self) -> bool:
        return self._busy

    @property
    def consecutive_failures(self) -> int:
        return self._consecutive_failures

    @property
    def current_plan(self) -> Plan | None:
        """Plan being executed, if any."""
        return self._current_plan

    @property
    def last_result(self) -> ExecutionResult | None:
        return self._last_result

    @property
    def config(self) -> ExecutorConfig:
        return self._config

    def set_handler(self, kind: CommandKind, handler: ActionHandler) -> None:
        """Replace the handler for a command kind."""
        self._handlers[kind] = handler

    def on_result(self, callback: ResultCallback) -> None:
        """Register a callback invoked after every completed execution."""
        self._result_callbacks.append(callback)

    async def execute(self, plan: Plan) -> ExecutionResult:
        """Execute a plan's action.

        Args:
            plan: Plan whose action string is dispatched.

        Returns:
            Outcome of the attempt. A busy executor returns immediately
            without touching the session or the history.

        Raises:
            SessionFault: If the session failed while the handler ran.
        """
        if self._busy:
            logger.debug(f"Rejecting {plan.action!r}: executor busy")
            return ExecutionResult(success=False, message=BUSY_MESSAGE)

        try:
            handler = self._resolve(plan)
        except UnknownCommand as e:
            result = ExecutionResult(success=False, message=str(e))
            logger.warning(result.message)
            self._finish(plan, result, HistoryOutcome.FAILURE)
            return result

        self._busy = True
        self._current_plan = plan
        start_time = time.time()
        logger.info(f"Executing: {plan.action}")
        if plan.reasoning:
            logger.info(f"Reasoning: {plan.reasoning}")

        try:
            try:
                result = await self._run_handler(handler, plan)
                outcome = HistoryOutcome.SUCCESS if result.success else HistoryOutcome.FAILURE
            except ExecutionTimeout as e:
                result = ExecutionResult(success=False, message=str(e))
                outcome = HistoryOutcome.FAILURE
            except SessionFault as e:
                result = ExecutionResult(success=False, message=f"Session fault: {e}")
                self._finish(plan, self._timed(result, start_time), HistoryOutcome.ERROR)
                raise
            except Exception as e:
                logger.exception(f"Action {plan.action!r} raised")
                result = ExecutionResult(success=False, message=f"Error: {e}")
                outcome = HistoryOutcome.ERROR
        finally:
            self._busy = False
            self._current_plan = None

        result = self._timed(result, start_time)
        self._finish(plan, result, outcome)
        return result

    def _resolve(self, plan: Plan) -> ActionHandler:
        kind = CommandKind.from_token(plan.command)
        if kind is None:
            raise UnknownCommand(plan.command)
        return self._handlers[kind]

    async def _run_handler(self, handler: ActionHandler, plan: Plan) -> ExecutionResult:
        """Run a handler, cancelling it when the action timeout elapses."""
        try:
            return await asyncio.wait_for(
                handler(plan.arguments), timeout=self._config.action_timeout
            )
        except TimeoutError as e:
            raise ExecutionTimeout(plan.action, self._config.action_timeout) from e

    @staticmethod
    def _timed(result: ExecutionResult, start_time: float) -> ExecutionResult:
        return result.model_copy(update={"duration_ms": (time.time() - start_time) * 1000})

    def _finish(self, plan: Plan, result: ExecutionResult, outcome: HistoryOutcome) -> None:
        if result.success:
            self._consecutive_failures = 0
            logger.info(f"Action completed: {result.message} ({result.duration_ms:.0f}ms)")
        else:
            self._consecutive_failures += 1
            logger.warning(f"Action failed: {result.message}")

        self._last_result = result
        self._store.add_to_history(plan.action, outcome, result.message)

        for callback in self._result_callbacks:
            try:
                callback(plan, result)
            except Exception as e:
                logger.warning(f"Result callback error: {e}")
