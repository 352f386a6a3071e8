"""Interaction handlers: mining, combat, crafting, building and survival.

Mining and attacking are open-loop: the agent orients, then emits a
fixed sequence of commands with fixed delays, without waiting for the
server to confirm a block break or a hit.
"""

from __future__ import annotations

import asyncio
import logging
import math
from typing import TYPE_CHECKING

from minebot.models.plans import ExecutionResult
from minebot.models.world import Rotation

if TYPE_CHECKING:
    from minebot.actions.executor import ExecutorConfig
    from minebot.core.state import StateStore
    from minebot.interfaces.session import Session

logger = logging.getLogger(__name__)

LOOK_DOWN_PITCH = 90.0
LOOK_LEVEL_PITCH = 0.0
MINE_SWINGS = 3
ATTACK_SWINGS = 2
EAT_DURATION_FACTOR = 3
MAX_WAIT_SECONDS = 60.0
# Relative (dx, dz) of blocks placed around the feet when building.
BUILD_OFFSETS: tuple[tuple[int, int], ...] = ((1, 0), (0, 1), (-1, 0), (0, -1))


class InteractionController:
    """Handlers for mine, attack, craft, build, eat, sleep, chat and wait."""

    def __init__(self, session: Session, store: StateStore, config: ExecutorConfig) -> None:
        self._session = session
        self._store = store
        self._config = config

    def _look(self, pitch: float, yaw: float | None = None) -> None:
        current = self._store.state.rotation
        rotation = Rotation(yaw=current.yaw if yaw is None else yaw, pitch=pitch)
        self._store.update(rotation=rotation)
        self._session.send("look", rotation.model_dump())

    def _feet_block(self, dy: int = 0, dx: int = 0, dz: int = 0) -> dict[str, int]:
        position = self._store.state.position
        return {
            "x": math.floor(position.x) + dx,
            "y": math.floor(position.y) + dy,
            "z": math.floor(position.z) + dz,
        }

    async def mine(self, args: list[str]) -> ExecutionResult:
        """mine [block]: break the block under the agent's feet."""
        block = args[0] if args else "block"
        target = self._feet_block(dy=-1)
        delay = self._config.interaction_delay

        self._look(LOOK_DOWN_PITCH)
        self._session.send("player_action", {"action": "start_break", "position": target})
        for _ in range(MINE_SWINGS):
            self._session.send("animate", {"action": "swing_arm"})
            await asyncio.sleep(delay)
        self._session.send("player_action", {"action": "stop_break", "position": target})

        return ExecutionResult(success=True, message=f"Mining {block}")

    async def attack(self, args: list[str]) -> ExecutionResult:
        """attack [target]: swing at the nearest hostile or a named target."""
        target = args[0] if args else "nearest_hostile"
        delay = self._config.interaction_delay

        self._look(LOOK_LEVEL_PITCH)
        for _ in range(ATTACK_SWINGS):
            self._session.send("animate", {"action": "swing_arm"})
            self._session.send("attack", {"target": target})
            await asyncio.sleep(delay)

        return ExecutionResult(success=True, message=f"Attacking {target}")

    async def craft(self, args: list[str]) -> ExecutionResult:
        """craft <item>"""
        item = " ".join(args)
        if not item:
            return ExecutionResult(success=False, message="Craft requires an item")
        self._session.send("crafting_event", {"type": "craft", "recipe": item})
        return ExecutionResult(success=True, message=f"Crafting {item}")

    async def build(self, args: list[str]) -> ExecutionResult:
        """build [structure]: place a ring of blocks around the agent."""
        structure = " ".join(args) or "shelter"
        delay = self._config.interaction_delay

        self._look(LOOK_DOWN_PITCH)
        for dx, dz in BUILD_OFFSETS:
            self._session.send(
                "place_block",
                {"structure": structure, "position": self._feet_block(dx=dx, dz=dz)},
            )
            await asyncio.sleep(delay)

        return ExecutionResult(success=True, message=f"Building {structure}")

    async def eat(self, args: list[str]) -> ExecutionResult:
        """eat [food]"""
        food = args[0] if args else None
        self._session.send("use_item", {"action": "consume", "item": food})
        await asyncio.sleep(self._config.interaction_delay * EAT_DURATION_FACTOR)
        return ExecutionResult(success=True, message=f"Eating {food or 'food'}")

    async def sleep(self, args: list[str]) -> ExecutionResult:
        """sleep: use a bed. Refused during the day."""
        if self._store.state.is_day:
            return ExecutionResult(success=False, message="Cannot sleep during the day")
        self._session.send("use_item", {"action": "sleep"})
        return ExecutionResult(success=True, message="Sleeping")

    async def chat(self, args: list[str]) -> ExecutionResult:
        """chat <message>"""
        message = " ".join(args)
        if not message:
            return ExecutionResult(success=False, message="Chat requires a message")
        self._session.send("text", {"type": "chat", "message": message})
        return ExecutionResult(success=True, message=f"Said: {message}")

    async def wait(self, args: list[str]) -> ExecutionResult:
        """wait [seconds]"""
        seconds = self._config.default_wait
        if args:
            try:
                seconds = float(args[0])
            except ValueError:
                return ExecutionResult(success=False, message=f"Invalid wait duration: {args[0]}")
        seconds = max(0.0, min(seconds, MAX_WAIT_SECONDS))
        await asyncio.sleep(seconds)
        return ExecutionResult(success=True, message=f"Waited {seconds:g}s")
