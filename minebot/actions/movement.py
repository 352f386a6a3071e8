"""Movement handlers: straight-line walking, jumping and random exploration.

Paths are interpolated into equal steps, one position update per step,
with the StateStore position updated optimistically before any server
confirmation arrives.
"""

from __future__ import annotations

import asyncio
import logging
import math
import random
from typing import TYPE_CHECKING, Any

from minebot.models.plans import ExecutionResult
from minebot.models.world import Position, Rotation

if TYPE_CHECKING:
    from minebot.actions.executor import ExecutorConfig
    from minebot.core.state import StateStore
    from minebot.interfaces.session import Session

logger = logging.getLogger(__name__)

# direction -> (dx, dz); north is -z, east is +x
DIRECTIONS: dict[str, tuple[int, int]] = {
    "north": (0, -1),
    "south": (0, 1),
    "east": (1, 0),
    "west": (-1, 0),
}

EXPLORE_MIN_DISTANCE = 10.0
EXPLORE_MAX_DISTANCE = 30.0
JUMP_HEIGHT = 1.0


def yaw_for(dx: float, dz: float) -> float:
    """Yaw in degrees facing along (dx, dz); 0 faces +z (south)."""
    return math.degrees(math.atan2(-dx, dz))


def interpolate_path(
    start: Position,
    dx: float,
    dz: float,
    distance: float,
    max_steps: int,
) -> list[Position]:
    """Split a straight horizontal line into equal steps.

    Args:
        start: Starting position.
        dx: X component of the unit heading.
        dz: Z component of the unit heading.
        distance: Blocks to travel.
        max_steps: Upper bound on the number of steps.

    Returns:
        Intermediate positions, the last one exactly at the destination.
    """
    steps = min(max_steps, max(1, round(distance)))
    return [
        start.offset(dx=dx * distance * i / steps, dz=dz * distance * i / steps)
        for i in range(1, steps + 1)
    ]


def _parse_distance(args: list[str], default: float, maximum: float) -> float | None:
    if not args:
        return default
    try:
        value = float(args[0])
    except ValueError:
        return None
    if value <= 0:
        return None
    return min(value, maximum)


class MovementController:
    """Handlers for move, jump and explore."""

    def __init__(
        self,
        session: Session,
        store: StateStore,
        config: ExecutorConfig,
        rng: random.Random | None = None,
    ) -> None:
        self._session = session
        self._store = store
        self._config = config
        self._rng = rng or random.Random()

    async def move(self, args: list[str]) -> ExecutionResult:
        """move <north|south|east|west> [distance]"""
        return await self._directional(args, jump=False)

    async def jump(self, args: list[str]) -> ExecutionResult:
        """jump <north|south|east|west> [distance], one hop per block."""
        return await self._directional(args, jump=True)

    async def explore(self, args: list[str]) -> ExecutionResult:
        """Walk a random heading for 10-30 blocks."""
        angle = self._rng.uniform(0.0, 2 * math.pi)
        distance = min(
            self._rng.uniform(EXPLORE_MIN_DISTANCE, EXPLORE_MAX_DISTANCE),
            self._config.max_move_distance,
        )
        dx, dz = math.cos(angle), math.sin(angle)
        await self._walk(dx, dz, distance, jump=False)
        return ExecutionResult(
            success=True,
            message=f"Exploring area (heading {math.degrees(angle):.0f} deg, {distance:.0f} blocks)",
        )

    async def _directional(self, args: list[str], jump: bool) -> ExecutionResult:
        verb = "Jumping" if jump else "Moving"
        direction = args[0].lower() if args else ""
        if direction not in DIRECTIONS:
            return ExecutionResult(success=False, message=f"Invalid direction: {direction or '<none>'}")

        distance = _parse_distance(
            args[1:], self._config.default_move_distance, self._config.max_move_distance
        )
        if distance is None:
            return ExecutionResult(success=False, message=f"Invalid distance: {args[1]}")

        dx, dz = DIRECTIONS[direction]
        await self._walk(dx, dz, distance, jump=jump)
        return ExecutionResult(success=True, message=f"{verb} {direction} ({distance:g}m)")

    async def _walk(self, dx: float, dz: float, distance: float, jump: bool) -> None:
        start = self._store.state.position
        rotation = Rotation(yaw=yaw_for(dx, dz), pitch=0.0)
        self._store.update(rotation=rotation)

        # Jumps hop once per block; walking is bounded by max_move_steps.
        max_steps = max(1, round(distance)) if jump else self._config.max_move_steps
        path = interpolate_path(start, dx, dz, distance, max_steps)
        delay = self._config.move_step_delay
        logger.debug(f"Walking {distance:.1f} blocks in {len(path)} steps (jump={jump})")

        for position in path:
            if jump:
                self._send_pose(position.offset(dy=JUMP_HEIGHT), rotation, on_ground=False)
                await asyncio.sleep(delay / 2)
                self._send_pose(position, rotation, on_ground=True)
                await asyncio.sleep(delay / 2)
            else:
                self._send_pose(position, rotation, on_ground=True)
                await asyncio.sleep(delay)

    def _send_pose(self, position: Position, rotation: Rotation, on_ground: bool) -> None:
        payload: dict[str, Any] = {
            "runtime_id": self._store.state.entity_id,
            "position": position.model_dump(),
            "rotation": rotation.model_dump(),
            "mode": "normal",
            "on_ground": on_ground,
        }
        self._session.send("move_player", payload)
        self._store.update(position=position)
