"""Action execution against the game session."""

from minebot.actions.executor import ActionExecutor, ExecutorConfig
from minebot.actions.interaction import InteractionController
from minebot.actions.movement import DIRECTIONS, MovementController, interpolate_path

__all__ = [
    "DIRECTIONS",
    "ActionExecutor",
    "ExecutorConfig",
    "InteractionController",
    "MovementController",
    "interpolate_path",
]
