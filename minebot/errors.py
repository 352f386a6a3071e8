"""Exception hierarchy for the agent.

Only SessionFault is allowed to escape a loop iteration. The others are
caught where they arise and turned into plans or execution results.
"""

from __future__ import annotations


class MinebotError(Exception):
    """Base class for agent errors."""

    pass


class UnknownCommand(MinebotError):
    """A plan's leading token is not a known command."""

    def __init__(self, token: str) -> None:
        self.token = token
        super().__init__(f"Unknown command: {token}")


class ExecutionTimeout(MinebotError):
    """A handler did not finish within the action timeout."""

    def __init__(self, action: str, timeout: float) -> None:
        self.action = action
        self.timeout = timeout
        super().__init__(f"Action timed out after {timeout:g}s")
