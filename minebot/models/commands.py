"""The closed set of commands the agent can execute."""

from __future__ import annotations

from enum import StrEnum


class CommandKind(StrEnum):
    """Command verbs understood by the action executor.

    Declaration order is the order in which free text is scanned for verbs.
    """

    MINE = "mine"
    CRAFT = "craft"
    MOVE = "move"
    JUMP = "jump"
    EXPLORE = "explore"
    ATTACK = "attack"
    COMBAT = "combat"
    BUILD = "build"
    EAT = "eat"
    SLEEP = "sleep"
    CHAT = "chat"
    WAIT = "wait"

    @classmethod
    def from_token(cls, token: str) -> CommandKind | None:
        """Map a command token to a kind, or None if unknown."""
        try:
            return cls(token.strip().lower())
        except ValueError:
            return None


KNOWN_VERBS: tuple[str, ...] = tuple(kind.value for kind in CommandKind)
