"""Reasoning service interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

from minebot.errors import MinebotError


class ReasoningServiceError(MinebotError):
    """A reasoning call failed (network error, non-2xx status, empty payload).

    Attributes:
        status: HTTP status code when one was received, else None.
        message: Human-readable failure description.
    """

    def __init__(self, message: str, status: int | None = None) -> None:
        self.status = status
        self.message = message
        prefix = f"HTTP {status}: " if status is not None else ""
        super().__init__(f"{prefix}{message}")


class ReasoningClient(ABC):
    """Abstract request/response reasoning capability."""

    @abstractmethod
    async def complete(self, prompt: str) -> str:
        """Send a prompt and return the raw text reply.

        The reply may be empty or free-form; callers must tolerate that.

        Args:
            prompt: Full prompt text.

        Returns:
            Response text.

        Raises:
            ReasoningServiceError: If the call does not succeed.
        """
        ...

    @property
    def model_name(self) -> str:
        """Model identifier used by this client."""
        return "unknown"

    async def aclose(self) -> None:
        """Release network resources."""
        return None
