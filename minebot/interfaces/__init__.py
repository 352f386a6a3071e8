"""Interfaces for the external collaborators of the agent core."""

from minebot.interfaces.reasoning import ReasoningClient, ReasoningServiceError
from minebot.interfaces.session import EventHandler, Session, SessionEvent, SessionFault

__all__ = [
    "EventHandler",
    "ReasoningClient",
    "ReasoningServiceError",
    "Session",
    "SessionEvent",
    "SessionFault",
]
