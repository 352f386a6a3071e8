"""Session adapters.

This package provides:
- EventSession: Base class with a local event registry
- NullSession: Offline session for dry runs and tests
- load_session: Build the configured adapter
"""

from minebot.session.base import EventSession, NullSession
from minebot.session.loader import SessionAdapterError, load_session

__all__ = [
    "EventSession",
    "NullSession",
    "SessionAdapterError",
    "load_session",
]
