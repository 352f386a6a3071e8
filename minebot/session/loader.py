"""Resolution of session adapters from configuration."""

from __future__ import annotations

import importlib
import logging
from typing import TYPE_CHECKING

from minebot.interfaces.session import Session
from minebot.session.base import NullSession

if TYPE_CHECKING:
    from minebot.config.loader import SessionConfig

logger = logging.getLogger(__name__)

NULL_ADAPTER = "null"


class SessionAdapterError(Exception):
    """Raised when a configured session adapter cannot be loaded."""

    pass


def load_session(config: SessionConfig) -> Session:
    """Build the session named by `config.adapter`.

    `adapter` is either "null" for an offline NullSession, or an import
    string "package.module:factory". The factory is called with the
    SessionConfig and must return a Session.

    Args:
        config: Session settings.

    Returns:
        A ready Session.

    Raises:
        SessionAdapterError: If the import string is malformed, the target
            cannot be imported, or the factory returns something else.
    """
    adapter = (config.adapter or NULL_ADAPTER).strip()
    if adapter == NULL_ADAPTER:
        logger.warning("Using NullSession: commands will not reach a server")
        return NullSession()

    module_name, sep, attr = adapter.partition(":")
    if not sep or not module_name or not attr:
        raise SessionAdapterError(
            f"Invalid session adapter {adapter!r}; expected 'module:factory'"
        )

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise SessionAdapterError(f"Cannot import session adapter module {module_name!r}: {e}") from e

    factory = getattr(module, attr, None)
    if factory is None or not callable(factory):
        raise SessionAdapterError(f"{adapter!r} is not a callable session factory")

    session = factory(config)
    if not isinstance(session, Session):
        raise SessionAdapterError(
            f"{adapter!r} returned {type(session).__name__}, expected a Session"
        )

    logger.info(f"Session adapter loaded: {adapter} -> {config.host}:{config.port}")
    return session
