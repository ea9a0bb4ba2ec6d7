"""Session and publisher-token caching for the annotator client.

Usage:
    from annotator_client import build_session_cache

    session = build_session_cache()
    model = await session.load()
    print(model.userid)
"""

from .auth import TokenManager
from .config import ClientSettings, ServiceConfig, settings
from .events import EventBus, GroupsChanged, UserChanged
from .session import SessionCache, SessionModel, SessionStore

__version__ = "0.1.0"


def build_session_cache(config: ClientSettings | None = None) -> SessionCache:
    """Wire a SessionCache with its default collaborators."""
    config = config or settings
    return SessionCache(
        settings=config,
        store=SessionStore(),
        events=EventBus(),
        auth=TokenManager(config),
    )


__all__ = [
    "ClientSettings",
    "EventBus",
    "GroupsChanged",
    "ServiceConfig",
    "SessionCache",
    "SessionModel",
    "SessionStore",
    "TokenManager",
    "UserChanged",
    "build_session_cache",
    "settings",
]
