"""Session state: models, store, transport and the session cache.

Usage:
    from annotator_client.session import SessionCache, SessionStore

    cache = SessionCache(settings, store=SessionStore(), events=EventBus())
    model = await cache.load()
"""

from .cache import CachedValue, SessionCache
from .client import ProfileAPI, SessionAPI
from .models import Group, SessionModel
from .response import ParsedEnvelope, process_response
from .store import SessionStore

__all__ = [
    "CachedValue",
    "Group",
    "ParsedEnvelope",
    "ProfileAPI",
    "SessionAPI",
    "SessionCache",
    "SessionModel",
    "SessionStore",
    "process_response",
]
