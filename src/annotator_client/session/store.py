"""Holder for the application's single copy of session state."""

from __future__ import annotations

from .models import SessionModel


class SessionStore:
    """Read/replace access to the current session.

    Other parts of the application read session state from here; only
    ``SessionCache.update`` replaces it.
    """

    def __init__(self, initial: SessionModel | None = None):
        self._session = initial or SessionModel()

    def get_session(self) -> SessionModel:
        return self._session

    def replace_session(self, session: SessionModel) -> None:
        self._session = session
