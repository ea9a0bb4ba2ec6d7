"""User-visible notices ("flash" messages) raised by session responses."""

from __future__ import annotations

import logging
from typing import Protocol

logger = logging.getLogger(__name__)

_LEVELS = {
    "error": logging.ERROR,
    "warning": logging.WARNING,
    "success": logging.INFO,
    "info": logging.INFO,
}


class Notifier(Protocol):
    def notify(self, kind: str, message: str) -> None:
        """Show ``message`` to the user as a notice of type ``kind``."""


class LogNotifier:
    """Notifier that writes notices to the log.

    Kinds map onto log levels; unrecognised kinds are logged at INFO.
    """

    def notify(self, kind: str, message: str) -> None:
        logger.log(_LEVELS.get(kind, logging.INFO), "[%s] %s", kind, message)
