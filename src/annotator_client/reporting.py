"""Error-reporting collaborator: associates reports with the current user."""

from __future__ import annotations

import logging
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class ErrorReporter(Protocol):
    def set_user_info(self, user: dict[str, Any] | None) -> None:
        """Attach ``user`` to future error reports, or clear it with None."""


class LogErrorReporter:
    """Reporter that only records the user context it was given."""

    def __init__(self):
        self.user: dict[str, Any] | None = None

    def set_user_info(self, user: dict[str, Any] | None) -> None:
        self.user = user
        if user:
            logger.debug("Error reports now tagged with user %s", user.get("id"))
        else:
            logger.debug("Error report user context cleared")
