"""Exception taxonomy for session and token operations."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .session.models import SessionModel


class AnnotatorClientError(Exception):
    """Base exception for annotator client errors."""

    def __init__(self, message: str, status_code: int | None = None):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class TransientFetchError(AnnotatorClientError):
    """Network failure or 5xx response while fetching session state.

    Retried by the session load backoff policy.
    """

    pass


class ApplicationError(AnnotatorClientError):
    """4xx response or an error envelope from the server. Never retried."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        model: SessionModel | None = None,
    ):
        super().__init__(message, status_code)
        self.model = model

    @property
    def errors(self) -> Any:
        return self.model.errors if self.model else None

    @property
    def reason(self) -> str | None:
        return self.model.reason if self.model else None


class TokenExchangeError(AnnotatorClientError):
    """The grant token could not be exchanged for an access token."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        error_code: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, status_code)
        self.error_code = error_code
        self.details = details or {}
