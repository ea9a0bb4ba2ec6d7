"""Shared test fixtures for the annotator client test suite."""

import pytest
import httpx
from unittest.mock import AsyncMock, MagicMock
from typing import Any

from annotator_client.config import ClientSettings, ServiceConfig
from annotator_client.events import EventBus
from annotator_client.retry import RetryPolicy
from annotator_client.session.cache import SessionCache
from annotator_client.session.store import SessionStore

# Sample values used across tests
SAMPLE_USERID = "acct:alice@example.org"
SAMPLE_OTHER_USERID = "acct:bob@example.org"
SAMPLE_CSRF = "csrf_abc123"
SAMPLE_AUTHORITY = "publisher.org"
SAMPLE_GRANT_TOKEN = "grant.jwt.token"


# ============================================================================
# Mock Response Data
# ============================================================================

MOCK_GROUPS = [
    {"id": "__world__", "name": "Public", "public": True},
    {"id": "grp_1", "name": "Reading Club", "public": False},
]

MOCK_SESSION_MODEL = {
    "userid": SAMPLE_USERID,
    "csrf": SAMPLE_CSRF,
    "groups": MOCK_GROUPS,
    "preferences": {"show_sidebar_tutorial": True},
    "features": {"flag_a": True, "flag_b": False},
}


# ============================================================================
# Fixtures
# ============================================================================


class FakeClock:
    """Manually advanced clock, in seconds."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    """A controllable clock."""
    return FakeClock()


@pytest.fixture
def settings():
    """Settings for a first-party client (no publisher services)."""
    return ClientSettings(
        service_url="https://annotate.example.com/",
        api_url="https://annotate.example.com/api/",
        services=[],
    )


@pytest.fixture
def publisher_settings():
    """Settings for a client embedded by a publisher."""
    return ClientSettings(
        service_url="https://annotate.example.com/",
        api_url="https://annotate.example.com/api/",
        services=[ServiceConfig(authority=SAMPLE_AUTHORITY, grant_token=SAMPLE_GRANT_TOKEN)],
    )


@pytest.fixture
def envelope_response():
    """Factory fixture to create session endpoint responses."""
    def _create_response(
        model: dict[str, Any] | None = None,
        status_code: int = 200,
        **extra: Any,
    ) -> httpx.Response:
        body = dict(extra)
        if model is not None:
            body["model"] = model
        return httpx.Response(status_code, json=body)
    return _create_response


@pytest.fixture
def mock_session_api(envelope_response):
    """Create a mock SessionAPI that answers with MOCK_SESSION_MODEL."""
    api = MagicMock()
    api.headers = {}
    api.load = AsyncMock(return_value=envelope_response(MOCK_SESSION_MODEL))
    api.login = AsyncMock(return_value=envelope_response(MOCK_SESSION_MODEL))
    api.logout = AsyncMock(
        return_value=envelope_response({"csrf": SAMPLE_CSRF, "groups": [MOCK_GROUPS[0]]})
    )
    api.close = AsyncMock()
    return api


@pytest.fixture
def mock_profile_api():
    """Create a mock ProfileAPI."""
    from annotator_client.session.models import SessionModel

    api = MagicMock()
    api.read = AsyncMock(return_value=SessionModel.from_dict(MOCK_SESSION_MODEL))
    api.update = AsyncMock(return_value=SessionModel.from_dict(MOCK_SESSION_MODEL))
    api.close = AsyncMock()
    return api


@pytest.fixture
def mock_auth():
    """Create a mock auth collaborator."""
    auth = MagicMock()
    auth.clear_cache = MagicMock()
    auth.get_token = AsyncMock(return_value=None)
    return auth


@pytest.fixture
def events():
    return EventBus()


@pytest.fixture
def make_cache(settings, events, mock_auth, mock_session_api, mock_profile_api, clock):
    """Factory fixture to build a SessionCache with mocked collaborators."""
    def _create(config: ClientSettings | None = None, **overrides: Any) -> SessionCache:
        kwargs = dict(
            settings=config or settings,
            store=SessionStore(),
            events=events,
            auth=mock_auth,
            notifier=MagicMock(),
            reporter=MagicMock(),
            session_api=mock_session_api,
            profile_api=mock_profile_api,
            retry_policy=RetryPolicy(attempts=2, min_delay=0, max_delay=0),
            clock=clock,
        )
        kwargs.update(overrides)
        return SessionCache(**kwargs)
    return _create
