"""Session cache: the client's time-bounded view of server session state.

Gives the rest of the application access to the current user, CSRF
token, groups and preferences, and provides the actions that change that
state (login, logout, dismissing the tutorial).

Loaded data is cached for ``settings.session_cache_ttl`` seconds across
all actions: a ``login()`` refreshes the cache, so a ``load()`` shortly
afterwards returns the login result instead of making another request.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Generic, Protocol, TypeVar

import httpx

from ..config import ClientSettings
from ..errors import ApplicationError, TransientFetchError
from ..events import EventBus, GroupsChanged, UserChanged
from ..notices import LogNotifier, Notifier
from ..reporting import ErrorReporter, LogErrorReporter
from ..retry import RetryPolicy, retry_operation
from .client import ProfileAPI, SessionAPI
from .models import SessionModel
from .response import process_response
from .store import SessionStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

LOGOUT_FAILED_MESSAGE = "Log out failed"


class Auth(Protocol):
    def clear_cache(self) -> None: ...


@dataclass
class CachedValue(Generic[T]):
    """Last fetched value, when it was fetched, and any fetch in flight."""

    value: T | None = None
    fetched_at: float | None = None
    pending: asyncio.Future | None = None

    @property
    def is_pending(self) -> bool:
        return self.pending is not None and not self.pending.done()


class SessionCache:
    """Cached access to the application session.

    Usage:
        cache = SessionCache(settings, store=SessionStore(), events=EventBus(), auth=tokens)
        model = await cache.load()        # fetches, or serves the cached copy
        cache.update(pushed_model)        # apply state pushed by the server
        await cache.logout()
    """

    def __init__(
        self,
        settings: ClientSettings,
        store: SessionStore,
        events: EventBus,
        auth: Auth | None = None,
        notifier: Notifier | None = None,
        reporter: ErrorReporter | None = None,
        session_api: SessionAPI | None = None,
        profile_api: ProfileAPI | None = None,
        retry_policy: RetryPolicy | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.settings = settings
        self.store = store
        self.events = events
        self.auth = auth
        self.notifier = notifier or LogNotifier()
        self.reporter = reporter or LogErrorReporter()
        self.retry_policy = retry_policy or settings.retry_policy
        self._clock = clock

        # Routing is fixed for the lifetime of the cache.
        self.authority = settings.authority

        if session_api is None:
            session_api = SessionAPI(
                settings,
                headers={},
                client=httpx.AsyncClient(timeout=settings.request_timeout, follow_redirects=True),
            )
        self.session_api = session_api
        # Headers sent by every session request; update() adds the CSRF token.
        self.headers = session_api.headers

        if profile_api is None:
            token_getter = getattr(auth, "get_token", None)
            profile_api = ProfileAPI(settings, token_getter=token_getter)
        self.profile_api = profile_api

        self._cached: CachedValue[SessionModel] = CachedValue()

    @property
    def state(self) -> SessionModel:
        """Current session state, including stale data after a failed load."""
        return self.store.get_session()

    async def load(self) -> SessionModel:
        """Return the session, fetching it if the cached copy is missing or expired.

        Concurrent callers share one fetch. The fetch is retried with backoff
        on transient failures; application errors are not retried.

        Raises:
            TransientFetchError: If retries are exhausted
            ApplicationError: If the server rejected the request
        """
        cached = self._cached
        if not cached.is_pending and self._is_stale():
            logger.debug("Session cache miss, fetching")
            cached.fetched_at = self._clock()
            cached.pending = asyncio.ensure_future(self._fetch())

        if cached.is_pending:
            # Shielded so one caller being cancelled does not abort the
            # fetch for everyone else attached to it.
            return await asyncio.shield(cached.pending)

        logger.debug("Session cache hit")
        return cached.value

    def _is_stale(self) -> bool:
        cached = self._cached
        if cached.value is None or cached.fetched_at is None:
            return True
        return (self._clock() - cached.fetched_at) > self.settings.session_cache_ttl

    async def _fetch(self) -> SessionModel:
        try:
            model = await retry_operation(
                self._fetch_once,
                self.retry_policy,
                retry_on=(TransientFetchError,),
            )
        except (Exception, asyncio.CancelledError) as e:
            logger.warning("Session load failed: %s", e)
            # An update() pushed while this fetch ran released the slot and
            # its timestamp must survive.
            if self._owns_pending():
                self._cached.fetched_at = None
            raise
        return model

    def _owns_pending(self) -> bool:
        """Whether the running task is the fetch held in the pending slot."""
        pending = self._cached.pending
        if pending is None:
            return False
        try:
            return asyncio.current_task() is pending
        except RuntimeError:
            return False

    async def _fetch_once(self) -> SessionModel:
        # A fetch superseded by update() answers its attached callers only.
        if self.authority:
            model = await self.profile_api.read(self.authority)
            return self.update(model) if self._owns_pending() else model

        response = await self.session_api.load()
        return self._handle_response(response, apply=self._owns_pending())

    def _handle_response(self, response: httpx.Response, apply: bool = True) -> SessionModel:
        """Process a session endpoint response, dispatch notices and apply it."""
        envelope = process_response(response.content, response.status_code)
        if envelope is None:
            raise TransientFetchError(
                f"Session endpoint unavailable: {response.status_code}",
                response.status_code,
            )

        for kind, message in envelope.flash:
            self.notifier.notify(kind, message)

        # Rejected requests still carry session state (a fresh CSRF token).
        model = self.update(envelope.model) if apply else envelope.model
        if envelope.is_error:
            raise ApplicationError(
                f"Session request rejected: {envelope.status_code}",
                envelope.status_code,
                model=model,
            )
        return model

    def update(self, model: SessionModel) -> SessionModel:
        """Apply session state obtained from the server.

        Counterpart to load(): where load() fetches and then updates, update()
        applies state the server pushed to the client (for example in the
        payload of another response). Resets the cache TTL and publishes
        UserChanged / GroupsChanged, in that order, before returning.
        """
        previous = self.store.get_session()

        initial_load = previous.csrf is None
        user_changed = model.userid != previous.userid
        groups_changed = model.groups != previous.groups

        self.store.replace_session(model)

        if model.csrf:
            self.headers[self.settings.csrf_header_name] = model.csrf

        self._cached.value = model
        self._cached.fetched_at = self._clock()
        if not self._owns_pending():
            self._cached.pending = None

        if user_changed:
            logger.info("Session user changed (initial_load=%s)", initial_load)
            if not self.authority and self.auth is not None:
                self.auth.clear_cache()

            self.events.publish(UserChanged(initial_load=initial_load, userid=model.userid))

            if model.userid:
                self.reporter.set_user_info({"id": model.userid})
            else:
                self.reporter.set_user_info(None)

        if groups_changed:
            self.events.publish(GroupsChanged(initial_load=initial_load))

        return model

    async def login(self, username: str, password: str) -> SessionModel:
        """Log in and apply the resulting session.

        Raises:
            ApplicationError: If the credentials were rejected; ``errors`` and
                ``reason`` from the server are on the exception
        """
        response = await self.session_api.login(username, password)
        return self._handle_response(response)

    async def logout(self) -> SessionModel:
        """Log out, apply the logged-out session and drop any access token.

        On failure a generic notice is shown and the error re-raised.
        """
        try:
            response = await self.session_api.logout()
            model = self._handle_response(response)
        except Exception:
            self._cached.fetched_at = None
            self.notifier.notify("error", LOGOUT_FAILED_MESSAGE)
            raise

        if self.auth is not None:
            self.auth.clear_cache()
        return model

    async def dismiss_tutorial(self) -> SessionModel:
        """Store server-side that the sidebar tutorial was dismissed."""
        model = await self.profile_api.update({"show_sidebar_tutorial": False})
        return self.update(model)

    def status(self) -> dict[str, Any]:
        """Summary of cache state for diagnostics."""
        cached = self._cached
        age = None
        if cached.fetched_at is not None:
            age = self._clock() - cached.fetched_at
        return {
            "source": "profile" if self.authority else "session",
            "authority": self.authority,
            "cached": cached.value is not None,
            "age_seconds": age,
            "pending": cached.is_pending,
            "userid": self.state.userid,
        }

    async def close(self) -> None:
        """Close the underlying HTTP clients."""
        await self.session_api.close()
        await self.profile_api.close()
