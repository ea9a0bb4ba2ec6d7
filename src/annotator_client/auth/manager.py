"""Access token manager for publisher ("third-party") accounts.

Keeps one access token in memory, exchanged from the grant token in the
client settings and re-exchanged once it expires.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable

import httpx

from ..config import ClientSettings, settings as default_settings
from ..oauth.client import exchange_grant_token

logger = logging.getLogger(__name__)


@dataclass
class CachedToken:
    """An access token and the monotonic time it stops being usable."""

    token: str
    expires_at: float


class TokenManager:
    """Cached access token for the configured publisher account.

    Usage:
        manager = TokenManager(settings)
        token = await manager.get_token()   # None without a publisher account
    """

    def __init__(
        self,
        settings: ClientSettings | None = None,
        client: httpx.AsyncClient | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize token manager.

        Args:
            settings: Client settings (uses the module settings if not provided)
            client: HTTP client for the exchange (a short-lived one per call if not provided)
            clock: Monotonic clock in seconds
        """
        self.settings = settings or default_settings
        self._client = client
        self._clock = clock

        # Read once: the grant token does not change for the process lifetime.
        self.grant_token = self.settings.grant_token

        self._cached_token: CachedToken | None = None
        self._pending: asyncio.Future | None = None

    async def get_token(self) -> str | None:
        """Return a valid access token, or None if no publisher account is configured.

        Raises:
            TokenExchangeError: If the grant token could not be exchanged
        """
        cached = self._cached_token
        if cached and self._clock() < cached.expires_at:
            return cached.token

        if not self.grant_token:
            return None

        if self._pending is None or self._pending.done():
            self._pending = asyncio.ensure_future(self._refresh())
        return await asyncio.shield(self._pending)

    async def _refresh(self) -> str:
        # Sampled before the request so network latency counts against the
        # token lifetime.
        refresh_start = self._clock()
        logger.info("Exchanging grant token for access token")

        tokens = await exchange_grant_token(
            self.settings.token_url,
            self.grant_token,
            timeout=self.settings.request_timeout,
            client=self._client,
        )

        self._cached_token = CachedToken(
            token=tokens.access_token,
            expires_at=refresh_start + tokens.expires_in,
        )
        logger.debug("Access token valid for %.0fs", tokens.expires_in)
        return tokens.access_token

    def clear_cache(self) -> None:
        """Placeholder: publisher tokens are not invalidated yet.

        Publisher accounts cannot log in or out of the client, so there is no
        event that should drop the token. Once they can, this must clear the
        cached token and any exchange in flight.
        """

    def get_status(self) -> dict[str, Any]:
        """Token status summary. Never includes the token itself."""
        cached = self._cached_token
        expires_in = None
        if cached:
            expires_in = max(0.0, cached.expires_at - self._clock())
        return {
            "publisher_configured": bool(self.grant_token),
            "token_cached": cached is not None,
            "valid": bool(cached and self._clock() < cached.expires_at),
            "expires_in_seconds": expires_in,
        }
