"""HTTP transport for the session and profile endpoints."""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable

import httpx

from ..config import ClientSettings
from ..errors import ApplicationError, TransientFetchError
from .models import SessionModel

logger = logging.getLogger(__name__)

TokenGetter = Callable[[], Awaitable[str | None]]


class SessionAPI:
    """Client for the ``/app`` session endpoint.

    ``headers`` is sent with every request. The session cache writes the
    CSRF token into it, so pass the same dict the cache owns.

    Usage:
        async with SessionAPI(settings) as api:
            response = await api.load()
    """

    def __init__(
        self,
        settings: ClientSettings,
        headers: dict[str, str] | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self.settings = settings
        self.headers = headers if headers is not None else {}
        # Cookies set by the service persist in this client's jar.
        self._client = client or httpx.AsyncClient(timeout=settings.request_timeout)

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        await self.close()

    async def close(self):
        """Close the HTTP client."""
        await self._client.aclose()

    async def request(
        self,
        method: str = "GET",
        formid: str | None = None,
        json: dict[str, Any] | None = None,
        path: str = "",
    ) -> httpx.Response:
        """Send a request to the session endpoint and return the raw response.

        Raises:
            TransientFetchError: If the request never got a response
        """
        url = self.settings.session_url
        if path:
            url = f"{url}/{path.lstrip('/')}"
        params = {"__formid__": formid} if formid else None

        try:
            response = await self._client.request(
                method=method,
                url=url,
                params=params,
                json=json,
                headers=self.headers,
            )
        except httpx.TransportError as e:
            raise TransientFetchError(f"Session request failed: {e}") from e

        logger.debug("%s %s -> %d", method, url, response.status_code)
        return response

    async def load(self) -> httpx.Response:
        return await self.request("GET")

    async def login(self, username: str, password: str) -> httpx.Response:
        return await self.request(
            "POST",
            formid="login",
            json={"username": username, "password": password},
        )

    async def logout(self) -> httpx.Response:
        return await self.request("POST", formid="logout", json={})


class ProfileAPI:
    """Client for the API ``/profile`` endpoint.

    Used instead of the session endpoint when the client is embedded for a
    third-party authority. Requests carry the publisher access token when
    ``token_getter`` returns one.
    """

    def __init__(
        self,
        settings: ClientSettings,
        token_getter: TokenGetter | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self.settings = settings
        self._token_getter = token_getter
        self._client = client or httpx.AsyncClient(timeout=settings.request_timeout)

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        await self.close()

    async def close(self):
        """Close the HTTP client."""
        await self._client.aclose()

    async def read(self, authority: str | None = None) -> SessionModel:
        """Fetch the profile, scoped to ``authority`` when given."""
        params = {"authority": authority} if authority else None
        data = await self._request("GET", params=params)
        return SessionModel.from_dict(data)

    async def update(self, preferences: dict[str, Any]) -> SessionModel:
        """Update profile preferences and return the resulting profile."""
        data = await self._request("PATCH", json={"preferences": preferences})
        return SessionModel.from_dict(data)

    async def _request(
        self,
        method: str,
        params: dict | None = None,
        json: dict | None = None,
    ) -> dict[str, Any]:
        headers = {}
        if self._token_getter:
            token = await self._token_getter()
            if token:
                headers["Authorization"] = f"Bearer {token}"

        try:
            response = await self._client.request(
                method=method,
                url=self.settings.profile_url,
                params=params,
                json=json,
                headers=headers,
            )
        except httpx.TransportError as e:
            raise TransientFetchError(f"Profile request failed: {e}") from e

        raise_for_status(response)
        if not response.content:
            return {}
        try:
            data = response.json()
        except ValueError as e:
            raise ApplicationError(f"Invalid profile response: {e}", response.status_code) from e
        if not isinstance(data, dict):
            raise ApplicationError(
                "Invalid profile response: expected a JSON object", response.status_code
            )
        return data


def raise_for_status(response: httpx.Response) -> None:
    """Map an unsuccessful response onto the error taxonomy.

    Raises:
        TransientFetchError: For 5xx responses
        ApplicationError: For 4xx responses, with any error payload attached
    """
    status = response.status_code
    if status >= 500:
        raise TransientFetchError(f"Server error: {status}", status)
    if status >= 400:
        try:
            data = response.json() if response.content else {}
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}
        model = SessionModel(errors=data.get("errors"), reason=data.get("reason"))
        raise ApplicationError(f"Request rejected: {status}", status, model=model)
