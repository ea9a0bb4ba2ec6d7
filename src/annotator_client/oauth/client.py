"""JWT bearer grant exchange for publisher accounts.

A grant token embedded by the publisher is exchanged for an opaque
access token. See https://tools.ietf.org/html/rfc7523#section-4
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import httpx

from ..errors import TokenExchangeError

JWT_BEARER_GRANT_TYPE = "urn:ietf:params:oauth:grant-type:jwt-bearer"


@dataclass
class AccessToken:
    """Access token returned by the token endpoint."""

    access_token: str
    expires_in: float  # seconds


async def exchange_grant_token(
    token_url: str,
    grant_token: str,
    timeout: float = 30.0,
    client: httpx.AsyncClient | None = None,
) -> AccessToken:
    """Exchange a JWT grant token for an access token.

    Args:
        token_url: The API's ``/token`` endpoint
        grant_token: Grant token issued to the publisher
        timeout: Request timeout in seconds
        client: Existing client to send the request with

    Returns:
        AccessToken with the token and its lifetime

    Raises:
        TokenExchangeError: If the endpoint does not answer 200 or the
            response lacks the token fields
    """
    if client is not None:
        response = await _post_grant(client, token_url, grant_token)
    else:
        async with httpx.AsyncClient(timeout=timeout) as owned:
            response = await _post_grant(owned, token_url, grant_token)

    if response.status_code != 200:
        try:
            error_data = response.json() if response.content else {}
        except ValueError:
            error_data = {"raw_response": response.text[:500]}
        if not isinstance(error_data, dict):
            error_data = {"raw_response": response.text[:500]}
        raise TokenExchangeError(
            f"Failed to retrieve access token: {response.status_code}",
            status_code=response.status_code,
            error_code=error_data.get("error", "exchange_failed"),
            details=error_data,
        )

    try:
        data = response.json()
    except ValueError as e:
        raise TokenExchangeError(
            f"Invalid token response: {e}",
            status_code=response.status_code,
            error_code="invalid_response",
            details={"raw_response": response.text[:500]},
        ) from e
    return _parse_token_response(data)


async def _post_grant(client: httpx.AsyncClient, token_url: str, grant_token: str) -> httpx.Response:
    return await client.post(
        token_url,
        data={
            "grant_type": JWT_BEARER_GRANT_TYPE,
            "assertion": grant_token,
        },
        headers={"Content-Type": "application/x-www-form-urlencoded"},
    )


def _parse_token_response(data: dict[str, Any]) -> AccessToken:
    try:
        return AccessToken(
            access_token=data["access_token"],
            expires_in=float(data["expires_in"]),
        )
    except (KeyError, TypeError, ValueError) as e:
        keys = list(data.keys()) if isinstance(data, dict) else []
        raise TokenExchangeError(
            f"Invalid token response: {e}",
            error_code="invalid_response",
            details={"response_keys": keys},
        ) from e
