"""OAuth grant token exchange for publisher accounts."""

from .client import JWT_BEARER_GRANT_TYPE, AccessToken, exchange_grant_token

__all__ = [
    "AccessToken",
    "JWT_BEARER_GRANT_TYPE",
    "exchange_grant_token",
]
