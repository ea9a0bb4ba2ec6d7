"""Publisher account authentication.

Usage:
    from annotator_client.auth import TokenManager

    manager = TokenManager()
    token = await manager.get_token()
"""

from .manager import CachedToken, TokenManager

__all__ = [
    "CachedToken",
    "TokenManager",
]
