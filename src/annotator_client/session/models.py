"""Session state records as returned by the session and profile endpoints."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

_GROUP_KEYS = {"id", "name", "public", "url"}
_SESSION_KEYS = {"userid", "csrf", "groups", "preferences", "features", "errors", "reason"}


@dataclass
class Group:
    """A group the current user can annotate in."""

    id: str
    name: str = ""
    public: bool = False
    url: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        data = {"id": self.id, "name": self.name, "public": self.public}
        if self.url is not None:
            data["url"] = self.url
        data.update(self.extra)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Group":
        return cls(
            id=data.get("id", ""),
            name=data.get("name", ""),
            public=bool(data.get("public", False)),
            url=data.get("url"),
            extra={k: v for k, v in data.items() if k not in _GROUP_KEYS},
        )


@dataclass
class SessionModel:
    """Client-side view of the server session.

    An empty model (no ``csrf``) is what the store holds before the first
    successful load.
    """

    userid: str | None = None
    csrf: str | None = None
    groups: list[Group] = field(default_factory=list)
    preferences: dict[str, Any] = field(default_factory=dict)
    features: dict[str, bool] = field(default_factory=dict)
    errors: Any = None
    reason: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def is_logged_in(self) -> bool:
        return self.userid is not None

    def to_dict(self) -> dict[str, Any]:
        """Convert to the wire format."""
        data: dict[str, Any] = {
            "userid": self.userid,
            "csrf": self.csrf,
            "groups": [g.to_dict() for g in self.groups],
            "preferences": dict(self.preferences),
            "features": dict(self.features),
        }
        if self.errors is not None:
            data["errors"] = self.errors
        if self.reason is not None:
            data["reason"] = self.reason
        data.update(self.extra)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "SessionModel":
        """Create from a server payload. Missing keys take empty defaults."""
        data = data or {}
        return cls(
            userid=data.get("userid"),
            csrf=data.get("csrf"),
            groups=[Group.from_dict(g) for g in data.get("groups") or []],
            preferences=dict(data.get("preferences") or {}),
            features=dict(data.get("features") or {}),
            errors=data.get("errors"),
            reason=data.get("reason"),
            extra={k: v for k, v in data.items() if k not in _SESSION_KEYS},
        )
