"""Interpretation of raw session endpoint responses.

``process_response`` is a pure function: it never touches cache state or
dispatches notices. The caller decides what to do with the envelope.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from ..errors import ApplicationError
from .models import SessionModel


@dataclass
class ParsedEnvelope:
    """A structured application response from the session endpoint."""

    model: SessionModel
    status_code: int = 200
    flash: list[tuple[str, str]] = field(default_factory=list)

    @property
    def is_error(self) -> bool:
        return self.status_code >= 400


def process_response(body: str | bytes | dict[str, Any] | None, status_code: int) -> ParsedEnvelope | None:
    """Parse a session endpoint response.

    Statuses outside [200, 500) are transport failures and yield None.

    Raises:
        ApplicationError: If a response in the parse range has a body that
            is not a JSON object.
    """
    if status_code < 200 or status_code >= 500:
        return None

    data = _decode(body, status_code)

    model = SessionModel.from_dict(data.get("model") or {})
    if "errors" in data:
        model.errors = data["errors"]
    if "reason" in data:
        model.reason = data["reason"]

    flash: list[tuple[str, str]] = []
    raw_flash = data.get("flash")
    if isinstance(raw_flash, dict):
        for kind, messages in raw_flash.items():
            if isinstance(messages, str):
                messages = [messages]
            elif not isinstance(messages, list):
                continue
            for message in messages:
                flash.append((kind, message))

    return ParsedEnvelope(model=model, status_code=status_code, flash=flash)


def _decode(body: str | bytes | dict[str, Any] | None, status_code: int) -> dict[str, Any]:
    if isinstance(body, dict):
        return body
    if not body:
        return {}
    try:
        data = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ApplicationError(f"Invalid session response: {e}", status_code) from e
    if not isinstance(data, dict):
        raise ApplicationError("Invalid session response: expected a JSON object", status_code)
    return data
