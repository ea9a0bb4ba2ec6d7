"""Publish/subscribe bus for session state changes.

Listeners subscribe by event type and are called synchronously, in
subscription order, from within ``publish``.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Callable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UserChanged:
    """The logged-in user differs from the previously known one."""

    initial_load: bool
    userid: str | None


@dataclass(frozen=True)
class GroupsChanged:
    """The list of groups the user belongs to has changed."""

    initial_load: bool


Listener = Callable[[Any], None]


class EventBus:
    """Minimal synchronous event bus.

    Usage:
        bus = EventBus()
        bus.subscribe(UserChanged, lambda event: print(event.userid))
        bus.publish(UserChanged(initial_load=True, userid="acct:bob@example.org"))
    """

    def __init__(self):
        self._listeners: dict[type, list[Listener]] = defaultdict(list)

    def subscribe(self, event_type: type, listener: Listener) -> Callable[[], None]:
        """Register a listener and return a callable that unsubscribes it."""
        self._listeners[event_type].append(listener)

        def unsubscribe() -> None:
            self.unsubscribe(event_type, listener)

        return unsubscribe

    def unsubscribe(self, event_type: type, listener: Listener) -> None:
        listeners = self._listeners.get(event_type, [])
        if listener in listeners:
            listeners.remove(listener)

    def publish(self, event: Any) -> None:
        """Deliver ``event`` to every listener of its type.

        A listener raising does not stop delivery to the rest; the error is
        logged with its traceback.
        """
        listeners = list(self._listeners.get(type(event), []))
        logger.debug("Publishing %s to %d listener(s)", type(event).__name__, len(listeners))
        for listener in listeners:
            try:
                listener(event)
            except Exception:
                logger.exception("Listener %r failed handling %s", listener, type(event).__name__)
