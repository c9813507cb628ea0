"""
EventBus - named application events with subscribed handlers.

Replaces re-run-on-render reactivity with explicit subscriptions to a small
set of events. Handlers must be idempotent: the host may publish the same
event more than once (re-renders, repeated auth checks).

Key behaviors:
- Handlers run synchronously in subscription order
- A raising handler is logged and does not stop the others
- Publishing never raises into the host application
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

PAGE_LOADED = "page-loaded"
AUTH_RESOLVED = "auth-resolved"

Handler = Callable[[Any], Any]


@dataclass(frozen=True)
class PageLoaded:
    """A page finished loading."""

    page_url: str
    referrer: str | None = None


@dataclass(frozen=True)
class AuthResolved:
    """
    The auth provider settled on a state.

    `user` is the raw user record ({id, email?, ...}) or None when
    unauthenticated.
    """

    user: dict[str, Any] | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None


class EventBus:
    """In-process publish/subscribe for named events."""

    def __init__(self) -> None:
        self._handlers: dict[str, list[Handler]] = defaultdict(list)

    def subscribe(self, event: str, handler: Handler) -> Callable[[], None]:
        """
        Register a handler.

        Returns:
            Callable that removes the subscription.
        """
        self._handlers[event].append(handler)

        def unsubscribe() -> None:
            if handler in self._handlers[event]:
                self._handlers[event].remove(handler)

        return unsubscribe

    def publish(self, event: str, payload: Any = None) -> list[Any]:
        """
        Run every handler for `event`.

        Returns:
            Handler return values, in order; None for handlers that raised.
        """
        results: list[Any] = []
        for handler in list(self._handlers.get(event, ())):
            try:
                results.append(handler(payload))
            except Exception:
                logger.exception("Handler for %s failed", event)
                results.append(None)
        return results

    def handler_count(self, event: str) -> int:
        return len(self._handlers.get(event, ()))
