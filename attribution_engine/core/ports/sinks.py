"""
Analytics Sink Interface.

Protocol-based interface for third-party analytics providers (tag managers,
pixels). Each sink is opaque: this package only guarantees that every sink
receives the same logical payload once.
"""

from __future__ import annotations

from typing import Any, Protocol


class SinkError(Exception):
    """A sink rejected or failed to process a call."""

    def __init__(self, sink_name: str, message: str) -> None:
        self.sink_name = sink_name
        super().__init__(f"[{sink_name}] {message}")


class AnalyticsSinkPort(Protocol):
    """Analytics provider port."""

    @property
    def name(self) -> str:
        """Stable provider name used in logs and results."""
        ...

    def identify(self, user_id: str, traits: dict[str, Any]) -> None:
        """Associate the current visitor with a known user."""
        ...

    def track(self, event: str, properties: dict[str, Any]) -> None:
        """Send a named event with arbitrary properties."""
        ...
