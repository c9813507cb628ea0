"""
Logging Analytics Sink.

Logs identify/track calls instead of forwarding them to a provider.
Used for local development and testing.

Key behaviors:
- Logs call names and payload keys, never payload values (PII)
- Stores calls in memory for test assertions
- Can be told to raise SinkError to exercise sink-isolation paths
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from attribution_engine.core.ports.sinks import SinkError

logger = logging.getLogger(__name__)


@dataclass
class SinkCall:
    """Record of a sink call for test assertions."""

    kind: str  # "identify" or "track"
    name: str  # user id for identify, event name for track
    payload: dict[str, Any]
    called_at: datetime


@dataclass
class LoggingAnalyticsSink:
    """
    Dev sink that logs instead of sending.

    Implements AnalyticsSinkPort protocol.
    """

    sink_name: str = "log"
    calls: list[SinkCall] = field(default_factory=list)

    # Configuration
    log_level: int = logging.INFO
    fail: bool = False

    @property
    def name(self) -> str:
        return self.sink_name

    def identify(self, user_id: str, traits: dict[str, Any]) -> None:
        self._record("identify", user_id, traits)

    def track(self, event: str, properties: dict[str, Any]) -> None:
        self._record("track", event, properties)

    def _record(self, kind: str, name: str, payload: dict[str, Any]) -> None:
        if self.fail:
            raise SinkError(self.sink_name, f"{kind} rejected")

        self.calls.append(
            SinkCall(kind=kind, name=name, payload=dict(payload), called_at=datetime.now(UTC))
        )
        logger.log(
            self.log_level,
            "[%s] %s %s keys=%s",
            self.sink_name,
            kind,
            name,
            sorted(payload),
        )

    # --- Test helpers ---

    def identifies(self) -> list[SinkCall]:
        return [c for c in self.calls if c.kind == "identify"]

    def events(self, name: str | None = None) -> list[SinkCall]:
        return [c for c in self.calls if c.kind == "track" and (name is None or c.name == name)]
