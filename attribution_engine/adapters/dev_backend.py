"""
Dev Attribution Backend.

Records payloads in memory instead of sending them.
Used for local development and testing.

Key behaviors:
- Stores every delivered payload for test assertions
- `fail_with` makes every send raise DeliveryError (simulated outage)
- Logs deliveries without the payload values
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from attribution_engine.core.ports.backend import DeliveryError

logger = logging.getLogger(__name__)


@dataclass
class DeliveredPayload:
    """Record of a delivered payload for test assertions."""

    payload: dict[str, Any]
    delivered_at: datetime


@dataclass
class InMemoryAttributionBackend:
    """
    Dev backend that records instead of sending.

    Implements AttributionBackendPort protocol.
    """

    delivered: list[DeliveredPayload] = field(default_factory=list)
    fail_with: str | None = None  # Error message to raise on every send
    attempts: int = 0

    def send_traffic_source(self, payload: dict[str, Any]) -> None:
        self.attempts += 1
        if self.fail_with is not None:
            raise DeliveryError(self.fail_with)

        self.delivered.append(DeliveredPayload(payload=dict(payload), delivered_at=datetime.now(UTC)))
        logger.info("Dev backend received traffic source (%d fields)", len(payload))
