"""
Attribution Backend Interface.

Protocol-based interface for the attribution-ingest endpoint.
The endpoint is opaque: delivery either succeeds or fails, no response body
contract is assumed.

Implementation strategies:
1. HttpAttributionBackend: POSTs JSON over httpx
2. InMemoryAttributionBackend: Records payloads (dev/test)
"""

from __future__ import annotations

from typing import Any, Protocol


class DeliveryError(Exception):
    """Attribution payload was not confirmed delivered."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class AttributionBackendPort(Protocol):
    """Backend port for forwarding the captured traffic source."""

    def send_traffic_source(self, payload: dict[str, Any]) -> None:
        """
        Deliver the traffic-source payload.

        Args:
            payload: camelCase record fields (trafficSource, trafficMedium, ...)

        Raises:
            DeliveryError: On transport failure or a non-success response
        """
        ...
