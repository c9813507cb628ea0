"""
HTTP Attribution Backend.

Implements AttributionBackendPort by POSTing the traffic-source payload as
JSON to the ingest endpoint. Any 2xx response is confirmed delivery; the
response body is ignored.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from attribution_engine.core.ports.backend import DeliveryError

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT = "/api/user/traffic-source"


class HttpAttributionBackend:
    """httpx implementation of AttributionBackendPort."""

    def __init__(
        self,
        base_url: str,
        *,
        endpoint: str = DEFAULT_ENDPOINT,
        timeout_seconds: float = 10.0,
        headers: dict[str, str] | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        """
        Initialize the backend client.

        Args:
            base_url: Scheme and host of the application API
            endpoint: Ingest path, joined to base_url
            timeout_seconds: Per-request timeout
            headers: Extra headers (session cookie, CSRF token)
            client: Pre-built client (tests inject one with a MockTransport)
        """
        self.endpoint = endpoint
        self._client = client or httpx.Client(
            base_url=base_url,
            timeout=timeout_seconds,
            headers=headers,
        )

    def send_traffic_source(self, payload: dict[str, Any]) -> None:
        try:
            response = self._client.post(self.endpoint, json=payload)
        except httpx.HTTPError as e:
            raise DeliveryError(f"Request to {self.endpoint} failed: {e}") from e

        if not response.is_success:
            raise DeliveryError(
                f"Ingest endpoint returned {response.status_code}",
                status_code=response.status_code,
            )

        logger.debug("Traffic source delivered (%s)", response.status_code)

    def close(self) -> None:
        self._client.close()
