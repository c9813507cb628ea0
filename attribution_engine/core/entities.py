"""
Core entities shared by the attribution components.

AttributionRecord is the first-touch record captured on the first page load
of a storage lifetime. Its storage and wire layouts use the camelCase names
the ingest endpoint expects.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime
from typing import Any

# Record field -> storage/wire key
_WIRE_KEYS = {
    "source": "trafficSource",
    "medium": "trafficMedium",
    "campaign": "trafficCampaign",
    "content": "trafficContent",
    "term": "trafficTerm",
    "gclid": "gclid",
    "fbclid": "fbclid",
}


@dataclass(frozen=True)
class AttributionRecord:
    """First-touch attribution record."""

    source: str
    medium: str
    landing_page: str
    captured_at: datetime
    campaign: str | None = None
    content: str | None = None
    term: str | None = None
    gclid: str | None = None
    fbclid: str | None = None
    referrer: str | None = None

    @property
    def click_ids(self) -> dict[str, str]:
        """Paid-click identifiers present on the landing URL."""
        ids = {"gclid": self.gclid, "fbclid": self.fbclid}
        return {k: v for k, v in ids.items() if v}

    def to_api_payload(self) -> dict[str, str]:
        """Backend payload; absent values are omitted."""
        payload: dict[str, str] = {}
        for attr, wire_key in _WIRE_KEYS.items():
            value = getattr(self, attr)
            if value:
                payload[wire_key] = value
        return payload

    def is_sendable(self) -> bool:
        """The ingest endpoint requires a source or a click id."""
        payload = self.to_api_payload()
        return any(payload.get(k) for k in ("trafficSource", "gclid", "fbclid"))

    def to_storage(self) -> dict[str, Any]:
        data: dict[str, Any] = self.to_api_payload()
        data["landingPage"] = self.landing_page
        if self.referrer:
            data["referrer"] = self.referrer
        data["capturedAt"] = self.captured_at.isoformat()
        return data

    def to_json(self) -> str:
        return json.dumps(self.to_storage(), sort_keys=True)

    @classmethod
    def from_storage(cls, data: dict[str, Any]) -> AttributionRecord:
        """
        Build a record from its storage layout.

        Raises:
            ValueError: If required fields are missing or malformed
        """
        if not isinstance(data, dict):
            raise ValueError("Attribution record must be a JSON object")

        source = data.get("trafficSource")
        medium = data.get("trafficMedium")
        captured_at = data.get("capturedAt")
        if not source or not medium or not captured_at:
            raise ValueError("Attribution record is missing required fields")

        return cls(
            source=source,
            medium=medium,
            landing_page=data.get("landingPage") or "/",
            captured_at=datetime.fromisoformat(str(captured_at)),
            campaign=data.get("trafficCampaign") or None,
            content=data.get("trafficContent") or None,
            term=data.get("trafficTerm") or None,
            gclid=data.get("gclid") or None,
            fbclid=data.get("fbclid") or None,
            referrer=data.get("referrer") or None,
        )

    @classmethod
    def from_json(cls, raw: str) -> AttributionRecord:
        """
        Parse a stored JSON blob.

        Raises:
            ValueError: On invalid JSON or an invalid record
        """
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid attribution record JSON: {e}") from e
        return cls.from_storage(data)
