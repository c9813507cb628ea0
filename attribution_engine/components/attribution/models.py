"""
Attribution component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass

from attribution_engine.core.entities import AttributionRecord
from attribution_engine.core.results import EffectResult


@dataclass(frozen=True)
class CaptureInput:
    """A page load to attribute."""

    page_url: str
    referrer: str | None = None


@dataclass(frozen=True)
class CaptureOutput:
    """
    Result of a capture.

    `record` is the record in the store after the call: the new one when
    captured, the pre-existing one when skipped, None when storage failed.
    """

    record: AttributionRecord | None
    captured: bool
    result: EffectResult


@dataclass(frozen=True)
class ReadOutput:
    """Result of reading the stored record."""

    record: AttributionRecord | None
    result: EffectResult
