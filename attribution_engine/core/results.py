"""
Typed outcomes for side-effecting operations.

Storage, sink and network failures are returned as values so callers can
ignore them (telemetry must never break navigation) while tests can still
assert on every failure path.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Outcome(str, Enum):
    """Result status of a gated effect or storage operation."""

    OK = "ok"
    SKIPPED = "skipped"  # Gate already set, record already present, nothing to do
    FIRING = "firing"  # Submitted to a worker; the outcome arrives later
    STORAGE_UNAVAILABLE = "storage_unavailable"
    NETWORK_ERROR = "network_error"
    SINK_ERROR = "sink_error"  # At least one analytics sink failed
    FAILED = "failed"  # Unexpected error inside an effect


@dataclass(frozen=True)
class EffectResult:
    """Result of a single operation."""

    status: Outcome
    error: str | None = None
    reason: str | None = None  # Why a SKIPPED result was skipped

    @property
    def ok(self) -> bool:
        return self.status == Outcome.OK

    @classmethod
    def success(cls) -> EffectResult:
        return cls(status=Outcome.OK)

    @classmethod
    def skipped(cls, reason: str) -> EffectResult:
        return cls(status=Outcome.SKIPPED, reason=reason)

    @classmethod
    def firing(cls) -> EffectResult:
        return cls(status=Outcome.FIRING)

    @classmethod
    def storage_unavailable(cls, error: str) -> EffectResult:
        return cls(status=Outcome.STORAGE_UNAVAILABLE, error=error)

    @classmethod
    def network_error(cls, error: str) -> EffectResult:
        return cls(status=Outcome.NETWORK_ERROR, error=error)

    @classmethod
    def sink_error(cls, error: str) -> EffectResult:
        return cls(status=Outcome.SINK_ERROR, error=error)

    @classmethod
    def failed(cls, error: str) -> EffectResult:
        return cls(status=Outcome.FAILED, error=error)
