"""
Tracking component models.
"""

from __future__ import annotations

from concurrent.futures import Future
from dataclasses import dataclass
from typing import Any

from attribution_engine.core.results import EffectResult


@dataclass(frozen=True)
class TrackingConfig:
    """Event tracking configuration."""

    login_event: str = "login"
    login_method: str = "session_auth"


DEFAULT_CONFIG = TrackingConfig()


@dataclass(frozen=True)
class TrackOutput:
    """Result of sending one event to every sink."""

    event: str
    properties: dict[str, Any]
    result: EffectResult
    failed_sinks: tuple[str, ...] = ()


@dataclass(frozen=True)
class AuthOutput:
    """
    Result of handling an auth-resolved event.

    `transitioned` is False when the event did not move the session from
    unauthenticated to authenticated; every effect is then SKIPPED.

    `traffic_source` is FIRING when the dispatch was handed to the worker;
    `dispatch` then resolves to its final result.
    """

    transitioned: bool
    identity: EffectResult
    login: EffectResult
    traffic_source: EffectResult
    dispatch: Future[EffectResult] | None = None

    @classmethod
    def no_transition(cls, reason: str) -> AuthOutput:
        skipped = EffectResult.skipped(reason)
        return cls(
            transitioned=False,
            identity=skipped,
            login=skipped,
            traffic_source=skipped,
        )
