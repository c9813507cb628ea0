"""
Identity component - links an authenticated user to every analytics sink.

Builds the normalized matching payload, sends it with the stable user id to
each registered sink, and caches it for enrichment of later events.

Invariants:
- Payload construction is pure; absent fields are omitted
- Sinks are independent: one failing sink never stops the others
- No retries; sink delivery is best-effort
- Email and phone values are never logged
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from attribution_engine.components.session_gate import SessionState
from attribution_engine.core.ports.sinks import AnalyticsSinkPort
from attribution_engine.core.results import EffectResult
from attribution_engine.rules.models import Rules

from ._impl import build_identity_payload
from .models import (
    DEFAULT_CONFIG,
    IdentityConfig,
    IdentityMatchPayload,
    LinkOutput,
    UserProfile,
)

logger = logging.getLogger(__name__)


def build_identity_config(rules: Rules | None) -> IdentityConfig:
    """Build identity config from rules."""
    if rules is None:
        return DEFAULT_CONFIG

    identity = rules.identity
    return IdentityConfig(
        default_country=identity.default_country,
        phone_country_code=identity.phone.country_code,
        phone_local_lengths=tuple(identity.phone.local_lengths),
        state_codes={k.lower(): v.lower() for k, v in identity.state_codes.items()},
        country_codes={k.lower(): v.lower() for k, v in identity.country_codes.items()},
    )


class IdentityLinker:
    """
    Identity linker service.

    Holds the per-session payload cache; one instance per session.
    """

    def __init__(
        self,
        state: SessionState,
        sinks: Sequence[AnalyticsSinkPort],
        config: IdentityConfig | None = None,
    ) -> None:
        """Initialize service."""
        self._state = state
        self._sinks = list(sinks)
        self._config = config or DEFAULT_CONFIG
        self._cached_payload: IdentityMatchPayload | None = None
        self._linked_user_id: str | None = None

    @property
    def cached_payload(self) -> IdentityMatchPayload | None:
        return self._cached_payload

    def build_payload(self, user: UserProfile) -> IdentityMatchPayload:
        return build_identity_payload(user, self._config)

    def remember(self, user: UserProfile) -> IdentityMatchPayload:
        """Recompute and cache the payload without contacting any sink."""
        payload = self.build_payload(user)
        self._cached_payload = payload
        self._linked_user_id = user.id
        return payload

    def forget(self) -> None:
        """Drop the cached payload (logout)."""
        self._cached_payload = None
        self._linked_user_id = None

    def matching_params(self) -> dict[str, Any]:
        """Cached advanced-matching params for event enrichment."""
        params: dict[str, Any] = {}
        if self._linked_user_id:
            params["external_id"] = self._linked_user_id
        if self._cached_payload is not None:
            params.update(self._cached_payload.as_matching_params())
        return params

    def link(self, user: UserProfile) -> LinkOutput:
        """
        Send identify to every sink.

        Returns:
            LinkOutput with OK, or SINK_ERROR naming the sinks that failed.
        """
        payload = self.remember(user)
        self._state.set_auth_user_id(user.id)

        traits: dict[str, Any] = {
            "analytics_id": self._state.analytics_user_id(),
            "external_id": user.id,
            **payload.as_matching_params(),
        }

        failed: list[str] = []
        for sink in self._sinks:
            try:
                sink.identify(user.id, traits)
            except Exception as e:
                logger.warning("Sink %s failed to identify user: %s", sink.name, e)
                failed.append(sink.name)

        logger.info(
            "Linked user to %d/%d sinks (email=%s, phone=%s, name=%s, location=%s)",
            len(self._sinks) - len(failed),
            len(self._sinks),
            payload.email is not None,
            payload.phone is not None,
            payload.first_name is not None,
            payload.city is not None or payload.state is not None,
        )

        if failed:
            result = EffectResult.sink_error(f"identify failed for: {', '.join(failed)}")
        else:
            result = EffectResult.success()
        return LinkOutput(payload=payload, result=result, failed_sinks=tuple(failed))


# --- Component Entry Points ---


def run_link(
    user: UserProfile,
    *,
    state: SessionState,
    sinks: Sequence[AnalyticsSinkPort],
    rules: Rules | None = None,
) -> LinkOutput:
    """
    Link an authenticated user to all sinks (ungated).

    Args:
        user: Authenticated user record.
        state: Scoped session state.
        sinks: Registered analytics sinks.
        rules: Optional rules for normalization configuration.

    Returns:
        LinkOutput with payload and outcome.
    """
    linker = IdentityLinker(state, sinks, build_identity_config(rules))
    return linker.link(user)
