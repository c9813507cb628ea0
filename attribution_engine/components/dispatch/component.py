"""
Dispatch component - forwards the first-touch record to the backend.

Fire-and-forget delivery: no retry loop, no exception escapes. The stored
record is cleared only on confirmed delivery, so a failed send leaves it in
place for the next qualifying trigger.

Invariants:
- Success clears the record (the gate is set by the caller's SessionGate)
- Failure leaves record untouched and returns NETWORK_ERROR, whatever the
  backend raised
- Records with neither a source nor a click id are never sent
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from attribution_engine.components.session_gate import SessionState
from attribution_engine.core.ports.backend import AttributionBackendPort, DeliveryError
from attribution_engine.core.results import EffectResult
from attribution_engine.rules.models import Rules

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DispatchConfig:
    """Backend dispatch configuration."""

    base_url: str = "http://localhost:5000"
    endpoint: str = "/api/user/traffic-source"
    timeout_seconds: float = 10.0


DEFAULT_CONFIG = DispatchConfig()


def build_dispatch_config(rules: Rules | None) -> DispatchConfig:
    """Build dispatch config from rules."""
    if rules is None:
        return DEFAULT_CONFIG

    return DispatchConfig(
        base_url=rules.dispatch.base_url,
        endpoint=rules.dispatch.endpoint,
        timeout_seconds=rules.dispatch.timeout_seconds,
    )


class TrafficSourceDispatcher:
    """Sends the stored attribution record to the backend once."""

    def __init__(
        self,
        state: SessionState,
        backend: AttributionBackendPort,
    ) -> None:
        self._state = state
        self._backend = backend

    def dispatch(self) -> EffectResult:
        """
        Send the stored record.

        Returns:
            OK on confirmed delivery, SKIPPED with no sendable record,
            NETWORK_ERROR or STORAGE_UNAVAILABLE otherwise.
        """
        record, read_result = self._state.read_record()
        if record is None:
            if not read_result.ok:
                return read_result
            return EffectResult.skipped("no_record")

        if not record.is_sendable():
            return EffectResult.skipped("record_not_sendable")

        try:
            self._backend.send_traffic_source(record.to_api_payload())
        except DeliveryError as e:
            logger.error("Failed to send traffic source: %s", e)
            return EffectResult.network_error(str(e))
        except Exception as e:
            logger.exception("Unexpected error sending traffic source")
            return EffectResult.network_error(str(e))

        cleared = self._state.remove_record()
        if not cleared.ok:
            # Delivered; the gate still stops a re-send
            logger.warning("Delivered traffic source but could not clear it: %s", cleared.error)

        logger.info("Traffic source sent (%s / %s)", record.source, record.medium)
        return EffectResult.success()


# --- Component Entry Points ---


def run_dispatch(
    *,
    state: SessionState,
    backend: AttributionBackendPort,
) -> EffectResult:
    """
    Send the stored attribution record to the backend (ungated).

    Args:
        state: Scoped session state.
        backend: Attribution backend port.

    Returns:
        EffectResult describing the delivery.
    """
    return TrafficSourceDispatcher(state, backend).dispatch()
