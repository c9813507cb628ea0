"""
Session gate component - scoped state and at-most-once effect gating.

Holds every persisted value behind one explicit SessionState object with two
scopes (long-lived and session), and runs gated effects through SessionGate.

Invariants:
- A gate flag, once set, is never cleared within its scope
- A gated effect is skipped when its flag is set
- The flag is set only when the effect reports success
- Storage failures read as "flag unset" / "no record" and never raise
- In-flight effects are tracked in memory only (FIRING is not persisted)

Races across processes sharing the long-lived store are not guarded:
two processes can both observe "unset" and both fire.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from concurrent.futures import Executor, Future
from uuid import uuid4

from attribution_engine.core.entities import AttributionRecord
from attribution_engine.core.ports.storage import (
    KeyValueStorePort,
    StorageScope,
    StorageUnavailableError,
)
from attribution_engine.core.results import EffectResult, Outcome
from attribution_engine.rules.models import Rules

from .models import (
    DEFAULT_KEYS,
    FLAG_VALUE,
    GATE_SCOPES,
    Gate,
    GateSnapshot,
    StorageKeys,
)

logger = logging.getLogger(__name__)

# Outcomes that complete a best-effort effect (some sinks may have failed)
BEST_EFFORT = frozenset({Outcome.OK, Outcome.SINK_ERROR})


class SessionState:
    """
    Explicit scoped client state.

    long_lived: attribution record, traffic_source_sent, analytics_linked,
                analytics user id, auth user id, locale
    session:    login_tracked, analytics session id
    """

    def __init__(
        self,
        long_lived: KeyValueStorePort,
        session: KeyValueStorePort,
        keys: StorageKeys | None = None,
    ) -> None:
        self._stores = {
            StorageScope.LONG_LIVED: long_lived,
            StorageScope.SESSION: session,
        }
        self.keys = keys or DEFAULT_KEYS
        # Fallback ids when storage cannot persist them
        self._ephemeral: dict[str, str] = {}

    @property
    def long_lived(self) -> KeyValueStorePort:
        return self._stores[StorageScope.LONG_LIVED]

    @property
    def session(self) -> KeyValueStorePort:
        return self._stores[StorageScope.SESSION]

    # --- Raw access ---

    def _read(self, scope: StorageScope, key: str) -> tuple[str | None, EffectResult]:
        try:
            return self._stores[scope].get(key), EffectResult.success()
        except StorageUnavailableError as e:
            logger.warning("Storage read failed for %s: %s", key, e)
            return None, EffectResult.storage_unavailable(str(e))

    def _write(self, scope: StorageScope, key: str, value: str) -> EffectResult:
        try:
            self._stores[scope].set(key, value)
            return EffectResult.success()
        except StorageUnavailableError as e:
            logger.warning("Storage write failed for %s: %s", key, e)
            return EffectResult.storage_unavailable(str(e))

    def _delete(self, scope: StorageScope, key: str) -> EffectResult:
        try:
            self._stores[scope].remove(key)
            return EffectResult.success()
        except StorageUnavailableError as e:
            logger.warning("Storage remove failed for %s: %s", key, e)
            return EffectResult.storage_unavailable(str(e))

    # --- Attribution record ---

    def read_record(self) -> tuple[AttributionRecord | None, EffectResult]:
        """Stored attribution record. A corrupt blob reads as no record."""
        raw, result = self._read(StorageScope.LONG_LIVED, self.keys.attribution_record)
        if raw is None:
            return None, result

        try:
            return AttributionRecord.from_json(raw), result
        except ValueError as e:
            logger.warning("Ignoring unreadable attribution record: %s", e)
            return None, result

    def write_record(self, record: AttributionRecord) -> EffectResult:
        return self._write(
            StorageScope.LONG_LIVED, self.keys.attribution_record, record.to_json()
        )

    def remove_record(self) -> EffectResult:
        return self._delete(StorageScope.LONG_LIVED, self.keys.attribution_record)

    # --- Gate flags ---

    def is_set(self, gate: Gate) -> tuple[bool, EffectResult]:
        raw, result = self._read(GATE_SCOPES[gate], self.keys.for_gate(gate))
        return raw == FLAG_VALUE, result

    def mark(self, gate: Gate) -> EffectResult:
        return self._write(GATE_SCOPES[gate], self.keys.for_gate(gate), FLAG_VALUE)

    def reset(self, gate: Gate) -> EffectResult:
        """Start a new scope for one gate (support tooling only)."""
        return self._delete(GATE_SCOPES[gate], self.keys.for_gate(gate))

    def snapshot(self) -> GateSnapshot:
        return GateSnapshot(
            login_tracked=self.is_set(Gate.LOGIN_TRACKED)[0],
            traffic_source_sent=self.is_set(Gate.TRAFFIC_SOURCE_SENT)[0],
            analytics_linked=self.is_set(Gate.ANALYTICS_LINKED)[0],
        )

    # --- Anonymous ids ---

    def _get_or_create_id(self, scope: StorageScope, key: str) -> str:
        existing, result = self._read(scope, key)
        if existing:
            return existing
        if key in self._ephemeral:
            return self._ephemeral[key]

        new_id = str(uuid4())
        if result.ok and self._write(scope, key, new_id).ok:
            return new_id

        # Storage is down: keep the id stable for this process at least
        self._ephemeral[key] = new_id
        return new_id

    def analytics_user_id(self) -> str:
        """Persistent anonymous analytics id (long-lived)."""
        return self._get_or_create_id(StorageScope.LONG_LIVED, self.keys.analytics_user_id)

    def analytics_session_id(self) -> str:
        """Per-session analytics id (session scope)."""
        return self._get_or_create_id(StorageScope.SESSION, self.keys.analytics_session_id)

    def get_auth_user_id(self) -> str | None:
        return self._read(StorageScope.LONG_LIVED, self.keys.auth_user_id)[0]

    def set_auth_user_id(self, user_id: str) -> EffectResult:
        return self._write(StorageScope.LONG_LIVED, self.keys.auth_user_id, user_id)

    # --- Locale ---

    def get_locale(self) -> str | None:
        return self._read(StorageScope.LONG_LIVED, self.keys.locale)[0]

    def set_locale(self, locale: str) -> EffectResult:
        return self._write(StorageScope.LONG_LIVED, self.keys.locale, locale)


class SessionGate:
    """
    Runs effects at most once per gate scope.

    Check-and-mark-in-flight happens under a lock so two calls in the same
    process cannot both fire. The persisted flag is written after the
    effect reports success, on whichever thread ran the effect.
    """

    def __init__(self, state: SessionState) -> None:
        self._state = state
        self._lock = threading.Lock()
        self._in_flight: set[Gate] = set()
        self._fired: set[Gate] = set()

    @property
    def state(self) -> SessionState:
        return self._state

    def is_open(self, gate: Gate) -> bool:
        """True when the effect for this gate may still fire."""
        if gate in self._fired or gate in self._in_flight:
            return False
        return not self._state.is_set(gate)[0]

    def run_once(
        self,
        gate: Gate,
        effect: Callable[[], EffectResult],
        completes_on: frozenset[Outcome] = frozenset({Outcome.OK}),
    ) -> EffectResult:
        """
        Fire `effect` unless its gate is already set.

        Args:
            gate: Gate guarding the effect.
            effect: Callable returning the effect's outcome.
            completes_on: Outcomes that count as "fired" and set the flag.
                Best-effort effects pass SINK_ERROR here as well.

        Returns:
            SKIPPED if the gate is set or the effect is in flight,
            otherwise the effect's own result. A completed effect whose flag
            could not be persisted returns STORAGE_UNAVAILABLE.
        """
        skipped = self._begin(gate)
        if skipped is not None:
            return skipped
        return self._complete(gate, effect, completes_on)

    def submit_once(
        self,
        gate: Gate,
        effect: Callable[[], EffectResult],
        executor: Executor,
        completes_on: frozenset[Outcome] = frozenset({Outcome.OK}),
    ) -> tuple[EffectResult, Future[EffectResult] | None]:
        """
        Like run_once, but the effect and the flag write run on `executor`.

        The gate is in flight from submission until the worker finishes, so
        a second call in the meantime is SKIPPED with reason "in_flight".

        Returns:
            (SKIPPED, None) when the gate is set or in flight, otherwise
            (FIRING, future) where the future resolves to what run_once
            would have returned.
        """
        skipped = self._begin(gate)
        if skipped is not None:
            return skipped, None

        try:
            future = executor.submit(self._complete, gate, effect, completes_on)
        except RuntimeError:
            # Executor already shut down
            with self._lock:
                self._in_flight.discard(gate)
            raise

        logger.debug("Gate %s submitted", gate.value)
        return EffectResult.firing(), future

    def _begin(self, gate: Gate) -> EffectResult | None:
        """Mark the gate in flight, or return the SKIPPED result."""
        with self._lock:
            if gate in self._fired:
                return EffectResult.skipped("gate_set")
            if gate in self._in_flight:
                return EffectResult.skipped("in_flight")
            already_set, _ = self._state.is_set(gate)
            if already_set:
                self._fired.add(gate)
                logger.debug("Gate %s already set, skipping", gate.value)
                return EffectResult.skipped("gate_set")
            self._in_flight.add(gate)
        return None

    def _complete(
        self,
        gate: Gate,
        effect: Callable[[], EffectResult],
        completes_on: frozenset[Outcome],
    ) -> EffectResult:
        """Run an in-flight effect, then persist its flag on completion."""
        result: EffectResult | None = None
        try:
            result = effect()
        finally:
            with self._lock:
                self._in_flight.discard(gate)
                if result is not None and result.status in completes_on:
                    self._fired.add(gate)

        if result.status not in completes_on:
            return result

        marked = self._state.mark(gate)
        if not marked.ok:
            return marked

        logger.info("Gate %s fired", gate.value)
        return result


def build_storage_keys(rules: Rules | None) -> StorageKeys:
    """Build storage key names from rules."""
    if rules is None:
        return DEFAULT_KEYS

    keys = rules.storage.keys
    return StorageKeys(
        attribution_record=keys.attribution_record,
        traffic_source_sent=keys.traffic_source_sent,
        analytics_linked=keys.analytics_linked,
        login_tracked=keys.login_tracked,
        analytics_user_id=keys.analytics_user_id,
        analytics_session_id=keys.analytics_session_id,
        auth_user_id=keys.auth_user_id,
        locale=keys.locale,
    )
