from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from attribution_engine.adapters.clock import SystemClock
from attribution_engine.adapters.http_backend import HttpAttributionBackend
from attribution_engine.adapters.memory_storage import InMemoryKeyValueStore
from attribution_engine.adapters.sqlite_storage import SQLiteKeyValueStore
from attribution_engine.components.dispatch import build_dispatch_config
from attribution_engine.components.session_gate import SessionState, build_storage_keys
from attribution_engine.components.tracking import AttributionTracker, create_tracker
from attribution_engine.core.ports.backend import AttributionBackendPort
from attribution_engine.core.ports.sinks import AnalyticsSinkPort
from attribution_engine.core.ports.storage import KeyValueStorePort, StorageScope
from attribution_engine.core.ports.time import TimePort
from attribution_engine.rules.models import Rules
from attribution_engine.shell.hooks import (
    AUTH_RESOLVED,
    PAGE_LOADED,
    AuthResolved,
    EventBus,
    PageLoaded,
)


@dataclass
class EngineContext:
    """Wired engine for one visitor session."""

    state: SessionState
    tracker: AttributionTracker
    bus: EventBus
    backend: AttributionBackendPort
    rules: Rules
    sinks: list[AnalyticsSinkPort] = field(default_factory=list)
    clock: TimePort | None = None  # For testing/injection

    @classmethod
    def create(
        cls,
        rules: Rules,
        *,
        db_path: str | Path | None = None,
        sinks: Sequence[AnalyticsSinkPort] = (),
        backend: AttributionBackendPort | None = None,
        long_lived: KeyValueStorePort | None = None,
        session: KeyValueStorePort | None = None,
        clock: TimePort | None = None,
    ) -> EngineContext:
        # Adapters
        if long_lived is None:
            long_lived = SQLiteKeyValueStore(db_path or rules.storage.long_lived_db_path)
        if session is None:
            session = InMemoryKeyValueStore(StorageScope.SESSION)
        if backend is None:
            dispatch = build_dispatch_config(rules)
            backend = HttpAttributionBackend(
                dispatch.base_url,
                endpoint=dispatch.endpoint,
                timeout_seconds=dispatch.timeout_seconds,
            )
        clock = clock or SystemClock()

        # Components
        state = SessionState(long_lived, session, build_storage_keys(rules))
        tracker = create_tracker(
            state,
            sinks=sinks,
            backend=backend,
            rules=rules,
            time_port=clock,
        )

        bus = EventBus()
        tracker.attach(bus)

        return cls(
            state=state,
            tracker=tracker,
            bus=bus,
            backend=backend,
            rules=rules,
            sinks=list(sinks),
            clock=clock,
        )

    # --- Host-facing helpers ---

    def page_loaded(self, page_url: str, referrer: str | None = None) -> list[Any]:
        return self.bus.publish(PAGE_LOADED, PageLoaded(page_url=page_url, referrer=referrer))

    def auth_resolved(self, user: dict[str, Any] | None) -> list[Any]:
        return self.bus.publish(AUTH_RESOLVED, AuthResolved(user=user))

    def close(self) -> None:
        """Wait for any in-flight dispatch, then stop the worker."""
        self.tracker.close()
