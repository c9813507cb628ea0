"""
Tracking component - wires capture, identity, login and dispatch to events.

page-loaded captures the first touch. auth-resolved, on an unauthenticated
to authenticated transition, runs three independently gated effects:

    1. identity link   (analytics_linked, long-lived)
    2. login event     (login_tracked, session)
    3. dispatch        (traffic_source_sent, long-lived, on a worker thread)

Invariants:
- An unexpected error in one effect is logged and never stops the others
- Repeated auth-resolved events for the same user are not transitions
- A logout (no user) resets the in-memory auth state only; gates persist
- The backend call never runs on the caller's thread; the gate is set and
  the record cleared when the worker finishes
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import Any

from attribution_engine.adapters.clock import SystemClock
from attribution_engine.components.attribution import (
    AttributionStore,
    CaptureOutput,
    build_classifier_config,
)
from attribution_engine.components.dispatch import TrafficSourceDispatcher
from attribution_engine.components.identity import (
    IdentityConfig,
    IdentityLinker,
    UserProfile,
    build_identity_config,
)
from attribution_engine.components.identity.models import LinkOutput
from attribution_engine.components.session_gate import (
    BEST_EFFORT,
    Gate,
    SessionGate,
    SessionState,
)
from attribution_engine.core.entities import AttributionRecord
from attribution_engine.core.ports.backend import AttributionBackendPort
from attribution_engine.core.ports.sinks import AnalyticsSinkPort
from attribution_engine.core.ports.time import TimePort
from attribution_engine.core.results import EffectResult
from attribution_engine.core.services.classifier import ChannelClassifier
from attribution_engine.rules.models import Rules
from attribution_engine.shell.hooks import (
    AUTH_RESOLVED,
    PAGE_LOADED,
    AuthResolved,
    EventBus,
    PageLoaded,
)

from .models import DEFAULT_CONFIG, AuthOutput, TrackingConfig, TrackOutput

logger = logging.getLogger(__name__)


def build_tracking_config(rules: Rules | None) -> TrackingConfig:
    """Build tracking config from rules."""
    if rules is None:
        return DEFAULT_CONFIG

    return TrackingConfig(
        login_event=rules.tracking.login_event,
        login_method=rules.tracking.login_method,
    )


class AttributionTracker:
    """
    Per-session orchestrator.

    Owns the SessionGate, so one instance must serve the whole session for
    in-flight tracking to hold. Also owns the single worker thread that
    delivers the traffic source, unless an executor is passed in; call
    close() when the session ends.
    """

    def __init__(
        self,
        state: SessionState,
        *,
        sinks: Sequence[AnalyticsSinkPort],
        backend: AttributionBackendPort,
        classifier: ChannelClassifier | None = None,
        identity_config: IdentityConfig | None = None,
        config: TrackingConfig | None = None,
        time_port: TimePort | None = None,
        executor: Executor | None = None,
    ) -> None:
        self._state = state
        self._sinks = list(sinks)
        self._config = config or DEFAULT_CONFIG
        self._time = time_port or SystemClock()

        self.gate = SessionGate(state)
        self.store = AttributionStore(state, classifier, self._time)
        self.linker = IdentityLinker(state, self._sinks, identity_config)
        self.dispatcher = TrafficSourceDispatcher(state, backend)

        self._user_id: str | None = None
        self._traffic: AttributionRecord | None = None
        self.last_link: LinkOutput | None = None
        self.pending_dispatch: Future[EffectResult] | None = None

        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="attribution-dispatch"
        )

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def authenticated_user_id(self) -> str | None:
        return self._user_id

    def attach(self, bus: EventBus) -> list[Callable[[], None]]:
        """Subscribe to page-loaded and auth-resolved. Returns unsubscribers."""
        return [
            bus.subscribe(PAGE_LOADED, self.on_page_loaded),
            bus.subscribe(AUTH_RESOLVED, self.on_auth_resolved),
        ]

    # --- Event handlers ---

    def on_page_loaded(self, event: PageLoaded) -> CaptureOutput:
        output = self.store.capture(event.page_url, event.referrer)
        if output.record is not None:
            self._traffic = output.record
        return output

    def on_auth_resolved(self, event: AuthResolved) -> AuthOutput:
        if event.user is None:
            if self._user_id is not None:
                logger.info("User signed out")
                self.linker.forget()
                self._user_id = None
            return AuthOutput.no_transition("unauthenticated")

        try:
            user = UserProfile.from_dict(event.user)
        except ValueError as e:
            logger.warning("Ignoring auth event: %s", e)
            return AuthOutput.no_transition("invalid_user")

        if user.id == self._user_id:
            return AuthOutput.no_transition("already_authenticated")

        self._user_id = user.id
        # Keep enrichment data fresh even when the link gate is already set
        self.linker.remember(user)

        identity = self._isolated(
            "identity link",
            lambda: self.gate.run_once(
                Gate.ANALYTICS_LINKED, lambda: self._link(user), BEST_EFFORT
            ),
        )
        login = self._isolated(
            "login event",
            lambda: self.gate.run_once(Gate.LOGIN_TRACKED, self.track_login, BEST_EFFORT),
        )
        traffic_source, dispatch = self._submit_dispatch()

        return AuthOutput(
            transitioned=True,
            identity=identity,
            login=login,
            traffic_source=traffic_source,
            dispatch=dispatch,
        )

    # --- Effects ---

    def _link(self, user: UserProfile) -> EffectResult:
        self.last_link = self.linker.link(user)
        return self.last_link.result

    def _submit_dispatch(self) -> tuple[EffectResult, Future[EffectResult] | None]:
        try:
            # Keep the record around for event context once it is cleared
            self._traffic_record()
            result, future = self.gate.submit_once(
                Gate.TRAFFIC_SOURCE_SENT,
                lambda: self._isolated("traffic source dispatch", self.dispatcher.dispatch),
                self._executor,
            )
        except Exception as e:
            logger.exception("Unexpected error in traffic source dispatch")
            return EffectResult.failed(str(e)), None

        if future is not None:
            self.pending_dispatch = future
        return result, future

    def wait_for_dispatch(self, timeout: float | None = None) -> EffectResult | None:
        """
        Block until the last submitted dispatch finishes.

        Returns its result, or None when nothing was ever submitted. Raises
        concurrent.futures.TimeoutError if it is still running at `timeout`.
        """
        if self.pending_dispatch is None:
            return None
        return self.pending_dispatch.result(timeout)

    def close(self, wait: bool = True) -> None:
        """Shut down the dispatch worker if this tracker created it."""
        if self._owns_executor:
            self._executor.shutdown(wait=wait)

    def _isolated(self, name: str, run: Callable[[], EffectResult]) -> EffectResult:
        try:
            return run()
        except Exception as e:
            logger.exception("Unexpected error in %s", name)
            return EffectResult.failed(str(e))

    def track_login(self) -> EffectResult:
        return self.track_event(
            self._config.login_event, {"method": self._config.login_method}
        ).result

    def track_event(self, name: str, properties: dict[str, Any] | None = None) -> TrackOutput:
        """
        Send an event to every sink, enriched with session context.

        Caller properties win over context keys of the same name.
        """
        payload = {**self.event_context(), **(properties or {})}

        failed: list[str] = []
        for sink in self._sinks:
            try:
                sink.track(name, payload)
            except Exception as e:
                logger.warning("Sink %s failed to track %s: %s", sink.name, name, e)
                failed.append(sink.name)

        if failed:
            result = EffectResult.sink_error(f"track failed for: {', '.join(failed)}")
        else:
            result = EffectResult.success()
        return TrackOutput(
            event=name,
            properties=payload,
            result=result,
            failed_sinks=tuple(failed),
        )

    # --- Context ---

    def _traffic_record(self) -> AttributionRecord | None:
        if self._traffic is None:
            self._traffic = self._state.read_record()[0]
        return self._traffic

    def event_context(self) -> dict[str, Any]:
        """Properties attached to every tracked event."""
        context: dict[str, Any] = {
            "user_id": self._state.analytics_user_id(),
            "session_id": self._state.analytics_session_id(),
            "timestamp": self._time.now_utc().isoformat(),
        }

        record = self._traffic_record()
        if record is not None:
            context["traffic_source"] = record.source
            context["traffic_medium"] = record.medium
            context["landing_page"] = record.landing_page
            if record.campaign:
                context["traffic_campaign"] = record.campaign

        context.update(self.linker.matching_params())
        return context


# --- Component Entry Points ---


def create_tracker(
    state: SessionState,
    *,
    sinks: Sequence[AnalyticsSinkPort],
    backend: AttributionBackendPort,
    rules: Rules | None = None,
    time_port: TimePort | None = None,
    executor: Executor | None = None,
) -> AttributionTracker:
    """
    Create a tracker configured from rules.

    Args:
        state: Scoped session state.
        sinks: Registered analytics sinks.
        backend: Attribution backend port.
        rules: Optional rules; defaults apply without them.
        time_port: Optional time port.
        executor: Optional executor for the dispatch; the tracker creates
            and owns a single-thread pool without one.

    Returns:
        AttributionTracker ready to attach to an EventBus.
    """
    return AttributionTracker(
        state,
        sinks=sinks,
        backend=backend,
        classifier=ChannelClassifier(build_classifier_config(rules)),
        identity_config=build_identity_config(rules),
        config=build_tracking_config(rules),
        time_port=time_port,
        executor=executor,
    )
