"""
Attribution component - first-touch capture of the traffic channel.

Classifies the landing URL and referrer and persists the result once per
storage lifetime.

Invariants:
- A stored record is never overwritten (first touch wins)
- read() never mutates state
- clear() is only called after confirmed backend delivery
- Storage failures degrade to "no record" and never raise
"""

from __future__ import annotations

import logging

from attribution_engine.adapters.clock import SystemClock
from attribution_engine.components.session_gate import SessionState
from attribution_engine.core.entities import AttributionRecord
from attribution_engine.core.ports.time import TimePort
from attribution_engine.core.results import EffectResult, Outcome
from attribution_engine.core.services.classifier import (
    DEFAULT_CONFIG,
    ChannelClassifier,
    ClassifierConfig,
    parse_landing_path,
    parse_query_params,
    parse_utm_params,
)
from attribution_engine.rules.models import Rules

from .models import CaptureInput, CaptureOutput, ReadOutput

logger = logging.getLogger(__name__)


def build_classifier_config(rules: Rules | None) -> ClassifierConfig:
    """Build classifier config from rules."""
    if rules is None:
        return DEFAULT_CONFIG

    classifier = rules.classifier
    return ClassifierConfig(
        click_ids=tuple((c.param, c.source, c.medium) for c in classifier.click_ids),
        referrers=tuple((r.match, r.source, r.medium) for r in classifier.referrers),
        medium_aliases={
            canonical: tuple(alias.lower() for alias in aliases)
            for canonical, aliases in classifier.medium_aliases.items()
        },
    )


class AttributionStore:
    """
    Write-once attribution store.

    Wraps SessionState's long-lived record slot with the classifier.
    """

    def __init__(
        self,
        state: SessionState,
        classifier: ChannelClassifier | None = None,
        time_port: TimePort | None = None,
    ) -> None:
        self._state = state
        self._classifier = classifier or ChannelClassifier()
        self._time = time_port or SystemClock()

    def build_record(self, page_url: str, referrer: str | None) -> AttributionRecord:
        """Classify a page load into a record without persisting it."""
        channel = self._classifier.classify(page_url, referrer)
        params = parse_query_params(page_url)
        utm = parse_utm_params(params)
        click_ids = self._classifier.click_ids(page_url)

        return AttributionRecord(
            source=channel.source,
            medium=channel.medium,
            landing_page=parse_landing_path(page_url),
            captured_at=self._time.now_utc(),
            campaign=utm.campaign,
            content=utm.content,
            term=utm.term,
            gclid=click_ids.get("gclid"),
            fbclid=click_ids.get("fbclid"),
            referrer=referrer or None,
        )

    def capture(self, page_url: str, referrer: str | None = None) -> CaptureOutput:
        """Capture the first touch; no-op when a record already exists."""
        existing, read_result = self._state.read_record()
        if existing is not None:
            return CaptureOutput(
                record=existing,
                captured=False,
                result=EffectResult.skipped("record_exists"),
            )
        if read_result.status == Outcome.STORAGE_UNAVAILABLE:
            # Cannot prove there is no earlier touch; do not risk overwriting it
            return CaptureOutput(record=None, captured=False, result=read_result)

        record = self.build_record(page_url, referrer)
        write_result = self._state.write_record(record)
        if not write_result.ok:
            return CaptureOutput(record=None, captured=False, result=write_result)

        logger.info("Captured first touch %s / %s", record.source, record.medium)
        return CaptureOutput(record=record, captured=True, result=write_result)

    def read(self) -> ReadOutput:
        record, result = self._state.read_record()
        return ReadOutput(record=record, result=result)

    def clear(self) -> EffectResult:
        return self._state.remove_record()


# --- Component Entry Points ---


def run_capture(
    inp: CaptureInput,
    *,
    state: SessionState,
    time_port: TimePort | None = None,
    rules: Rules | None = None,
) -> CaptureOutput:
    """
    Capture first-touch attribution for a page load.

    Args:
        inp: Page URL and referrer.
        state: Scoped session state.
        time_port: Optional time port.
        rules: Optional rules for classifier configuration.

    Returns:
        CaptureOutput with the stored record and outcome.
    """
    classifier = ChannelClassifier(build_classifier_config(rules))
    store = AttributionStore(state, classifier=classifier, time_port=time_port)
    return store.capture(inp.page_url, inp.referrer)


def run_read(*, state: SessionState) -> ReadOutput:
    """Read the stored attribution record."""
    return AttributionStore(state).read()


def run_clear(*, state: SessionState) -> EffectResult:
    """Remove the stored attribution record."""
    return AttributionStore(state).clear()
