from datetime import UTC, datetime
from pathlib import Path

import pytest

from attribution_engine.adapters.dev_backend import InMemoryAttributionBackend
from attribution_engine.adapters.log_sink import LoggingAnalyticsSink
from attribution_engine.adapters.memory_storage import InMemoryKeyValueStore
from attribution_engine.components.session_gate import SessionState
from attribution_engine.core.ports.storage import StorageScope
from attribution_engine.rules.loader import load_rules
from attribution_engine.rules.models import Rules

FIXED_NOW = datetime(2025, 3, 14, 12, 0, 0, tzinfo=UTC)


class FixedClock:
    """Time port that always returns the same instant."""

    def __init__(self, now: datetime = FIXED_NOW) -> None:
        self.current = now

    def now_utc(self) -> datetime:
        return self.current


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def rules() -> Rules:
    """Load REAL rules from project root."""
    rules_path = Path(__file__).resolve().parent.parent / "rules.yaml"
    return load_rules(rules_path)


@pytest.fixture
def long_lived() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore(StorageScope.LONG_LIVED)


@pytest.fixture
def session_store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore(StorageScope.SESSION)


@pytest.fixture
def state(long_lived, session_store) -> SessionState:
    return SessionState(long_lived, session_store)


@pytest.fixture
def sink() -> LoggingAnalyticsSink:
    return LoggingAnalyticsSink(sink_name="primary")


@pytest.fixture
def second_sink() -> LoggingAnalyticsSink:
    return LoggingAnalyticsSink(sink_name="secondary")


@pytest.fixture
def backend() -> InMemoryAttributionBackend:
    return InMemoryAttributionBackend()


@pytest.fixture
def user() -> dict:
    """Authenticated user record as the auth provider sends it."""
    return {
        "id": "user-42",
        "email": "  Maria.Silva@Example.COM ",
        "phone": "(11) 98765-4321",
        "firstName": "Maria",
        "lastName": "Silva",
        "location": "São Paulo, São Paulo",
    }
