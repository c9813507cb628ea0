"""
Session gate component models.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from attribution_engine.core.ports.storage import StorageScope


class Gate(str, Enum):
    """Side-effect classes that fire at most once per scope."""

    LOGIN_TRACKED = "login_tracked"
    TRAFFIC_SOURCE_SENT = "traffic_source_sent"
    ANALYTICS_LINKED = "analytics_linked"


GATE_SCOPES: dict[Gate, StorageScope] = {
    Gate.LOGIN_TRACKED: StorageScope.SESSION,
    Gate.TRAFFIC_SOURCE_SENT: StorageScope.LONG_LIVED,
    Gate.ANALYTICS_LINKED: StorageScope.LONG_LIVED,
}

FLAG_VALUE = "true"


@dataclass(frozen=True)
class StorageKeys:
    """Names of every persisted key."""

    attribution_record: str = "traffic_source_data"
    traffic_source_sent: str = "traffic_source_sent"
    analytics_linked: str = "analytics_user_linked"
    login_tracked: str = "session_login_tracked"
    analytics_user_id: str = "analytics_user_id"
    analytics_session_id: str = "analytics_session_id"
    auth_user_id: str = "analytics_auth_user_id"
    locale: str = "app_locale"

    def for_gate(self, gate: Gate) -> str:
        return {
            Gate.LOGIN_TRACKED: self.login_tracked,
            Gate.TRAFFIC_SOURCE_SENT: self.traffic_source_sent,
            Gate.ANALYTICS_LINKED: self.analytics_linked,
        }[gate]


DEFAULT_KEYS = StorageKeys()


@dataclass(frozen=True)
class GateSnapshot:
    """Flag values for inspection (CLI, tests)."""

    login_tracked: bool
    traffic_source_sent: bool
    analytics_linked: bool
