"""
Session gate component - scoped state and at-most-once effect gating.
"""

from .component import BEST_EFFORT, SessionGate, SessionState, build_storage_keys
from .models import (
    DEFAULT_KEYS,
    FLAG_VALUE,
    GATE_SCOPES,
    Gate,
    GateSnapshot,
    StorageKeys,
)

__all__ = [
    "BEST_EFFORT",
    "SessionGate",
    "SessionState",
    "build_storage_keys",
    # Models
    "DEFAULT_KEYS",
    "FLAG_VALUE",
    "GATE_SCOPES",
    "Gate",
    "GateSnapshot",
    "StorageKeys",
]
