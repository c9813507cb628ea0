# attribution-engine - Ports (Protocol Interfaces)
# Abstract interfaces for adapters; no implementations here

from attribution_engine.core.ports.backend import AttributionBackendPort, DeliveryError
from attribution_engine.core.ports.sinks import AnalyticsSinkPort, SinkError
from attribution_engine.core.ports.storage import (
    KeyValueStorePort,
    StorageError,
    StorageQuotaExceededError,
    StorageScope,
    StorageUnavailableError,
)
from attribution_engine.core.ports.time import TimePort

__all__ = [
    # Backend
    "AttributionBackendPort",
    "DeliveryError",
    # Sinks
    "AnalyticsSinkPort",
    "SinkError",
    # Storage
    "KeyValueStorePort",
    "StorageError",
    "StorageQuotaExceededError",
    "StorageScope",
    "StorageUnavailableError",
    # Time
    "TimePort",
]
