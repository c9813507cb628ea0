"""
Dispatch component - forwards the first-touch record to the backend.
"""

from .component import (
    DispatchConfig,
    TrafficSourceDispatcher,
    build_dispatch_config,
    run_dispatch,
)

__all__ = [
    "DispatchConfig",
    "TrafficSourceDispatcher",
    "build_dispatch_config",
    "run_dispatch",
]
