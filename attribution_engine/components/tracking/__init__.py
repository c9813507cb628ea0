"""
Tracking component - event wiring for capture and the gated auth effects.
"""

from .component import AttributionTracker, build_tracking_config, create_tracker
from .models import AuthOutput, TrackingConfig, TrackOutput

__all__ = [
    # Entry points
    "create_tracker",
    # Service
    "AttributionTracker",
    "build_tracking_config",
    # Models
    "AuthOutput",
    "TrackOutput",
    "TrackingConfig",
]
