"""
Attribution component - first-touch capture of the traffic channel.
"""

from .component import (
    AttributionStore,
    build_classifier_config,
    run_capture,
    run_clear,
    run_read,
)
from .models import CaptureInput, CaptureOutput, ReadOutput

__all__ = [
    # Entry points
    "run_capture",
    "run_clear",
    "run_read",
    # Service
    "AttributionStore",
    "build_classifier_config",
    # Models
    "CaptureInput",
    "CaptureOutput",
    "ReadOutput",
]
