"""
Identity component - advanced-matching identity linking.
"""

from ._impl import (
    build_identity_payload,
    normalize_city,
    normalize_country,
    normalize_phone,
    normalize_state,
    normalize_text,
    split_location,
)
from .component import IdentityLinker, build_identity_config, run_link
from .models import (
    MATCHING_KEYS,
    IdentityConfig,
    IdentityMatchPayload,
    LinkOutput,
    UserProfile,
)

__all__ = [
    # Entry points
    "run_link",
    # Service
    "IdentityLinker",
    "build_identity_config",
    # Models
    "MATCHING_KEYS",
    "IdentityConfig",
    "IdentityMatchPayload",
    "LinkOutput",
    "UserProfile",
    # Normalization
    "build_identity_payload",
    "normalize_city",
    "normalize_country",
    "normalize_phone",
    "normalize_state",
    "normalize_text",
    "split_location",
]
