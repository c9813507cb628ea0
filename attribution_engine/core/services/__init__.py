# attribution-engine - Core Services
# Pure domain logic with no injected side effects

from attribution_engine.core.services.classifier import (
    ChannelClassification,
    ChannelClassifier,
    ClassifierConfig,
    UTMParams,
    classify_channel,
    classify_referrer,
    create_channel_classifier,
    normalize_medium,
    parse_query_params,
    parse_referrer_hostname,
    parse_utm_params,
)

__all__ = [
    "ChannelClassification",
    "ChannelClassifier",
    "ClassifierConfig",
    "UTMParams",
    "classify_channel",
    "classify_referrer",
    "create_channel_classifier",
    "normalize_medium",
    "parse_query_params",
    "parse_referrer_hostname",
    "parse_utm_params",
]
