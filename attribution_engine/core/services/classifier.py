"""
ChannelClassifier - click-id, UTM and referrer channel classification.

Maps the landing URL and document referrer to a (source, medium) pair.

Precedence (first match wins):
1. Google click identifier (gclid) -> google / cpc
2. Meta click identifier (fbclid) -> facebook / cpc
3. utm_source -> lowercased source, normalized utm_medium or "(not set)"
4. Referrer hostname lookup, else hostname (minus "www.") / referral
5. No usable referrer -> (direct) / (none)

Key behaviors:
- Pure and deterministic, no I/O
- Malformed referrers fall back to direct rather than raising
- Query parameters use the first occurrence of a repeated key
- A blank or whitespace-only UTM value counts as absent, so a blank
  utm_source falls through to the referrer
"""

from __future__ import annotations

from dataclasses import dataclass, field
from urllib.parse import parse_qsl, urlparse

DIRECT_SOURCE = "(direct)"
DIRECT_MEDIUM = "(none)"
NOT_SET_MEDIUM = "(not set)"
REFERRAL_MEDIUM = "referral"

UTM_KEYS = ("source", "medium", "campaign", "content", "term")


# --- Configuration ---


@dataclass(frozen=True)
class ClassifierConfig:
    """Classifier configuration."""

    # (query param, source, medium), checked in order
    click_ids: tuple[tuple[str, str, str], ...] = (
        ("gclid", "google", "cpc"),
        ("fbclid", "facebook", "cpc"),
    )

    # (hostname pattern, source, medium), checked in order.
    # "google." matches a hostname label ("www.google.com.br");
    # "t.co" matches the domain itself or any subdomain of it.
    referrers: tuple[tuple[str, str, str], ...] = (
        ("google.", "google", "organic"),
        ("facebook.", "facebook", "social"),
        ("fb.", "facebook", "social"),
        ("instagram.", "instagram", "social"),
        ("linkedin.", "linkedin", "social"),
        ("twitter.", "twitter", "social"),
        ("t.co", "twitter", "social"),
        ("x.com", "twitter", "social"),
        ("youtube.", "youtube", "social"),
        ("tiktok.", "tiktok", "social"),
        ("bing.", "bing", "organic"),
        ("yahoo.", "yahoo", "organic"),
        ("duckduckgo.", "duckduckgo", "organic"),
    )

    # Canonical medium -> accepted aliases (lowercase)
    medium_aliases: dict[str, tuple[str, ...]] = field(
        default_factory=lambda: {
            "cpc": ("cpc", "ppc", "paidsearch", "paid-search", "paid_search"),
            "display": ("display", "cpm", "banner"),
            "social": ("social", "social-network", "social_network", "sm"),
            "email": ("email", "e-mail", "newsletter"),
        }
    )


DEFAULT_CONFIG = ClassifierConfig()


# --- Data Models ---


@dataclass(frozen=True)
class ChannelClassification:
    """Classified traffic channel."""

    source: str
    medium: str

    @property
    def is_direct(self) -> bool:
        return self.source == DIRECT_SOURCE and self.medium == DIRECT_MEDIUM


@dataclass
class UTMParams:
    """Parsed UTM parameters, values stripped, empty values dropped."""

    source: str | None = None
    medium: str | None = None
    campaign: str | None = None
    content: str | None = None
    term: str | None = None

    def has_any(self) -> bool:
        """Check if any UTM parameter is present."""
        return any(
            [
                self.source,
                self.medium,
                self.campaign,
                self.content,
                self.term,
            ]
        )


# --- Parsing Functions ---


def parse_query_params(page_url: str | None) -> dict[str, str]:
    """
    Extract query parameters from a page URL.

    Accepts a full URL, a path with query, or a bare "?a=b" query string.
    The first value of a repeated key wins.
    """
    if not page_url:
        return {}

    try:
        query = urlparse(page_url).query
    except ValueError:
        return {}

    params: dict[str, str] = {}
    for key, value in parse_qsl(query, keep_blank_values=True):
        params.setdefault(key, value)
    return params


def parse_landing_path(page_url: str | None) -> str:
    """Path component of the landing URL, "/" when absent."""
    if not page_url:
        return "/"
    try:
        return urlparse(page_url).path or "/"
    except ValueError:
        return "/"


def parse_utm_params(params: dict[str, str]) -> UTMParams:
    """
    Parse UTM parameters from query params.

    Values are stripped but not lowercased; campaign, content and term
    pass through as supplied.
    """

    def get_param(key: str) -> str | None:
        value = params.get(f"utm_{key}")
        if value and isinstance(value, str):
            return value.strip() or None
        return None

    return UTMParams(**{key: get_param(key) for key in UTM_KEYS})


def parse_referrer_hostname(referrer: str | None) -> str | None:
    """
    Extract the lowercased hostname from a referrer URL.

    Returns None for empty or malformed referrers (no scheme, no host).
    """
    if not referrer:
        return None

    try:
        parsed = urlparse(referrer.strip())
        if not parsed.scheme or not parsed.netloc:
            return None
        hostname = parsed.hostname
    except ValueError:
        return None

    return hostname.lower() if hostname else None


def normalize_medium(
    medium: str,
    config: ClassifierConfig = DEFAULT_CONFIG,
) -> str:
    """Map a utm_medium value onto its canonical name (case-insensitive)."""
    medium_lower = medium.strip().lower()
    for canonical, aliases in config.medium_aliases.items():
        if medium_lower in aliases:
            return canonical
    return medium_lower


def hostname_matches(hostname: str, pattern: str) -> bool:
    """
    Match a hostname against a lookup pattern.

    Patterns ending in "." match at a label boundary ("google." matches
    "www.google.co.uk" but not "notgoogle.com"). Other patterns match the
    domain or any of its subdomains ("t.co" matches "t.co", not "reddit.com").
    """
    if pattern.endswith("."):
        return f".{hostname}".find(f".{pattern}") != -1
    return hostname == pattern or hostname.endswith(f".{pattern}")


def strip_www(hostname: str) -> str:
    """Drop a leading "www." label."""
    return hostname[4:] if hostname.startswith("www.") else hostname


# --- Classification Functions ---


def classify_referrer(
    referrer: str | None,
    config: ClassifierConfig = DEFAULT_CONFIG,
) -> ChannelClassification:
    """Classify by referrer hostname alone."""
    hostname = parse_referrer_hostname(referrer)
    if not hostname:
        return ChannelClassification(source=DIRECT_SOURCE, medium=DIRECT_MEDIUM)

    for pattern, source, medium in config.referrers:
        if hostname_matches(hostname, pattern):
            return ChannelClassification(source=source, medium=medium)

    return ChannelClassification(source=strip_www(hostname), medium=REFERRAL_MEDIUM)


def classify_channel(
    params: dict[str, str],
    referrer: str | None,
    config: ClassifierConfig = DEFAULT_CONFIG,
) -> ChannelClassification:
    """
    Classify a visit from its query params and referrer.

    Click ids beat UTM tags, UTM tags beat the referrer.
    """
    for param, source, medium in config.click_ids:
        if params.get(param):
            return ChannelClassification(source=source, medium=medium)

    utm = parse_utm_params(params)
    if utm.source:
        medium = normalize_medium(utm.medium, config) if utm.medium else NOT_SET_MEDIUM
        return ChannelClassification(source=utm.source.lower(), medium=medium)

    return classify_referrer(referrer, config)


# --- Classifier Service ---


class ChannelClassifier:
    """
    Channel classifier service.

    Parses the landing URL and referrer and classifies the traffic channel.
    """

    def __init__(
        self,
        config: ClassifierConfig | None = None,
    ) -> None:
        """Initialize service."""
        self._config = config or DEFAULT_CONFIG

    @property
    def config(self) -> ClassifierConfig:
        return self._config

    def classify(self, page_url: str | None, referrer: str | None) -> ChannelClassification:
        """Classify a visit from its landing URL and referrer."""
        return classify_channel(parse_query_params(page_url), referrer, self._config)

    def click_ids(self, page_url: str | None) -> dict[str, str]:
        """Click identifiers present on the landing URL, keyed by param name."""
        params = parse_query_params(page_url)
        return {param: params[param] for param, _, _ in self._config.click_ids if params.get(param)}


# --- Factory ---


def create_channel_classifier(
    config: ClassifierConfig | None = None,
) -> ChannelClassifier:
    """Create a ChannelClassifier."""
    return ChannelClassifier(config=config)
