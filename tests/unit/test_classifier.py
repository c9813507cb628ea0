"""
Tests for ChannelClassifier.

Covers click-id precedence, UTM parsing, medium normalization and the
referrer lookup table.
"""

from __future__ import annotations

import pytest

from attribution_engine.core.services.classifier import (
    DIRECT_MEDIUM,
    DIRECT_SOURCE,
    NOT_SET_MEDIUM,
    ChannelClassification,
    ChannelClassifier,
    ClassifierConfig,
    classify_channel,
    classify_referrer,
    create_channel_classifier,
    hostname_matches,
    normalize_medium,
    parse_landing_path,
    parse_query_params,
    parse_referrer_hostname,
    parse_utm_params,
    strip_www,
)

# --- Fixtures ---


@pytest.fixture
def classifier() -> ChannelClassifier:
    """Classifier with default configuration."""
    return ChannelClassifier()


# --- Query Parsing ---


class TestParseQueryParams:
    """Test query parameter extraction."""

    def test_full_url(self) -> None:
        params = parse_query_params("https://example.com/plans?utm_source=x&gclid=1")
        assert params == {"utm_source": "x", "gclid": "1"}

    def test_bare_query(self) -> None:
        assert parse_query_params("?a=1&b=2") == {"a": "1", "b": "2"}

    def test_first_value_wins(self) -> None:
        assert parse_query_params("/?utm_source=first&utm_source=second") == {
            "utm_source": "first"
        }

    def test_empty_and_none(self) -> None:
        assert parse_query_params(None) == {}
        assert parse_query_params("") == {}
        assert parse_query_params("https://example.com/") == {}

    def test_landing_path(self) -> None:
        assert parse_landing_path("https://example.com/pricing?x=1") == "/pricing"
        assert parse_landing_path("https://example.com") == "/"
        assert parse_landing_path(None) == "/"


class TestParseUTMParams:
    """Test UTM parameter parsing."""

    def test_all_fields(self) -> None:
        utm = parse_utm_params(
            {
                "utm_source": "Newsletter",
                "utm_medium": "email",
                "utm_campaign": "Spring Sale",
                "utm_content": "hero",
                "utm_term": "crm software",
            }
        )

        assert utm.source == "Newsletter"
        assert utm.medium == "email"
        assert utm.campaign == "Spring Sale"
        assert utm.content == "hero"
        assert utm.term == "crm software"
        assert utm.has_any()

    def test_blank_values_dropped(self) -> None:
        utm = parse_utm_params({"utm_source": "  ", "utm_campaign": ""})

        assert utm.source is None
        assert utm.campaign is None
        assert not utm.has_any()

    def test_values_are_trimmed(self) -> None:
        assert parse_utm_params({"utm_source": " google "}).source == "google"


# --- Medium Normalization ---


class TestNormalizeMedium:
    """Test medium alias normalization."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("cpc", "cpc"),
            ("PPC", "cpc"),
            ("paidsearch", "cpc"),
            ("paid-search", "cpc"),
            ("Paid_Search", "cpc"),
            ("display", "display"),
            ("CPM", "display"),
            ("banner", "display"),
            ("social", "social"),
            ("social-network", "social"),
            ("social_network", "social"),
            ("sm", "social"),
            ("Email", "email"),
            ("e-mail", "email"),
            ("newsletter", "email"),
        ],
    )
    def test_aliases(self, raw: str, expected: str) -> None:
        assert normalize_medium(raw) == expected

    def test_unknown_passes_through_lowercased(self) -> None:
        assert normalize_medium("Affiliate") == "affiliate"


# --- Referrer Parsing ---


class TestReferrerHostname:
    """Test referrer hostname extraction."""

    def test_valid(self) -> None:
        assert parse_referrer_hostname("https://WWW.Google.com/search?q=x") == "www.google.com"

    @pytest.mark.parametrize("referrer", [None, "", "   ", "not a url", "google.com", "http://"])
    def test_malformed(self, referrer: str | None) -> None:
        assert parse_referrer_hostname(referrer) is None

    def test_invalid_port_does_not_raise(self) -> None:
        # urlparse raises ValueError on a bad IPv6 literal
        assert parse_referrer_hostname("http://[::1/") is None

    def test_strip_www(self) -> None:
        assert strip_www("www.example.com") == "example.com"
        assert strip_www("blog.example.com") == "blog.example.com"
        assert strip_www("wwwexample.com") == "wwwexample.com"


class TestHostnameMatches:
    """Test lookup-pattern matching."""

    def test_label_pattern(self) -> None:
        assert hostname_matches("www.google.com.br", "google.")
        assert hostname_matches("google.com", "google.")
        assert not hostname_matches("notgoogle.com", "google.")

    def test_domain_pattern(self) -> None:
        assert hostname_matches("t.co", "t.co")
        assert hostname_matches("mobile.t.co", "t.co")
        assert not hostname_matches("reddit.com", "t.co")
        assert not hostname_matches("box.com", "x.com")


# --- Classification ---


class TestReferrerTable:
    """Every referrer in the lookup table yields its documented pair."""

    @pytest.mark.parametrize(
        "referrer,source,medium",
        [
            ("https://www.google.com/search?q=x", "google", "organic"),
            ("https://www.google.com.br/", "google", "organic"),
            ("https://www.facebook.com/", "facebook", "social"),
            ("https://m.facebook.com/", "facebook", "social"),
            ("https://l.fb.com/", "facebook", "social"),
            ("https://www.instagram.com/", "instagram", "social"),
            ("https://www.linkedin.com/feed/", "linkedin", "social"),
            ("https://twitter.com/someone", "twitter", "social"),
            ("https://t.co/abc", "twitter", "social"),
            ("https://x.com/someone", "twitter", "social"),
            ("https://www.youtube.com/watch?v=1", "youtube", "social"),
            ("https://www.tiktok.com/@someone", "tiktok", "social"),
            ("https://www.bing.com/search?q=x", "bing", "organic"),
            ("https://search.yahoo.com/", "yahoo", "organic"),
            ("https://duckduckgo.com/", "duckduckgo", "organic"),
        ],
    )
    def test_lookup(self, referrer: str, source: str, medium: str) -> None:
        result = classify_referrer(referrer)
        assert (result.source, result.medium) == (source, medium)

    def test_unknown_hostname_is_referral(self) -> None:
        result = classify_referrer("https://www.example.org/blog/post")
        assert (result.source, result.medium) == ("example.org", "referral")

    def test_unknown_subdomain_keeps_subdomain(self) -> None:
        result = classify_referrer("https://news.ycombinator.com/item?id=1")
        assert result.source == "news.ycombinator.com"

    def test_reddit_is_not_twitter(self) -> None:
        result = classify_referrer("https://www.reddit.com/r/python")
        assert (result.source, result.medium) == ("reddit.com", "referral")

    def test_malformed_is_direct(self) -> None:
        result = classify_referrer("::::")
        assert result.is_direct


class TestClassifyChannel:
    """Test precedence: click id, then UTM, then referrer, then direct."""

    def test_google_search(self, classifier: ChannelClassifier) -> None:
        result = classifier.classify("https://app.example.com/", "https://www.google.com/search?q=x")
        assert result == ChannelClassification(source="google", medium="organic")

    def test_utm_newsletter(self, classifier: ChannelClassifier) -> None:
        result = classifier.classify("/?utm_source=Newsletter&utm_medium=email", None)
        assert (result.source, result.medium) == ("newsletter", "email")

    def test_gclid_beats_utm_source(self, classifier: ChannelClassifier) -> None:
        result = classifier.classify("/?gclid=abc123&utm_source=facebook", None)
        assert (result.source, result.medium) == ("google", "cpc")

    def test_gclid_beats_fbclid(self) -> None:
        result = classify_channel({"gclid": "g", "fbclid": "f"}, None)
        assert result.source == "google"

    def test_fbclid(self) -> None:
        result = classify_channel({"fbclid": "f"}, "https://www.google.com/")
        assert (result.source, result.medium) == ("facebook", "cpc")

    def test_empty_click_id_ignored(self) -> None:
        result = classify_channel({"gclid": ""}, None)
        assert result.is_direct

    def test_utm_without_medium(self) -> None:
        result = classify_channel({"utm_source": "Partner"}, None)
        assert (result.source, result.medium) == ("partner", NOT_SET_MEDIUM)

    def test_utm_beats_referrer(self) -> None:
        result = classify_channel(
            {"utm_source": "spring", "utm_medium": "PPC"},
            "https://www.facebook.com/",
        )
        assert (result.source, result.medium) == ("spring", "cpc")

    def test_blank_utm_source_uses_referrer(self) -> None:
        result = classify_channel(
            {"utm_source": "   ", "utm_medium": "email"}, "https://www.bing.com/"
        )
        assert (result.source, result.medium) == ("bing", "organic")

    def test_utm_medium_without_source_uses_referrer(self) -> None:
        result = classify_channel({"utm_medium": "email"}, "https://www.bing.com/")
        assert (result.source, result.medium) == ("bing", "organic")

    def test_direct(self, classifier: ChannelClassifier) -> None:
        result = classifier.classify("https://app.example.com/", None)
        assert (result.source, result.medium) == (DIRECT_SOURCE, DIRECT_MEDIUM)
        assert result.is_direct

    def test_deterministic(self, classifier: ChannelClassifier) -> None:
        url = "/?utm_source=X&utm_medium=banner"
        assert classifier.classify(url, None) == classifier.classify(url, None)


class TestChannelClassifier:
    """Test the service wrapper."""

    def test_click_ids(self, classifier: ChannelClassifier) -> None:
        ids = classifier.click_ids("/?gclid=g1&fbclid=f1&other=x")
        assert ids == {"gclid": "g1", "fbclid": "f1"}

    def test_custom_config(self) -> None:
        config = ClassifierConfig(
            referrers=(("example.", "example", "partner"),),
        )
        classifier = create_channel_classifier(config)

        result = classifier.classify("/", "https://www.example.com/")

        assert (result.source, result.medium) == ("example", "partner")
        assert classifier.config is config
