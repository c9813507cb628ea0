"""
Tests for the rules loader.
"""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from attribution_engine.rules import Rules, load_rules, parse_rules

RULES_PATH = Path(__file__).resolve().parents[2] / "rules.yaml"


def real_rules_data() -> dict:
    return yaml.safe_load(RULES_PATH.read_text(encoding="utf-8"))


class TestLoadRules:
    """Test loading the real rules file."""

    def test_loads(self) -> None:
        rules = load_rules(RULES_PATH)

        assert isinstance(rules, Rules)
        assert rules.project.slug == "attribution-engine"
        assert rules.storage.keys.attribution_record == "traffic_source_data"
        assert rules.dispatch.endpoint == "/api/user/traffic-source"

    def test_referrer_table(self) -> None:
        rules = load_rules(RULES_PATH)
        sources = {r.source for r in rules.classifier.referrers}

        assert sources == {
            "google",
            "facebook",
            "instagram",
            "linkedin",
            "twitter",
            "youtube",
            "tiktok",
            "bing",
            "yahoo",
            "duckduckgo",
        }

    def test_identity_maps(self) -> None:
        rules = load_rules(RULES_PATH)

        assert rules.identity.state_codes["são paulo"] == "sp"
        assert rules.identity.phone.local_lengths == [10, 11]

    def test_missing_file(self, tmp_path) -> None:
        with pytest.raises(FileNotFoundError):
            load_rules(tmp_path / "missing.yaml")


class TestParseRules:
    """Test validation errors."""

    def test_invalid_yaml(self) -> None:
        with pytest.raises(ValueError, match="Invalid YAML"):
            parse_rules("project: [unclosed")

    def test_missing_section(self) -> None:
        data = real_rules_data()
        del data["dispatch"]

        with pytest.raises(ValueError, match="Rules validation failed"):
            parse_rules(yaml.safe_dump(data))

    def test_bad_timeout(self) -> None:
        data = real_rules_data()
        data["dispatch"]["timeout_seconds"] = 0

        with pytest.raises(ValueError, match="timeout_seconds"):
            parse_rules(yaml.safe_dump(data))

    def test_empty_local_lengths(self) -> None:
        data = real_rules_data()
        data["identity"]["phone"]["local_lengths"] = []

        with pytest.raises(ValueError):
            parse_rules(yaml.safe_dump(data))

    def test_empty_document(self) -> None:
        with pytest.raises(ValueError):
            parse_rules("")
