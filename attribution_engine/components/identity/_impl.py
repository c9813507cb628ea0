"""
Identity normalization for advanced matching.

Analytics providers hash these values themselves; they only match when the
plain values are normalized the same way on every send.

Key behaviors:
- Email and names: lowercased, trimmed
- Phone: digits only, country code prefixed onto local-length numbers
- City: lowercased, whitespace removed
- State and country: two-letter codes via lookup, else first two letters
- Empty results are dropped, never sent as ""
"""

from __future__ import annotations

import re

from .models import DEFAULT_CONFIG, IdentityConfig, IdentityMatchPayload, UserProfile

_NON_DIGITS = re.compile(r"\D")
_WHITESPACE = re.compile(r"\s+")


def normalize_text(value: str | None) -> str | None:
    """Lowercase and trim."""
    if not value:
        return None
    return value.strip().lower() or None


def normalize_city(value: str | None) -> str | None:
    """Lowercase with all whitespace removed."""
    if not value:
        return None
    return _WHITESPACE.sub("", value.lower()) or None


def normalize_phone(
    value: str | None,
    config: IdentityConfig = DEFAULT_CONFIG,
) -> str | None:
    """Digits only, with the default country code on local numbers."""
    if not value:
        return None
    digits = _NON_DIGITS.sub("", value)
    if not digits:
        return None
    if len(digits) in config.phone_local_lengths:
        return f"{config.phone_country_code}{digits}"
    return digits


def normalize_state(
    value: str | None,
    config: IdentityConfig = DEFAULT_CONFIG,
) -> str | None:
    """Two-letter state code."""
    if not value:
        return None
    state = value.strip().lower()
    if not state:
        return None
    if len(state) == 2:
        return state
    return config.state_codes.get(state) or state[:2]


def normalize_country(
    value: str | None,
    config: IdentityConfig = DEFAULT_CONFIG,
) -> str | None:
    """Two-letter ISO country code."""
    if not value:
        return None
    country = value.strip().lower()
    if not country:
        return None
    return config.country_codes.get(country) or country[:2]


def split_location(location: str | None) -> tuple[str | None, str | None]:
    """
    Split a free-text location into (city, state).

    "Campinas, São Paulo" -> ("Campinas", "São Paulo"). Segments past the
    second comma are ignored; empty segments are None.
    """
    if not location:
        return None, None

    parts = location.split(",")
    city = parts[0].strip() or None
    state = (parts[1].strip() or None) if len(parts) > 1 else None
    return city, state


def build_identity_payload(
    user: UserProfile,
    config: IdentityConfig = DEFAULT_CONFIG,
) -> IdentityMatchPayload:
    """Derive the normalized matching payload from a user record."""
    city, state = split_location(user.location)

    return IdentityMatchPayload(
        email=normalize_text(user.email),
        phone=normalize_phone(user.phone, config),
        first_name=normalize_text(user.first_name),
        last_name=normalize_text(user.last_name),
        city=normalize_city(city),
        state=normalize_state(state, config),
        country=normalize_country(config.default_country, config),
    )
