"""
Identity component models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from attribution_engine.core.results import EffectResult

# Payload field -> advanced-matching parameter name
MATCHING_KEYS = {
    "email": "em",
    "phone": "ph",
    "first_name": "fn",
    "last_name": "ln",
    "city": "ct",
    "state": "st",
    "country": "country",
}


# Brazilian state names -> two-letter codes
STATE_CODES = {
    "acre": "ac",
    "alagoas": "al",
    "amapá": "ap",
    "amazonas": "am",
    "bahia": "ba",
    "ceará": "ce",
    "distrito federal": "df",
    "espírito santo": "es",
    "goiás": "go",
    "maranhão": "ma",
    "mato grosso": "mt",
    "mato grosso do sul": "ms",
    "minas gerais": "mg",
    "pará": "pa",
    "paraíba": "pb",
    "paraná": "pr",
    "pernambuco": "pe",
    "piauí": "pi",
    "rio de janeiro": "rj",
    "rio grande do norte": "rn",
    "rio grande do sul": "rs",
    "rondônia": "ro",
    "roraima": "rr",
    "santa catarina": "sc",
    "são paulo": "sp",
    "sergipe": "se",
    "tocantins": "to",
}

COUNTRY_CODES = {
    "brazil": "br",
    "brasil": "br",
    "united states": "us",
    "usa": "us",
    "portugal": "pt",
    "argentina": "ar",
    "chile": "cl",
    "mexico": "mx",
}


@dataclass(frozen=True)
class IdentityConfig:
    """Identity normalization configuration."""

    default_country: str | None = "br"
    phone_country_code: str = "55"
    # Digit counts of a local number that still lacks the country code
    phone_local_lengths: tuple[int, ...] = (10, 11)
    state_codes: dict[str, str] = field(default_factory=lambda: dict(STATE_CODES))
    country_codes: dict[str, str] = field(default_factory=lambda: dict(COUNTRY_CODES))


DEFAULT_CONFIG = IdentityConfig()


@dataclass(frozen=True)
class UserProfile:
    """Authenticated user record supplied by the auth provider."""

    id: str
    email: str | None = None
    phone: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    location: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> UserProfile:
        """Build from an auth payload; accepts camelCase or snake_case names."""

        def pick(*names: str) -> str | None:
            for name in names:
                value = data.get(name)
                if value:
                    return str(value)
            return None

        user_id = pick("id")
        if user_id is None:
            raise ValueError("User record has no id")

        return cls(
            id=user_id,
            email=pick("email"),
            phone=pick("phone"),
            first_name=pick("firstName", "first_name"),
            last_name=pick("lastName", "last_name"),
            location=pick("location"),
        )


@dataclass(frozen=True)
class IdentityMatchPayload:
    """Normalized identity-matching attributes. None means absent."""

    email: str | None = None
    phone: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    city: str | None = None
    state: str | None = None
    country: str | None = None

    def as_dict(self) -> dict[str, str]:
        """Present fields only; absent fields are never sent as empty strings."""
        return {
            name: getattr(self, name)
            for name in MATCHING_KEYS
            if getattr(self, name)
        }

    def as_matching_params(self) -> dict[str, str]:
        """Advanced-matching parameter names (em, ph, fn, ...)."""
        return {MATCHING_KEYS[name]: value for name, value in self.as_dict().items()}


@dataclass(frozen=True)
class LinkOutput:
    """Result of an identity link."""

    payload: IdentityMatchPayload
    result: EffectResult
    failed_sinks: tuple[str, ...] = ()
