"""Alias generator — proposes replacement text for an entity.

The alias map is the consistency contract: once an original text has an
alias, every later request for it returns the same alias for as long as
the map lives.  Generic numbering state lives in an explicit
``AliasCounters`` object owned by the caller, never in module globals.
"""

from __future__ import annotations
import random
import re
import unicodedata
from dataclasses import dataclass, field

from .lexicons import (
    ALIAS_STREET_NAMES,
    ALIAS_STREET_TYPES,
    ALL_LEGAL_FORMS,
    CITY_POOL,
    COMPANY_PARTS,
    EMAIL_DOMAINS,
    GENDERED_FIRST_NAMES,
    SURNAMES,
)
from .types import AliasStyle, EntityType

# Placeholders keep the shape of the original for structured types
_GENERIC_FORMATS: dict[EntityType, str] = {
    EntityType.PERSON: "Personne {n}",
    EntityType.COMPANY: "Société {n}",
    EntityType.ADDRESS: "Adresse {n}",
    EntityType.CITY: "Ville {n}",
    EntityType.EMAIL: "personne{n}@exemple.fr",
    EntityType.PHONE: "+33 X XX XX XX X{n}",
    EntityType.IBAN: "FRXX XXXX XXXX XXXX XXXX XXX{n}",
    EntityType.SSN: "X XX XX XX XXX XXX X{n}",
    EntityType.URL: "https://exemple.fr/lien-{n}",
    EntityType.UNKNOWN: "Entité {n}",
}

_GENERIC_PATTERNS: dict[EntityType, re.Pattern] = {
    entity_type: re.compile(re.escape(fmt).replace(re.escape("{n}"), r"(\d+)"))
    for entity_type, fmt in _GENERIC_FORMATS.items()
}

_MAX_ATTEMPTS = 10


@dataclass
class AliasCounters:
    """Per-session generic numbering, one counter per entity type."""
    counts: dict[EntityType, int] = field(default_factory=dict)

    def next(self, entity_type: EntityType) -> int:
        n = self.counts.get(entity_type, 0) + 1
        self.counts[entity_type] = n
        return n

    @classmethod
    def from_alias_map(cls, alias_map: dict[str, str]) -> AliasCounters:
        """Resume numbering after the generic labels already in a session map."""
        counters = cls()
        for alias in alias_map.values():
            for entity_type, pattern in _GENERIC_PATTERNS.items():
                m = pattern.fullmatch(alias)
                if m is not None:
                    n = int(m.group(1))
                    counters.counts[entity_type] = max(counters.counts.get(entity_type, 0), n)
                    break
        return counters


def generate_alias(
    entity_type: EntityType,
    original: str,
    alias_map: dict[str, str],
    style: AliasStyle | str = AliasStyle.REALISTIC,
    counters: AliasCounters | None = None,
) -> str:
    """Return the alias for original, creating and recording it if needed."""
    existing = alias_map.get(original)
    if existing is not None:
        return existing

    style = AliasStyle(style)
    if style is AliasStyle.GENERIC:
        if counters is None:
            counters = AliasCounters.from_alias_map(alias_map)
        alias = _generic_alias(entity_type, counters.next(entity_type))
    else:
        taken = set(alias_map.values())
        alias = _realistic_alias(entity_type, original)
        for _ in range(_MAX_ATTEMPTS):
            if alias not in taken:
                break
            alias = _realistic_alias(entity_type, original)

    alias_map[original] = alias
    return alias


# ── Generic style ────────────────────────────────────────────────────

def _generic_alias(entity_type: EntityType, n: int) -> str:
    return _GENERIC_FORMATS[entity_type].format(n=n)


# ── Realistic style ──────────────────────────────────────────────────

def _realistic_alias(entity_type: EntityType, original: str) -> str:
    return _REALISTIC[entity_type](original)


def _person_alias(original: str) -> str:
    parts = [p for p in re.split(r"[\s\-]+", original.strip()) if p]
    surname = random.choice(SURNAMES)
    if parts and parts[-1].isupper():
        surname = surname.upper()
    if len(parts) >= 2:
        return f"{random.choice(GENDERED_FIRST_NAMES)} {surname}"
    return surname


def _company_alias(original: str) -> str:
    words = original.split()
    if words and words[0].upper() in ALL_LEGAL_FORMS:
        return f"{words[0]} {random.choice(COMPANY_PARTS['standalone'])}"
    if len(words) > 1 and words[-1].upper() in ALL_LEGAL_FORMS:
        return f"{random.choice(COMPANY_PARTS['standalone'])} {words[-1]}"
    return f"{random.choice(COMPANY_PARTS['prefixes'])} {random.choice(COMPANY_PARTS['suffixes'])}"


def _address_alias(original: str) -> str:
    number = random.randint(1, 150)
    return f"{number} {random.choice(ALIAS_STREET_TYPES)} {random.choice(ALIAS_STREET_NAMES)}"


def _city_alias(original: str) -> str:
    return random.choice(CITY_POOL)


def _email_alias(original: str) -> str:
    first = _ascii_slug(random.choice(GENDERED_FIRST_NAMES))
    last = _ascii_slug(random.choice(SURNAMES))
    return f"{first}.{last}@{random.choice(EMAIL_DOMAINS)}"


def _phone_alias(original: str) -> str:
    compact = re.sub(r"[\s.\-]", "", original)
    pairs = " ".join(f"{random.randint(10, 99)}" for _ in range(4))
    if compact.startswith("+44"):
        groups = " ".join(f"{random.randint(100, 999)}" for _ in range(3))
        return f"+44 {groups}"
    # UK domestic numbers carry 11 digits, French ones 10
    if re.fullmatch(r"0\d{10}", compact):
        return f"07{random.randint(100, 999)} {random.randint(100000, 999999)}"
    if compact.startswith(("+33", "0033")):
        return f"+33 6 {pairs}"
    if re.match(r"0[1-9]", compact):
        return f"06 {pairs}"
    return re.sub(r"\d", lambda _: str(random.randint(0, 9)), original)


def _mask(original: str) -> str:
    """Keep the first 4 characters, mask every later letter or digit."""
    head, tail = original[:4], original[4:]
    return head + re.sub(r"[0-9A-Za-z]", "X", tail)


def _url_alias(original: str) -> str:
    return f"https://exemple.fr/{random.choice(COMPANY_PARTS['standalone']).lower()}-{random.randint(100, 999)}"


def _unknown_alias(original: str) -> str:
    return f"[{random.choice(COMPANY_PARTS['standalone'])}-{random.randint(100, 999)}]"


def _ascii_slug(text: str) -> str:
    decomposed = unicodedata.normalize("NFD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch)).lower()


_REALISTIC = {
    EntityType.PERSON: _person_alias,
    EntityType.COMPANY: _company_alias,
    EntityType.ADDRESS: _address_alias,
    EntityType.CITY: _city_alias,
    EntityType.EMAIL: _email_alias,
    EntityType.PHONE: _phone_alias,
    EntityType.IBAN: _mask,
    EntityType.SSN: _mask,
    EntityType.URL: _url_alias,
    EntityType.UNKNOWN: _unknown_alias,
}
