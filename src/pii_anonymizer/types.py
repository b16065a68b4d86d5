"""Core types."""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class TokenKind(str, Enum):
    WORD = "word"
    NUMBER = "number"
    PUNCTUATION = "punctuation"
    WHITESPACE = "whitespace"
    PATTERN = "pattern"


class PatternType(str, Enum):
    EMAIL = "email"
    PHONE = "phone"
    IBAN = "iban"
    SSN_FR = "ssn_fr"
    URL = "url"


class LocalType(str, Enum):
    PERSON_CANDIDATE = "person_candidate"
    COMPANY_CANDIDATE = "company_candidate"
    ADDRESS_FRAGMENT = "address_fragment"
    EMAIL = "email"
    PHONE = "phone"
    IBAN = "iban"
    SSN = "ssn"
    URL = "url"


class GroupConfidence(str, Enum):
    CERTAIN = "certain"
    PROBABLE = "probable"
    CANDIDATE = "candidate"


class EntityType(str, Enum):
    PERSON = "person"
    COMPANY = "company"
    ADDRESS = "address"
    CITY = "city"
    EMAIL = "email"
    PHONE = "phone"
    IBAN = "iban"
    SSN = "ssn"
    URL = "url"
    UNKNOWN = "unknown"


class Confidence(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return _CONFIDENCE_RANK[self]


_CONFIDENCE_RANK = {Confidence.LOW: 0, Confidence.MEDIUM: 1, Confidence.HIGH: 2}


class AliasStyle(str, Enum):
    REALISTIC = "realistic"
    GENERIC = "generic"


@dataclass(frozen=True, slots=True)
class Token:
    """A typed slice of the original text."""
    text: str
    start: int
    end: int
    kind: TokenKind
    pattern_type: PatternType | None = None


@dataclass(frozen=True, slots=True)
class DetectedGroup:
    """A run of tokens the local detector believes forms one entity."""
    tokens: tuple[Token, ...]
    text: str                          # exact source slice
    local_type: LocalType | None
    confidence: GroupConfidence
    skip_classification: bool          # resolved locally, never sent out

    @property
    def start(self) -> int:
        return self.tokens[0].start

    @property
    def end(self) -> int:
        return self.tokens[-1].end


@dataclass(frozen=True, slots=True)
class ClassificationResult:
    """One dictionary verdict from the remote classification service."""
    dictionary: str
    match: bool
    type: str
    jurisdiction: str = ""
    confidence: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ClassificationResult:
        metadata = data.get("metadata")
        return cls(
            dictionary=str(data.get("dict", "")),
            match=data.get("match") is True,
            type=str(data.get("type", "")),
            jurisdiction=str(data.get("jurisdiction", "")),
            confidence=str(data.get("confidence", "")),
            metadata=dict(metadata) if isinstance(metadata, dict) else {},
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "dict": self.dictionary,
            "match": self.match,
            "type": self.type,
            "jurisdiction": self.jurisdiction,
            "confidence": self.confidence,
            "metadata": dict(self.metadata),
        }


@dataclass(slots=True)
class Entity:
    """A detected entity ready for substitution."""
    text: str
    start: int
    end: int
    type: EntityType
    confidence: Confidence
    sources: list[str] = field(default_factory=list)
    proposed_alias: str = ""
    accepted_alias: str | None = None   # set by a human reviewer

    @property
    def alias(self) -> str:
        return self.accepted_alias if self.accepted_alias is not None else self.proposed_alias


@dataclass(slots=True)
class PipelineResult:
    """Result of a full pipeline run."""
    entities: list[Entity]
    anonymized_text: str
    language: str
