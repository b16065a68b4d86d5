"""Assembler — fuses local groups and remote verdicts into typed entities."""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Mapping, Sequence

from .aliases import AliasCounters, generate_alias
from .types import (
    AliasStyle,
    ClassificationResult,
    Confidence,
    DetectedGroup,
    Entity,
    EntityType,
    LocalType,
)

_MAX_MERGE_GAP = 3

_LOCAL_ENTITY_TYPES: dict[LocalType, EntityType] = {
    LocalType.PERSON_CANDIDATE: EntityType.PERSON,
    LocalType.COMPANY_CANDIDATE: EntityType.COMPANY,
    LocalType.ADDRESS_FRAGMENT: EntityType.ADDRESS,
    LocalType.EMAIL: EntityType.EMAIL,
    LocalType.PHONE: EntityType.PHONE,
    LocalType.IBAN: EntityType.IBAN,
    LocalType.SSN: EntityType.SSN,
    LocalType.URL: EntityType.URL,
}

# Remote dictionary types that settle a bare candidate on their own
_REMOTE_ENTITY_TYPES: dict[str, EntityType] = {
    "first_name": EntityType.PERSON,
    "surname": EntityType.PERSON,
    "city": EntityType.CITY,
    "commune": EntityType.CITY,
    "company": EntityType.COMPANY,
}


@dataclass(slots=True)
class _Resolved:
    text: str
    start: int
    end: int
    type: EntityType
    confidence: Confidence
    sources: list[str] = field(default_factory=list)


def assemble(
    groups: Sequence[DetectedGroup],
    remote: Mapping[str, Sequence[ClassificationResult]],
    alias_map: dict[str, str],
    style: AliasStyle | str = AliasStyle.REALISTIC,
    *,
    counters: AliasCounters | None = None,
    source_text: str | None = None,
) -> list[Entity]:
    """Resolve groups to entities, merge split names, then assign aliases.

    Aliases are generated after merging so "Jean" + "Dupont" is keyed (and
    later reused) as "Jean Dupont".  When source_text is given, merged
    entities take their exact text from it.
    """
    style = AliasStyle(style)
    if counters is None:
        counters = AliasCounters.from_alias_map(alias_map)

    resolved = [_resolve(group, remote) for group in groups]
    merged = _merge_adjacent_persons(sorted(resolved, key=lambda r: r.start), source_text)

    return [
        Entity(
            text=r.text,
            start=r.start,
            end=r.end,
            type=r.type,
            confidence=r.confidence,
            sources=r.sources,
            proposed_alias=generate_alias(r.type, r.text, alias_map, style, counters),
        )
        for r in merged
    ]


def _resolve(group: DetectedGroup, remote: Mapping[str, Sequence[ClassificationResult]]) -> _Resolved:
    if group.skip_classification and group.local_type is not None:
        return _Resolved(
            text=group.text,
            start=group.start,
            end=group.end,
            type=_LOCAL_ENTITY_TYPES[group.local_type],
            confidence=Confidence.HIGH,
            sources=[f"local:{group.local_type.value}"],
        )

    sources: list[str] = []
    remote_type: str | None = None

    # the group text decides the remote type first, then its tokens in order
    for term in [group.text] + [t.text for t in group.tokens]:
        for r in remote.get(term, ()):
            if not r.match:
                continue
            if r.dictionary and r.dictionary not in sources:
                sources.append(r.dictionary)
            if remote_type is None:
                remote_type = r.type

    corroborated = remote_type is not None
    if group.local_type is not None:
        entity_type = _LOCAL_ENTITY_TYPES[group.local_type]
        confidence = Confidence.HIGH if corroborated else Confidence.MEDIUM
    elif remote_type in _REMOTE_ENTITY_TYPES:
        entity_type = _REMOTE_ENTITY_TYPES[remote_type]
        confidence = Confidence.MEDIUM
    else:
        # surfaced for human review rather than dropped
        entity_type = EntityType.UNKNOWN
        confidence = Confidence.LOW

    if not sources:
        local = group.local_type.value if group.local_type is not None else "candidate"
        sources = [f"local:{local}"]

    return _Resolved(
        text=group.text,
        start=group.start,
        end=group.end,
        type=entity_type,
        confidence=confidence,
        sources=sources,
    )


def _merge_adjacent_persons(resolved: list[_Resolved], source_text: str | None) -> list[_Resolved]:
    merged: list[_Resolved] = []
    for current in resolved:
        prev = merged[-1] if merged else None
        if prev is not None and _touching_persons(prev, current, source_text):
            if source_text is not None:
                text = source_text[prev.start:current.end]
            else:
                text = f"{prev.text} {current.text}"
            merged[-1] = _Resolved(
                text=text,
                start=prev.start,
                end=current.end,
                type=EntityType.PERSON,
                confidence=max(prev.confidence, current.confidence, key=lambda c: c.rank),
                sources=list(dict.fromkeys(prev.sources + current.sources)),
            )
            continue
        merged.append(current)
    return merged


def _touching_persons(a: _Resolved, b: _Resolved, source_text: str | None) -> bool:
    if a.type is not EntityType.PERSON or b.type is not EntityType.PERSON:
        return False
    gap = b.start - a.end
    if gap < 0 or gap > _MAX_MERGE_GAP:
        return False
    if source_text is not None:
        return source_text[a.end:b.start].isspace() or gap == 0
    return True
