"""Entity graph — cross-document identity for confirmed entities.

Three tables sit behind ``EntityGraphPort``: known entities (indexed by
canonical text and by type), occurrences (indexed by entity and by
document) and documents (indexed by fingerprint).  ``find_matches`` and
``record_document`` only use the port, so any backing engine works.

A match is a proposal for a human reviewer, never an automatic rewrite.
"""

from __future__ import annotations
import hashlib
import logging
import re
import secrets
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Iterable, Protocol, Sequence

from .types import EntityType

logger = logging.getLogger(__name__)

FINGERPRINT_PREFIX_CHARS = 200
MAX_CO_ENTITIES = 5


class MatchConfidence(str, Enum):
    EXACT = "exact"
    LIKELY = "likely"
    POSSIBLE = "possible"


@dataclass(slots=True)
class KnownEntity:
    """An entity tracked across documents."""
    id: str
    canonical: str
    type: EntityType
    first_seen: str        # ISO 8601
    last_seen: str         # ISO 8601
    document_count: int


@dataclass(slots=True)
class EntityOccurrence:
    """One appearance of a known entity in one document."""
    entity_id: str
    document_id: str
    original_text: str
    alias: str
    confirmed: bool = False


@dataclass(slots=True)
class DocumentRecord:
    id: str
    label: str
    processed_at: str      # ISO 8601
    entity_count: int
    fingerprint: str       # dedup only, the content itself is never stored


@dataclass(slots=True)
class EntityMatch:
    known_entity: KnownEntity
    match_confidence: MatchConfidence
    previous_alias: str
    previous_document: DocumentRecord
    co_entities: list[str] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class DetectedEntity:
    text: str
    type: EntityType


@dataclass(frozen=True, slots=True)
class RecordedEntity:
    """An entity the reviewer kept for a document."""
    text: str
    type: EntityType
    alias: str
    confirmed: bool = True
    known_entity_id: str | None = None


class EntityGraphPort(Protocol):
    # ── Entities ──
    def find_by_canonical(self, canonical: str) -> list[KnownEntity]: ...
    def find_by_type(self, entity_type: EntityType) -> list[KnownEntity]: ...
    def search(self, prefix: str, limit: int = 20) -> list[KnownEntity]: ...
    def put_entity(self, entity: KnownEntity) -> None: ...
    def get_entity(self, entity_id: str) -> KnownEntity | None: ...

    # ── Occurrences (returned in insertion order) ──
    def add_occurrence(self, occurrence: EntityOccurrence) -> None: ...
    def get_occurrences(self, entity_id: str) -> list[EntityOccurrence]: ...
    def get_document_occurrences(self, document_id: str) -> list[EntityOccurrence]: ...
    def confirm_occurrence(self, entity_id: str, document_id: str) -> None: ...

    # ── Documents ──
    def put_document(self, doc: DocumentRecord) -> None: ...
    def get_document(self, document_id: str) -> DocumentRecord | None: ...
    def find_by_fingerprint(self, fingerprint: str) -> DocumentRecord | None: ...
    def list_documents(self, limit: int = 20, offset: int = 0) -> list[DocumentRecord]: ...

    # ── Stats ──
    def entity_count(self) -> int: ...
    def document_count(self) -> int: ...


# ── Helpers ──────────────────────────────────────────────────────────

_WHITESPACE = re.compile(r"\s+")


def canonicalize(text: str) -> str:
    """Join key for identity: "  Jean-Pierre   Dupont " → "JEAN-PIERRE DUPONT"."""
    return _WHITESPACE.sub(" ", text.strip().upper())


def fingerprint(text: str) -> str:
    """SHA-256 of the first characters of a document."""
    return hashlib.sha256(text[:FINGERPRINT_PREFIX_CHARS].encode("utf-8")).hexdigest()


def generate_id(prefix: str) -> str:
    """Sortable, collision-resistant ID: prefix + ms timestamp + random hex."""
    return f"{prefix}{int(time.time() * 1000):011x}{secrets.token_hex(4)}"


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()


# ── Matching ─────────────────────────────────────────────────────────

@dataclass(slots=True)
class _Candidate:
    detected: DetectedEntity
    canonical: str
    known: KnownEntity
    same_type: bool
    last_occurrence: EntityOccurrence


def find_matches(
    detected: Iterable[DetectedEntity],
    graph: EntityGraphPort,
    *,
    max_workers: int = 8,
) -> dict[str, EntityMatch]:
    """Propose known entities for the entities detected in a new document.

    Per-candidate lookups are independent reads and run in a thread pool;
    each previous document (and its occurrences) is fetched once and
    shared by every candidate that points at it.
    """
    detected = list(detected)
    if not detected:
        return {}
    current_canonicals = {canonicalize(d.text) for d in detected}

    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        candidates = [
            c for c in pool.map(lambda d: _lookup_candidate(d, graph), detected)
            if c is not None
        ]
        doc_ids = sorted({c.last_occurrence.document_id for c in candidates})
        documents = dict(zip(doc_ids, pool.map(graph.get_document, doc_ids)))
        doc_occurrences = dict(zip(doc_ids, pool.map(graph.get_document_occurrences, doc_ids)))

    matches: dict[str, EntityMatch] = {}
    for c in candidates:
        document_id = c.last_occurrence.document_id
        previous = documents.get(document_id)
        if previous is None:
            logger.debug("Occurrence points at missing document %s", document_id)
            continue

        co_texts = [
            o.original_text
            for o in doc_occurrences.get(document_id, [])
            if o.entity_id != c.known.id
        ]
        if not c.same_type:
            confidence = MatchConfidence.POSSIBLE
        elif c.known.canonical == c.canonical and any(
            canonicalize(t) in current_canonicals - {c.canonical} for t in co_texts
        ):
            confidence = MatchConfidence.EXACT
        elif c.known.canonical == c.canonical:
            confidence = MatchConfidence.LIKELY
        else:
            confidence = MatchConfidence.POSSIBLE

        matches[c.detected.text] = EntityMatch(
            known_entity=c.known,
            match_confidence=confidence,
            previous_alias=c.last_occurrence.alias,
            previous_document=previous,
            co_entities=co_texts[:MAX_CO_ENTITIES],
        )
    return matches


def _lookup_candidate(detected: DetectedEntity, graph: EntityGraphPort) -> _Candidate | None:
    canonical = canonicalize(detected.text)
    known = graph.find_by_canonical(canonical)
    if not known:
        return None

    by_recency = sorted(known, key=lambda k: k.last_seen, reverse=True)
    same_type = [k for k in by_recency if k.type == detected.type]
    best = same_type[0] if same_type else by_recency[0]

    occurrences = graph.get_occurrences(best.id)
    if not occurrences:
        return None
    return _Candidate(
        detected=detected,
        canonical=canonical,
        known=best,
        same_type=bool(same_type),
        last_occurrence=occurrences[-1],
    )


# ── Recording ────────────────────────────────────────────────────────

def record_document(
    document_id: str,
    label: str,
    text: str,
    entities: Sequence[RecordedEntity],
    graph: EntityGraphPort,
) -> DocumentRecord:
    """Persist a reviewed document and its entities to the graph.

    ``document_count`` is recomputed from the distinct documents among an
    entity's occurrences instead of being incremented.  Entities are
    handled one by one; the whole call is not atomic.
    """
    now = _utcnow()
    doc = DocumentRecord(
        id=document_id,
        label=label,
        processed_at=now,
        entity_count=len(entities),
        fingerprint=fingerprint(text),
    )
    graph.put_document(doc)

    created = 0
    for ent in entities:
        canonical = canonicalize(ent.text)
        known = graph.get_entity(ent.known_entity_id) if ent.known_entity_id else None
        if known is None:
            known = next((k for k in graph.find_by_canonical(canonical) if k.type == ent.type), None)

        if known is None:
            known = KnownEntity(
                id=ent.known_entity_id or generate_id("ent_"),
                canonical=canonical,
                type=ent.type,
                first_seen=now,
                last_seen=now,
                document_count=1,
            )
            graph.put_entity(known)
            created += 1

        graph.add_occurrence(EntityOccurrence(
            entity_id=known.id,
            document_id=document_id,
            original_text=ent.text,
            alias=ent.alias,
            confirmed=ent.confirmed,
        ))
        distinct_docs = {o.document_id for o in graph.get_occurrences(known.id)}
        graph.put_entity(replace(known, last_seen=now, document_count=len(distinct_docs)))

    logger.info(
        "Recorded document %s: %d entities, %d new", document_id, len(entities), created
    )
    return doc
