"""In-memory entity graph — tests, offline use, and the reference semantics."""

from __future__ import annotations
from collections import defaultdict
from dataclasses import replace

from .entity_graph import DocumentRecord, EntityOccurrence, KnownEntity
from .types import EntityType


class MemoryEntityGraph:
    """Dict-backed EntityGraphPort with the same secondary indices as SQLite."""

    def __init__(self) -> None:
        self._entities: dict[str, KnownEntity] = {}
        self._by_canonical: dict[str, set[str]] = defaultdict(set)
        self._occurrences: list[EntityOccurrence] = []
        self._documents: dict[str, DocumentRecord] = {}

    # ------------------------------------------------------------------
    # Entities
    # ------------------------------------------------------------------

    def find_by_canonical(self, canonical: str) -> list[KnownEntity]:
        ids = self._by_canonical.get(canonical.upper(), set())
        return [replace(self._entities[i]) for i in sorted(ids)]

    def find_by_type(self, entity_type: EntityType) -> list[KnownEntity]:
        return [replace(e) for e in self._entities.values() if e.type == entity_type]

    def search(self, prefix: str, limit: int = 20) -> list[KnownEntity]:
        upper = prefix.upper()
        hits = sorted(
            (e for e in self._entities.values() if e.canonical.startswith(upper)),
            key=lambda e: e.canonical,
        )
        return [replace(e) for e in hits[:limit]]

    def put_entity(self, entity: KnownEntity) -> None:
        old = self._entities.get(entity.id)
        if old is not None:
            self._by_canonical[old.canonical].discard(entity.id)
        self._entities[entity.id] = replace(entity)
        self._by_canonical[entity.canonical].add(entity.id)

    def get_entity(self, entity_id: str) -> KnownEntity | None:
        entity = self._entities.get(entity_id)
        return replace(entity) if entity is not None else None

    # ------------------------------------------------------------------
    # Occurrences
    # ------------------------------------------------------------------

    def add_occurrence(self, occurrence: EntityOccurrence) -> None:
        self._occurrences.append(replace(occurrence))

    def get_occurrences(self, entity_id: str) -> list[EntityOccurrence]:
        return [replace(o) for o in self._occurrences if o.entity_id == entity_id]

    def get_document_occurrences(self, document_id: str) -> list[EntityOccurrence]:
        return [replace(o) for o in self._occurrences if o.document_id == document_id]

    def confirm_occurrence(self, entity_id: str, document_id: str) -> None:
        for o in self._occurrences:
            if o.entity_id == entity_id and o.document_id == document_id:
                o.confirmed = True

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    def put_document(self, doc: DocumentRecord) -> None:
        self._documents[doc.id] = replace(doc)

    def get_document(self, document_id: str) -> DocumentRecord | None:
        doc = self._documents.get(document_id)
        return replace(doc) if doc is not None else None

    def find_by_fingerprint(self, fingerprint: str) -> DocumentRecord | None:
        for doc in self._documents.values():
            if doc.fingerprint == fingerprint:
                return replace(doc)
        return None

    def list_documents(self, limit: int = 20, offset: int = 0) -> list[DocumentRecord]:
        ordered = sorted(self._documents.values(), key=lambda d: d.processed_at, reverse=True)
        return [replace(d) for d in ordered[offset:offset + limit]]

    # ------------------------------------------------------------------
    # Stats
    # ------------------------------------------------------------------

    def entity_count(self) -> int:
        return len(self._entities)

    def document_count(self) -> int:
        return len(self._documents)
