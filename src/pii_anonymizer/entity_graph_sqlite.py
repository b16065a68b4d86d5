"""Persistent entity graph backed by SQLite.

Drop-in replacement for MemoryEntityGraph.

Usage:
    graph = SqliteEntityGraph(db_path="~/.pii-anonymizer/graph.db")
    record_document("doc_1", "Bail Lyon", text, entities, graph)
    matches = find_matches(detected, graph)
"""

from __future__ import annotations
import logging
import sqlite3
import threading
from pathlib import Path

from .entity_graph import DocumentRecord, EntityOccurrence, KnownEntity
from .types import EntityType

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS entities (
    id TEXT PRIMARY KEY,
    canonical TEXT NOT NULL,
    type TEXT NOT NULL,
    first_seen TEXT NOT NULL,
    last_seen TEXT NOT NULL,
    document_count INTEGER NOT NULL DEFAULT 0
);
CREATE INDEX IF NOT EXISTS idx_entities_canonical ON entities(canonical);
CREATE INDEX IF NOT EXISTS idx_entities_type ON entities(type);

CREATE TABLE IF NOT EXISTS occurrences (
    seq INTEGER PRIMARY KEY AUTOINCREMENT,
    entity_id TEXT NOT NULL,
    document_id TEXT NOT NULL,
    original_text TEXT NOT NULL,
    alias TEXT NOT NULL,
    confirmed INTEGER NOT NULL DEFAULT 0
);
CREATE INDEX IF NOT EXISTS idx_occurrences_entity ON occurrences(entity_id);
CREATE INDEX IF NOT EXISTS idx_occurrences_document ON occurrences(document_id);

CREATE TABLE IF NOT EXISTS documents (
    id TEXT PRIMARY KEY,
    label TEXT NOT NULL,
    processed_at TEXT NOT NULL,
    entity_count INTEGER NOT NULL,
    fingerprint TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_documents_fingerprint ON documents(fingerprint);
"""

_ENTITY_COLS = "id, canonical, type, first_seen, last_seen, document_count"
_OCCURRENCE_COLS = "entity_id, document_id, original_text, alias, confirmed"
_DOCUMENT_COLS = "id, label, processed_at, entity_count, fingerprint"


def _entity(row: tuple) -> KnownEntity:
    eid, canonical, etype, first_seen, last_seen, count = row
    return KnownEntity(eid, canonical, EntityType(etype), first_seen, last_seen, count)


def _occurrence(row: tuple) -> EntityOccurrence:
    entity_id, document_id, original_text, alias, confirmed = row
    return EntityOccurrence(entity_id, document_id, original_text, alias, bool(confirmed))


def _document(row: tuple) -> DocumentRecord:
    return DocumentRecord(*row)


class SqliteEntityGraph:
    """EntityGraphPort over three SQLite tables."""

    __slots__ = ("_db", "_lock")

    def __init__(self, db_path: str | Path = "graph.db") -> None:
        db_path = Path(db_path).expanduser()
        db_path.parent.mkdir(parents=True, exist_ok=True)
        # find_matches reads from worker threads; the lock serializes access
        self._db = sqlite3.connect(str(db_path), check_same_thread=False)
        self._db.executescript(_SCHEMA)
        self._lock = threading.Lock()
        logger.debug("Opened entity graph at %s", db_path)

    def _query(self, sql: str, params: tuple = ()) -> list[tuple]:
        with self._lock:
            return self._db.execute(sql, params).fetchall()

    def _write(self, sql: str, params: tuple = ()) -> None:
        with self._lock, self._db:
            self._db.execute(sql, params)

    # ------------------------------------------------------------------
    # Entities
    # ------------------------------------------------------------------

    def find_by_canonical(self, canonical: str) -> list[KnownEntity]:
        rows = self._query(
            f"SELECT {_ENTITY_COLS} FROM entities WHERE canonical = ? ORDER BY id",
            (canonical.upper(),),
        )
        return [_entity(r) for r in rows]

    def find_by_type(self, entity_type: EntityType) -> list[KnownEntity]:
        rows = self._query(
            f"SELECT {_ENTITY_COLS} FROM entities WHERE type = ? ORDER BY id",
            (EntityType(entity_type).value,),
        )
        return [_entity(r) for r in rows]

    def search(self, prefix: str, limit: int = 20) -> list[KnownEntity]:
        upper = prefix.upper()
        escaped = upper.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        rows = self._query(
            f"SELECT {_ENTITY_COLS} FROM entities WHERE canonical LIKE ? ESCAPE '\\' "
            "ORDER BY canonical LIMIT ?",
            (escaped + "%", limit),
        )
        # LIKE is case-insensitive for ASCII only; canonical forms are upper-cased anyway
        return [_entity(r) for r in rows if r[1].startswith(upper)]

    def put_entity(self, entity: KnownEntity) -> None:
        self._write(
            f"INSERT OR REPLACE INTO entities ({_ENTITY_COLS}) VALUES (?, ?, ?, ?, ?, ?)",
            (
                entity.id,
                entity.canonical,
                EntityType(entity.type).value,
                entity.first_seen,
                entity.last_seen,
                entity.document_count,
            ),
        )

    def get_entity(self, entity_id: str) -> KnownEntity | None:
        rows = self._query(f"SELECT {_ENTITY_COLS} FROM entities WHERE id = ?", (entity_id,))
        return _entity(rows[0]) if rows else None

    # ------------------------------------------------------------------
    # Occurrences
    # ------------------------------------------------------------------

    def add_occurrence(self, occurrence: EntityOccurrence) -> None:
        self._write(
            f"INSERT INTO occurrences ({_OCCURRENCE_COLS}) VALUES (?, ?, ?, ?, ?)",
            (
                occurrence.entity_id,
                occurrence.document_id,
                occurrence.original_text,
                occurrence.alias,
                int(occurrence.confirmed),
            ),
        )

    def get_occurrences(self, entity_id: str) -> list[EntityOccurrence]:
        rows = self._query(
            f"SELECT {_OCCURRENCE_COLS} FROM occurrences WHERE entity_id = ? ORDER BY seq",
            (entity_id,),
        )
        return [_occurrence(r) for r in rows]

    def get_document_occurrences(self, document_id: str) -> list[EntityOccurrence]:
        rows = self._query(
            f"SELECT {_OCCURRENCE_COLS} FROM occurrences WHERE document_id = ? ORDER BY seq",
            (document_id,),
        )
        return [_occurrence(r) for r in rows]

    def confirm_occurrence(self, entity_id: str, document_id: str) -> None:
        self._write(
            "UPDATE occurrences SET confirmed = 1 WHERE entity_id = ? AND document_id = ?",
            (entity_id, document_id),
        )

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    def put_document(self, doc: DocumentRecord) -> None:
        self._write(
            f"INSERT OR REPLACE INTO documents ({_DOCUMENT_COLS}) VALUES (?, ?, ?, ?, ?)",
            (doc.id, doc.label, doc.processed_at, doc.entity_count, doc.fingerprint),
        )

    def get_document(self, document_id: str) -> DocumentRecord | None:
        rows = self._query(f"SELECT {_DOCUMENT_COLS} FROM documents WHERE id = ?", (document_id,))
        return _document(rows[0]) if rows else None

    def find_by_fingerprint(self, fingerprint: str) -> DocumentRecord | None:
        rows = self._query(
            f"SELECT {_DOCUMENT_COLS} FROM documents WHERE fingerprint = ? "
            "ORDER BY processed_at DESC LIMIT 1",
            (fingerprint,),
        )
        return _document(rows[0]) if rows else None

    def list_documents(self, limit: int = 20, offset: int = 0) -> list[DocumentRecord]:
        rows = self._query(
            f"SELECT {_DOCUMENT_COLS} FROM documents ORDER BY processed_at DESC LIMIT ? OFFSET ?",
            (limit, offset),
        )
        return [_document(r) for r in rows]

    # ------------------------------------------------------------------
    # Stats
    # ------------------------------------------------------------------

    def entity_count(self) -> int:
        return self._query("SELECT COUNT(*) FROM entities")[0][0]

    def document_count(self) -> int:
        return self._query("SELECT COUNT(*) FROM documents")[0][0]

    def close(self) -> None:
        self._db.close()
