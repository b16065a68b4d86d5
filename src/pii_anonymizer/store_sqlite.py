"""Persistent store backed by SQLite — survives process restarts.

Drop-in replacement for MemoryStore when alias maps and the classification
cache must outlive the process.

Usage:
    store = SqliteStore(db_path="~/.pii-anonymizer/store.db")
    result = pipeline(text, transport, store, "session_abc")
"""

from __future__ import annotations
import json
import logging
import sqlite3
import threading
import time
from pathlib import Path
from typing import Sequence

from .types import ClassificationResult

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS aliases (
    session_id TEXT NOT NULL,
    original TEXT NOT NULL,
    alias TEXT NOT NULL,
    PRIMARY KEY (session_id, original)
);
CREATE TABLE IF NOT EXISTS classification_cache (
    term TEXT PRIMARY KEY,
    results TEXT NOT NULL,
    expires_at INTEGER NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_cache_expiry
    ON classification_cache(expires_at);
"""


class SqliteStore:
    """Persistent alias maps and TTL classification cache."""

    __slots__ = ("_db", "_lock")

    def __init__(self, db_path: str | Path = "store.db") -> None:
        db_path = Path(db_path).expanduser()
        db_path.parent.mkdir(parents=True, exist_ok=True)
        self._db = sqlite3.connect(str(db_path), check_same_thread=False)
        self._db.executescript(_SCHEMA)
        self._lock = threading.Lock()
        logger.debug("Opened store at %s", db_path)

    # ------------------------------------------------------------------
    # Alias maps
    # ------------------------------------------------------------------

    def get_alias_map(self, session_id: str) -> dict[str, str]:
        with self._lock:
            rows = self._db.execute(
                "SELECT original, alias FROM aliases WHERE session_id = ?",
                (session_id,),
            ).fetchall()
        return {original: alias for original, alias in rows}

    def set_alias_map(self, session_id: str, mapping: dict[str, str]) -> None:
        with self._lock, self._db:
            self._db.execute("DELETE FROM aliases WHERE session_id = ?", (session_id,))
            self._db.executemany(
                "INSERT INTO aliases (session_id, original, alias) VALUES (?, ?, ?)",
                [(session_id, original, alias) for original, alias in mapping.items()],
            )

    # ------------------------------------------------------------------
    # Classification cache
    # ------------------------------------------------------------------

    def get_cached_classification(self, term: str) -> list[ClassificationResult] | None:
        with self._lock:
            row = self._db.execute(
                "SELECT results, expires_at FROM classification_cache WHERE term = ?",
                (term,),
            ).fetchone()
            if row is None:
                return None
            payload, expires_at = row
            if int(time.time() * 1000) > expires_at:
                with self._db:
                    self._db.execute("DELETE FROM classification_cache WHERE term = ?", (term,))
                return None
        return [ClassificationResult.from_dict(item) for item in json.loads(payload)]

    def set_cached_classification(
        self, term: str, results: Sequence[ClassificationResult], ttl_ms: int
    ) -> None:
        payload = json.dumps([r.to_dict() for r in results], ensure_ascii=False)
        expires_at = int(time.time() * 1000) + ttl_ms
        with self._lock, self._db:
            self._db.execute(
                "INSERT OR REPLACE INTO classification_cache (term, results, expires_at) "
                "VALUES (?, ?, ?)",
                (term, payload, expires_at),
            )

    def purge_expired(self) -> int:
        """Drop expired cache rows; returns how many were removed."""
        with self._lock, self._db:
            cur = self._db.execute(
                "DELETE FROM classification_cache WHERE expires_at < ?",
                (int(time.time() * 1000),),
            )
        return cur.rowcount

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def list_sessions(self) -> list[str]:
        """List all session IDs in the database."""
        with self._lock:
            rows = self._db.execute("SELECT DISTINCT session_id FROM aliases").fetchall()
        return sorted(r[0] for r in rows)

    def delete_session(self, session_id: str) -> None:
        """Delete the alias map of a session."""
        with self._lock, self._db:
            self._db.execute("DELETE FROM aliases WHERE session_id = ?", (session_id,))

    def close(self) -> None:
        self._db.close()
