"""Store — session alias maps and the classification cache.

Design goals:
  - Deterministic: a session's alias map is read once before assembly and
    written once after, so the same original text keeps the same alias
  - TTL cache: classification verdicts are reused until they expire, which
    keeps repeat terms off the network entirely
  - Pluggable: anything implementing ``Store`` works; ``MemoryStore`` here,
    ``SqliteStore`` for durability
"""

from __future__ import annotations
import time
from typing import Protocol, Sequence

from .types import ClassificationResult


class Store(Protocol):
    def get_alias_map(self, session_id: str) -> dict[str, str]:
        ...

    def set_alias_map(self, session_id: str, mapping: dict[str, str]) -> None:
        ...

    def get_cached_classification(self, term: str) -> list[ClassificationResult] | None:
        ...

    def set_cached_classification(
        self, term: str, results: Sequence[ClassificationResult], ttl_ms: int
    ) -> None:
        ...


def _now_ms() -> int:
    return int(time.time() * 1000)


class MemoryStore:
    """In-process store for tests, one-off calls and offline use."""

    __slots__ = ("_aliases", "_cache")

    def __init__(self) -> None:
        self._aliases: dict[str, dict[str, str]] = {}
        # term → (results, expires_at_ms)
        self._cache: dict[str, tuple[list[ClassificationResult], int]] = {}

    # ------------------------------------------------------------------
    # Alias maps
    # ------------------------------------------------------------------

    def get_alias_map(self, session_id: str) -> dict[str, str]:
        return dict(self._aliases.get(session_id, {}))

    def set_alias_map(self, session_id: str, mapping: dict[str, str]) -> None:
        self._aliases[session_id] = dict(mapping)

    # ------------------------------------------------------------------
    # Classification cache
    # ------------------------------------------------------------------

    def get_cached_classification(self, term: str) -> list[ClassificationResult] | None:
        entry = self._cache.get(term)
        if entry is None:
            return None
        results, expires_at = entry
        if _now_ms() > expires_at:
            del self._cache[term]
            return None
        return list(results)

    def set_cached_classification(
        self, term: str, results: Sequence[ClassificationResult], ttl_ms: int
    ) -> None:
        self._cache[term] = (list(results), _now_ms() + ttl_ms)

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def list_sessions(self) -> list[str]:
        return sorted(self._aliases)

    def clear(self) -> None:
        self._aliases.clear()
        self._cache.clear()
