"""Classification client — asks the remote dictionary service about candidate terms.

Only word tokens of groups that the local detector could not resolve leave
the device, always deduplicated, cached, and hidden among decoys.  The
service is an optional signal: any failure degrades a batch to "no remote
signal" and the pipeline carries on with local confidence.

Endpoints are tried in order, Connect-style RPC path first, then the plain
REST path.  Moving on to the next endpoint only happens when the current
one answers 404/415; any other failure abandons the batch.
"""

from __future__ import annotations
import json
import logging
import math
from dataclasses import dataclass
from typing import Any, Sequence

from .decoys import mix_decoys
from .store import Store
from .transport import Transport, TransportError
from .types import ClassificationResult, DetectedGroup, TokenKind

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:8420"
DEFAULT_CACHE_TTL_MS = 24 * 60 * 60 * 1000

_FALLBACK_STATUSES = frozenset({404, 415})
_HEADERS = {"Content-Type": "application/json", "Accept": "application/json"}


@dataclass(frozen=True, slots=True)
class Endpoint:
    name: str
    path: str


CONNECT_ENDPOINT = Endpoint("connect", "/touchstone.v1.ClassificationService/ClassifyBatch")
REST_ENDPOINT = Endpoint("rest", "/v1/classify/batch")
DEFAULT_ENDPOINTS: tuple[Endpoint, ...] = (CONNECT_ENDPOINT, REST_ENDPOINT)


@dataclass(frozen=True)
class ClassifierConfig:
    """Where and how to reach the classification service."""
    base_url: str = DEFAULT_BASE_URL
    # seconds; read by the factories that build the transport
    # (Anonymizer.create, create_anonymizer), not by classify_batch
    timeout: float = 5.0
    max_batch_size: int = 100          # real terms + decoys per request
    jurisdictions: tuple[str, ...] | None = None
    cache_ttl_ms: int = DEFAULT_CACHE_TTL_MS
    endpoints: tuple[Endpoint, ...] = DEFAULT_ENDPOINTS

    def __post_init__(self) -> None:
        if self.max_batch_size < 1:
            raise ValueError("max_batch_size must be at least 1")


def classify_batch(
    groups: Sequence[DetectedGroup],
    transport: Transport,
    store: Store,
    config: ClassifierConfig | None = None,
    decoy_ratio: float = 0.35,
) -> dict[str, list[ClassificationResult]]:
    """Classify the unresolved terms of groups; returns term → results.

    Cache lookups and writes go straight to the store; store errors are
    not caught here.
    """
    cfg = config or ClassifierConfig()
    results: dict[str, list[ClassificationResult]] = {}
    pending: list[str] = []
    checked: set[str] = set()

    def lookup(term: str) -> bool:
        checked.add(term)
        cached = store.get_cached_classification(term)
        if cached is None:
            return False
        results[term] = cached
        return True

    for group in groups:
        if group.skip_classification:
            continue
        if group.text not in checked:
            lookup(group.text)
        # the service matches single words, so only tokens go out
        for token in group.tokens:
            if token.kind is not TokenKind.WORD:
                continue
            if token.text in results or token.text in pending:
                continue
            if token.text in checked or not lookup(token.text):
                pending.append(token.text)

    if not pending:
        return results

    per_batch = max(1, math.floor(cfg.max_batch_size / (1 + max(decoy_ratio, 0.0))))
    batches = [pending[i:i + per_batch] for i in range(0, len(pending), per_batch)]
    logger.debug(
        "Classifying %d terms in %d batch(es), %d served from cache",
        len(pending), len(batches), len(results),
    )

    for chunk in batches:
        batch = mix_decoys(chunk, decoy_ratio, cfg.max_batch_size)
        classified = _post_batch(batch.mixed, transport, cfg)
        if classified is None:
            continue
        for term, term_results in classified.items():
            # decoys are dropped here and nowhere else
            if term not in batch.real_set:
                continue
            results[term] = term_results
            store.set_cached_classification(term, term_results, cfg.cache_ttl_ms)

    return results


def _post_batch(
    mixed: list[str],
    transport: Transport,
    cfg: ClassifierConfig,
) -> dict[str, list[ClassificationResult]] | None:
    """Send one mixed batch through the endpoint chain; None on failure."""
    body = json.dumps(
        {"terms": mixed, "jurisdictions": list(cfg.jurisdictions or [])},
        ensure_ascii=False,
    )
    base = cfg.base_url.rstrip("/")

    for endpoint in cfg.endpoints:
        try:
            response = transport.post(base + endpoint.path, body, dict(_HEADERS))
        except (TransportError, OSError) as e:
            logger.warning("Classifier unreachable via %s endpoint, batch skipped: %s", endpoint.name, e)
            return None

        if response.status in _FALLBACK_STATUSES:
            logger.info("Classifier %s endpoint returned %d, trying next", endpoint.name, response.status)
            continue
        if response.status != 200:
            logger.warning(
                "Classifier %s endpoint returned %d, batch skipped", endpoint.name, response.status
            )
            return None

        try:
            return parse_classifications(response.body)
        except ValueError as e:
            logger.warning("Unreadable classifier response, batch skipped: %s", e)
            return None

    logger.warning("No classifier endpoint accepted the batch")
    return None


def parse_classifications(body: str) -> dict[str, list[ClassificationResult]]:
    """Parse ``{"classifications": {term: [...] | {"results": [...]}}}``."""
    data = json.loads(body)
    if not isinstance(data, dict) or not isinstance(data.get("classifications"), dict):
        raise ValueError("missing 'classifications' object")

    parsed: dict[str, list[ClassificationResult]] = {}
    for term, value in data["classifications"].items():
        items: Any = value.get("results", []) if isinstance(value, dict) else value
        if not isinstance(items, list):
            raise ValueError(f"unexpected classification payload type {type(items).__name__}")
        parsed[term] = [ClassificationResult.from_dict(item) for item in items if isinstance(item, dict)]
    return parsed
