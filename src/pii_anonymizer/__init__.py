"""PII Anonymizer — reversible pseudonymization of personal data in text."""

from .anonymizer import Anonymizer, AnonymizeResult, anonymize, anonymize_batch
from .classifier import ClassifierConfig, classify_batch
from .config import create_anonymizer, load_config, load_from_yaml
from .entity_graph import (
    DetectedEntity, EntityMatch, MatchConfidence, RecordedEntity,
    find_matches, record_document,
)
from .entity_graph_memory import MemoryEntityGraph
from .entity_graph_sqlite import SqliteEntityGraph
from .pipeline import PipelineOptions, pipeline
from .store import MemoryStore, Store
from .store_sqlite import SqliteStore
from .transport import OfflineTransport, RequestsTransport, TransportError, TransportResponse
from .types import AliasStyle, Confidence, Entity, EntityType, PipelineResult

__all__ = [
    "Anonymizer", "AnonymizeResult", "anonymize", "anonymize_batch",
    "ClassifierConfig", "classify_batch",
    "create_anonymizer", "load_config", "load_from_yaml",
    "DetectedEntity", "EntityMatch", "MatchConfidence", "RecordedEntity",
    "find_matches", "record_document",
    "MemoryEntityGraph", "SqliteEntityGraph",
    "PipelineOptions", "pipeline",
    "MemoryStore", "Store", "SqliteStore",
    "OfflineTransport", "RequestsTransport", "TransportError", "TransportResponse",
    "AliasStyle", "Confidence", "Entity", "EntityType", "PipelineResult",
]
__version__ = "0.1.0"
