"""Anonymizer — the main API.

Usage:
    from pii_anonymizer import Anonymizer

    anon = Anonymizer.create(classifier_url=None)    # local detection only
    result = anon.anonymize("M. Dupont habite à Lyon.")
    print(result.text)                 # "M. Renaud habite à [Orion-412]."

    reply = llm.chat(result.text)
    print(anon.deanonymize(reply))     # aliases mapped back to originals

One Anonymizer is one session: every call shares the same alias map, so
"Dupont" keeps its alias across documents.
"""

from __future__ import annotations
import uuid
from dataclasses import dataclass, field
from typing import Iterable

from .classifier import DEFAULT_BASE_URL, ClassifierConfig
from .pipeline import PipelineOptions, pipeline
from .store import MemoryStore, Store
from .substituter import alias_table, deanonymize
from .transport import OfflineTransport, RequestsTransport, Transport
from .types import AliasStyle, Entity


@dataclass(slots=True)
class AnonymizeResult:
    """Result of anonymizing one text."""
    text: str                                   # anonymized text
    entities: list[Entity] = field(default_factory=list)
    language: str = ""
    alias_table: dict[str, str] = field(default_factory=dict)  # original → alias


class Anonymizer:
    """Session-bound front end over ``pipeline``."""

    def __init__(
        self,
        transport: Transport,
        store: Store | None = None,
        options: PipelineOptions | None = None,
        session_id: str | None = None,
    ) -> None:
        self.transport = transport
        self.store = store or MemoryStore()
        self.options = options or PipelineOptions()
        self.session_id = session_id or f"session_{uuid.uuid4().hex[:12]}"

    @classmethod
    def create(
        cls,
        *,
        classifier_url: str | None = DEFAULT_BASE_URL,
        timeout: float = 5.0,
        decoy_ratio: float = 0.35,
        alias_style: AliasStyle | str = AliasStyle.REALISTIC,
        jurisdictions: list[str] | None = None,
        max_batch_size: int = 100,
        store: Store | None = None,
        session_id: str | None = None,
    ) -> Anonymizer:
        """Factory — ``classifier_url=None`` forces offline mode."""
        if classifier_url is None:
            transport: Transport = OfflineTransport()
            classifier = ClassifierConfig(timeout=timeout, max_batch_size=max_batch_size)
        else:
            transport = RequestsTransport(timeout=timeout)
            classifier = ClassifierConfig(
                base_url=classifier_url, timeout=timeout, max_batch_size=max_batch_size
            )
        options = PipelineOptions(
            classifier=classifier,
            decoy_ratio=decoy_ratio,
            alias_style=AliasStyle(alias_style),
            jurisdictions=jurisdictions,
        )
        return cls(transport=transport, store=store, options=options, session_id=session_id)

    def anonymize(self, text: str) -> AnonymizeResult:
        result = pipeline(text, self.transport, self.store, self.session_id, self.options)
        return AnonymizeResult(
            text=result.anonymized_text,
            entities=result.entities,
            language=result.language,
            alias_table=alias_table(result.entities),
        )

    def anonymize_batch(self, texts: Iterable[str]) -> list[AnonymizeResult]:
        """Anonymize several texts with aliases shared across all of them."""
        return [self.anonymize(text) for text in texts]

    def deanonymize(self, text: str) -> str:
        """Map every alias of this session back to its original text."""
        return deanonymize(text, self.alias_map)

    @property
    def alias_map(self) -> dict[str, str]:
        return self.store.get_alias_map(self.session_id)


def anonymize(text: str, **kwargs) -> AnonymizeResult:
    """One-off anonymization; see ``Anonymizer.create`` for keyword options."""
    return Anonymizer.create(**kwargs).anonymize(text)


def anonymize_batch(texts: Iterable[str], **kwargs) -> list[AnonymizeResult]:
    """Anonymize several texts in one fresh session."""
    return Anonymizer.create(**kwargs).anonymize_batch(texts)
