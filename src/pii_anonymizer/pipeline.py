"""Pipeline — text in, anonymized text and entities out.

    tokenize → detect language → detect locally → classify (with decoys)
    → assemble + alias → persist alias map → substitute

The only I/O happens through the transport (classification) and the store
(alias map, classification cache).  Classification failures never fail the
document; store failures do.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field, replace

from .aliases import AliasCounters
from .assembler import assemble
from .classifier import ClassifierConfig, classify_batch
from .detector import detect_language, detect_local
from .store import Store
from .substituter import substitute
from .tokenizer import tokenize
from .transport import Transport
from .types import AliasStyle, PipelineResult

logger = logging.getLogger(__name__)


@dataclass
class PipelineOptions:
    """Configuration for one pipeline run."""
    classifier: ClassifierConfig = field(default_factory=ClassifierConfig)
    decoy_ratio: float = 0.35          # decoys per real term, 0 to 1
    alias_style: AliasStyle = AliasStyle.REALISTIC
    # None = query the dictionaries of the detected language
    jurisdictions: list[str] | None = None

    def __post_init__(self) -> None:
        if not 0.0 <= self.decoy_ratio <= 1.0:
            raise ValueError(f"decoy_ratio must be within 0..1, got {self.decoy_ratio}")
        self.alias_style = AliasStyle(self.alias_style)


def pipeline(
    text: str,
    transport: Transport,
    store: Store,
    session_id: str,
    options: PipelineOptions | None = None,
) -> PipelineResult:
    """Run the full anonymization pipeline on one text."""
    opts = options or PipelineOptions()

    alias_map = store.get_alias_map(session_id)
    counters = AliasCounters.from_alias_map(alias_map)

    tokens = tokenize(text)
    language = detect_language(tokens)
    groups = detect_local(tokens)

    jurisdictions = opts.jurisdictions or list(opts.classifier.jurisdictions or [language])
    classifier_cfg = replace(opts.classifier, jurisdictions=tuple(jurisdictions))
    remote = classify_batch(groups, transport, store, classifier_cfg, opts.decoy_ratio)

    entities = assemble(
        groups,
        remote,
        alias_map,
        opts.alias_style,
        counters=counters,
        source_text=text,
    )
    store.set_alias_map(session_id, alias_map)

    anonymized = substitute(text, entities)
    logger.debug(
        "Session %s: %d tokens, %d groups, %d remote terms, %d entities, lang=%s",
        session_id, len(tokens), len(groups), len(remote), len(entities), language,
    )
    return PipelineResult(entities=entities, anonymized_text=anonymized, language=language)
