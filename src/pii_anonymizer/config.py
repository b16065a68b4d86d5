"""YAML/dict config loader for pii-anonymizer.

Supports loading from a YAML file or a plain dict (for embedding
in a larger application config).

Example YAML:

    pii_anonymizer:
      offline: false
      alias_style: realistic     # "realistic" or "generic"
      decoy_ratio: 0.35
      jurisdictions:
        - fr
      classifier:
        base_url: http://localhost:8420
        timeout: 5
        max_batch_size: 100
      store:
        backend: sqlite          # "memory" or "sqlite"
        path: ~/.pii-anonymizer/store.db

Environment variables fill in what the file leaves out:
PII_ANONYMIZER_CLASSIFIER_URL, PII_ANONYMIZER_TIMEOUT, PII_ANONYMIZER_DB.
"""

from __future__ import annotations
import os
from pathlib import Path
from typing import Any

import yaml

from .anonymizer import Anonymizer
from .classifier import DEFAULT_BASE_URL, ClassifierConfig
from .pipeline import PipelineOptions
from .store import MemoryStore, Store
from .store_sqlite import SqliteStore
from .transport import OfflineTransport, RequestsTransport, Transport
from .types import AliasStyle

_BACKENDS = ("memory", "sqlite")


def load_config(data: dict[str, Any] | None) -> dict[str, Any]:
    """Normalize a config dict (from YAML or inline)."""
    data = data or {}
    # Support nested under "pii_anonymizer" key or flat
    if "pii_anonymizer" in data:
        data = data["pii_anonymizer"] or {}

    classifier = data.get("classifier") or {}
    store = data.get("store") or {}
    jurisdictions = data.get("jurisdictions")
    if isinstance(jurisdictions, str):
        jurisdictions = [jurisdictions]

    cfg = {
        "offline": bool(data.get("offline", False)),
        "alias_style": AliasStyle(data.get("alias_style", AliasStyle.REALISTIC)),
        "decoy_ratio": float(data.get("decoy_ratio", 0.35)),
        "jurisdictions": list(jurisdictions) if jurisdictions else None,
        "classifier_url": classifier.get(
            "base_url", os.environ.get("PII_ANONYMIZER_CLASSIFIER_URL", DEFAULT_BASE_URL)
        ),
        "timeout": float(classifier.get(
            "timeout", os.environ.get("PII_ANONYMIZER_TIMEOUT", 5.0)
        )),
        "max_batch_size": int(classifier.get("max_batch_size", 100)),
        "store_backend": store.get("backend", "memory"),
        "store_path": store.get("path", os.environ.get("PII_ANONYMIZER_DB", "store.db")),
    }
    if cfg["store_backend"] not in _BACKENDS:
        raise ValueError(f"Unknown store backend: {cfg['store_backend']!r}")
    return cfg


def load_from_yaml(path: str | Path) -> dict[str, Any]:
    """Load config from a YAML file."""
    with open(Path(path).expanduser()) as f:
        return load_config(yaml.safe_load(f))


def create_anonymizer(
    config: dict[str, Any],
    session_id: str = "default",
) -> Anonymizer:
    """Create a fully configured Anonymizer from a config dict."""
    cfg = load_config(config) if "store_backend" not in config else config

    options = PipelineOptions(
        classifier=ClassifierConfig(
            base_url=cfg["classifier_url"],
            timeout=cfg["timeout"],
            max_batch_size=cfg["max_batch_size"],
        ),
        decoy_ratio=cfg["decoy_ratio"],
        alias_style=cfg["alias_style"],
        jurisdictions=cfg["jurisdictions"],
    )

    if cfg["offline"]:
        transport: Transport = OfflineTransport()
    else:
        transport = RequestsTransport(timeout=cfg["timeout"])

    if cfg["store_backend"] == "sqlite":
        store: Store = SqliteStore(db_path=cfg["store_path"])
    else:
        store = MemoryStore()

    return Anonymizer(transport=transport, store=store, options=options, session_id=session_id)
