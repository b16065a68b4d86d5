"""Tests for the config loader and anonymizer factory."""

import pytest

from pii_anonymizer.anonymizer import Anonymizer
from pii_anonymizer.config import create_anonymizer, load_config, load_from_yaml
from pii_anonymizer.store import MemoryStore
from pii_anonymizer.store_sqlite import SqliteStore
from pii_anonymizer.transport import OfflineTransport, RequestsTransport
from pii_anonymizer.types import AliasStyle


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("PII_ANONYMIZER_CLASSIFIER_URL", "PII_ANONYMIZER_TIMEOUT", "PII_ANONYMIZER_DB"):
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    cfg = load_config({})
    assert cfg["offline"] is False
    assert cfg["alias_style"] is AliasStyle.REALISTIC
    assert cfg["decoy_ratio"] == 0.35
    assert cfg["jurisdictions"] is None
    assert cfg["classifier_url"] == "http://localhost:8420"
    assert cfg["timeout"] == 5.0
    assert cfg["store_backend"] == "memory"


def test_nested_and_flat_equivalent():
    flat = {"alias_style": "generic", "decoy_ratio": 0.2, "jurisdictions": ["fr"]}
    assert load_config({"pii_anonymizer": flat}) == load_config(flat)


def test_environment_defaults(monkeypatch):
    monkeypatch.setenv("PII_ANONYMIZER_CLASSIFIER_URL", "http://classifier.internal:9000")
    monkeypatch.setenv("PII_ANONYMIZER_TIMEOUT", "2.5")
    monkeypatch.setenv("PII_ANONYMIZER_DB", "/tmp/anon.db")
    cfg = load_config({})
    assert cfg["classifier_url"] == "http://classifier.internal:9000"
    assert cfg["timeout"] == 2.5
    assert cfg["store_path"] == "/tmp/anon.db"


def test_explicit_values_beat_environment(monkeypatch):
    monkeypatch.setenv("PII_ANONYMIZER_TIMEOUT", "2.5")
    assert load_config({"classifier": {"timeout": 9}})["timeout"] == 9.0


def test_bad_values_rejected():
    with pytest.raises(ValueError):
        load_config({"alias_style": "fancy"})
    with pytest.raises(ValueError):
        load_config({"store": {"backend": "redis"}})


def test_load_from_yaml(tmp_path):
    path = tmp_path / "anon.yaml"
    path.write_text(
        "pii_anonymizer:\n"
        "  offline: true\n"
        "  alias_style: generic\n"
        "  jurisdictions: [fr, uk]\n"
        "  classifier:\n"
        "    base_url: http://localhost:9999\n"
        "    max_batch_size: 50\n"
        "  store:\n"
        "    backend: sqlite\n"
        f"    path: {tmp_path / 'store.db'}\n"
    )
    cfg = load_from_yaml(path)
    assert cfg["offline"] is True
    assert cfg["alias_style"] is AliasStyle.GENERIC
    assert cfg["jurisdictions"] == ["fr", "uk"]
    assert cfg["classifier_url"] == "http://localhost:9999"
    assert cfg["max_batch_size"] == 50
    assert cfg["store_backend"] == "sqlite"


def test_empty_yaml(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")
    assert load_from_yaml(path)["store_backend"] == "memory"


def test_create_offline_memory():
    anon = create_anonymizer({"offline": True, "alias_style": "generic"}, session_id="s1")
    assert isinstance(anon, Anonymizer)
    assert isinstance(anon.transport, OfflineTransport)
    assert isinstance(anon.store, MemoryStore)
    assert anon.session_id == "s1"
    assert anon.anonymize("M. Dupont signe.").text == "M. Personne 1 signe."


def test_create_online_sqlite(tmp_path):
    anon = create_anonymizer({
        "classifier": {"base_url": "http://localhost:9999", "timeout": 1},
        "store": {"backend": "sqlite", "path": str(tmp_path / "store.db")},
    })
    assert isinstance(anon.transport, RequestsTransport)
    assert anon.transport.timeout == 1.0
    assert anon.options.classifier.timeout == anon.transport.timeout
    assert isinstance(anon.store, SqliteStore)
    assert anon.options.classifier.base_url == "http://localhost:9999"
    anon.store.close()


def test_create_accepts_normalized_config():
    cfg = load_config({"offline": True})
    anon = create_anonymizer(cfg)
    assert isinstance(anon.transport, OfflineTransport)


def test_single_jurisdiction_string_wrapped():
    assert load_config({"jurisdictions": "fr"})["jurisdictions"] == ["fr"]
    assert load_config({"jurisdictions": ["fr", "uk"]})["jurisdictions"] == ["fr", "uk"]
