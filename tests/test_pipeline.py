"""End-to-end pipeline tests."""

import pytest

from conftest import FailingTransport, FakeClassifier, RawTransport, SURNAME
from pii_anonymizer.classifier import ClassifierConfig
from pii_anonymizer.pipeline import PipelineOptions, pipeline
from pii_anonymizer.store_sqlite import SqliteStore
from pii_anonymizer.transport import OfflineTransport
from pii_anonymizer.types import AliasStyle, Confidence, EntityType


# ── Scenarios ────────────────────────────────────────────────────────

def test_remote_confirmed_person_and_city(store, classifier):
    result = pipeline("M. Dupont habite à Lyon depuis dix ans.", classifier, store, "s1")

    assert "Dupont" not in result.anonymized_text
    assert "Lyon" not in result.anonymized_text
    assert result.anonymized_text.startswith("M. ")
    assert sorted(e.type.value for e in result.entities) == ["city", "person"]
    assert result.language == "fr"
    person = next(e for e in result.entities if e.type is EntityType.PERSON)
    assert person.confidence is Confidence.HIGH


def test_structured_pii_survives_classifier_outage(store):
    transport = FailingTransport()
    result = pipeline("Contacter jean.dupont@gmail.com au 06 12 34 56 78", transport, store, "s1")

    assert [(e.type, e.confidence) for e in result.entities] == [
        (EntityType.EMAIL, Confidence.HIGH),
        (EntityType.PHONE, Confidence.HIGH),
    ]
    assert transport.calls == 0
    assert "jean.dupont@gmail.com" not in result.anonymized_text


def test_alias_stable_across_calls_in_session(store):
    transport = OfflineTransport()
    first = pipeline("M. Dupont signe.", transport, store, "s1")
    second = pipeline("M. Dupont confirme.", transport, store, "s1")

    alias_1 = next(e.alias for e in first.entities if e.text == "Dupont")
    alias_2 = next(e.alias for e in second.entities if e.text == "Dupont")
    assert alias_1 == alias_2
    assert store.get_alias_map("s1") == {"Dupont": alias_1}


# ── Options ──────────────────────────────────────────────────────────

def test_generic_numbering_continues_across_calls(store):
    opts = PipelineOptions(alias_style=AliasStyle.GENERIC)
    transport = OfflineTransport()
    first = pipeline("M. Dupont signe.", transport, store, "s1", opts)
    second = pipeline("Mme Bertin signe aussi.", transport, store, "s1", opts)
    assert first.anonymized_text == "M. Personne 1 signe."
    assert second.anonymized_text == "Mme Personne 2 signe aussi."


def test_sessions_do_not_share_aliases(store):
    opts = PipelineOptions(alias_style="generic")
    transport = OfflineTransport()
    pipeline("M. Dupont signe.", transport, store, "s1", opts)
    result = pipeline("M. Bertin signe.", transport, store, "s2", opts)
    assert result.anonymized_text == "M. Personne 1 signe."


def test_detected_language_used_as_jurisdiction(store):
    transport = FakeClassifier({"Smithers": [SURNAME]})
    pipeline("The report was sent to Mr Smithers yesterday.", transport, store, "s1")
    assert transport.calls[0]["jurisdictions"] == ["en"]


def test_jurisdiction_override(store):
    transport = FakeClassifier()
    opts = PipelineOptions(jurisdictions=["uk", "fr"])
    pipeline("Bonjour M. Dupont.", transport, store, "s1", opts)
    assert transport.calls[0]["jurisdictions"] == ["uk", "fr"]


def test_classifier_config_jurisdictions(store):
    transport = FakeClassifier()
    opts = PipelineOptions(classifier=ClassifierConfig(jurisdictions=("de",)))
    pipeline("Bonjour M. Dupont.", transport, store, "s1", opts)
    assert transport.calls[0]["jurisdictions"] == ["de"]


def test_invalid_decoy_ratio_rejected():
    with pytest.raises(ValueError):
        PipelineOptions(decoy_ratio=1.5)


def test_invalid_alias_style_rejected():
    with pytest.raises(ValueError):
        PipelineOptions(alias_style="fancy")


def test_text_without_entities(store):
    result = pipeline("il fait beau aujourd'hui.", OfflineTransport(), store, "s1")
    assert result.entities == []
    assert result.anonymized_text == "il fait beau aujourd'hui."


# ── Persistence ──────────────────────────────────────────────────────

def test_aliases_persist_in_sqlite(tmp_path):
    path = tmp_path / "store.db"
    s = SqliteStore(db_path=path)
    first = pipeline("M. Dupont signe.", OfflineTransport(), s, "dossier-42")
    s.close()

    reopened = SqliteStore(db_path=path)
    second = pipeline("Signé par M. Dupont.", OfflineTransport(), reopened, "dossier-42")
    reopened.close()
    assert first.entities[0].alias == second.entities[0].alias


# ── Malformed responses ──────────────────────────────────────────────

def test_malformed_metadata_does_not_break_pipeline(store):
    transport = RawTransport(200, '{"classifications": {"Dupont": '
                                  '[{"dict": "fr_surnames", "match": true, "type": "surname", "metadata": 5}]}}')
    result = pipeline("M. Dupont signe.", transport, store, "s1")
    assert "Dupont" not in result.anonymized_text
    [entity] = result.entities
    assert entity.type is EntityType.PERSON


def test_string_false_match_is_not_a_confirmation(store):
    transport = RawTransport(200, '{"classifications": {"Lyon": '
                                  '[{"dict": "fr_communes", "match": "false", "type": "city"}]}}')
    result = pipeline("Il habite à Lyon.", transport, store, "s1")
    [entity] = result.entities
    assert entity.type is EntityType.UNKNOWN
