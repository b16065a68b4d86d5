"""Tests for substitution and deanonymization."""

from pii_anonymizer.substituter import alias_table, deanonymize, substitute
from pii_anonymizer.types import Confidence, Entity, EntityType


def _entity(text, start, alias, accepted=None, type_=EntityType.PERSON):
    return Entity(
        text=text, start=start, end=start + len(text), type=type_,
        confidence=Confidence.MEDIUM, proposed_alias=alias, accepted_alias=accepted,
    )


def test_substitute_replaces_from_the_end():
    text = "M. Dupont habite à Lyon."
    entities = [_entity("Dupont", 3, "Bernard-Moreau"), _entity("Lyon", 19, "Nantes", type_=EntityType.CITY)]
    assert substitute(text, entities) == "M. Bernard-Moreau habite à Nantes."


def test_accepted_alias_overrides_proposed():
    text = "M. Dupont"
    assert substitute(text, [_entity("Dupont", 3, "Moreau", accepted="Girard")]) == "M. Girard"


def test_empty_accepted_alias_is_used():
    assert substitute("M. Dupont", [_entity("Dupont", 3, "Moreau", accepted="")]) == "M. "


def test_no_entities():
    assert substitute("Rien à signaler.", []) == "Rien à signaler."


def test_round_trip_restores_originals():
    text = "Jean Dupont a écrit à jean@exemple.fr depuis Lyon."
    entities = [
        _entity("Jean Dupont", 0, "Hugo Renaud"),
        _entity("jean@exemple.fr", 22, "hugo.renaud@email.fr", type_=EntityType.EMAIL),
        _entity("Lyon", 45, "Rennes", type_=EntityType.CITY),
    ]
    anonymized = substitute(text, entities)
    for e in entities:
        assert e.text not in anonymized
    assert deanonymize(anonymized, alias_table(entities)) == text


def test_deanonymize_longest_alias_first():
    table = {"Alice": "Personne 1", "Bob": "Personne 10"}
    assert deanonymize("Personne 10 et Personne 1", table) == "Bob et Alice"


def test_alias_table():
    entities = [_entity("Dupont", 0, "Moreau"), _entity("Lyon", 10, "Nantes", accepted="Rennes")]
    assert alias_table(entities) == {"Dupont": "Moreau", "Lyon": "Rennes"}
