"""Substitution and its inverse."""

from __future__ import annotations
from typing import Iterable, Mapping

from .types import Entity


def substitute(text: str, entities: Iterable[Entity]) -> str:
    """Replace every entity span with its alias.

    Spans are in original-document coordinates; replacing from the end of
    the text backward keeps the earlier offsets valid.
    """
    result = text
    for entity in sorted(entities, key=lambda e: e.start, reverse=True):
        result = result[:entity.start] + entity.alias + result[entity.end:]
    return result


def alias_table(entities: Iterable[Entity]) -> dict[str, str]:
    """Original text → alias for the given entities."""
    return {e.text: e.alias for e in entities}


def deanonymize(text: str, table: Mapping[str, str]) -> str:
    """Restore original text from an original → alias table."""
    reverse = {alias: original for original, alias in table.items()}
    result = text
    # Replace longest aliases first to avoid partial matches
    for alias in sorted(reverse, key=len, reverse=True):
        if alias and alias in result:
            result = result.replace(alias, reverse[alias])
    return result
