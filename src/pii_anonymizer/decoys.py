"""Decoy mixer — hides real candidate terms among synthetic ones.

Decoys are drawn from the same pools the alias generator uses, so a batch
observer cannot tell genuine document terms from noise by their shape.
Both the decoy picks and the final shuffle use the OS CSPRNG.
"""

from __future__ import annotations
import math
import secrets
from dataclasses import dataclass
from typing import Sequence

from .lexicons import ALL_FIRST_NAMES, COMPANY_PARTS, SURNAMES

_rng = secrets.SystemRandom()


@dataclass(frozen=True, slots=True)
class MixedBatch:
    """Shuffled real + decoy terms, plus the side channel of real ones."""
    mixed: list[str]
    real_set: frozenset[str]
    decoy_count: int


def decoy_budget(real_count: int, ratio: float, max_batch: int) -> int:
    """Number of decoys to add; shrinks under pressure, never evicts real terms."""
    wanted = math.ceil(real_count * ratio)
    return max(0, min(wanted, max_batch - real_count))


def mix_decoys(real_terms: Sequence[str], ratio: float = 0.35, max_batch: int = 100) -> MixedBatch:
    """Mix decoys into real_terms and shuffle the result."""
    real = list(dict.fromkeys(real_terms))
    real_set = frozenset(real)
    count = decoy_budget(len(real), ratio, max_batch)

    # decoys are distinct from each other and from every real term
    decoys: list[str] = []
    seen = set(real_set)
    attempts = count * 20
    while len(decoys) < count and attempts:
        attempts -= 1
        decoy = _generate_decoy()
        if decoy not in seen:
            seen.add(decoy)
            decoys.append(decoy)

    mixed = real + decoys
    _shuffle(mixed)
    return MixedBatch(mixed=mixed, real_set=real_set, decoy_count=len(decoys))


def _generate_decoy() -> str:
    roll = _rng.random()
    if roll < 0.4:
        return _rng.choice(ALL_FIRST_NAMES)
    if roll < 0.7:
        return _rng.choice(SURNAMES)
    return _rng.choice(COMPANY_PARTS["standalone"])


def _shuffle(items: list[str]) -> None:
    # Fisher-Yates
    for i in range(len(items) - 1, 0, -1):
        j = _rng.randrange(i + 1)
        items[i], items[j] = items[j], items[i]
