"""Local detection — language guess and candidate entity groups.

Detection runs as ordered passes over an immutable token tuple.  Each pass
receives the claimed-token flags from the previous one and returns the
groups it found together with a new set of flags, so a token claimed by a
strong signal (pattern, legal form, street type, honorific) is never
re-claimed by a weaker one (bare capitalization).
"""

from __future__ import annotations
from typing import Callable, Sequence

from .lexicons import (
    ALL_HONORIFICS,
    ALL_LEGAL_FORMS,
    ALL_STOP_WORDS,
    ALL_STREET_TYPES,
    DEFAULT_LANGUAGE,
    STOP_WORDS,
)
from .types import DetectedGroup, GroupConfidence, LocalType, PatternType, Token, TokenKind

Claimed = tuple[bool, ...]
Pass = Callable[[tuple[Token, ...], Claimed], tuple[list[DetectedGroup], Claimed]]

_MAX_ADDRESS_WORDS = 6
_SENTENCE_END = {".", "!", "?"}

_PATTERN_LOCAL_TYPES: dict[PatternType, LocalType] = {
    PatternType.EMAIL: LocalType.EMAIL,
    PatternType.PHONE: LocalType.PHONE,
    PatternType.IBAN: LocalType.IBAN,
    PatternType.SSN_FR: LocalType.SSN,
    PatternType.URL: LocalType.URL,
}


def detect_language(tokens: Sequence[Token]) -> str:
    """Stop-word vote over word tokens; ties fall back to the default language."""
    scores = dict.fromkeys(STOP_WORDS, 0)
    for t in tokens:
        if t.kind is not TokenKind.WORD:
            continue
        word = t.text.upper()
        for lang, stop_words in STOP_WORDS.items():
            if word in stop_words:
                scores[lang] += 1

    best = max(scores.values())
    winners = [lang for lang, score in scores.items() if score == best]
    if best == 0 or len(winners) > 1:
        return DEFAULT_LANGUAGE
    return winners[0]


def detect_local(tokens: Sequence[Token]) -> list[DetectedGroup]:
    """Run every detection pass in priority order and collect their groups."""
    frozen = tuple(tokens)
    claimed: Claimed = (False,) * len(frozen)
    groups: list[DetectedGroup] = []
    for detect in _PASSES:
        found, claimed = detect(frozen, claimed)
        groups.extend(found)
    return groups


# ── Passes ───────────────────────────────────────────────────────────

def _pattern_pass(tokens: tuple[Token, ...], claimed: Claimed) -> tuple[list[DetectedGroup], Claimed]:
    flags = list(claimed)
    groups: list[DetectedGroup] = []
    for i, t in enumerate(tokens):
        if t.kind is not TokenKind.PATTERN or flags[i]:
            continue
        flags[i] = True
        groups.append(DetectedGroup(
            tokens=(t,),
            text=t.text,
            local_type=_PATTERN_LOCAL_TYPES[t.pattern_type],
            confidence=GroupConfidence.CERTAIN,
            skip_classification=True,
        ))
    return groups, tuple(flags)


def _legal_form_pass(tokens: tuple[Token, ...], claimed: Claimed) -> tuple[list[DetectedGroup], Claimed]:
    flags = list(claimed)
    groups: list[DetectedGroup] = []
    for i, t in enumerate(tokens):
        if flags[i] or not _is_word(t) or not _is_capitalized(t.text):
            continue
        if t.text.upper() not in ALL_LEGAL_FORMS:
            continue
        # "SCI Les Lilas": capitalized stop words may sit inside the name
        members = _trim_stop_words(tokens, _absorb_capitalized(tokens, flags, i, allow_stop_words=True))
        if not members:
            continue  # lone legal form, left for later passes
        indices = [i, *members]
        for j in indices:
            flags[j] = True
        groups.append(_group(tokens, indices, LocalType.COMPANY_CANDIDATE, GroupConfidence.PROBABLE))
    return groups, tuple(flags)


def _address_pass(tokens: tuple[Token, ...], claimed: Claimed) -> tuple[list[DetectedGroup], Claimed]:
    flags = list(claimed)
    groups: list[DetectedGroup] = []
    for i, t in enumerate(tokens):
        if flags[i] or not _is_word(t) or t.text.upper() not in ALL_STREET_TYPES:
            continue

        indices: list[int] = []
        prev = _prev_significant(tokens, i)
        if prev is not None and tokens[prev].kind is TokenKind.NUMBER and not flags[prev]:
            indices.append(prev)
        indices.append(i)

        following: list[int] = []
        j = _next_significant(tokens, i)
        while j is not None and not flags[j] and len(following) < _MAX_ADDRESS_WORDS:
            nxt = tokens[j]
            if nxt.kind is TokenKind.NUMBER:
                following.append(j)
            elif nxt.kind is not TokenKind.WORD:
                break  # punctuation ends the street name
            elif _is_capitalized(nxt.text) or _is_stop_word(nxt.text):
                following.append(j)
            else:
                break
            j = _next_significant(tokens, j)
        indices.extend(_trim_stop_words(tokens, following))

        if len(indices) < 2:
            continue  # "au cours de", "à la place": street word used in prose
        for k in indices:
            flags[k] = True
        groups.append(_group(tokens, indices, LocalType.ADDRESS_FRAGMENT, GroupConfidence.PROBABLE))
    return groups, tuple(flags)


def _honorific_pass(tokens: tuple[Token, ...], claimed: Claimed) -> tuple[list[DetectedGroup], Claimed]:
    flags = list(claimed)
    groups: list[DetectedGroup] = []
    for i, t in enumerate(tokens):
        if flags[i] or not _is_word(t) or not _is_capitalized(t.text):
            continue
        if t.text.upper().rstrip(".") not in ALL_HONORIFICS:
            continue

        anchor = i
        if i + 1 < len(tokens) and tokens[i + 1].text == "." and not flags[i + 1]:
            anchor = i + 1
        members = _absorb_capitalized(tokens, flags, anchor, allow_stop_words=False)
        if not members:
            continue  # lone honorific, released

        # the honorific is claimed but stays outside the span: "M. <alias>"
        for j in range(i, anchor + 1):
            flags[j] = True
        for j in members:
            flags[j] = True
        groups.append(_group(tokens, members, LocalType.PERSON_CANDIDATE, GroupConfidence.PROBABLE))
    return groups, tuple(flags)


def _candidate_pass(tokens: tuple[Token, ...], claimed: Claimed) -> tuple[list[DetectedGroup], Claimed]:
    flags = list(claimed)
    groups: list[DetectedGroup] = []
    for i, t in enumerate(tokens):
        if flags[i] or not _is_candidate_word(t):
            continue
        if t.text.upper() in ALL_HONORIFICS or t.text.upper() in ALL_LEGAL_FORMS:
            continue
        if _is_sentence_start(tokens, i) and not _is_all_upper(t.text):
            continue

        indices = [i, *_absorb_capitalized(tokens, flags, i, allow_stop_words=False)]
        for j in indices:
            flags[j] = True
        groups.append(_group(tokens, indices, None, GroupConfidence.CANDIDATE))
    return groups, tuple(flags)


_PASSES: tuple[Pass, ...] = (
    _pattern_pass,
    _legal_form_pass,
    _address_pass,
    _honorific_pass,
    _candidate_pass,
)


# ── Helpers ──────────────────────────────────────────────────────────

def _group(
    tokens: tuple[Token, ...],
    indices: list[int],
    local_type: LocalType | None,
    confidence: GroupConfidence,
) -> DetectedGroup:
    first, last = indices[0], indices[-1]
    return DetectedGroup(
        tokens=tuple(tokens[j] for j in indices),
        text="".join(t.text for t in tokens[first:last + 1]),
        local_type=local_type,
        confidence=confidence,
        skip_classification=False,
    )


def _absorb_capitalized(
    tokens: tuple[Token, ...],
    flags: list[bool],
    i: int,
    *,
    allow_stop_words: bool,
) -> list[int]:
    """Indices of capitalized words following token i, whitespace-separated only."""
    members: list[int] = []
    j = _next_significant(tokens, i)
    while j is not None and not flags[j]:
        t = tokens[j]
        if not _is_word(t) or not _is_capitalized(t.text):
            break
        if not allow_stop_words and _is_stop_word(t.text):
            break
        members.append(j)
        j = _next_significant(tokens, j)
    return members


def _trim_stop_words(tokens: tuple[Token, ...], indices: list[int]) -> list[int]:
    end = len(indices)
    while end and _is_stop_word(tokens[indices[end - 1]].text):
        end -= 1
    return indices[:end]


def _next_significant(tokens: tuple[Token, ...], i: int) -> int | None:
    for j in range(i + 1, len(tokens)):
        if tokens[j].kind is not TokenKind.WHITESPACE:
            return j
    return None


def _prev_significant(tokens: tuple[Token, ...], i: int) -> int | None:
    for j in range(i - 1, -1, -1):
        if tokens[j].kind is not TokenKind.WHITESPACE:
            return j
    return None


def _is_sentence_start(tokens: tuple[Token, ...], i: int) -> bool:
    prev = _prev_significant(tokens, i)
    if prev is None:
        return True
    return tokens[prev].kind is TokenKind.PUNCTUATION and tokens[prev].text in _SENTENCE_END


def _is_candidate_word(t: Token) -> bool:
    return (
        _is_word(t)
        and len(t.text) >= 2
        and _is_capitalized(t.text)
        and not _is_stop_word(t.text)
    )


def _is_word(t: Token) -> bool:
    return t.kind is TokenKind.WORD


def _is_capitalized(text: str) -> bool:
    return bool(text) and text[0].isupper()


def _is_all_upper(text: str) -> bool:
    return text.isupper()


def _is_stop_word(text: str) -> bool:
    return text.upper() in ALL_STOP_WORDS
