"""Tokenizer — structured patterns first, then words/numbers/punctuation.

Pattern matchers run in priority order over the whole text; a later match
that overlaps an earlier accepted one is dropped.  IBAN candidates must pass
the ISO 13616 mod-97 check, otherwise they fall through to plain tokens.
Whitespace is kept as tokens so the tokens partition the text exactly.
"""

from __future__ import annotations
import re

from .types import PatternType, Token, TokenKind

# Each pattern: (pattern_type, compiled_regex), in priority order
_PATTERNS: list[tuple[PatternType, re.Pattern]] = [
    (PatternType.URL, re.compile(
        r"https?://[\w\-.~:/?#\[\]@!$&'()*+,;=%]+"
    )),

    (PatternType.EMAIL, re.compile(
        r"[a-zA-Z0-9._%+\-]+@[a-zA-Z0-9.\-]+\.[a-zA-Z]{2,}"
    )),

    # IBAN: country code, check digits, 4-char groups with optional spaces
    (PatternType.IBAN, re.compile(
        r"\b[A-Z]{2}\d{2}\s?[\dA-Z]{4}(?:\s?[\dA-Z]{4}){2,7}(?:\s?[\dA-Z]{1,4})?\b"
    )),

    # French NIR: sex, year, month, department (2A/2B for Corsica), commune, order, key
    (PatternType.SSN_FR, re.compile(
        r"(?<![\dA-Za-z])[12]\s?\d{2}\s?\d{2}\s?(?:\d{2}|2[AB])\s?\d{3}\s?\d{3}\s?\d{2}(?!\d)"
    )),

    # French phone: 0X or +33/0033 followed by four digit pairs
    (PatternType.PHONE, re.compile(
        r"(?<![\d+])(?:(?:\+|00)33|0)\s*[1-9](?:[\s.\-]*\d{2}){4}(?!\d)"
    )),

    # UK phone
    (PatternType.PHONE, re.compile(
        r"(?<![\d+])(?:\+44|0)[\s.\-]?\d{4}[\s.\-]?\d{6}(?!\d)"
    )),
]

_BASIC = re.compile(
    r"(?P<whitespace>\s+)"
    r"|(?P<word>[^\W\d_](?:(?:[^\W\d_]|['’\-])*[^\W\d_])?)"
    r"|(?P<number>\d+(?:[.,]\d+)*)"
    r"|(?P<punctuation>\S)"
)

_URL_TRAILING = ".,;:!?)]}'"


def tokenize(text: str) -> list[Token]:
    """Split text into typed tokens covering every character exactly once."""
    spans = _pattern_spans(text)

    tokens: list[Token] = []
    cursor = 0
    for start, end, pattern_type in spans:
        if cursor < start:
            _split_basic(text, cursor, start, tokens)
        tokens.append(Token(
            text=text[start:end],
            start=start,
            end=end,
            kind=TokenKind.PATTERN,
            pattern_type=pattern_type,
        ))
        cursor = end

    if cursor < len(text):
        _split_basic(text, cursor, len(text), tokens)
    return tokens


def validate_iban(candidate: str) -> bool:
    """ISO 13616 mod-97 check: rearranged, letters as numbers, remainder 1."""
    cleaned = re.sub(r"\s", "", candidate).upper()
    if len(cleaned) < 5 or not cleaned.isalnum():
        return False
    rearranged = cleaned[4:] + cleaned[:4]
    remainder = 0
    for ch in rearranged:
        if "A" <= ch <= "Z":
            digits = str(ord(ch) - 55)
        elif ch.isdigit():
            digits = ch
        else:
            return False
        for d in digits:
            remainder = (remainder * 10 + int(d)) % 97
    return remainder == 1


def _pattern_spans(text: str) -> list[tuple[int, int, PatternType]]:
    """Return non-overlapping pattern spans sorted by start offset."""
    taken: list[tuple[int, int, PatternType]] = []
    for pattern_type, pattern in _PATTERNS:
        for m in pattern.finditer(text):
            start, end = m.start(), m.end()
            if pattern_type is PatternType.URL:
                end = start + len(m.group().rstrip(_URL_TRAILING))
            if end <= start:
                continue
            if any(start < e and end > s for s, e, _ in taken):
                continue
            if pattern_type is PatternType.IBAN:
                end = _longest_valid_iban(text, start, end)
                if end is None:
                    continue
            taken.append((start, end, pattern_type))
    return sorted(taken, key=lambda span: span[0])


def _longest_valid_iban(text: str, start: int, end: int) -> int | None:
    """End offset of the longest checksum-valid prefix of an IBAN match.

    The match may have swallowed a trailing word ("... 7654 32 EUR"), so
    shorter candidates ending at a group boundary are tried as well.
    """
    gaps = [start + m.start() for m in re.finditer(r"\s", text[start:end])]
    for stop in [end, *reversed(gaps)]:
        # shortest IBAN in use is 15 characters (NO)
        if len(re.sub(r"\s", "", text[start:stop])) < 15:
            break
        if validate_iban(text[start:stop]):
            return stop
    return None


def _split_basic(text: str, start: int, end: int, out: list[Token]) -> None:
    for m in _BASIC.finditer(text, start, end):
        out.append(Token(
            text=m.group(),
            start=m.start(),
            end=m.end(),
            kind=TokenKind(m.lastgroup),
        ))
