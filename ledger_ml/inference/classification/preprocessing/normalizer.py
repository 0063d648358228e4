from __future__ import annotations

from ledger_ml.config.patterns import (
    BOILERPLATE_PATTERNS,
    DISPOSITION_PREFIX,
    MIN_TOKEN_LENGTH,
    NUMERIC_ONLY,
    PUNCTUATION,
    STOPWORDS,
    SUGGESTION_STRIP,
    WHITESPACE,
)

SUGGESTION_PREFIX_LENGTH = 40


def _normalize_once(text: str) -> str:
    text = text.lower()
    for pattern in BOILERPLATE_PATTERNS:
        text = pattern.sub("", text)
    text = DISPOSITION_PREFIX.sub("", text)
    text = PUNCTUATION.sub(" ", text)
    return WHITESPACE.sub(" ", text).strip()


def normalize_description(description: str | None) -> str:
    """Strip banking boilerplate (references, dates, times) from a description.

    Card, account and contract numbers are kept: they identify the
    counterparty. Removing punctuation can expose new boilerplate
    ("rif:.123" -> "rif 123"), so passes repeat until the text is stable.

        >>> normalize_description("Disposizione - RIF:149304229BEN. ORLANDO ANNAMARIA")
        'orlando annamaria'
    """
    if not description:
        return ""

    current = description
    while True:
        cleaned = _normalize_once(current)
        if cleaned == current:
            return cleaned
        current = cleaned


def extract_significant_tokens(description: str | None) -> list[str]:
    """Tokens worth matching on: no stopwords, no pure numbers, no short words.

    Order of first appearance is preserved, duplicates dropped.
    """
    normalized = normalize_description(description)
    if not normalized:
        return []

    tokens: list[str] = []
    seen: set[str] = set()
    for word in normalized.split():
        if len(word) < MIN_TOKEN_LENGTH or word in STOPWORDS:
            continue
        if NUMERIC_ONLY.match(word) or word in seen:
            continue
        seen.add(word)
        tokens.append(word)
    return tokens


def suggestion_pattern(description: str) -> str:
    """Coarse grouping key for rule suggestions.

    First characters of the raw description, then trimmed and upper-cased,
    with digits and separators removed and whitespace collapsed.
    """
    head = description[:SUGGESTION_PREFIX_LENGTH].strip().upper()
    return WHITESPACE.sub(" ", SUGGESTION_STRIP.sub("", head)).strip()
