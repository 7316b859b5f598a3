"""Normalize candidate text into the token forms every matcher tier uses."""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable

from ats_bot.log import get_logger

log = get_logger(__name__)

_WHITESPACE_RE = re.compile(r"\s+")
# Lowercase alphanumerics, whitespace and the punctuation kept in skill names
# like "c++", "c#", "node.js" or "ci/cd".
_DISALLOWED_RE = re.compile(r"[^a-z0-9\s\-.,:;()\[\]{}+=*/@#$%&]")


@dataclass(frozen=True)
class NormalizedText:
    text: str
    tokens: tuple[str, ...]
    token_set: frozenset[str]
    bigrams: frozenset[str]
    trigrams: frozenset[str]

    @property
    def empty(self) -> bool:
        return not self.text


def _join(raw: str | Iterable[str] | None) -> str:
    if raw is None:
        return ""
    if isinstance(raw, str):
        return raw
    return " ".join(raw)


def normalize_text(raw: str | Iterable[str] | None) -> str:
    """Lowercase, strip unsupported characters and collapse whitespace."""
    text = _WHITESPACE_RE.sub(" ", _join(raw).lower()).strip()
    text = _DISALLOWED_RE.sub(" ", text)
    return _WHITESPACE_RE.sub(" ", text).strip()


def normalize_keyword(text: str) -> str:
    return text.strip().lower()


def tokenize(text: str) -> list[str]:
    return [t for t in text.split() if t]


def ngrams(tokens: list[str] | tuple[str, ...], n: int) -> list[str]:
    if n <= 0 or len(tokens) < n:
        return []
    return [" ".join(tokens[i:i + n]) for i in range(len(tokens) - n + 1)]


def prepare(raw: str | Iterable[str] | None, max_chars: int | None = None) -> NormalizedText:
    """Normalize *raw* and derive tokens, bigrams and trigrams.

    Input longer than *max_chars* is truncated first so that tokenizing and
    fuzzy matching stay bounded on oversized resumes.
    """
    joined = _join(raw)
    if max_chars is not None and len(joined) > max_chars:
        log.debug("Truncating candidate text from %d to %d chars", len(joined), max_chars)
        joined = joined[:max_chars]
    text = normalize_text(joined)
    tokens = tuple(tokenize(text))
    return NormalizedText(
        text=text,
        tokens=tokens,
        token_set=frozenset(tokens),
        bigrams=frozenset(ngrams(tokens, 2)),
        trigrams=frozenset(ngrams(tokens, 3)),
    )
