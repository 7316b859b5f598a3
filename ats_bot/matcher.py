"""Match job keywords against normalized candidate text.

Tiers, tried in order per keyword (first hit wins, weight attenuated):
  - exact  substring of the normalized text                → 1.0
  - word   every word of a multi-word keyword is a token   → 0.8
  - ngram  leading bigram/trigram of the keyword appears   → 0.6
  - fuzzy  single word within edit similarity > 0.8        → 0.5
"""
from __future__ import annotations

import logging
from typing import Iterable, Sequence

from ats_bot.log import get_logger
from ats_bot.models import Keyword, MatchedKeyword, MatchType
from ats_bot.text import NormalizedText

log = get_logger(__name__)

TIER_FACTORS: dict[MatchType, float] = {
    MatchType.EXACT: 1.0,
    MatchType.WORD: 0.8,
    MatchType.NGRAM: 0.6,
    MatchType.FUZZY: 0.5,
}
TIER_ORDER: tuple[MatchType, ...] = (MatchType.EXACT, MatchType.WORD, MatchType.NGRAM, MatchType.FUZZY)
FUZZY_THRESHOLD = 0.8


def levenshtein(a: str, b: str) -> int:
    if len(a) < len(b):
        a, b = b, a
    if not b:
        return len(a)
    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, 1):
        current = [i]
        for j, cb in enumerate(b, 1):
            cost = 0 if ca == cb else 1
            current.append(min(previous[j] + 1, current[j - 1] + 1, previous[j - 1] + cost))
        previous = current
    return previous[-1]


def similarity(a: str, b: str) -> float:
    """1 - distance / longer length; two empty strings are identical."""
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    return 1.0 - levenshtein(a, b) / longest


def _match_exact(term: str, text: NormalizedText) -> bool:
    return term in text.text


def _match_words(words: list[str], text: NormalizedText) -> bool:
    return len(words) > 1 and all(w in text.token_set for w in words)


def _match_ngram(words: list[str], text: NormalizedText) -> bool:
    if len(words) < 2:
        return False
    if " ".join(words[:2]) in text.bigrams:
        return True
    return len(words) >= 3 and " ".join(words[:3]) in text.trigrams


def _match_fuzzy(words: list[str], text: NormalizedText) -> tuple[str, ...]:
    if len(words) != 1:
        return ()
    word = words[0]
    # Length difference is a lower bound on edit distance
    hits = []
    for token in sorted(text.token_set):
        longest = max(len(token), len(word))
        if longest and 1.0 - abs(len(token) - len(word)) / longest <= FUZZY_THRESHOLD:
            continue
        if similarity(token, word) > FUZZY_THRESHOLD:
            hits.append(token)
    return tuple(hits)


def _match_term(term: str, tier: MatchType, text: NormalizedText) -> tuple[bool, tuple[str, ...]]:
    if tier is MatchType.EXACT:
        return _match_exact(term, text), ()
    words = term.split()
    if tier is MatchType.WORD:
        return _match_words(words, text), ()
    if tier is MatchType.NGRAM:
        return _match_ngram(words, text), ()
    hits = _match_fuzzy(words, text)
    return bool(hits), hits


def match_keyword(
    keyword: Keyword,
    text: NormalizedText,
    tiers: Iterable[MatchType] = TIER_ORDER,
) -> MatchedKeyword | None:
    """Return the highest-priority match of *keyword* (or an alias), else None."""
    enabled = set(tiers)
    for tier in TIER_ORDER:
        if tier not in enabled:
            continue
        for term in keyword.terms:
            ok, hits = _match_term(term, tier, text)
            if ok:
                return MatchedKeyword(
                    keyword=keyword.text,
                    type=keyword.type,
                    category=keyword.category,
                    weight=round(keyword.weight * TIER_FACTORS[tier], 4),
                    declared_weight=keyword.weight,
                    match_type=tier,
                    matched_terms=hits,
                )
    return None


def match_keywords(
    text: NormalizedText,
    keywords: Sequence[Keyword],
    tiers: Iterable[MatchType] = TIER_ORDER,
    logger: logging.Logger | logging.LoggerAdapter | None = None,
) -> list[MatchedKeyword]:
    logger = logger or log
    if text.empty or not keywords:
        logger.debug("Nothing to match (text=%d chars, keywords=%d)", len(text.text), len(keywords))
        return []

    tiers = tuple(tiers)
    matched: list[MatchedKeyword] = []
    for kw in keywords:
        if not kw.active:
            continue
        hit = match_keyword(kw, text, tiers)
        if hit is None:
            logger.debug("No match: %s", kw.text)
            continue
        logger.debug("%s match: %s (weight %.2f)", hit.match_type.value, kw.text, hit.weight)
        matched.append(hit)
    return matched
