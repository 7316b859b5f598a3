"""Score candidates against a job's keyword set and decide shortlist/reject."""
from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, Sequence

from ats_bot.config import max_candidate_chars
from ats_bot.log import get_logger
from ats_bot.matcher import TIER_ORDER, match_keywords
from ats_bot.models import (
    Candidate,
    Decision,
    InvalidInputError,
    Keyword,
    KeywordSet,
    KeywordType,
    MatchedKeyword,
    MatchType,
    ScoringMode,
    ScoringResult,
)
from ats_bot.text import prepare

log = get_logger(__name__)

MODE_TIERS: dict[ScoringMode, tuple[MatchType, ...]] = {
    ScoringMode.SIMPLE: (MatchType.EXACT,),
    ScoringMode.FULL: TIER_ORDER,
}

TYPE_MULTIPLIERS: dict[KeywordType, float] = {
    KeywordType.REQUIRED: 2.0,
    KeywordType.PREFERRED: 1.0,
    KeywordType.NEGATIVE: -1.0,
}

_TIER_BREAKDOWN_KEYS: dict[MatchType, str] = {
    MatchType.EXACT: "exact_matches",
    MatchType.WORD: "word_matches",
    MatchType.NGRAM: "ngram_matches",
    MatchType.FUZZY: "partial_matches",
}


def parse_mode(mode: ScoringMode | str) -> ScoringMode:
    if isinstance(mode, ScoringMode):
        return mode
    try:
        return ScoringMode(str(mode).strip().lower())
    except ValueError:
        raise InvalidInputError(f"Unknown scoring mode {mode!r}; expected 'simple' or 'full'") from None


def _parse_keywords(keywords: KeywordSet | Sequence[Keyword | Mapping[str, Any]] | None) -> tuple[Keyword, ...]:
    """Validate every keyword up front so scoring never starts on a bad set."""
    if keywords is None:
        return ()
    if isinstance(keywords, KeywordSet):
        return keywords.keywords
    if isinstance(keywords, (str, bytes)) or not isinstance(keywords, (list, tuple)):
        raise InvalidInputError(f"Keywords must be a list, got {type(keywords).__name__}")
    return KeywordSet(job_id="", keywords=tuple(keywords)).keywords


def _check_pass_mark(pass_mark: Any) -> float:
    if isinstance(pass_mark, bool) or not isinstance(pass_mark, (int, float)):
        raise InvalidInputError(f"Pass mark must be a number, got {pass_mark!r}")
    return pass_mark


def aggregate(matches: Iterable[MatchedKeyword]) -> float:
    """Sum type-weighted contributions, floored at zero."""
    total = sum(TYPE_MULTIPLIERS[m.type] * m.weight for m in matches)
    return round(max(0.0, total), 4)


def decide(total_score: float, pass_mark: float) -> Decision:
    return Decision.SHORTLIST if total_score >= pass_mark else Decision.REJECT


def breakdown(matches: Sequence[MatchedKeyword], total_keywords: int) -> dict[str, int]:
    counts = {key: 0 for key in _TIER_BREAKDOWN_KEYS.values()}
    counts.update({t.value: 0 for t in KeywordType})
    for m in matches:
        counts[_TIER_BREAKDOWN_KEYS[m.match_type]] += 1
        counts[m.type.value] += 1
    counts["total_keywords"] = total_keywords
    counts["matched"] = len(matches)
    return counts


def candidate_text(candidate: Candidate, mode: ScoringMode) -> str:
    """Skills joined by spaces, plus resume text in full mode."""
    parts = list(candidate.skills)
    if mode is ScoringMode.FULL and candidate.resume_text:
        parts.append(candidate.resume_text)
    return " ".join(parts)


def score(
    candidate: Candidate | Mapping[str, Any],
    keywords: KeywordSet | Sequence[Keyword | Mapping[str, Any]],
    pass_mark: float,
    mode: ScoringMode | str = ScoringMode.SIMPLE,
    *,
    max_chars: int | None = None,
    logger: logging.Logger | logging.LoggerAdapter | None = None,
) -> ScoringResult:
    """Score one candidate and return a fresh :class:`ScoringResult`.

    Raises :class:`InvalidInputError` for malformed candidates, keywords,
    pass marks or modes. Empty skills or keyword lists score 0.
    """
    logger = logger or log
    cand = Candidate.from_dict(candidate)
    kws = _parse_keywords(keywords)
    pass_mark = _check_pass_mark(pass_mark)
    mode = parse_mode(mode)
    limit = max_chars if max_chars is not None else max_candidate_chars()

    text = prepare(candidate_text(cand, mode), max_chars=limit)
    active = [k for k in kws if k.active]
    matches = match_keywords(text, active, MODE_TIERS[mode], logger=logger)
    total = aggregate(matches)
    decision = decide(total, pass_mark)

    logger.debug(
        "Scored %s mode: %d/%d keywords matched, score %s/%s → %s",
        mode.value, len(matches), len(active), total, pass_mark, decision.value,
    )
    return ScoringResult(
        total_score=total,
        matched_keywords=tuple(matches),
        breakdown=breakdown(matches, len(active)),
        decision=decision,
        pass_mark=pass_mark,
        mode=mode,
    )


def score_batch(
    candidates: Sequence[Candidate | Mapping[str, Any]],
    keywords: KeywordSet | Sequence[Keyword | Mapping[str, Any]],
    pass_mark: float,
    mode: ScoringMode | str = ScoringMode.SIMPLE,
    *,
    max_chars: int | None = None,
    logger: logging.Logger | logging.LoggerAdapter | None = None,
) -> list[ScoringResult]:
    """Score each candidate independently; results keep input order."""
    kws = _parse_keywords(keywords)
    results = [
        score(c, kws, pass_mark, mode, max_chars=max_chars, logger=logger)
        for c in candidates
    ]
    shortlisted = sum(1 for r in results if r.shortlisted)
    (logger or log).info(
        "Scored %d candidate(s) → %d shortlisted at pass mark %s", len(results), shortlisted, pass_mark
    )
    return results
