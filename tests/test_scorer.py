"""Tests for scoring, aggregation and the shortlist decision."""
import logging

import pytest

from ats_bot.models import (
    Candidate,
    Decision,
    InvalidInputError,
    Keyword,
    KeywordSet,
    ScoringMode,
)
from ats_bot.scorer import aggregate, decide, score, score_batch


class TestScenarios:
    """End-to-end scoring scenarios."""

    def test_required_exact_matches_shortlist(self, fullstack_keywords):
        result = score({"skills": ["React", "Node.js", "MongoDB"]}, fullstack_keywords, 5, "simple")

        assert result.total_score == 34
        assert result.decision is Decision.SHORTLIST
        assert [m.keyword for m in result.matched_keywords] == ["react", "node.js"]
        assert result.breakdown["required"] == 2
        assert result.breakdown["exact_matches"] == 2

    def test_no_match_rejects(self):
        kws = [{"text": "python", "type": "preferred", "weight": 5}]
        result = score({"skills": ["Java", "C++"]}, kws, 5, "simple")

        assert result.total_score == 0
        assert result.matched_keywords == ()
        assert result.decision is Decision.REJECT

    def test_word_set_match_in_full_mode(self):
        kws = [{"text": "aws certified", "type": "required", "weight": 4}]
        candidate = Candidate(skills=("AWS",), resume_text="Holds certified scrum credentials.")
        result = score(candidate, kws, 5, ScoringMode.FULL)

        assert result.total_score == pytest.approx(6.4)
        assert result.decision is Decision.SHORTLIST
        assert result.breakdown["word_matches"] == 1

    def test_negative_only_floors_at_zero(self):
        kws = [{"text": "leadership", "type": "negative", "weight": 3}]
        result = score({"skills": ["Leadership"]}, kws, 5)

        assert result.total_score == 0
        assert result.breakdown["negative"] == 1
        assert result.decision is Decision.REJECT

    def test_reprocessing_with_lower_pass_mark_flips(self):
        kws = [{"text": "django", "type": "preferred", "weight": 8}]
        candidate = {"skills": ["Django"]}

        first = score(candidate, kws, 10)
        second = score(candidate, kws, 5)

        assert first.total_score == second.total_score == 8
        assert first.decision is Decision.REJECT
        assert second.decision is Decision.SHORTLIST


class TestProperties:
    """Invariants that hold for every input."""

    def test_idempotent(self, fullstack_keywords):
        candidate = {"skills": ["React"], "resume_text": "node developer"}
        a = score(candidate, fullstack_keywords, 5, "full")
        b = score(candidate, fullstack_keywords, 5, "full")
        assert a == b
        assert a.to_dict() == b.to_dict()

    def test_inclusive_boundary(self):
        kws = [Keyword("go", "preferred", 5)]
        assert score({"skills": ["Go"]}, kws, 5).decision is Decision.SHORTLIST

    def test_monotonic_in_pass_mark(self):
        kws = [Keyword("go", "preferred", 5)]
        decisions = [score({"skills": ["Go"]}, kws, pm).decision for pm in (0, 4, 5, 5.01, 6, 50)]
        assert decisions == [Decision.SHORTLIST] * 3 + [Decision.REJECT] * 3

    def test_empty_keywords(self):
        result = score({"skills": ["Anything"]}, [], 5)
        assert result.total_score == 0
        assert result.matched_keywords == ()
        assert result.decision is Decision.REJECT

    def test_empty_keywords_with_zero_pass_mark_shortlists(self):
        assert score({"skills": []}, [], 0).decision is Decision.SHORTLIST

    def test_negative_outweighs_positive_floors_at_zero(self):
        kws = [Keyword("php", "negative", 10), Keyword("html", "preferred", 2)]
        assert score({"skills": ["PHP", "HTML"]}, kws, 1).total_score == 0

    def test_mixed_polarity(self):
        kws = [
            Keyword("react", "required", 8),
            Keyword("css", "preferred", 2),
            Keyword("php", "negative", 3),
        ]
        result = score({"skills": ["React", "CSS", "PHP"]}, kws, 5)
        assert result.total_score == 2 * 8 + 2 - 3

    def test_tier_priority_counts_once(self):
        kws = [Keyword("aws certified", "required", 4)]
        result = score({"skills": ["AWS certified"]}, kws, 5, "full")
        assert result.total_score == 8
        assert result.breakdown["matched"] == 1
        assert result.breakdown["word_matches"] == 0

    def test_float_artifacts_are_rounded(self):
        kws = [Keyword("a1", "preferred", 0.1), Keyword("b2", "preferred", 0.2)]
        assert score({"skills": ["a1 b2"]}, kws, 0.3).total_score == 0.3


class TestModes:
    """Simple mode versus full mode."""

    def test_simple_mode_ignores_resume(self, fullstack_keywords):
        candidate = {"skills": [], "resume_text": "React and Node.js"}
        assert score(candidate, fullstack_keywords, 5, "simple").total_score == 0
        assert score(candidate, fullstack_keywords, 5, "full").total_score == 34

    def test_simple_mode_has_no_fuzzy_tier(self):
        kws = [Keyword("kubernetes", "preferred", 4)]
        assert score({"skills": ["kubernets"]}, kws, 1, "simple").total_score == 0
        assert score({"skills": ["kubernets"]}, kws, 1, "full").total_score == 2

    def test_keyword_set_and_inactive_keywords(self):
        kset = KeywordSet(
            job_id="j1",
            keywords=(Keyword("react", "required", 8), Keyword("vue", "required", 8, active=False)),
        )
        result = score({"skills": ["React", "Vue"]}, kset, 5)
        assert result.total_score == 16
        assert result.breakdown["total_keywords"] == 1

    def test_candidate_text_is_capped(self):
        kws = [Keyword("python", "preferred", 5)]
        candidate = {"skills": ["java " * 10, "python"]}
        assert score(candidate, kws, 5, max_chars=20).total_score == 0
        assert score(candidate, kws, 5).total_score == 5

    def test_injected_logger_receives_trace(self, caplog):
        logger = logging.getLogger("tests.scoring-trace")
        with caplog.at_level(logging.DEBUG, logger="tests.scoring-trace"):
            score({"skills": ["React"]}, [Keyword("react", "required", 1)], 1, logger=logger)
        assert any("react" in r.getMessage() for r in caplog.records)


class TestValidation:
    """Malformed input is rejected before scoring."""

    @pytest.mark.parametrize("candidate", [
        {"skills": ["React", 3]},
        {"skills": "React, Node"},
        {"skills": ["React"], "resume_text": 42},
        {"resume_text": "no skills key"},
        ["React"],
    ])
    def test_bad_candidates(self, candidate):
        with pytest.raises(InvalidInputError):
            score(candidate, [], 5)

    @pytest.mark.parametrize("keyword", [
        {"type": "required", "weight": 1},
        {"text": "react", "weight": 1},
        {"text": "react", "type": "mandatory"},
        {"text": "react", "type": "required", "category": "hobby"},
        {"text": "react", "type": "required", "weight": 0},
        {"text": "react", "type": "required", "weight": 10.5},
        {"text": "react", "type": "required", "weight": "heavy"},
        {"text": "   ", "type": "required"},
        {"text": "node.js", "type": "required", "aliases": "nodejs"},
        {"text": "node.js", "type": "required", "aliases": {"name": "nodejs"}},
        {"text": "node.js", "type": "required", "aliases": ["nodejs", 5]},
    ])
    def test_bad_keywords(self, keyword):
        with pytest.raises(InvalidInputError):
            score({"skills": ["React"]}, [keyword], 5)

    def test_string_aliases_are_not_split_into_letters(self):
        kw = {"text": "node.js", "type": "required", "weight": 9, "aliases": "nodejs"}
        with pytest.raises(InvalidInputError, match="aliases must be a list"):
            score({"skills": ["Java"]}, [kw], 5)

    def test_one_bad_keyword_rejects_whole_set(self):
        kws = [{"text": "react", "type": "required"}, {"text": "vue", "type": "bogus"}]
        with pytest.raises(InvalidInputError, match="bogus"):
            score({"skills": ["React"]}, kws, 5)

    def test_duplicate_keywords(self):
        kws = [{"text": "React", "type": "required"}, {"text": " react ", "type": "preferred"}]
        with pytest.raises(InvalidInputError, match="Duplicate"):
            score({"skills": ["React"]}, kws, 5)

    @pytest.mark.parametrize("pass_mark", ["5", None, True])
    def test_bad_pass_mark(self, pass_mark):
        with pytest.raises(InvalidInputError):
            score({"skills": []}, [], pass_mark)

    def test_unknown_mode(self):
        with pytest.raises(InvalidInputError, match="mode"):
            score({"skills": []}, [], 5, "turbo")

    def test_keyword_alias_field_and_defaults(self):
        kw = Keyword.from_dict({"keyword": " React ", "type": "Preferred"})
        assert kw.text == "react"
        assert kw.weight == 1.0
        assert kw.category.value == "other"


class TestHelpers:
    """Tests for aggregate, decide and score_batch."""

    def test_aggregate_empty(self):
        assert aggregate([]) == 0

    def test_decide(self):
        assert decide(5, 5) is Decision.SHORTLIST
        assert decide(4.99, 5) is Decision.REJECT
        assert decide(0, -1) is Decision.SHORTLIST

    def test_score_batch_keeps_order(self, fullstack_keywords):
        candidates = [{"skills": ["React"]}, {"skills": []}, {"skills": ["React", "Node.js"]}]
        results = score_batch(candidates, fullstack_keywords, 20)
        assert [r.total_score for r in results] == [16, 0, 34]
        assert [r.decision for r in results] == [Decision.REJECT, Decision.REJECT, Decision.SHORTLIST]
