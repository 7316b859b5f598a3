"""Tests for the multi-tier keyword matcher."""
import pytest

from ats_bot.matcher import levenshtein, match_keyword, match_keywords, similarity
from ats_bot.models import Keyword, MatchType
from ats_bot.text import prepare


class TestSimilarity:
    """Tests for edit-distance helpers."""

    def test_levenshtein(self):
        assert levenshtein("kitten", "sitting") == 3
        assert levenshtein("", "abc") == 3
        assert levenshtein("same", "same") == 0

    def test_similarity_bounds(self):
        assert similarity("", "") == 1.0
        assert similarity("python", "python") == 1.0
        assert similarity("abc", "xyz") == 0.0

    def test_similarity_is_symmetric(self):
        assert similarity("kubernetes", "kubernets") == similarity("kubernets", "kubernetes")
        assert similarity("kubernetes", "kubernets") == pytest.approx(0.9)


class TestTiers:
    """One test per matching tier."""

    def test_exact_substring(self):
        hit = match_keyword(Keyword("node.js", "required", 9), prepare("React Node.js MongoDB"))
        assert hit.match_type is MatchType.EXACT
        assert hit.weight == 9

    def test_word_set_match_ignores_order_and_adjacency(self):
        text = prepare("AWS experience; holds certified scrum credentials")
        hit = match_keyword(Keyword("aws certified", "required", 4), text)
        assert hit.match_type is MatchType.WORD
        assert hit.weight == pytest.approx(3.2)

    def test_ngram_match_on_leading_bigram(self):
        text = prepare("machine learning expert")
        hit = match_keyword(Keyword("machine learning engineer", "preferred", 5), text)
        assert hit.match_type is MatchType.NGRAM
        assert hit.weight == pytest.approx(3.0)

    def test_ngram_match_when_a_word_is_missing(self):
        text = prepare("senior data platform lead")
        hit = match_keyword(Keyword("data platform lead engineer", "preferred", 5), text)
        # "engineer" is missing so the word tier fails
        assert hit.match_type is MatchType.NGRAM

    def test_fuzzy_single_word(self):
        hit = match_keyword(Keyword("kubernetes", "preferred", 4), prepare("Docker kubernets"))
        assert hit.match_type is MatchType.FUZZY
        assert hit.weight == 2.0
        assert hit.matched_terms == ("kubernets",)

    def test_fuzzy_threshold_is_strict(self):
        """A similarity of exactly 0.8 is not enough."""
        assert similarity("abcde", "abcdx") == pytest.approx(0.8)
        assert match_keyword(Keyword("abcde", "preferred", 1), prepare("abcdx")) is None

    def test_multi_word_keywords_never_fuzzy_match(self):
        assert match_keyword(Keyword("spring boot", "preferred", 1), prepare("sprint boat")) is None

    def test_single_word_keywords_skip_word_and_ngram_tiers(self):
        hit = match_keyword(
            Keyword("python", "preferred", 1),
            prepare("pythons"),
            tiers=(MatchType.WORD, MatchType.NGRAM),
        )
        assert hit is None


class TestMatchKeywords:
    """Tests for match_keywords over a keyword list."""

    def test_exact_wins_over_word_tier(self):
        text = prepare("aws certified developer")
        [hit] = match_keywords(text, [Keyword("aws certified", "required", 4)])
        assert hit.match_type is MatchType.EXACT
        assert hit.weight == 4

    def test_tier_restriction(self):
        text = prepare("aws and certified")
        assert match_keywords(text, [Keyword("aws certified", "required", 4)], [MatchType.EXACT]) == []

    def test_alias_matches(self):
        kw = Keyword("node.js", "required", 9, aliases=["NodeJS"])
        [hit] = match_keywords(prepare("nodejs developer"), [kw])
        assert hit.keyword == "node.js"
        assert hit.match_type is MatchType.EXACT

    def test_inactive_keywords_are_skipped(self):
        kw = Keyword("react", "required", 8, active=False)
        assert match_keywords(prepare("react"), [kw]) == []

    def test_results_keep_keyword_order(self):
        kws = [Keyword("sql", "preferred", 1), Keyword("go", "preferred", 1), Keyword("rust", "preferred", 1)]
        hits = match_keywords(prepare("rust go sql"), kws)
        assert [h.keyword for h in hits] == ["sql", "go", "rust"]

    def test_empty_inputs(self):
        assert match_keywords(prepare(""), [Keyword("react", "required", 1)]) == []
        assert match_keywords(prepare("react"), []) == []
