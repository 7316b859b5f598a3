from .models import (
    Candidate,
    Decision,
    InvalidInputError,
    Keyword,
    KeywordCategory,
    KeywordSet,
    KeywordType,
    ScoringMode,
    ScoringResult,
)
from .scorer import score, score_batch

__all__ = [
    "Candidate", "Decision", "InvalidInputError", "Keyword", "KeywordCategory",
    "KeywordSet", "KeywordType", "ScoringMode", "ScoringResult",
    "score", "score_batch",
]
