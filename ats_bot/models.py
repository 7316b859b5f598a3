"""Data models for keywords, candidates, scoring results and applications."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping

MIN_WEIGHT = 0.1
MAX_WEIGHT = 10.0


class InvalidInputError(ValueError):
    """Raised when a candidate, keyword or pass mark fails shape validation."""


class KeywordType(str, Enum):
    REQUIRED = "required"
    PREFERRED = "preferred"
    NEGATIVE = "negative"


class KeywordCategory(str, Enum):
    SKILL = "skill"
    TECHNOLOGY = "technology"
    EDUCATION = "education"
    EXPERIENCE = "experience"
    CERTIFICATION = "certification"
    LANGUAGE = "language"
    OTHER = "other"


class MatchType(str, Enum):
    EXACT = "exact"
    WORD = "word"
    NGRAM = "ngram"
    FUZZY = "fuzzy"


class ScoringMode(str, Enum):
    SIMPLE = "simple"
    FULL = "full"


class Decision(str, Enum):
    SHORTLIST = "shortlist"
    REJECT = "reject"


class ApplicationStatus(str, Enum):
    PENDING = "pending"
    APPLIED = "applied"
    PENDING_BOT_REVIEW = "pending_bot_review"
    UNDER_REVIEW = "under_review"
    SHORTLISTED = "shortlisted"
    INTERVIEW = "interview"
    HIRED = "hired"
    REJECTED = "rejected"


def _parse_enum(enum_cls: type[Enum], value: Any, field_name: str) -> Any:
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        try:
            return enum_cls(value.strip().lower())
        except ValueError:
            pass
    allowed = ", ".join(m.value for m in enum_cls)  # type: ignore[attr-defined]
    raise InvalidInputError(f"Invalid {field_name} {value!r}; expected one of: {allowed}")


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


@dataclass(frozen=True)
class Keyword:
    """A weighted, typed term configured for one job.

    ``text`` and ``aliases`` are stored trimmed and lowercased. Construction
    validates everything, so a ``Keyword`` that exists is always scorable.
    """

    text: str
    type: KeywordType
    weight: float = 1.0
    category: KeywordCategory = KeywordCategory.OTHER
    aliases: tuple[str, ...] = ()
    active: bool = True

    def __post_init__(self) -> None:
        if not isinstance(self.text, str) or not self.text.strip():
            raise InvalidInputError(f"Keyword text must be a non-empty string, got {self.text!r}")
        object.__setattr__(self, "text", self.text.strip().lower())
        object.__setattr__(self, "type", _parse_enum(KeywordType, self.type, "keyword type"))
        object.__setattr__(
            self, "category", _parse_enum(KeywordCategory, self.category, "keyword category")
        )
        if not _is_number(self.weight):
            raise InvalidInputError(f"Keyword {self.text!r}: weight must be a number, got {self.weight!r}")
        if not MIN_WEIGHT <= self.weight <= MAX_WEIGHT:
            raise InvalidInputError(
                f"Keyword {self.text!r}: weight {self.weight} outside [{MIN_WEIGHT}, {MAX_WEIGHT}]"
            )
        if not isinstance(self.aliases, (list, tuple)) or not all(isinstance(a, str) for a in self.aliases):
            raise InvalidInputError(f"Keyword {self.text!r}: aliases must be a list of strings")
        aliases = tuple(a.strip().lower() for a in self.aliases if a.strip())
        object.__setattr__(self, "aliases", tuple(dict.fromkeys(a for a in aliases if a != self.text)))
        if not isinstance(self.active, bool):
            raise InvalidInputError(f"Keyword {self.text!r}: active must be a boolean")

    @property
    def terms(self) -> tuple[str, ...]:
        """Keyword text followed by its aliases."""
        return (self.text, *self.aliases)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Keyword:
        """Build from a config/API mapping; accepts ``keyword`` as an alias of ``text``."""
        if isinstance(data, Keyword):
            return data
        if not isinstance(data, Mapping):
            raise InvalidInputError(f"Keyword entry must be a mapping, got {type(data).__name__}")
        text = data.get("text", data.get("keyword"))
        if text is None:
            raise InvalidInputError(f"Keyword entry missing 'text': {dict(data)!r}")
        if data.get("type") is None:
            raise InvalidInputError(f"Keyword {text!r} missing 'type'")
        aliases = data.get("aliases")
        if aliases is None:
            aliases = ()
        elif not isinstance(aliases, (list, tuple)):
            raise InvalidInputError(
                f"Keyword {text!r}: aliases must be a list of strings, got {type(aliases).__name__}"
            )
        return cls(
            text=text,
            type=data["type"],
            weight=data.get("weight", 1.0),
            category=data.get("category", KeywordCategory.OTHER),
            aliases=tuple(aliases),
            active=data.get("active", data.get("is_active", True)),
        )

    def to_dict(self) -> dict:
        return {
            "text": self.text,
            "type": self.type.value,
            "weight": self.weight,
            "category": self.category.value,
            "aliases": list(self.aliases),
            "active": self.active,
        }


@dataclass(frozen=True)
class KeywordSet:
    """All keywords of one job plus its configured minimum score."""

    job_id: str
    keywords: tuple[Keyword, ...] = ()
    minimum_score: float | None = None

    def __post_init__(self) -> None:
        parsed = tuple(Keyword.from_dict(k) for k in self.keywords)
        seen: set[str] = set()
        for kw in parsed:
            if kw.text in seen:
                raise InvalidInputError(f"Duplicate keyword {kw.text!r} for job {self.job_id!r}")
            seen.add(kw.text)
        object.__setattr__(self, "keywords", parsed)
        if self.minimum_score is not None and not _is_number(self.minimum_score):
            raise InvalidInputError(
                f"Job {self.job_id!r}: minimum_score must be a number, got {self.minimum_score!r}"
            )

    @property
    def active_keywords(self) -> tuple[Keyword, ...]:
        return tuple(k for k in self.keywords if k.active)


@dataclass(frozen=True)
class Candidate:
    """Text to score: declared skills and optional resume text."""

    skills: tuple[str, ...] = ()
    resume_text: str | None = None

    def __post_init__(self) -> None:
        if isinstance(self.skills, str) or not isinstance(self.skills, (list, tuple)):
            raise InvalidInputError(
                f"Candidate skills must be a list of strings, got {type(self.skills).__name__}"
            )
        for i, s in enumerate(self.skills):
            if not isinstance(s, str):
                raise InvalidInputError(f"Candidate skill #{i} is {type(s).__name__}, expected str")
        object.__setattr__(self, "skills", tuple(self.skills))
        if self.resume_text is not None and not isinstance(self.resume_text, str):
            raise InvalidInputError(
                f"Candidate resume_text must be a string, got {type(self.resume_text).__name__}"
            )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Candidate:
        if isinstance(data, Candidate):
            return data
        if not isinstance(data, Mapping):
            raise InvalidInputError(f"Candidate must be a mapping, got {type(data).__name__}")
        if "skills" not in data:
            raise InvalidInputError("Candidate missing 'skills'")
        return cls(
            skills=data["skills"],
            resume_text=data.get("resume_text", data.get("resumeText")),
        )


@dataclass(frozen=True)
class MatchedKeyword:
    keyword: str
    type: KeywordType
    category: KeywordCategory
    weight: float  # effective, after the tier factor
    declared_weight: float
    match_type: MatchType
    matched_terms: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {
            "keyword": self.keyword,
            "type": self.type.value,
            "category": self.category.value,
            "weight": self.weight,
            "declared_weight": self.declared_weight,
            "match_type": self.match_type.value,
            "matched_terms": list(self.matched_terms),
        }


@dataclass(frozen=True)
class ScoringResult:
    total_score: float
    matched_keywords: tuple[MatchedKeyword, ...]
    breakdown: Mapping[str, int]
    decision: Decision
    pass_mark: float
    mode: ScoringMode

    @property
    def shortlisted(self) -> bool:
        return self.decision is Decision.SHORTLIST

    def to_dict(self) -> dict:
        return {
            "total_score": self.total_score,
            "matched_keywords": [m.to_dict() for m in self.matched_keywords],
            "breakdown": dict(self.breakdown),
            "decision": self.decision.value,
            "pass_mark": self.pass_mark,
            "mode": self.mode.value,
        }


@dataclass
class JobConfig:
    job_id: str
    title: str = ""
    is_technical: bool = True
    keyword_set: KeywordSet | None = None
    # default_pass_mark of the jobs file this job was loaded from
    default_pass_mark: float | None = None

    def __post_init__(self) -> None:
        if self.keyword_set is None:
            self.keyword_set = KeywordSet(job_id=self.job_id)


@dataclass
class Application:
    """Caller-side application record the bot reads from and writes onto."""

    id: str
    job_id: str
    applicant: str = ""
    skills: list[str] = field(default_factory=list)
    resume_path: str | None = None
    status: ApplicationStatus = ApplicationStatus.APPLIED
    current_stage: str = "Application Submitted"
    bot_result: ScoringResult | None = None
    bot_recommendation: str | None = None
    rejection_reason: str | None = None
    bot_notes: str = ""

    @property
    def bot_processed(self) -> bool:
        return self.bot_result is not None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Application:
        if "id" not in data or "job_id" not in data:
            raise InvalidInputError(f"Application entry needs 'id' and 'job_id': {dict(data)!r}")
        skills = data.get("skills")
        if skills is None:
            skills = []
        elif not isinstance(skills, (list, tuple)):
            raise InvalidInputError(
                f"Application {data['id']}: skills must be a list, got {type(skills).__name__}"
            )
        return cls(
            id=str(data["id"]),
            job_id=str(data["job_id"]),
            applicant=data.get("applicant", ""),
            skills=list(skills),
            resume_path=data.get("resume_path"),
            status=_parse_enum(ApplicationStatus, data.get("status", "applied"), "application status"),
            current_stage=data.get("current_stage", "Application Submitted"),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "job_id": self.job_id,
            "applicant": self.applicant,
            "skills": list(self.skills),
            "resume_path": self.resume_path,
            "status": self.status.value,
            "current_stage": self.current_stage,
            "bot_processed": self.bot_processed,
            "bot_result": self.bot_result.to_dict() if self.bot_result else None,
            "bot_recommendation": self.bot_recommendation,
            "rejection_reason": self.rejection_reason,
            "bot_notes": self.bot_notes,
        }


@dataclass
class ProcessingOutcome:
    """What one bot run did to one application.

    A bulk run records a failed application with ``result=None`` and the
    error message; the application itself is left untouched.
    """

    application_id: str
    result: ScoringResult | None
    status: ApplicationStatus
    current_stage: str
    recommendation: str
    rejection_reason: str | None = None
    summary: list[str] = field(default_factory=list)
    error: str | None = None

    @property
    def failed(self) -> bool:
        return self.result is None

    @classmethod
    def from_error(cls, application: Application, error: Exception) -> ProcessingOutcome:
        return cls(
            application_id=application.id,
            result=None,
            status=application.status,
            current_stage=application.current_stage,
            recommendation="ERROR",
            rejection_reason=application.rejection_reason,
            error=str(error),
        )
