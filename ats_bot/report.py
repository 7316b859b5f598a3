"""Human-readable explanations of bot scoring: audit lines and Markdown reports."""
from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Sequence

from ats_bot.config import REPORTS_DIR
from ats_bot.log import get_logger
from ats_bot.models import (
    Application,
    JobConfig,
    KeywordType,
    ProcessingOutcome,
    ScoringMode,
    ScoringResult,
)

log = get_logger(__name__)


def _fmt(value: float) -> str:
    return f"{value:g}"


def score_label(result: ScoringResult) -> str:
    return f"{_fmt(result.total_score)}/{_fmt(result.pass_mark)}"


def recommendation_text(result: ScoringResult) -> str:
    verdict = "SHORTLISTED" if result.shortlisted else "REJECTED"
    return f"{verdict} (Score: {score_label(result)})"


def summarize(result: ScoringResult) -> list[str]:
    """Audit lines listing matched keywords overall and per type."""
    lines: list[str] = []
    if result.matched_keywords:
        lines.append("Matched keywords: " + ", ".join(m.keyword for m in result.matched_keywords))
    for kw_type in KeywordType:
        names = [m.keyword for m in result.matched_keywords if m.type is kw_type]
        if names:
            lines.append(f"{kw_type.value.capitalize()}: {', '.join(names)}")
    return lines


def audit_comment(result: ScoringResult, notes: str = "", *, reprocessed: bool = False) -> str:
    action = "reprocessed" if reprocessed else "processed"
    comment = f"Bot {action} application with {result.mode.value} keyword matching. Score: {score_label(result)}."
    summary = "; ".join(summarize(result))
    return " ".join(part for part in (comment, summary, notes.strip()) if part)


def build_result_report(application: Application, result: ScoringResult) -> str:
    b = result.breakdown
    lines: list[str] = [
        f"### {'✅' if result.shortlisted else '❌'} {application.applicant or application.id}",
        f"- **Score:** {score_label(result)} — {result.decision.value}",
        f"- **Mode:** {result.mode.value}",
        f"- **Matched:** {b.get('matched', 0)} of {b.get('total_keywords', 0)} keywords "
        f"(required {b.get('required', 0)}, preferred {b.get('preferred', 0)}, negative {b.get('negative', 0)})",
    ]
    if result.mode is ScoringMode.FULL:
        lines.append(
            f"- **Tiers:** exact {b.get('exact_matches', 0)}, word {b.get('word_matches', 0)}, "
            f"ngram {b.get('ngram_matches', 0)}, fuzzy {b.get('partial_matches', 0)}"
        )
    if result.matched_keywords:
        lines.append("")
        lines.append("| Keyword | Type | Category | Match | Weight |")
        lines.append("|---------|------|----------|-------|-------:|")
        for m in result.matched_keywords:
            match = m.match_type.value
            if m.matched_terms:
                match += f" ({', '.join(m.matched_terms[:3])})"
            lines.append(
                f"| {m.keyword} | {m.type.value} | {m.category.value} | {match} "
                f"| {_fmt(m.weight)}/{_fmt(m.declared_weight)} |"
            )
    lines.append("")
    return "\n".join(lines)


def build_batch_report(
    job: JobConfig,
    applications: Sequence[Application],
    outcomes: Sequence[ProcessingOutcome],
) -> str:
    """Markdown for one bulk run; *applications* supplies applicant names."""
    date = datetime.now(timezone.utc).strftime("%Y-%m-%d")
    by_id = {a.id: a for a in applications}
    scored = [o for o in outcomes if not o.failed]
    failed = [o for o in outcomes if o.failed]
    shortlisted = sum(1 for o in scored if o.result.shortlisted)

    lines: list[str] = [f"# Screening Report — {job.title or job.job_id} — {date}", ""]
    lines.append(
        f"**{len(scored)}** processed | **{shortlisted}** shortlisted | "
        f"**{len(scored) - shortlisted}** rejected | **{len(failed)}** errors"
    )
    lines.append("")
    if not outcomes:
        lines.append("_No applications were eligible for bot processing._")
        lines.append("")
        return "\n".join(lines)

    def name_of(o: ProcessingOutcome) -> str:
        app = by_id.get(o.application_id)
        return (app.applicant if app and app.applicant else o.application_id)[:30]

    lines.append("| # | Applicant | Score | Pass mark | Recommendation | Status |")
    lines.append("|--:|-----------|------:|----------:|----------------|--------|")
    for i, o in enumerate(outcomes, 1):
        if o.failed:
            lines.append(f"| {i} | {name_of(o)} | – | – | {o.recommendation} | {o.status.value} |")
            continue
        lines.append(
            f"| {i} | {name_of(o)} | {_fmt(o.result.total_score)} | {_fmt(o.result.pass_mark)} "
            f"| {o.recommendation} | {o.status.value} |"
        )
    lines.append("")
    if failed:
        lines.append("## Errors")
        lines.append("")
        for o in failed:
            lines.append(f"- **{name_of(o)}** ({o.application_id}): {o.error}")
        lines.append("")
    lines.append("---")
    lines.append("")
    lines.append("## Details")
    lines.append("")
    for o in scored:
        app = by_id.get(o.application_id) or Application(id=o.application_id, job_id=job.job_id)
        lines.append(build_result_report(app, o.result))
    return "\n".join(lines)


def write_report(content: str, name: str) -> Path:
    REPORTS_DIR.mkdir(parents=True, exist_ok=True)
    stamp = datetime.now(timezone.utc).strftime("%Y-%m-%d_%H%M%S")
    path = REPORTS_DIR / f"screening_{name}_{stamp}.md"
    path.write_text(content, encoding="utf-8")
    log.info("Report written → %s", path)
    return path
