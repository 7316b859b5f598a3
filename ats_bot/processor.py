"""
Bot processing workflow for applications.

Runs: gather candidate text → score against the job's keywords → apply the
decision to the application → append status history.
"""
from __future__ import annotations

import logging
from typing import Callable, Sequence

from ats_bot.config import resolve_pass_mark
from ats_bot.log import get_logger, get_trace_logger
from ats_bot.models import (
    Application,
    ApplicationStatus,
    Candidate,
    InvalidInputError,
    JobConfig,
    ProcessingOutcome,
    ScoringMode,
    ScoringResult,
)
from ats_bot.report import audit_comment, summarize
from ats_bot.resume_parser import extract_text_safe
from ats_bot import scorer, tracker

log = get_logger(__name__)

BOT_ELIGIBLE_STATUSES = (ApplicationStatus.APPLIED, ApplicationStatus.PENDING_BOT_REVIEW)
SHORTLISTED_STAGE = "Shortlisted by Bot"
REJECTED_STAGE = "Rejected by Bot"


def _candidate_for(application: Application, mode: ScoringMode) -> Candidate:
    resume_text = None
    if mode is not ScoringMode.SIMPLE:
        resume_text = extract_text_safe(application.resume_path)
    return Candidate(skills=tuple(application.skills), resume_text=resume_text)


def _score_application(
    application: Application,
    job: JobConfig,
    pass_mark: float | None,
    mode: ScoringMode | str,
    logger: logging.Logger | logging.LoggerAdapter | None,
) -> ScoringResult:
    if application.job_id != job.job_id:
        raise InvalidInputError(
            f"Application {application.id} belongs to job {application.job_id!r}, not {job.job_id!r}"
        )
    if not job.is_technical:
        raise InvalidInputError(f"Bot can only process technical jobs; {job.job_id!r} is not")
    mode = scorer.parse_mode(mode)
    keyword_set = job.keyword_set
    effective_pass_mark = resolve_pass_mark(pass_mark, keyword_set.minimum_score, job.default_pass_mark)
    return scorer.score(
        _candidate_for(application, mode),
        keyword_set,
        effective_pass_mark,
        mode,
        logger=logger or get_trace_logger("ats_bot.scorer", application.id),
    )


def process_application(
    application: Application,
    job: JobConfig,
    pass_mark: float | None = None,
    mode: ScoringMode | str = ScoringMode.SIMPLE,
    *,
    bot_notes: str = "",
    logger: logging.Logger | logging.LoggerAdapter | None = None,
) -> ProcessingOutcome:
    """Score *application* and move it to shortlisted/rejected."""
    result = _score_application(application, job, pass_mark, mode, logger)
    recommendation = "SHORTLIST" if result.shortlisted else "REJECT"

    application.bot_result = result
    application.bot_recommendation = recommendation
    application.bot_notes = bot_notes
    if result.shortlisted:
        application.status = ApplicationStatus.SHORTLISTED
        application.current_stage = SHORTLISTED_STAGE
        application.rejection_reason = None
    else:
        application.status = ApplicationStatus.REJECTED
        application.current_stage = REJECTED_STAGE
        application.rejection_reason = (
            f"Score {result.total_score:g}/{result.pass_mark:g} below pass mark"
        )

    tracker.record_event(
        application.id,
        job.job_id,
        event="processed",
        status=application.status.value,
        stage=application.current_stage,
        score=result.total_score,
        pass_mark=result.pass_mark,
        recommendation=recommendation,
        comment=audit_comment(result, bot_notes),
    )
    log.info(
        "Application %s: score %g/%g → %s",
        application.id, result.total_score, result.pass_mark, application.status.value,
    )
    return ProcessingOutcome(
        application_id=application.id,
        result=result,
        status=application.status,
        current_stage=application.current_stage,
        recommendation=recommendation,
        rejection_reason=application.rejection_reason,
        summary=summarize(result),
    )


def eligible_for_bot(application: Application, job: JobConfig) -> bool:
    return (
        job.is_technical
        and application.job_id == job.job_id
        and application.status in BOT_ELIGIBLE_STATUSES
        and not application.bot_processed
    )


def process_job(
    applications: Sequence[Application],
    job: JobConfig,
    pass_mark: float | None = None,
    mode: ScoringMode | str = ScoringMode.SIMPLE,
    *,
    logger: logging.Logger | logging.LoggerAdapter | None = None,
) -> list[ProcessingOutcome]:
    """Bulk-process every eligible application of *job*, in input order.

    An application that fails validation becomes an error outcome and the
    run moves on to the next one.
    """
    if not job.is_technical:
        log.warning("Job %s is not technical — nothing for the bot to process", job.job_id)
        return []
    eligible = [a for a in applications if eligible_for_bot(a, job)]
    log.info(
        "Found %d application(s), %d eligible for bot processing on %s",
        len(applications), len(eligible), job.job_id,
    )
    outcomes = _run_each(eligible, lambda a: process_application(a, job, pass_mark, mode, logger=logger))
    _log_batch("Bulk run", outcomes)
    return outcomes


def reprocess_job(
    applications: Sequence[Application],
    job: JobConfig,
    pass_mark: float | None = None,
    mode: ScoringMode | str = ScoringMode.FULL,
    *,
    logger: logging.Logger | logging.LoggerAdapter | None = None,
) -> list[ProcessingOutcome]:
    """Reprocess every application of *job*, whatever its status."""
    own = [a for a in applications if a.job_id == job.job_id]
    outcomes = _run_each(own, lambda a: reprocess_application(a, job, pass_mark, mode, logger=logger))
    _log_batch("Reprocess run", outcomes)
    return outcomes


def _run_each(
    applications: Sequence[Application],
    run: Callable[[Application], ProcessingOutcome],
) -> list[ProcessingOutcome]:
    outcomes: list[ProcessingOutcome] = []
    for app in applications:
        try:
            outcomes.append(run(app))
        except InvalidInputError as exc:
            log.error("Application %s skipped: %s", app.id, exc)
            outcomes.append(ProcessingOutcome.from_error(app, exc))
    return outcomes


def _log_batch(label: str, outcomes: Sequence[ProcessingOutcome]) -> None:
    scored = [o for o in outcomes if not o.failed]
    shortlisted = sum(1 for o in scored if o.result.shortlisted)
    log.info(
        "%s complete — processed=%d, shortlisted=%d, rejected=%d, errors=%d",
        label, len(scored), shortlisted, len(scored) - shortlisted, len(outcomes) - len(scored),
    )


def reprocess_application(
    application: Application,
    job: JobConfig,
    pass_mark: float | None = None,
    mode: ScoringMode | str = ScoringMode.FULL,
    *,
    bot_notes: str = "",
    logger: logging.Logger | logging.LoggerAdapter | None = None,
) -> ProcessingOutcome:
    """Rescore and replace the bot result; the application status is left alone."""
    result = _score_application(application, job, pass_mark, mode, logger)
    recommendation = "SHORTLIST" if result.shortlisted else "REJECT"

    application.bot_result = result
    application.bot_recommendation = recommendation
    if bot_notes:
        application.bot_notes = bot_notes

    tracker.record_event(
        application.id,
        job.job_id,
        event="reprocessed",
        status=application.status.value,
        stage=application.current_stage,
        score=result.total_score,
        pass_mark=result.pass_mark,
        recommendation=recommendation,
        comment=audit_comment(result, bot_notes, reprocessed=True),
    )
    log.info(
        "Reprocessed %s: score %g/%g → recommend %s",
        application.id, result.total_score, result.pass_mark, recommendation,
    )
    return ProcessingOutcome(
        application_id=application.id,
        result=result,
        status=application.status,
        current_stage=application.current_stage,
        recommendation=recommendation,
        rejection_reason=application.rejection_reason,
        summary=summarize(result),
    )
