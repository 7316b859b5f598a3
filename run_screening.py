#!/usr/bin/env python3
"""Entry point to screen a job's applications with the keyword bot."""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

import yaml

sys.path.insert(0, str(Path(__file__).resolve().parent))

from ats_bot.config import ensure_dirs, jobs_path, load_applications, load_job
from ats_bot.log import get_logger
from ats_bot.models import Application, InvalidInputError

log = get_logger(__name__)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Screen applications against a job's keywords.")
    parser.add_argument("--job", required=True, help="Job id from the jobs config")
    parser.add_argument("--applications", required=True, type=Path, help="Applications YAML file")
    parser.add_argument("--pass-mark", type=float, default=None, help="Override the job minimum score")
    parser.add_argument("--mode", choices=("simple", "full"), default=None,
                        help="Matching tiers (default: simple, or full with --reprocess)")
    parser.add_argument("--reprocess", action="store_true",
                        help="Rescore every application without changing its status")
    parser.add_argument("--no-report", action="store_true", help="Skip writing the Markdown report")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    if not jobs_path().exists():
        print()
        print(f"  No jobs config found at {jobs_path()}.")
        print("  Copy config/jobs.example.yaml to config/jobs.yaml and edit it.")
        print()
        return 1

    from ats_bot.processor import process_job, reprocess_job
    from ats_bot.report import build_batch_report, recommendation_text, write_report

    ensure_dirs()
    try:
        job = load_job(args.job)
        applications = [Application.from_dict(a) for a in load_applications(args.applications)]
        if args.reprocess:
            outcomes = reprocess_job(applications, job, args.pass_mark, args.mode or "full")
        else:
            outcomes = process_job(applications, job, args.pass_mark, args.mode or "simple")
    except (KeyError, InvalidInputError, OSError, yaml.YAMLError) as exc:
        log.error("Screening aborted: %s", exc)
        return 2

    for o in outcomes:
        if o.failed:
            log.warning("  %s: ERROR (%s)", o.application_id, o.error)
        else:
            log.info("  %s: %s", o.application_id, recommendation_text(o.result))

    if not args.no_report:
        content = build_batch_report(job, applications, outcomes)
        path = write_report(content, job.job_id)
        log.info("  Report: %s", path)

    failed = sum(1 for o in outcomes if o.failed)
    log.info("Screening complete — %d application(s) scored, %d error(s).", len(outcomes) - failed, failed)
    return 0


if __name__ == "__main__":
    sys.exit(main())
