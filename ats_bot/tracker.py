"""Status history for bot-processed applications.

One CSV row per processing run. Rows are only ever appended, under an
advisory ``fcntl`` lock, so concurrent bulk runs cannot interleave writes.
"""
from __future__ import annotations

import csv
import fcntl
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import IO, Iterator

from ats_bot.config import DATA_DIR
from ats_bot.log import get_logger

log = get_logger(__name__)

HISTORY_CSV: Path = DATA_DIR / "status_history.csv"
HEADERS: list[str] = [
    "application_id", "job_id", "event", "status", "stage", "score",
    "pass_mark", "recommendation", "actor", "comment", "recorded_at",
]


@contextmanager
def _locked(path: Path, mode: str) -> Iterator[IO[str]]:
    """Open *path* holding a shared lock for reads, exclusive otherwise."""
    with open(path, mode, newline="", encoding="utf-8") as f:
        fcntl.flock(f.fileno(), fcntl.LOCK_SH if mode == "r" else fcntl.LOCK_EX)
        try:
            yield f
        finally:
            fcntl.flock(f.fileno(), fcntl.LOCK_UN)


def ensure_history(path: Path | None = None) -> Path:
    path = path or HISTORY_CSV
    if path.exists():
        return path
    path.parent.mkdir(parents=True, exist_ok=True)
    with _locked(path, "w") as f:
        csv.writer(f).writerow(HEADERS)
    log.info("Started status history at %s", path)
    return path


def record_event(
    application_id: str,
    job_id: str,
    *,
    event: str,
    status: str,
    stage: str,
    score: float,
    pass_mark: float,
    recommendation: str,
    comment: str = "",
    actor: str = "bot_mimic",
    path: Path | None = None,
) -> dict[str, str]:
    """Append one event row and return it as written."""
    row = dict(
        application_id=application_id,
        job_id=job_id,
        event=event,
        status=status,
        stage=stage,
        score=f"{score:g}",
        pass_mark=f"{pass_mark:g}",
        recommendation=recommendation,
        actor=actor,
        comment=comment,
        recorded_at=datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S"),
    )
    with _locked(ensure_history(path), "a") as f:
        csv.DictWriter(f, fieldnames=HEADERS).writerow(row)
    log.debug("%s %s: %s, recommend %s", application_id, event, status, recommendation)
    return row


def get_history(application_id: str | None = None, path: Path | None = None) -> list[dict[str, str]]:
    with _locked(ensure_history(path), "r") as f:
        rows = list(csv.DictReader(f))
    if application_id is None:
        return rows
    return [r for r in rows if r.get("application_id") == application_id]


def get_stats(path: Path | None = None) -> dict[str, int]:
    """Counts by each application's latest ``processed`` status."""
    latest: dict[str, str] = {}
    for row in get_history(path=path):
        if row.get("event") == "processed":
            latest[row["application_id"]] = row.get("status", "")
    statuses = list(latest.values())
    return {
        "total_processed": len(statuses),
        "shortlisted": statuses.count("shortlisted"),
        "rejected": statuses.count("rejected"),
    }
