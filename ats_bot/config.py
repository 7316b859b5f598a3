"""Load job keyword configuration and env settings."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from ats_bot.log import get_logger
from ats_bot.models import InvalidInputError, JobConfig, KeywordSet

log = get_logger(__name__)

load_dotenv()

ROOT_DIR: Path = Path(__file__).resolve().parent.parent
CONFIG_DIR: Path = ROOT_DIR / "config"
JOBS_PATH: Path = CONFIG_DIR / "jobs.yaml"
REPORTS_DIR: Path = ROOT_DIR / "reports"
DATA_DIR: Path = ROOT_DIR / "data"
RESUME_DIR: Path = ROOT_DIR / "resume"

SYSTEM_DEFAULT_PASS_MARK: float = 5
DEFAULT_MAX_CANDIDATE_CHARS: int = 100_000


def get_env(key: str, default: str = "") -> str:
    return os.environ.get(key, default).strip()


def _env_number(key: str, default: float) -> float:
    raw = get_env(key)
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        log.warning("Ignoring non-numeric %s=%r, using %s", key, raw, default)
        return default
    return int(value) if value.is_integer() else value


def default_pass_mark(file_default: float | None = None) -> float:
    """``BOT_DEFAULT_PASS_MARK``, else the jobs file's ``default_pass_mark``, else 5."""
    fallback = SYSTEM_DEFAULT_PASS_MARK if file_default is None else file_default
    return _env_number("BOT_DEFAULT_PASS_MARK", fallback)


def max_candidate_chars() -> int:
    return int(_env_number("BOT_MAX_CANDIDATE_CHARS", DEFAULT_MAX_CANDIDATE_CHARS))


def resolve_pass_mark(
    requested: float | None = None,
    job_minimum: float | None = None,
    file_default: float | None = None,
) -> float:
    """Pick the pass mark: explicit request > job minimum score > system default.

    Only ``None`` means "not given"; an explicit 0 is honoured.
    """
    for value, source in ((requested, "request"), (job_minimum, "job")):
        if value is None:
            continue
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise InvalidInputError(f"Pass mark from {source} must be a number, got {value!r}")
        return value
    return default_pass_mark(file_default)


def jobs_path() -> Path:
    override = get_env("JOBS_CONFIG")
    return Path(override) if override else JOBS_PATH


def _job_from_dict(job_id: str, data: dict[str, Any], file_default: float | None) -> JobConfig:
    keywords = data.get("keywords") or []
    if not isinstance(keywords, list):
        raise InvalidInputError(f"Job {job_id!r}: 'keywords' must be a list")
    is_technical = data.get("is_technical", True)
    if not isinstance(is_technical, bool):
        raise InvalidInputError(f"Job {job_id!r}: is_technical must be true or false, got {is_technical!r}")
    return JobConfig(
        job_id=job_id,
        title=data.get("title", job_id),
        is_technical=is_technical,
        default_pass_mark=file_default,
        keyword_set=KeywordSet(
            job_id=job_id,
            keywords=tuple(keywords),
            minimum_score=data.get("minimum_score"),
        ),
    )


def load_jobs(path: Path | None = None) -> dict[str, JobConfig]:
    path = path or jobs_path()
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    file_default = data.get("default_pass_mark")
    if file_default is not None and (isinstance(file_default, bool) or not isinstance(file_default, (int, float))):
        raise InvalidInputError(f"{path.name}: default_pass_mark must be a number")

    jobs = {
        str(job_id): _job_from_dict(str(job_id), body or {}, file_default)
        for job_id, body in (data.get("jobs") or {}).items()
    }
    log.info("Loaded %d job(s) from %s", len(jobs), path.name)
    return jobs


def load_job(job_id: str, path: Path | None = None) -> JobConfig:
    jobs = load_jobs(path)
    if job_id not in jobs:
        raise KeyError(f"Unknown job {job_id!r}; configured: {', '.join(sorted(jobs)) or 'none'}")
    return jobs[job_id]


def load_applications(path: Path) -> list[dict[str, Any]]:
    """Read an applications YAML file (a list, or a mapping with ``applications``)."""
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or []
    if isinstance(data, dict):
        data = data.get("applications") or []
    if not isinstance(data, list):
        raise InvalidInputError(f"{path.name}: expected a list of applications")
    return data


def ensure_dirs() -> None:
    for d in (REPORTS_DIR, DATA_DIR, RESUME_DIR):
        d.mkdir(parents=True, exist_ok=True)
