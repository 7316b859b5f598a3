"""
Pytest configuration for the keyword bot tests.
"""
import os
import sys
import tempfile

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))
os.environ.setdefault("BOT_LOG_DIR", os.path.join(tempfile.gettempdir(), "ats_bot_test_logs"))

from ats_bot import tracker  # noqa: E402
from ats_bot.models import JobConfig, Keyword, KeywordSet  # noqa: E402


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Keep history files and env overrides out of the real project."""
    monkeypatch.setattr(tracker, "HISTORY_CSV", tmp_path / "status_history.csv")
    for key in ("BOT_DEFAULT_PASS_MARK", "BOT_MAX_CANDIDATE_CHARS", "JOBS_CONFIG"):
        monkeypatch.delenv(key, raising=False)
    return tmp_path


@pytest.fixture
def fullstack_keywords():
    return [
        Keyword("react", "required", 8, "technology"),
        Keyword("node.js", "required", 9, "technology"),
    ]


@pytest.fixture
def fullstack_job(fullstack_keywords):
    return JobConfig(
        job_id="fullstack-dev",
        title="Full Stack Developer",
        is_technical=True,
        keyword_set=KeywordSet(job_id="fullstack-dev", keywords=tuple(fullstack_keywords)),
    )
