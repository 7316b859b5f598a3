"""Logging setup shared by the bot modules.

Handlers are attached to the root logger once, on the first
:func:`get_logger` call: stdout at ``LOG_LEVEL`` and, unless
``BOT_LOG_TO_FILE`` is off, a debug-level ``logs/screening_<date>.log``.
Per-application scoring traces go through :func:`get_trace_logger`.
"""
from __future__ import annotations

import logging
import os
import sys
from datetime import date
from pathlib import Path
from typing import Any, MutableMapping

_FORMATTER = logging.Formatter(
    "%(asctime)s  %(levelname)-8s  %(name)s  %(message)s", datefmt="%Y-%m-%d %H:%M:%S"
)
_TRUTHY = ("1", "true", "yes", "on")
_configured = False


class TraceAdapter(logging.LoggerAdapter):
    """Prefix records with the id of the application being scored."""

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> tuple[Any, MutableMapping[str, Any]]:
        return f"[{self.extra['application_id']}] {msg}", kwargs


def get_logger(name: str) -> logging.Logger:
    global _configured
    if not _configured:
        _install_handlers()
        _configured = True
    return logging.getLogger(name)


def get_trace_logger(name: str, application_id: str) -> TraceAdapter:
    return TraceAdapter(get_logger(name), {"application_id": application_id})


def _log_dir() -> Path:
    override = os.environ.get("BOT_LOG_DIR", "").strip()
    return Path(override) if override else Path(__file__).resolve().parent.parent / "logs"


def _file_handler() -> logging.Handler | None:
    if os.environ.get("BOT_LOG_TO_FILE", "true").strip().lower() not in _TRUTHY:
        return None
    log_dir = _log_dir()
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(log_dir / f"screening_{date.today():%Y-%m-%d}.log", encoding="utf-8")
    except OSError as exc:
        sys.stderr.write(f"File logging disabled, cannot write to {log_dir}: {exc}\n")
        return None
    handler.setLevel(logging.DEBUG)
    return handler


def _install_handlers() -> None:
    level = getattr(logging, os.environ.get("LOG_LEVEL", "INFO").upper(), logging.INFO)
    root = logging.getLogger()
    if root.handlers:
        root.setLevel(level)
        return

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)
    handlers: list[logging.Handler] = [console]
    file_handler = _file_handler()
    if file_handler is not None:
        handlers.append(file_handler)
    # Root passes everything its most verbose handler wants; each handler filters itself
    root.setLevel(min(h.level for h in handlers))
    for handler in handlers:
        handler.setFormatter(_FORMATTER)
        root.addHandler(handler)
