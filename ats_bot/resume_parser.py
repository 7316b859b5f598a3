"""Resume text for full-mode scoring.

Only plain text is needed here: the scorer normalizes and matches it, so no
structure (sections, contact details) is pulled out. PDF goes through
pdftotext when installed and pypdf otherwise; DOCX is read straight from its
``word/document.xml`` part.

:func:`extract_text_safe` is what the bot calls. A missing or unreadable
resume yields ``""`` and the applicant is scored on skills alone.
"""
from __future__ import annotations

import re
import shutil
import subprocess
import zipfile
from pathlib import Path
from typing import Callable, Iterator
from xml.etree import ElementTree

from pypdf import PdfReader
from pypdf.errors import PyPdfError

from ats_bot.log import get_logger

log = get_logger(__name__)

_W_NS = "{http://schemas.openxmlformats.org/wordprocessingml/2006/main}"
_PDFTOTEXT_TIMEOUT = 30
_MIN_SPACE_RATIO = 0.08

# camelCase, letter/digit and punctuation boundaries glued together by PDF extraction
_SPACING_FIXES = (
    re.compile(r"(?<=[a-z])(?=[A-Z])"),
    re.compile(r"(?<=[a-zA-Z])(?=\d)"),
    re.compile(r"(?<=\d)(?=[a-zA-Z])"),
    re.compile(r"(?<=[!?,;:])(?=[A-Za-z])"),
)

_EXTRACTION_ERRORS = (
    OSError,
    ValueError,
    KeyError,
    zipfile.BadZipFile,
    ElementTree.ParseError,
    PyPdfError,
    subprocess.SubprocessError,
)


def _fix_spacing(text: str) -> str:
    """Split words that a PDF text layer ran together.

    Short snippets and text with a normal share of spaces are returned as is.
    """
    if not text or len(text) < 50:
        return text
    ratio = text.count(" ") / len(text)
    if ratio > _MIN_SPACE_RATIO:
        return text
    log.debug("Space ratio %.3f below %.2f, splitting merged words", ratio, _MIN_SPACE_RATIO)
    for pattern in _SPACING_FIXES:
        text = pattern.sub(" ", text)
    return text


def _pdftotext(path: Path) -> str:
    if not shutil.which("pdftotext"):
        return ""
    proc = subprocess.run(
        ["pdftotext", "-layout", str(path), "-"],
        capture_output=True,
        text=True,
        timeout=_PDFTOTEXT_TIMEOUT,
    )
    return proc.stdout if proc.returncode == 0 else ""


def _extract_pdf(path: Path) -> str:
    text = _pdftotext(path)
    if text.strip():
        return text
    reader = PdfReader(str(path))
    return "\n".join(_fix_spacing(page.extract_text() or "") for page in reader.pages)


def _docx_paragraphs(path: Path) -> Iterator[str]:
    with zipfile.ZipFile(path) as archive, archive.open("word/document.xml") as body:
        root = ElementTree.parse(body).getroot()
    for para in root.iter(f"{_W_NS}p"):
        runs = "".join(node.text or "" for node in para.iter(f"{_W_NS}t"))
        if runs:
            yield runs


def _extract_docx(path: Path) -> str:
    return "\n".join(_docx_paragraphs(path))


def _extract_txt(path: Path) -> str:
    return path.read_text(encoding="utf-8", errors="ignore")


_EXTRACTORS: dict[str, Callable[[Path], str]] = {
    ".pdf": _extract_pdf,
    ".docx": _extract_docx,
    ".txt": _extract_txt,
}


def extract_text(path: Path) -> str:
    """Return the plain text of a PDF, DOCX or TXT resume.

    Raises ``ValueError`` for any other suffix.
    """
    extractor = _EXTRACTORS.get(path.suffix.lower())
    if extractor is None:
        raise ValueError(f"Unsupported resume format: {path.suffix or path.name}")
    return extractor(path)


def extract_text_safe(path: str | Path | None) -> str:
    if not path:
        return ""
    path = Path(path)
    if not path.is_file():
        log.warning("Resume %s not found, scoring on skills only", path)
        return ""
    try:
        text = extract_text(path)
    except _EXTRACTION_ERRORS as exc:
        log.warning("Could not read resume %s (%s), scoring on skills only", path.name, exc)
        return ""
    log.debug("Resume %s: %d chars", path.name, len(text))
    return text
