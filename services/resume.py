"""Resume text extraction and best-effort candidate name detection."""
from __future__ import annotations

import io
import logging
import re
from typing import Optional

from pydantic import BaseModel
from pypdf import PdfReader
from pypdf.errors import PdfReadError

from config.settings import settings

from .errors import InvalidResume


logger = logging.getLogger(__name__)

UNKNOWN_NAME = "Unknown"
NAME_SCAN_LINES = 5
NAME_STOPWORDS = ("resume", "cv", "phone", "email", "linkedin", "github", "portfolio")
_NAME_PATTERN = re.compile(r"^[A-Z][a-z]+ [A-Z][a-z]+")


class ResumeText(BaseModel):
    text: str
    name: str = UNKNOWN_NAME


def guess_candidate_name(text: str) -> str:
    """First of the leading non-empty lines shaped like "Firstname Lastname"."""

    lines = [line.strip() for line in text.splitlines() if line.strip()]
    for line in lines[:NAME_SCAN_LINES]:
        lowered = line.lower()
        if _NAME_PATTERN.match(line) and not any(word in lowered for word in NAME_STOPWORDS):
            return line
    return UNKNOWN_NAME


def pdf_text(document: bytes, *, max_pages: Optional[int] = None) -> str:
    limit = max_pages or settings.RESUME_MAX_PAGES
    try:
        reader = PdfReader(io.BytesIO(document))
        if reader.is_encrypted:
            raise InvalidResume("encrypted PDF files are not supported")
        if len(reader.pages) > limit:
            raise InvalidResume(f"PDF exceeds maximum page limit ({limit})")
        pages = [(page.extract_text() or "").strip() for page in reader.pages]
    except InvalidResume:
        raise
    except (PdfReadError, ValueError) as exc:
        logger.warning("Resume PDF could not be read: %s", exc)
        raise InvalidResume("resume PDF could not be read") from exc
    return "\n\n".join(page for page in pages if page)


def extract_resume(document: bytes, *, max_pages: Optional[int] = None) -> ResumeText:
    """PDF bytes go through pypdf; anything else is decoded as UTF-8 text."""

    if not document:
        raise InvalidResume("resume upload is empty")
    if document.lstrip()[:5] == b"%PDF-":
        text = pdf_text(document, max_pages=max_pages)
    else:
        text = document.decode("utf-8", errors="replace")
    text = text.strip()
    if not text:
        raise InvalidResume("no text could be extracted from the resume")
    return ResumeText(text=text, name=guess_candidate_name(text))


def resume_from_text(text: str) -> ResumeText:
    text = (text or "").strip()
    return ResumeText(text=text, name=guess_candidate_name(text) if text else UNKNOWN_NAME)


__all__ = ["ResumeText", "UNKNOWN_NAME", "extract_resume", "guess_candidate_name", "pdf_text", "resume_from_text"]
