"""Text cleanup applied to OCR output before segmentation."""

from __future__ import annotations

import re

_NUL_RE = re.compile("\x00")
_TAB_CR_RE = re.compile(r"[\t\r]+")
_WHITESPACE_RUN_RE = re.compile(r"\s{2,}")

PAGE_SEPARATOR = "\n\n"


def normalize_ocr_text(text: str) -> str:
    """Strip NUL bytes, flatten tabs/CRs and collapse whitespace runs."""

    cleaned = _NUL_RE.sub(" ", text)
    cleaned = _TAB_CR_RE.sub(" ", cleaned)
    cleaned = _WHITESPACE_RUN_RE.sub(" ", cleaned)
    return cleaned.strip()


def join_pages(pages: list[str]) -> str:
    """Join normalized pages with a blank line, skipping empty pages."""

    return PAGE_SEPARATOR.join(page for page in pages if page)
