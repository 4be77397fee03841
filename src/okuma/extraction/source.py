"""Open PDF resources given by URL or local path."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import pymupdf
import requests

from okuma.errors import SourceUnavailableError

logger = logging.getLogger(__name__)

_PDF_MAGIC = b"%PDF-"
_REMOTE_SCHEMES = ("http://", "https://")


def is_remote(source: str) -> bool:
    return source.lower().startswith(_REMOTE_SCHEMES)


class PdfSourceLoader:
    """Resolve a source reference into an open ``pymupdf.Document``.

    Not-found, not-a-PDF and network failures all surface as
    :class:`SourceUnavailableError`.
    """

    def __init__(self, *, timeout_seconds: float = 60.0, session: Any | None = None) -> None:
        self._timeout_seconds = timeout_seconds
        self._session = session or requests.Session()

    def open(self, source: str) -> pymupdf.Document:
        reference = source.strip()
        if not reference:
            raise SourceUnavailableError(source=source, message="document source is empty")

        payload = self._fetch_remote(reference) if is_remote(reference) else self._read_local(reference)
        if not payload.startswith(_PDF_MAGIC):
            raise SourceUnavailableError(source=reference, message="could not open document: not a PDF")

        try:
            document = pymupdf.open(stream=payload, filetype="pdf")
        except Exception as exc:
            raise SourceUnavailableError(source=reference, message=f"could not open document: {exc}") from exc

        logger.info("Opened PDF %s with %d page(s)", reference, document.page_count)
        return document

    def _fetch_remote(self, url: str) -> bytes:
        try:
            response = self._session.get(url, timeout=self._timeout_seconds)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise SourceUnavailableError(source=url, message=f"could not open document: {exc}") from exc
        return bytes(response.content)

    def _read_local(self, path_text: str) -> bytes:
        path = Path(path_text)
        try:
            return path.read_bytes()
        except OSError as exc:
            raise SourceUnavailableError(source=path_text, message=f"could not open document: {exc}") from exc
