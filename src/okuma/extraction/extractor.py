"""Document-level OCR extraction over a page range."""

from __future__ import annotations

import logging
from typing import Protocol

import pymupdf

from okuma.errors import InsufficientTextError, PageExtractionError
from okuma.extraction.config import ExtractionSettings
from okuma.extraction.normalization import join_pages, normalize_ocr_text
from okuma.extraction.ocr import OcrEngine, TesseractEngine, is_tesseract_not_found, render_page
from okuma.extraction.page_range import ALL_PAGES, require_page_range
from okuma.extraction.progress import ExtractionProgress, ExtractionStage, ProgressSink, discard_progress
from okuma.extraction.source import PdfSourceLoader

logger = logging.getLogger(__name__)

MIN_TEXT_CHARS = 10


class _DocumentLoader(Protocol):
    def open(self, source: str) -> pymupdf.Document:
        ...


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, float(value)))


class PdfTextExtractor:
    """Render each selected page, OCR it, and return the merged text.

    Pages are processed strictly in ascending order and one at a time; any
    page failure aborts the whole call.
    """

    def __init__(
        self,
        settings: ExtractionSettings | None = None,
        *,
        loader: _DocumentLoader | None = None,
        engine: OcrEngine | None = None,
        min_chars: int = MIN_TEXT_CHARS,
    ) -> None:
        self._settings = settings or ExtractionSettings()
        self._loader = loader or PdfSourceLoader(timeout_seconds=self._settings.fetch_timeout_seconds)
        self._engine = engine or TesseractEngine(
            tesseract_cmd=self._settings.tesseract_cmd,
            tessdata_dir=self._settings.tessdata_dir,
        )
        self._min_chars = min_chars

    @property
    def settings(self) -> ExtractionSettings:
        return self._settings

    def extract(
        self,
        source_url: str,
        page_range: str | None = ALL_PAGES,
        progress: ProgressSink | None = None,
        *,
        language: str | None = None,
    ) -> str:
        emit = progress or discard_progress
        lang = language or self._settings.language

        emit(ExtractionProgress(stage=ExtractionStage.LOADING))

        with self._loader.open(source_url) as document:
            selected = require_page_range(page_range, document.page_count)
            total = selected.size
            logger.info(
                "Extracting pages %d-%d of %d from %s (lang=%s)",
                selected.start,
                selected.end,
                document.page_count,
                source_url,
                lang,
            )

            pages: list[str] = []
            for position, page_number in enumerate(selected.pages(), start=1):
                pages.append(
                    self._extract_page(document, page_number, position=position, total=total, language=lang, emit=emit)
                )

        emit(ExtractionProgress(stage=ExtractionStage.DONE, page=total, total_pages=total))

        text = join_pages(pages)
        if len(text) < self._min_chars:
            raise InsufficientTextError(message="insufficient text extracted", characters=len(text))

        logger.info("Extracted %d characters from %d page(s)", len(text), total)
        return text

    def _extract_page(
        self,
        document: pymupdf.Document,
        page_number: int,
        *,
        position: int,
        total: int,
        language: str,
        emit: ProgressSink,
    ) -> str:
        emit(ExtractionProgress(stage=ExtractionStage.RENDER, page=position, total_pages=total))
        try:
            image = render_page(document[page_number - 1], scale=self._settings.render_scale)
        except Exception as exc:
            raise PageExtractionError(page=page_number, message=f"page rendering failed: {exc}") from exc

        emit(ExtractionProgress(stage=ExtractionStage.OCR, page=position, total_pages=total, progress=0.0))

        def _on_progress(value: float) -> None:
            emit(ExtractionProgress(stage=ExtractionStage.OCR, page=position, total_pages=total, progress=_clamp(value)))

        try:
            raw = self._engine.recognize(image, language=language, on_progress=_on_progress)
        except Exception as exc:
            if is_tesseract_not_found(exc):
                message = "OCR unavailable: Tesseract is not installed or not in PATH"
            else:
                message = f"OCR failed: {exc}"
            logger.warning("Aborting extraction on page %d: %s", page_number, message)
            raise PageExtractionError(page=page_number, message=message) from exc

        return normalize_ocr_text(raw)
