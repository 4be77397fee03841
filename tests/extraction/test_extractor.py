"""Tests for page-ordered OCR extraction using synthetic PDFs and a fake engine."""

from __future__ import annotations

from pathlib import Path
from typing import Callable

import pymupdf
import pytest

from okuma.errors import InsufficientTextError, InvalidPageRangeError, PageExtractionError, SourceUnavailableError
from okuma.extraction.extractor import PdfTextExtractor
from okuma.extraction.progress import ExtractionProgress, ExtractionStage


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

class _FakeEngine:
    """Returns queued page texts in call order and records each call."""

    def __init__(self, outputs: list[object]) -> None:
        self._outputs = list(outputs)
        self.calls: list[tuple[tuple[int, int], str]] = []

    def recognize(self, image, *, language: str, on_progress: Callable[[float], None]) -> str:
        self.calls.append((image.size, language))
        output = self._outputs.pop(0)
        if isinstance(output, Exception):
            raise output
        on_progress(0.5)
        on_progress(1.0)
        return str(output)


def _build_pdf(path: Path, page_count: int) -> Path:
    doc = pymupdf.open()
    for index in range(page_count):
        page = doc.new_page(width=200, height=300)
        page.insert_text((20, 40), f"Page {index + 1}")
    doc.save(str(path))
    doc.close()
    return path


def _extractor(engine: _FakeEngine, **kwargs) -> PdfTextExtractor:
    return PdfTextExtractor(engine=engine, **kwargs)


# ---------------------------------------------------------------------------
# Ordering and joining
# ---------------------------------------------------------------------------

def test_pages_are_joined_in_ascending_order(tmp_path: Path) -> None:
    pdf_path = _build_pdf(tmp_path / "three.pdf", 3)
    engine = _FakeEngine(["P1 first page", "P2 second page", "P3 third page"])

    text = _extractor(engine).extract(str(pdf_path), "all")

    assert text == "P1 first page\n\nP2 second page\n\nP3 third page"
    assert [language for _, language in engine.calls] == ["tur", "tur", "tur"]


def test_short_pages_still_keep_order_and_separator(tmp_path: Path) -> None:
    pdf_path = _build_pdf(tmp_path / "three.pdf", 3)

    text = _extractor(_FakeEngine(["P1", "P2", "P3"])).extract(str(pdf_path), "0-2")

    assert text == "P1\n\nP2\n\nP3"


def test_empty_pages_are_skipped_without_extra_separators(tmp_path: Path) -> None:
    pdf_path = _build_pdf(tmp_path / "three.pdf", 3)
    engine = _FakeEngine(["   \n  ", "Sadece ikinci sayfa", ""])

    text = _extractor(engine).extract(str(pdf_path))

    assert text == "Sadece ikinci sayfa"


def test_page_range_limits_rendered_pages(tmp_path: Path) -> None:
    pdf_path = _build_pdf(tmp_path / "five.pdf", 5)
    engine = _FakeEngine(["third page text", "fourth page text"])

    text = _extractor(engine).extract(str(pdf_path), "2-3")

    assert text == "third page text\n\nfourth page text"
    assert len(engine.calls) == 2


def test_pages_are_rendered_at_twice_native_resolution(tmp_path: Path) -> None:
    pdf_path = _build_pdf(tmp_path / "one.pdf", 1)
    engine = _FakeEngine(["rendered page text"])

    _extractor(engine).extract(str(pdf_path))

    assert engine.calls[0][0] == (400, 600)


def test_language_override_is_forwarded(tmp_path: Path) -> None:
    pdf_path = _build_pdf(tmp_path / "one.pdf", 1)
    engine = _FakeEngine(["some english text"])

    _extractor(engine).extract(str(pdf_path), language="eng")

    assert engine.calls[0][1] == "eng"


# ---------------------------------------------------------------------------
# Progress events
# ---------------------------------------------------------------------------

def test_progress_events_follow_stage_sequence(tmp_path: Path) -> None:
    pdf_path = _build_pdf(tmp_path / "three.pdf", 3)
    events: list[ExtractionProgress] = []

    _extractor(_FakeEngine(["second page", "third page"])).extract(str(pdf_path), "1-2", events.append)

    assert [event.to_dict() for event in events] == [
        {"stage": "loading", "page": None, "total_pages": None, "progress": None},
        {"stage": "render", "page": 1, "total_pages": 2, "progress": None},
        {"stage": "ocr", "page": 1, "total_pages": 2, "progress": 0.0},
        {"stage": "ocr", "page": 1, "total_pages": 2, "progress": 0.5},
        {"stage": "ocr", "page": 1, "total_pages": 2, "progress": 1.0},
        {"stage": "render", "page": 2, "total_pages": 2, "progress": None},
        {"stage": "ocr", "page": 2, "total_pages": 2, "progress": 0.0},
        {"stage": "ocr", "page": 2, "total_pages": 2, "progress": 0.5},
        {"stage": "ocr", "page": 2, "total_pages": 2, "progress": 1.0},
        {"stage": "done", "page": 2, "total_pages": 2, "progress": None},
    ]


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------

def test_invalid_range_fails_before_rendering(tmp_path: Path) -> None:
    pdf_path = _build_pdf(tmp_path / "two.pdf", 2)
    engine = _FakeEngine([])
    events: list[ExtractionProgress] = []

    with pytest.raises(InvalidPageRangeError):
        _extractor(engine).extract(str(pdf_path), "4-7", events.append)

    assert engine.calls == []
    assert [event.stage for event in events] == [ExtractionStage.LOADING]


def test_missing_document_is_source_unavailable(tmp_path: Path) -> None:
    engine = _FakeEngine([])

    with pytest.raises(SourceUnavailableError, match="could not open document"):
        _extractor(engine).extract(str(tmp_path / "missing.pdf"))

    assert engine.calls == []


def test_ocr_failure_aborts_whole_document(tmp_path: Path) -> None:
    pdf_path = _build_pdf(tmp_path / "three.pdf", 3)
    engine = _FakeEngine(["first page text", RuntimeError("image decode failed"), "never reached"])
    events: list[ExtractionProgress] = []

    with pytest.raises(PageExtractionError, match="OCR failed: image decode failed") as info:
        _extractor(engine).extract(str(pdf_path), "all", events.append)

    assert info.value.page == 2
    assert len(engine.calls) == 2
    assert ExtractionStage.DONE not in [event.stage for event in events]


def test_missing_tesseract_is_reported_distinctly(tmp_path: Path) -> None:
    class TesseractNotFoundError(Exception):
        pass

    pdf_path = _build_pdf(tmp_path / "one.pdf", 1)
    engine = _FakeEngine([TesseractNotFoundError("tesseract is not installed or it's not in your PATH")])

    with pytest.raises(PageExtractionError, match="Tesseract is not installed"):
        _extractor(engine).extract(str(pdf_path))


def test_nine_characters_after_normalization_is_insufficient(tmp_path: Path) -> None:
    pdf_path = _build_pdf(tmp_path / "one.pdf", 1)
    # 13 characters raw, "abc def g" (9) once whitespace runs collapse.
    engine = _FakeEngine(["abc    def  g"])

    with pytest.raises(InsufficientTextError) as info:
        _extractor(engine).extract(str(pdf_path))

    assert info.value.characters == 9


def test_ten_characters_after_normalization_passes(tmp_path: Path) -> None:
    pdf_path = _build_pdf(tmp_path / "one.pdf", 1)
    engine = _FakeEngine(["abc\t\tdef  gh"])

    assert _extractor(engine).extract(str(pdf_path)) == "abc def gh"
