"""Human-readable progress lines for CLI commands."""

from __future__ import annotations

import sys
from typing import TextIO

from okuma.extraction.progress import ExtractionProgress, ExtractionStage


def format_progress(event: ExtractionProgress) -> str:
    if event.stage is ExtractionStage.LOADING:
        return "PDF yükleniyor..."
    if event.stage is ExtractionStage.RENDER:
        return f"Sayfa {event.page}/{event.total_pages} render ediliyor..."
    if event.stage is ExtractionStage.OCR:
        percent = round((event.progress or 0.0) * 100)
        return f"Sayfa {event.page}/{event.total_pages} analiz ediliyor... {percent}%"
    return "PDF başarıyla analiz edildi!"


class StderrProgress:
    """Progress sink writing one line per event."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream or sys.stderr

    def __call__(self, event: ExtractionProgress) -> None:
        print(format_progress(event), file=self._stream, flush=True)
