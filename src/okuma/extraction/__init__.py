"""PDF text extraction stage."""

from .extractor import PdfTextExtractor
from .page_range import PageRange, require_page_range, resolve_page_range
from .progress import ExtractionProgress, ExtractionStage

__all__ = [
    "ExtractionProgress",
    "ExtractionStage",
    "PageRange",
    "PdfTextExtractor",
    "require_page_range",
    "resolve_page_range",
]
