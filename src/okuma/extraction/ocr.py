"""Page rasterization and Tesseract OCR.

pytesseract and Pillow are imported inside the functions that need them so
that text-only callers (the plain-document path) never load them.
"""

from __future__ import annotations

import io
import logging
from typing import TYPE_CHECKING, Any, Callable, Protocol

import pymupdf

if TYPE_CHECKING:
    from PIL import Image


logger = logging.getLogger(__name__)

# pymupdf renders at 72 DPI for scale 1.0
_BASE_DPI = 72
_TESSERACT_CONFIG = "--oem 3 --psm 6"


class OcrEngine(Protocol):
    def recognize(
        self,
        image: "Image.Image",
        *,
        language: str,
        on_progress: Callable[[float], None],
    ) -> str:
        ...


def is_tesseract_not_found(exc: Exception) -> bool:
    """Return True when *exc* indicates that the Tesseract binary is missing."""
    # Checked by class name so this module does not import pytesseract eagerly.
    if "TesseractNotFoundError" in type(exc).__name__:
        return True
    msg = str(exc).lower()
    return "tesseract is not installed" in msg or "tesseract is not in your path" in msg


def render_page(page: pymupdf.Page, *, scale: float) -> "Image.Image":
    """Rasterize *page* at ``scale`` times its native resolution."""
    from PIL import Image

    matrix = pymupdf.Matrix(scale, scale)
    pix = page.get_pixmap(matrix=matrix, colorspace=pymupdf.csRGB)
    logger.debug("Rendered page %d at %.0f DPI (%dx%d)", page.number + 1, _BASE_DPI * scale, pix.width, pix.height)
    return Image.open(io.BytesIO(pix.tobytes("png")))


class TesseractEngine:
    """OCR engine backed by the Tesseract binary via pytesseract."""

    def __init__(
        self,
        *,
        tesseract_cmd: str | None = None,
        tessdata_dir: str | None = None,
        config: str = _TESSERACT_CONFIG,
    ) -> None:
        self._tesseract_cmd = tesseract_cmd
        self._config = config
        if tessdata_dir:
            self._config = f'{config} --tessdata-dir "{tessdata_dir}"'

    @property
    def config(self) -> str:
        return self._config

    def recognize(
        self,
        image: "Image.Image",
        *,
        language: str,
        on_progress: Callable[[float], None],
    ) -> str:
        import pytesseract

        # pytesseract only reads the binary location from module state, so the
        # override is scoped to this call and restored afterwards.
        previous_cmd = pytesseract.pytesseract.tesseract_cmd
        if self._tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = self._tesseract_cmd
        try:
            text: Any = pytesseract.image_to_string(image, lang=language, config=self._config)
        finally:
            pytesseract.pytesseract.tesseract_cmd = previous_cmd

        # Tesseract does not stream progress; report completion once it returns.
        on_progress(1.0)
        return str(text or "")
