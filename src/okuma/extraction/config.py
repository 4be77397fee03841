"""Runtime configuration for PDF rendering and OCR."""

from __future__ import annotations

from dataclasses import dataclass
import os
from typing import Mapping


DEFAULT_OCR_LANGUAGE = "tur"
DEFAULT_RENDER_SCALE = 2.0
DEFAULT_FETCH_TIMEOUT_SECONDS = 60.0


def _parse_positive_float(*, name: str, raw_value: str, minimum: float) -> float:
    try:
        value = float(raw_value)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number") from exc
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}")
    return value


def _optional(source: Mapping[str, str], name: str) -> str | None:
    value = source.get(name, "").strip()
    return value or None


@dataclass(frozen=True, slots=True)
class ExtractionSettings:
    """Validated OCR settings injected into the extractor at construction."""

    language: str = DEFAULT_OCR_LANGUAGE
    render_scale: float = DEFAULT_RENDER_SCALE
    tesseract_cmd: str | None = None
    tessdata_dir: str | None = None
    fetch_timeout_seconds: float = DEFAULT_FETCH_TIMEOUT_SECONDS

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ExtractionSettings":
        source: Mapping[str, str] = os.environ if environ is None else environ

        language = source.get("OKUMA_OCR_LANGUAGE", DEFAULT_OCR_LANGUAGE).strip()
        if not language:
            raise ValueError("OKUMA_OCR_LANGUAGE cannot be empty")

        render_scale = _parse_positive_float(
            name="OKUMA_RENDER_SCALE",
            raw_value=source.get("OKUMA_RENDER_SCALE", str(DEFAULT_RENDER_SCALE)).strip(),
            minimum=0.5,
        )
        fetch_timeout = _parse_positive_float(
            name="OKUMA_FETCH_TIMEOUT_SECONDS",
            raw_value=source.get("OKUMA_FETCH_TIMEOUT_SECONDS", str(DEFAULT_FETCH_TIMEOUT_SECONDS)).strip(),
            minimum=0.001,
        )

        return cls(
            language=language,
            render_scale=render_scale,
            tesseract_cmd=_optional(source, "OKUMA_TESSERACT_CMD"),
            tessdata_dir=_optional(source, "OKUMA_TESSDATA_DIR"),
            fetch_timeout_seconds=fetch_timeout,
        )
