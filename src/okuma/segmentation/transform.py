"""Single-shot text transformation: card titles, card content, flashcard questions."""

from __future__ import annotations

import logging
from typing import Protocol

from okuma.segmentation.openrouter import Completion, GenerationRequestError


logger = logging.getLogger(__name__)

TRANSFORM_INSTRUCTIONS = (
    "Sen yardımsever bir asistansın. Kullanıcının istediği dönüşümleri yap, fazladan açıklama yapma. "
    "Sadece dönüştürülmüş metni döndür."
)


class _TextGenerator(Protocol):
    def complete(self, *, system: str, user: str, json_mode: bool = False) -> Completion:
        ...


def transform_text(generator: _TextGenerator, prompt: str) -> Completion:
    """Run *prompt* as a free-form transformation and return the trimmed result."""

    request = (prompt or "").strip()
    if not request:
        raise ValueError("prompt cannot be empty")

    completion = generator.complete(system=TRANSFORM_INSTRUCTIONS, user=request)
    text = completion.text.strip()
    if not text:
        raise GenerationRequestError(model=completion.model, message="Transformation returned empty text")

    logger.info("Transformed prompt (%d chars) into %d chars", len(request), len(text))
    return Completion(text=text, model=completion.model, total_tokens=completion.total_tokens)
