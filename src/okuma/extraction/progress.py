"""Progress events emitted while a PDF is extracted."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable


class ExtractionStage(Enum):
    LOADING = "loading"
    RENDER = "render"
    OCR = "ocr"
    DONE = "done"


@dataclass(frozen=True, slots=True)
class ExtractionProgress:
    stage: ExtractionStage
    page: int | None = None
    total_pages: int | None = None
    progress: float | None = None  # 0..1, only for the ocr stage

    def to_dict(self) -> dict[str, str | int | float | None]:
        return {
            "stage": self.stage.value,
            "page": self.page,
            "total_pages": self.total_pages,
            "progress": self.progress,
        }


ProgressSink = Callable[[ExtractionProgress], None]


def discard_progress(_event: ExtractionProgress) -> None:
    return None
