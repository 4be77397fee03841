"""Error taxonomy shared by the extraction, segmentation and pipeline stages."""

from __future__ import annotations

from dataclasses import dataclass


class CardPipelineError(Exception):
    """Base class for failures the card pipeline reports to its caller."""

    kind = "pipeline"


@dataclass(slots=True)
class SourceUnavailableError(CardPipelineError):
    """The PDF resource could not be fetched, opened or read."""

    source: str
    message: str = "could not open document"

    kind = "source_unavailable"

    def __str__(self) -> str:
        return f"{self.message} (source={self.source})"


@dataclass(slots=True)
class InvalidPageRangeError(CardPipelineError):
    """The page-range string is malformed or outside the document."""

    spec: str
    total_pages: int

    kind = "invalid_range"

    def __str__(self) -> str:
        return f"invalid page range '{self.spec}' (total_pages={self.total_pages})"


@dataclass(slots=True)
class PageExtractionError(CardPipelineError):
    """Rendering or OCR failed for one page, aborting the whole document."""

    page: int
    message: str

    kind = "page_extraction"

    def __str__(self) -> str:
        return f"{self.message} (page={self.page})"


@dataclass(slots=True)
class InsufficientTextError(CardPipelineError):
    """Extraction or direct input produced too little usable text."""

    message: str = "insufficient text extracted"
    characters: int = 0

    kind = "insufficient_text"

    def __str__(self) -> str:
        return f"{self.message} (characters={self.characters})"


@dataclass(slots=True)
class SegmentationContractError(CardPipelineError):
    """The generator response does not satisfy the selected output contract.

    ``tokens_used`` carries the tokens the rejected completion consumed.
    """

    contract: str
    message: str
    tokens_used: int = 0

    kind = "segmentation_contract"

    def __str__(self) -> str:
        return f"{self.message} (contract={self.contract})"


@dataclass(slots=True)
class QuotaExceededError(CardPipelineError):
    """The user has no daily token budget left; raised before any AI call."""

    user_id: str
    used: int
    limit: int

    kind = "quota_exceeded"

    def __str__(self) -> str:
        return f"daily token quota exceeded (user_id={self.user_id}, used={self.used}, limit={self.limit})"
