"""Document-to-cards pipeline: resolve source, extract if needed, segment."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Protocol

from okuma.errors import InsufficientTextError, SegmentationContractError
from okuma.extraction.page_range import ALL_PAGES
from okuma.extraction.progress import ProgressSink
from okuma.segmentation.models import Card, PromptOptions, ResponseContract
from okuma.segmentation.openrouter import Completion
from okuma.segmentation.parser import parse_response
from okuma.segmentation.prompts import build_request

logger = logging.getLogger(__name__)

MIN_SOURCE_CHARS = 10
SOURCE_TEXT = "text"
SOURCE_PDF = "pdf"


class _TextExtractor(Protocol):
    def extract(
        self,
        source_url: str,
        page_range: str | None = ALL_PAGES,
        progress: ProgressSink | None = None,
    ) -> str:
        ...


class _TextGenerator(Protocol):
    def complete(self, *, system: str, user: str, json_mode: bool = False) -> Completion:
        ...


@dataclass(frozen=True, slots=True)
class CardSource:
    text: str | None = None
    pdf_url: str | None = None


@dataclass(slots=True)
class CardGenerationResult:
    cards: list[Card]
    source_kind: str
    model: str
    tokens_used: int = 0
    characters: int = 0
    contract: ResponseContract = ResponseContract.DELIMITED


def _usable_text(text: str | None) -> str | None:
    value = (text or "").strip()
    return value if len(value) > MIN_SOURCE_CHARS else None


class CardPipeline:
    """Turn a document source into ordered reading cards.

    The pipeline does not persist anything and never retries: extraction and
    generation errors reach the caller unchanged.
    """

    def __init__(self, *, extractor: _TextExtractor, generator: _TextGenerator) -> None:
        self._extractor = extractor
        self._generator = generator

    def generate(
        self,
        source: CardSource,
        page_range: str | None = ALL_PAGES,
        options: PromptOptions | None = None,
        *,
        progress: ProgressSink | None = None,
        prior_card_count: int = 0,
    ) -> CardGenerationResult:
        resolved_options = options or PromptOptions()
        text, source_kind = self._resolve_text(source, page_range=page_range, progress=progress)

        request = build_request(text, resolved_options)
        completion = self._generator.complete(
            system=request.system_instructions,
            user=request.user_payload,
            json_mode=request.contract is ResponseContract.JSON,
        )
        try:
            cards = parse_response(completion.text, request.contract, prior_card_count=prior_card_count)
        except SegmentationContractError as exc:
            exc.tokens_used = completion.total_tokens
            raise

        logger.info("Generated %d card(s) from %s source (%d chars)", len(cards), source_kind, len(text))
        return CardGenerationResult(
            cards=cards,
            source_kind=source_kind,
            model=completion.model,
            tokens_used=completion.total_tokens,
            characters=len(text),
            contract=request.contract,
        )

    def generate_cards(
        self,
        source: CardSource,
        page_range: str | None = ALL_PAGES,
        options: PromptOptions | None = None,
        *,
        progress: ProgressSink | None = None,
        prior_card_count: int = 0,
    ) -> list[Card]:
        return self.generate(
            source,
            page_range,
            options,
            progress=progress,
            prior_card_count=prior_card_count,
        ).cards

    def _resolve_text(
        self,
        source: CardSource,
        *,
        page_range: str | None,
        progress: ProgressSink | None,
    ) -> tuple[str, str]:
        direct = _usable_text(source.text)
        if direct is not None:
            return direct, SOURCE_TEXT

        pdf_url = (source.pdf_url or "").strip()
        if not pdf_url:
            raise InsufficientTextError(
                message="no content to analyze",
                characters=len((source.text or "").strip()),
            )

        logger.info("No usable inline text; extracting from %s", pdf_url)
        return self._extractor.extract(pdf_url, page_range, progress), SOURCE_PDF
