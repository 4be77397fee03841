from __future__ import annotations

import pytest

from okuma.errors import (
    InsufficientTextError,
    PageExtractionError,
    SegmentationContractError,
    SourceUnavailableError,
)
from okuma.extraction.progress import ExtractionProgress, ExtractionStage
from okuma.pipeline.orchestrator import CardPipeline, CardSource
from okuma.segmentation.models import Card, PromptOptions, ResponseContract
from okuma.segmentation.openrouter import Completion


LONG_TEXT = "Okuma alışkanlığı üzerine uzun bir metin. " * 5  # 210 characters


class _CountingExtractor:
    def __init__(self, text: str = "", error: Exception | None = None) -> None:
        self._text = text
        self._error = error
        self.calls: list[tuple[str, str | None]] = []

    def extract(self, source_url, page_range="all", progress=None) -> str:
        self.calls.append((source_url, page_range))
        if progress is not None:
            progress(ExtractionProgress(stage=ExtractionStage.LOADING))
        if self._error is not None:
            raise self._error
        return self._text


class _StubGenerator:
    def __init__(self, text: str, total_tokens: int = 42) -> None:
        self._text = text
        self._total_tokens = total_tokens
        self.calls: list[dict[str, object]] = []

    def complete(self, *, system: str, user: str, json_mode: bool = False) -> Completion:
        self.calls.append({"system": system, "user": user, "json_mode": json_mode})
        return Completion(text=self._text, model="stub/model", total_tokens=self._total_tokens)


DELIMITED = "=== KART 1 ===\nBirinci bölüm\n=== KART 2 ===\nİkinci bölüm"


def test_inline_text_skips_extraction_even_with_pdf_url() -> None:
    extractor = _CountingExtractor(text="never used")
    generator = _StubGenerator(DELIMITED)
    pipeline = CardPipeline(extractor=extractor, generator=generator)

    assert len(LONG_TEXT.strip()) > 10
    result = pipeline.generate(CardSource(text=LONG_TEXT, pdf_url="https://storage.example/doc.pdf"))

    assert extractor.calls == []
    assert result.source_kind == "text"
    assert result.cards == [Card("Kart 1", "Birinci bölüm"), Card("Kart 2", "İkinci bölüm")]
    assert result.tokens_used == 42
    assert result.model == "stub/model"
    assert generator.calls[0]["user"] == LONG_TEXT.strip()


def test_pdf_is_extracted_when_text_is_trivial() -> None:
    extractor = _CountingExtractor(text="OCR ile çıkarılmış sayfa metni")
    generator = _StubGenerator(DELIMITED)
    events: list[ExtractionProgress] = []
    pipeline = CardPipeline(extractor=extractor, generator=generator)

    result = pipeline.generate(
        CardSource(text="   kısa   ", pdf_url="https://storage.example/doc.pdf"),
        "0-3",
        progress=events.append,
    )

    assert extractor.calls == [("https://storage.example/doc.pdf", "0-3")]
    assert [event.stage for event in events] == [ExtractionStage.LOADING]
    assert result.source_kind == "pdf"
    assert generator.calls[0]["user"] == "OCR ile çıkarılmış sayfa metni"


def test_exactly_ten_characters_is_not_enough_inline_text() -> None:
    extractor = _CountingExtractor(text="extracted text body")
    pipeline = CardPipeline(extractor=extractor, generator=_StubGenerator(DELIMITED))

    pipeline.generate(CardSource(text="0123456789", pdf_url="/tmp/doc.pdf"))

    assert len(extractor.calls) == 1


def test_no_content_fails_before_any_work() -> None:
    extractor = _CountingExtractor()
    generator = _StubGenerator(DELIMITED)
    pipeline = CardPipeline(extractor=extractor, generator=generator)

    with pytest.raises(InsufficientTextError, match="no content to analyze"):
        pipeline.generate(CardSource(text="  çok kısa ", pdf_url="   "))

    assert extractor.calls == []
    assert generator.calls == []


@pytest.mark.parametrize(
    "error",
    [
        SourceUnavailableError(source="https://storage.example/doc.pdf"),
        PageExtractionError(page=3, message="OCR failed: boom"),
        InsufficientTextError(characters=4),
    ],
)
def test_extraction_errors_propagate_unchanged(error: Exception) -> None:
    generator = _StubGenerator(DELIMITED)
    pipeline = CardPipeline(extractor=_CountingExtractor(error=error), generator=generator)

    with pytest.raises(type(error)) as info:
        pipeline.generate(CardSource(pdf_url="https://storage.example/doc.pdf"))

    assert info.value is error
    assert generator.calls == []


def test_zero_sections_is_never_an_empty_success() -> None:
    pipeline = CardPipeline(extractor=_CountingExtractor(), generator=_StubGenerator("Bu metni bölemedim."))

    with pytest.raises(SegmentationContractError, match="no cards produced"):
        pipeline.generate_cards(CardSource(text=LONG_TEXT))


def test_rejected_response_carries_consumed_tokens() -> None:
    pipeline = CardPipeline(extractor=_CountingExtractor(), generator=_StubGenerator("Bu metni bölemedim.", total_tokens=5000))

    with pytest.raises(SegmentationContractError) as excinfo:
        pipeline.generate(CardSource(text=LONG_TEXT))

    assert excinfo.value.tokens_used == 5000


def test_json_contract_uses_json_mode_and_parser() -> None:
    generator = _StubGenerator('{"cards": [{"title": "Giriş", "content": "Okuma alışkanlığı"}]}')
    pipeline = CardPipeline(extractor=_CountingExtractor(), generator=generator)

    cards = pipeline.generate_cards(CardSource(text=LONG_TEXT), options=PromptOptions(contract=ResponseContract.JSON))

    assert cards == [Card("Giriş", "Okuma alışkanlığı")]
    assert generator.calls[0]["json_mode"] is True


def test_json_error_response_surfaces_generator_message() -> None:
    generator = _StubGenerator('{"error": "İçerik okunamadı", "cards": []}')
    pipeline = CardPipeline(extractor=_CountingExtractor(), generator=generator)

    with pytest.raises(SegmentationContractError, match="İçerik okunamadı"):
        pipeline.generate_cards(CardSource(text=LONG_TEXT), options=PromptOptions(contract=ResponseContract.JSON))


def test_prior_card_count_offsets_synthesized_titles() -> None:
    pipeline = CardPipeline(extractor=_CountingExtractor(), generator=_StubGenerator(DELIMITED))

    cards = pipeline.generate_cards(CardSource(text=LONG_TEXT), prior_card_count=10)

    assert [card.title for card in cards] == ["Kart 11", "Kart 12"]
