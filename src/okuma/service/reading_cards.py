"""Application services: quota gate, generation, persistence, usage recording."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Protocol, Sequence

from okuma.errors import QuotaExceededError, SegmentationContractError
from okuma.extraction.page_range import ALL_PAGES
from okuma.extraction.progress import ProgressSink
from okuma.pipeline.orchestrator import CardGenerationResult, CardPipeline, CardSource
from okuma.segmentation.models import Card, PromptOptions
from okuma.segmentation.openrouter import Completion
from okuma.segmentation.transform import transform_text
from okuma.storage.card_repository import StoredCard
from okuma.storage.token_usage import TokenUsage

logger = logging.getLogger(__name__)


class CardStore(Protocol):
    def count_cards(self, document_id: str) -> int:
        ...

    def append_cards(self, *, document_id: str, user_id: str, cards: Sequence[Card]) -> list[StoredCard]:
        ...


class _TextGenerator(Protocol):
    def complete(self, *, system: str, user: str, json_mode: bool = False) -> Completion:
        ...


class QuotaGate(Protocol):
    def has_quota(self, user_id: str) -> bool:
        ...

    def get_usage(self, user_id: str) -> TokenUsage:
        ...

    def record_usage(self, user_id: str, tokens: int) -> int:
        ...


@dataclass(slots=True)
class DocumentCardsResult:
    document_id: str
    cards: list[StoredCard]
    generation: CardGenerationResult

    def to_dict(self) -> dict[str, object]:
        return {
            "document_id": self.document_id,
            "source": self.generation.source_kind,
            "model": self.generation.model,
            "tokens_used": self.generation.tokens_used,
            "cards_created": len(self.cards),
            "cards": [card.to_dict() for card in self.cards],
        }

def _require_quota(quota: QuotaGate, user_id: str, action: str) -> None:
    if quota.has_quota(user_id):
        return
    usage = quota.get_usage(user_id)
    logger.warning("Refusing %s for user %s: %d/%d tokens used", action, user_id, usage.used, usage.limit)
    raise QuotaExceededError(user_id=user_id, used=usage.used, limit=usage.limit)


class ReadingCardService:
    """Generate cards for a stored document on behalf of a user."""

    def __init__(self, *, pipeline: CardPipeline, store: CardStore, quota: QuotaGate) -> None:
        self._pipeline = pipeline
        self._store = store
        self._quota = quota

    def generate_for_document(
        self,
        *,
        document_id: str,
        user_id: str,
        source: CardSource,
        page_range: str | None = ALL_PAGES,
        options: PromptOptions | None = None,
        progress: ProgressSink | None = None,
    ) -> DocumentCardsResult:
        _require_quota(self._quota, user_id, "card generation")

        prior = self._store.count_cards(document_id)
        try:
            generation = self._pipeline.generate(
                source,
                page_range,
                options,
                progress=progress,
                prior_card_count=prior,
            )
        except SegmentationContractError as exc:
            # Rejected completions still count against the quota.
            if exc.tokens_used:
                self._quota.record_usage(user_id, exc.tokens_used)
            raise

        stored = self._store.append_cards(document_id=document_id, user_id=user_id, cards=generation.cards)
        if generation.tokens_used:
            self._quota.record_usage(user_id, generation.tokens_used)

        return DocumentCardsResult(document_id=document_id, cards=stored, generation=generation)


class TextTransformService:
    """Quota-gated free-form transformations (titles, card text, flashcards)."""

    def __init__(self, *, generator: _TextGenerator, quota: QuotaGate) -> None:
        self._generator = generator
        self._quota = quota

    def transform(self, *, user_id: str, prompt: str) -> Completion:
        _require_quota(self._quota, user_id, "text transformation")

        completion = transform_text(self._generator, prompt)
        if completion.total_tokens:
            self._quota.record_usage(user_id, completion.total_tokens)
        return completion
