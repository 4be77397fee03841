"""Application services built on the card pipeline."""

from .reading_cards import DocumentCardsResult, ReadingCardService, TextTransformService

__all__ = ["DocumentCardsResult", "ReadingCardService", "TextTransformService"]
