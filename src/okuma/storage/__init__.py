"""SQLite-backed collaborators: card persistence and token quota."""

from .card_repository import CardRepository, StoredCard
from .token_usage import DEFAULT_DAILY_TOKEN_LIMIT, TokenUsage, TokenUsageRepository

__all__ = [
    "CardRepository",
    "DEFAULT_DAILY_TOKEN_LIMIT",
    "StoredCard",
    "TokenUsage",
    "TokenUsageRepository",
]
