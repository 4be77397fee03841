"""Per-user daily token quota backed by SQLite."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone
import logging
from pathlib import Path
import sqlite3
from typing import Callable

from okuma.storage.schema import apply_runtime_pragmas, ensure_schema

logger = logging.getLogger(__name__)

DEFAULT_DAILY_TOKEN_LIMIT = 30000
ADMIN_ROLE = "admin"


def _utc_today() -> date:
    return datetime.now(timezone.utc).date()


@dataclass(slots=True)
class TokenUsage:
    used: int
    limit: int
    is_admin: bool

    @property
    def limit_reached(self) -> bool:
        return not self.is_admin and self.used >= self.limit


class TokenUsageRepository:
    """Daily usage counters keyed by ``(user_id, UTC date)``; admins are unlimited."""

    def __init__(
        self,
        db_path: str | Path,
        *,
        daily_limit: int = DEFAULT_DAILY_TOKEN_LIMIT,
        today: Callable[[], date] = _utc_today,
    ) -> None:
        if daily_limit < 1:
            raise ValueError("daily_limit must be >= 1")
        self._db_path = Path(db_path)
        self._daily_limit = daily_limit
        self._today = today
        self._connection = sqlite3.connect(str(self._db_path))
        self._connection.row_factory = sqlite3.Row
        apply_runtime_pragmas(self._connection)
        ensure_schema(self._connection)

    @property
    def daily_limit(self) -> int:
        return self._daily_limit

    def close(self) -> None:
        self._connection.close()

    def __enter__(self) -> "TokenUsageRepository":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def is_admin(self, user_id: str) -> bool:
        row = self._connection.execute(
            "SELECT 1 FROM user_roles WHERE user_id = ? AND role = ?",
            (user_id, ADMIN_ROLE),
        ).fetchone()
        return row is not None

    def grant_admin(self, user_id: str) -> None:
        with self._connection:
            self._connection.execute(
                "INSERT OR IGNORE INTO user_roles (user_id, role) VALUES (?, ?)",
                (user_id, ADMIN_ROLE),
            )

    def get_usage(self, user_id: str) -> TokenUsage:
        row = self._connection.execute(
            "SELECT tokens_used FROM token_usage WHERE user_id = ? AND usage_date = ?",
            (user_id, self._today().isoformat()),
        ).fetchone()
        used = int(row["tokens_used"]) if row is not None else 0
        return TokenUsage(used=used, limit=self._daily_limit, is_admin=self.is_admin(user_id))

    def has_quota(self, user_id: str) -> bool:
        return not self.get_usage(user_id).limit_reached

    def record_usage(self, user_id: str, tokens: int) -> int:
        """Add *tokens* to today's counter and return the new total."""

        if tokens < 0:
            raise ValueError("tokens cannot be negative")

        usage_date = self._today().isoformat()
        with self._connection:
            self._connection.execute(
                """
                INSERT INTO token_usage (user_id, usage_date, tokens_used)
                VALUES (?, ?, ?)
                ON CONFLICT(user_id, usage_date) DO UPDATE SET
                    tokens_used = tokens_used + excluded.tokens_used,
                    updated_at = CURRENT_TIMESTAMP
                """,
                (user_id, usage_date, tokens),
            )
            row = self._connection.execute(
                "SELECT tokens_used FROM token_usage WHERE user_id = ? AND usage_date = ?",
                (user_id, usage_date),
            ).fetchone()

        total = int(row["tokens_used"])
        logger.info("Recorded %d token(s) for user %s (today=%d)", tokens, user_id, total)
        return total
