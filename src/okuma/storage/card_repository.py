"""SQLite persistence for generated reading cards."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from pathlib import Path
import sqlite3
from typing import Sequence

from okuma.segmentation.models import Card
from okuma.storage.schema import apply_runtime_pragmas, ensure_schema

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class StoredCard:
    id: int
    document_id: str
    user_id: str
    title: str
    content: str
    card_order: int

    def to_dict(self) -> dict[str, str | int]:
        return {
            "id": self.id,
            "document_id": self.document_id,
            "user_id": self.user_id,
            "title": self.title,
            "content": self.content,
            "card_order": self.card_order,
        }


class CardRepository:
    """Stores cards per document with a monotonically increasing ``card_order``."""

    def __init__(self, db_path: str | Path) -> None:
        self._db_path = Path(db_path)
        self._connection = sqlite3.connect(str(self._db_path))
        self._connection.row_factory = sqlite3.Row
        apply_runtime_pragmas(self._connection)
        ensure_schema(self._connection)

    @property
    def connection(self) -> sqlite3.Connection:
        return self._connection

    def close(self) -> None:
        self._connection.close()

    def __enter__(self) -> "CardRepository":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def count_cards(self, document_id: str) -> int:
        row = self._connection.execute(
            "SELECT COUNT(*) AS c FROM reading_cards WHERE document_id = ?",
            (document_id,),
        ).fetchone()
        return int(row["c"])

    def next_card_order(self, document_id: str) -> int:
        row = self._connection.execute(
            "SELECT MAX(card_order) AS max_order FROM reading_cards WHERE document_id = ?",
            (document_id,),
        ).fetchone()
        if row is None or row["max_order"] is None:
            return 0
        return int(row["max_order"]) + 1

    def append_cards(self, *, document_id: str, user_id: str, cards: Sequence[Card]) -> list[StoredCard]:
        """Insert *cards* after the document's existing cards, preserving order."""

        if not document_id.strip():
            raise ValueError("document_id cannot be empty")
        if not cards:
            raise ValueError("cards cannot be empty")

        stored: list[StoredCard] = []
        with self._connection:
            start = self.next_card_order(document_id)
            for offset, card in enumerate(cards):
                order = start + offset
                cursor = self._connection.execute(
                    """
                    INSERT INTO reading_cards (document_id, user_id, title, content, card_order)
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    (document_id, user_id, card.title, card.content, order),
                )
                stored.append(
                    StoredCard(
                        id=int(cursor.lastrowid),
                        document_id=document_id,
                        user_id=user_id,
                        title=card.title,
                        content=card.content,
                        card_order=order,
                    )
                )

        logger.info("Stored %d card(s) for document %s starting at order %d", len(stored), document_id, start)
        return stored

    def list_cards(self, document_id: str) -> list[StoredCard]:
        rows = self._connection.execute(
            """
            SELECT id, document_id, user_id, title, content, card_order
            FROM reading_cards
            WHERE document_id = ?
            ORDER BY card_order ASC
            """,
            (document_id,),
        ).fetchall()
        return [
            StoredCard(
                id=int(row["id"]),
                document_id=row["document_id"],
                user_id=row["user_id"],
                title=row["title"],
                content=row["content"],
                card_order=int(row["card_order"]),
            )
            for row in rows
        ]
