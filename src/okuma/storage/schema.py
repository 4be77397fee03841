"""SQLite schema and pragmas for reading-card storage."""

from __future__ import annotations

import sqlite3


PRAGMA_BUSY_TIMEOUT_MS = 5000


def apply_runtime_pragmas(connection: sqlite3.Connection) -> None:
    connection.execute("PRAGMA journal_mode=WAL;")
    connection.execute(f"PRAGMA busy_timeout={PRAGMA_BUSY_TIMEOUT_MS};")
    connection.execute("PRAGMA synchronous=NORMAL;")
    connection.execute("PRAGMA foreign_keys=ON;")


def ensure_schema(connection: sqlite3.Connection) -> None:
    """Create card and token-usage tables if missing."""

    connection.executescript(
        """
        CREATE TABLE IF NOT EXISTS reading_cards (
            id INTEGER PRIMARY KEY,
            document_id TEXT NOT NULL,
            user_id TEXT NOT NULL,
            title TEXT NOT NULL,
            content TEXT NOT NULL,
            card_order INTEGER NOT NULL,
            created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
            UNIQUE(document_id, card_order)
        );

        CREATE INDEX IF NOT EXISTS idx_reading_cards_document_order
        ON reading_cards(document_id, card_order);

        CREATE TABLE IF NOT EXISTS token_usage (
            user_id TEXT NOT NULL,
            usage_date TEXT NOT NULL,
            tokens_used INTEGER NOT NULL DEFAULT 0 CHECK(tokens_used >= 0),
            updated_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
            PRIMARY KEY (user_id, usage_date)
        );

        CREATE TABLE IF NOT EXISTS user_roles (
            user_id TEXT NOT NULL,
            role TEXT NOT NULL CHECK(role IN ('admin')),
            created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
            PRIMARY KEY (user_id, role)
        );
        """
    )
