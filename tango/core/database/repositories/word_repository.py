"""
Word repository: the word supply for study sessions
"""

import logging
from typing import Any

from ..connection import DatabaseConnection
from ..models import WordRow

logger = logging.getLogger(__name__)


class WordRepository:
    """Repository for word-related database operations"""

    def __init__(self, db_connection: DatabaseConnection):
        self.db_connection = db_connection

    def add_words(self, words_data: list[dict[str, Any]]) -> int:
        """Insert many words at once, skipping incomplete entries"""
        rows = []
        for word in words_data:
            english = (word.get("english") or "").strip()
            japanese = (word.get("japanese") or "").strip()
            level = (word.get("level") or "").strip()
            if not (english and japanese and level):
                logger.warning(f"Skipping incomplete word entry: {word}")
                continue
            rows.append((word.get("id"), english, japanese, level))

        if not rows:
            return 0

        try:
            with self.db_connection.get_connection() as conn:
                conn.executemany(
                    """
                    INSERT OR REPLACE INTO words (id, english, japanese, level)
                    VALUES (?, ?, ?, ?)
                    """,
                    rows,
                )
                conn.commit()
                logger.info(f"Added {len(rows)} words")
                return len(rows)
        except Exception as e:
            logger.error(f"Error adding words: {e}")
            return 0

    def get_words(
        self, level: str | None = None, count: int = 10, randomize: bool = True
    ) -> list[WordRow]:
        """
        Get up to count words, optionally restricted to one level.

        Returns fewer rows than requested when the level is small, and an
        empty list when nothing matches. Database errors propagate so that
        the caller can tell a failed fetch from an empty level.
        """
        if count <= 0:
            return []

        order = "RANDOM()" if randomize else "id"
        where = "WHERE level = ?" if level else ""
        params: list[Any] = [level] if level else []
        params.append(count)

        with self.db_connection.get_connection() as conn:
            cursor = conn.execute(
                f"SELECT * FROM words {where} ORDER BY {order} LIMIT ?",  # noqa: S608  # Safe: fixed fragments only
                params,
            )
            return [dict(row) for row in cursor.fetchall()]

    def count_words(self, level: str | None = None) -> int:
        """Count words, optionally for one level"""
        try:
            with self.db_connection.get_connection() as conn:
                if level:
                    cursor = conn.execute(
                        "SELECT COUNT(*) FROM words WHERE level = ?", (level,)
                    )
                else:
                    cursor = conn.execute("SELECT COUNT(*) FROM words")
                return cursor.fetchone()[0]
        except Exception as e:
            logger.error(f"Error counting words: {e}")
            return 0
