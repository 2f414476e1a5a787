"""
Learning history repository: per-user, per-word counters
"""

import logging
from datetime import datetime

from ...history.counters import (
    COUNTER_FIELDS,
    STATUS_LEARNING,
    initial_counters,
    updated_counters,
)
from ...history.schemas import UserWordUpdate
from ..connection import DatabaseConnection
from ..models import UserWord, UserWordWithWord

logger = logging.getLogger(__name__)


class UserWordRepository:
    """Repository for learning history records keyed by (user, word)"""

    def __init__(self, db_connection: DatabaseConnection):
        self.db_connection = db_connection

    def get_user_word(self, user_id: int, word_id: int) -> UserWord | None:
        """Get the history record for one word"""
        try:
            with self.db_connection.get_connection() as conn:
                cursor = conn.execute(
                    "SELECT * FROM user_words WHERE user_id = ? AND word_id = ?",
                    (user_id, word_id),
                )
                row = cursor.fetchone()
                return dict(row) if row else None
        except Exception as e:
            logger.error(f"Error getting user word: {e}")
            return None

    def upsert_user_word(
        self, user_id: int, update: UserWordUpdate, now: datetime | None = None
    ) -> UserWord | None:
        """Create the record on first write, otherwise apply counter changes"""
        now = now or datetime.now()
        try:
            with self.db_connection.get_connection() as conn:
                cursor = conn.execute(
                    "SELECT * FROM user_words WHERE user_id = ? AND word_id = ?",
                    (user_id, update.word_id),
                )
                existing = cursor.fetchone()

                if existing:
                    changes = updated_counters(dict(existing), update)
                    changes["status"] = update.status or existing["status"]
                    changes["last_studied_at"] = now
                    changes["updated_at"] = now
                    assignments = ", ".join(f"{column} = ?" for column in changes)
                    conn.execute(
                        f"UPDATE user_words SET {assignments} WHERE id = ?",  # noqa: S608  # Safe: column names come from COUNTER_FIELDS
                        [*changes.values(), existing["id"]],
                    )
                else:
                    counters = initial_counters(update)
                    conn.execute(
                        f"""
                        INSERT INTO user_words (
                            user_id, word_id, status, last_studied_at,
                            created_at, updated_at, {", ".join(COUNTER_FIELDS)}
                        )
                        VALUES (?, ?, ?, ?, ?, ?, {", ".join("?" for _ in COUNTER_FIELDS)})
                        """,  # noqa: S608  # Safe: column names come from COUNTER_FIELDS
                        [
                            user_id,
                            update.word_id,
                            update.status or STATUS_LEARNING,
                            now,
                            now,
                            now,
                            *(counters[field] for field in COUNTER_FIELDS),
                        ],
                    )
                    logger.info(
                        f"Created learning history for user {user_id}, word {update.word_id}"
                    )

                conn.commit()
        except Exception as e:
            logger.error(f"Error saving learning history: {e}")
            return None

        return self.get_user_word(user_id, update.word_id)

    def get_user_words(self, user_id: int) -> list[UserWordWithWord]:
        """All history records of a user, most recently studied first"""
        try:
            with self.db_connection.get_connection() as conn:
                cursor = conn.execute(
                    """
                    SELECT uw.*, w.english, w.japanese, w.level
                    FROM user_words uw
                    JOIN words w ON uw.word_id = w.id
                    WHERE uw.user_id = ?
                    ORDER BY uw.last_studied_at DESC, uw.id DESC
                    """,
                    (user_id,),
                )
                return [dict(row) for row in cursor.fetchall()]
        except Exception as e:
            logger.error(f"Error getting user words: {e}")
            return []
