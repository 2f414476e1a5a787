"""
Database connection manager for the vocabulary study engine
"""

import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path

from ...config import get_database_path

logger = logging.getLogger(__name__)

# Columns added after the first release; older databases only carry the
# legacy correct/mistake pair.
USER_WORD_MIGRATIONS = {
    "quiz_correct_count": "INTEGER NOT NULL DEFAULT 0",
    "quiz_mistake_count": "INTEGER NOT NULL DEFAULT 0",
    "flashcard_learned_count": "INTEGER NOT NULL DEFAULT 0",
}


def _adapt_datetime(val: datetime) -> str:
    return val.isoformat()


def _convert_datetime(val: bytes) -> datetime:
    text = val.decode()
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        for fmt in ["%Y-%m-%d %H:%M:%S", "%Y-%m-%d %H:%M:%S.%f", "%Y-%m-%d"]:
            try:
                return datetime.strptime(text, fmt)
            except ValueError:
                continue
        raise ValueError(f"Invalid datetime format: {text}") from None


sqlite3.register_adapter(datetime, _adapt_datetime)
sqlite3.register_converter("timestamp", _convert_datetime)


class DatabaseConnection:
    """Manages SQLite database connections and settings"""

    def __init__(self, db_path: str | None = None):
        self.db_path = db_path or get_database_path()
        self._ensure_database_directory()
        self._init_connection_settings()

    def _ensure_database_directory(self) -> None:
        """Ensure the database directory exists"""
        db_dir = Path(self.db_path).parent
        db_dir.mkdir(parents=True, exist_ok=True)

    def _init_connection_settings(self) -> None:
        """Initialize database connection settings"""
        with self.get_connection() as conn:
            # WAL lets the history writer thread and readers overlap
            conn.execute("PRAGMA journal_mode=WAL")
            conn.execute("PRAGMA foreign_keys=ON")
            conn.execute("PRAGMA busy_timeout=30000")

    @contextmanager
    def get_connection(self):
        """Get database connection with proper cleanup"""
        conn = None
        try:
            conn = sqlite3.connect(self.db_path, detect_types=sqlite3.PARSE_DECLTYPES)
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA foreign_keys=ON")
            yield conn
        except Exception as e:
            if conn:
                conn.rollback()
            logger.error(f"Database error: {e}")
            raise
        finally:
            if conn:
                conn.close()

    def init_database(self) -> None:
        """Initialize database tables"""
        with self.get_connection() as conn:
            self._create_tables(conn)
            self._run_migrations(conn)
            self._create_indexes(conn)
            conn.commit()

    def _create_tables(self, conn: sqlite3.Connection) -> None:
        """Create database tables"""
        tables = [
            """
            CREATE TABLE IF NOT EXISTS users (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                username TEXT UNIQUE NOT NULL,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
            """,
            """
            CREATE TABLE IF NOT EXISTS words (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                english TEXT NOT NULL,
                japanese TEXT NOT NULL,
                level TEXT NOT NULL,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
            """,
            """
            CREATE TABLE IF NOT EXISTS user_words (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                user_id INTEGER NOT NULL,
                word_id INTEGER NOT NULL,
                status TEXT NOT NULL DEFAULT 'learning',
                correct_count INTEGER NOT NULL DEFAULT 0,
                mistake_count INTEGER NOT NULL DEFAULT 0,
                last_studied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                FOREIGN KEY (user_id) REFERENCES users(id) ON DELETE CASCADE,
                FOREIGN KEY (word_id) REFERENCES words(id) ON DELETE CASCADE,
                UNIQUE(user_id, word_id)
            )
            """,
        ]

        for table_sql in tables:
            conn.execute(table_sql)

    def _create_indexes(self, conn: sqlite3.Connection) -> None:
        """Create database indexes for performance"""
        indexes = [
            "CREATE INDEX IF NOT EXISTS idx_words_level ON words(level)",
            "CREATE INDEX IF NOT EXISTS idx_user_words_user_id ON user_words(user_id)",
            (
                "CREATE INDEX IF NOT EXISTS idx_user_words_last_studied "
                "ON user_words(user_id, last_studied_at)"
            ),
        ]

        for index_sql in indexes:
            try:
                conn.execute(index_sql)
            except sqlite3.OperationalError as e:
                logger.warning(f"Failed to create index: {index_sql}, error: {e}")

    def _run_migrations(self, conn: sqlite3.Connection) -> None:
        """Add the split counter columns to databases created before them"""
        cursor = conn.execute("PRAGMA table_info(user_words)")
        columns = {row[1] for row in cursor.fetchall()}

        for column, definition in USER_WORD_MIGRATIONS.items():
            if column in columns:
                continue
            logger.info(f"Adding missing {column} column to user_words table")
            conn.execute(f"ALTER TABLE user_words ADD COLUMN {column} {definition}")
