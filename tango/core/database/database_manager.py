"""
Unified database manager that coordinates all repositories
"""

import logging
from typing import Any

from ..history.schemas import UserWordUpdate
from .connection import DatabaseConnection
from .models import User, UserWord, UserWordWithWord, WordRow
from .repositories.user_repository import UserRepository
from .repositories.user_word_repository import UserWordRepository
from .repositories.word_repository import WordRepository

logger = logging.getLogger(__name__)


class DatabaseManager:
    """Unified database manager that coordinates all repositories"""

    def __init__(self, db_path: str | None = None):
        self.db_connection = DatabaseConnection(db_path)
        self.user_repo = UserRepository(self.db_connection)
        self.word_repo = WordRepository(self.db_connection)
        self.user_word_repo = UserWordRepository(self.db_connection)

    def init_database(self) -> None:
        """Initialize database tables and indexes"""
        self.db_connection.init_database()

    # User methods
    def create_user(self, username: str) -> User | None:
        return self.user_repo.create_user(username)

    def get_user_by_id(self, user_id: int) -> User | None:
        return self.user_repo.get_user_by_id(user_id)

    # Word methods
    def add_words(self, words_data: list[dict[str, Any]]) -> int:
        return self.word_repo.add_words(words_data)

    def get_words(self, level: str | None, count: int) -> list[WordRow]:
        """Word supply entry point used by the pool loader"""
        return self.word_repo.get_words(level, count)

    # Learning history methods
    def upsert_user_word(self, user_id: int, update: UserWordUpdate) -> UserWord | None:
        return self.user_word_repo.upsert_user_word(user_id, update)

    def get_user_words(self, user_id: int) -> list[UserWordWithWord]:
        return self.user_word_repo.get_user_words(user_id)

    def get_connection(self):
        """Get database connection for direct SQL access in tests"""
        return self.db_connection.get_connection()


# Global instance
_db_manager = None


def get_db_manager(db_path: str | None = None) -> DatabaseManager:
    """Get global database manager instance"""
    global _db_manager
    if _db_manager is None:
        _db_manager = DatabaseManager(db_path)
    return _db_manager
