"""
Tests for the database layer
"""

import sqlite3
from datetime import datetime, timedelta

import pytest

from tango.core.database.database_manager import DatabaseManager
from tango.core.history.schemas import UserWordUpdate


class TestDatabaseManager:
    """Test schema setup, the word supply and learning history storage"""

    @pytest.fixture
    def db_manager(self, tmp_path):
        """Create a temporary database for testing"""
        manager = DatabaseManager(str(tmp_path / "test.db"))
        manager.init_database()
        return manager

    @pytest.fixture
    def seeded(self, db_manager):
        db_manager.add_words([
            {"id": 1, "english": "apple", "japanese": "りんご", "level": "中1"},
            {"id": 2, "english": "book", "japanese": "本", "level": "中1"},
            {"id": 3, "english": "cat", "japanese": "猫", "level": "中1"},
            {"id": 4, "english": "decide", "japanese": "決める", "level": "中2"},
            {"id": 5, "english": "environment", "japanese": "環境", "level": "中3"},
        ])
        return db_manager

    def test_tables_created(self, db_manager):
        with db_manager.get_connection() as conn:
            tables = {
                row[0]
                for row in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
            }
            columns = {row[1] for row in conn.execute("PRAGMA table_info(user_words)")}

        assert {"users", "words", "user_words"} <= tables
        assert {
            "correct_count",
            "mistake_count",
            "quiz_correct_count",
            "quiz_mistake_count",
            "flashcard_learned_count",
            "status",
            "last_studied_at",
        } <= columns

    def test_init_database_is_idempotent(self, db_manager):
        db_manager.init_database()
        db_manager.init_database()

    def test_add_words_skips_incomplete_entries(self, db_manager):
        added = db_manager.add_words([
            {"english": "dog", "japanese": "犬", "level": "中1"},
            {"english": "", "japanese": "空", "level": "中1"},
            {"english": "tree", "japanese": "木"},
        ])

        assert added == 1
        assert db_manager.word_repo.count_words() == 1

    def test_get_words_filters_by_level(self, seeded):
        words = seeded.get_words("中1", 10)

        assert len(words) == 3
        assert {w["level"] for w in words} == {"中1"}

    def test_get_words_without_level_returns_all_levels(self, seeded):
        words = seeded.get_words(None, 10)

        assert {w["id"] for w in words} == {1, 2, 3, 4, 5}

    def test_get_words_respects_count(self, seeded):
        assert len(seeded.get_words(None, 2)) == 2
        assert seeded.get_words(None, 0) == []

    def test_get_words_unknown_level_is_empty(self, seeded):
        assert seeded.get_words("高1", 100) == []

    def test_create_user_unique(self, db_manager):
        user = db_manager.create_user("hanako")

        assert user["username"] == "hanako"
        assert db_manager.get_user_by_id(user["id"]) == user
        assert db_manager.create_user("hanako") is None

    def test_count_words_by_level(self, seeded):
        assert seeded.word_repo.count_words() == 5
        assert seeded.word_repo.count_words("中1") == 3
        assert seeded.word_repo.count_words("高1") == 0

    def test_get_words_propagates_database_errors(self, tmp_path):
        """A missing schema is an error, not an empty level"""
        manager = DatabaseManager(str(tmp_path / "bare.db"))

        with pytest.raises(sqlite3.OperationalError):
            manager.get_words("中1", 10)

    def test_upsert_creates_then_updates(self, seeded):
        user = seeded.create_user("taro")
        update = UserWordUpdate(wordId=2, isCorrect=True, status="mastered", studyType="quiz")

        created = seeded.upsert_user_word(user["id"], update)
        assert created["quiz_correct_count"] == 1
        assert created["correct_count"] == 1
        assert created["status"] == "mastered"

        miss = UserWordUpdate(wordId=2, isCorrect=False, status="learning", studyType="quiz")
        updated = seeded.upsert_user_word(user["id"], miss)
        assert updated["id"] == created["id"]
        assert updated["quiz_correct_count"] == 1
        assert updated["quiz_mistake_count"] == 1
        assert updated["mistake_count"] == 1
        assert updated["status"] == "learning"

    def test_upsert_unknown_word_fails(self, seeded):
        user = seeded.create_user("taro")

        assert seeded.upsert_user_word(user["id"], UserWordUpdate(wordId=999)) is None

    def test_user_words_most_recent_first(self, seeded):
        user = seeded.create_user("taro")
        base = datetime(2024, 5, 1, 12, 0)
        repo = seeded.user_word_repo
        repo.upsert_user_word(user["id"], UserWordUpdate(wordId=1, studyType="quiz"), now=base)
        repo.upsert_user_word(
            user["id"], UserWordUpdate(wordId=3, studyType="quiz"), now=base + timedelta(hours=2)
        )
        repo.upsert_user_word(
            user["id"], UserWordUpdate(wordId=2, studyType="quiz"), now=base + timedelta(hours=1)
        )

        records = seeded.get_user_words(user["id"])

        assert [r["word_id"] for r in records] == [3, 2, 1]
        assert records[0]["english"] == "cat"
        assert records[0]["japanese"] == "猫"
        assert records[0]["last_studied_at"] == base + timedelta(hours=2)

    def test_user_words_are_per_user(self, seeded):
        taro = seeded.create_user("taro")
        hanako = seeded.create_user("hanako")
        seeded.upsert_user_word(taro["id"], UserWordUpdate(wordId=1, studyType="quiz"))

        assert len(seeded.get_user_words(taro["id"])) == 1
        assert seeded.get_user_words(hanako["id"]) == []


class TestLegacyMigration:
    """Test upgrading a database created before the split counters existed"""

    @pytest.fixture
    def legacy_path(self, tmp_path):
        path = tmp_path / "legacy.db"
        conn = sqlite3.connect(path)
        conn.executescript(
            """
            CREATE TABLE users (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                username TEXT UNIQUE NOT NULL,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            );
            CREATE TABLE words (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                english TEXT NOT NULL,
                japanese TEXT NOT NULL,
                level TEXT NOT NULL,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            );
            CREATE TABLE user_words (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                user_id INTEGER NOT NULL,
                word_id INTEGER NOT NULL,
                status TEXT NOT NULL DEFAULT 'learning',
                correct_count INTEGER NOT NULL DEFAULT 0,
                mistake_count INTEGER NOT NULL DEFAULT 0,
                last_studied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                UNIQUE(user_id, word_id)
            );
            INSERT INTO users (id, username) VALUES (1, 'taro');
            INSERT INTO words (id, english, japanese, level) VALUES (1, 'apple', 'りんご', '中1');
            INSERT INTO user_words (user_id, word_id, correct_count, mistake_count)
            VALUES (1, 1, 4, 2);
            """
        )
        conn.commit()
        conn.close()
        return path

    def test_missing_columns_are_added(self, legacy_path):
        manager = DatabaseManager(str(legacy_path))
        manager.init_database()

        record = manager.user_word_repo.get_user_word(1, 1)

        assert record["correct_count"] == 4
        assert record["mistake_count"] == 2
        assert record["quiz_correct_count"] == 0
        assert record["quiz_mistake_count"] == 0
        assert record["flashcard_learned_count"] == 0

    def test_legacy_record_accepts_new_writes(self, legacy_path):
        manager = DatabaseManager(str(legacy_path))
        manager.init_database()

        record = manager.upsert_user_word(
            1, UserWordUpdate(wordId=1, isCorrect=True, studyType="quiz")
        )

        assert record["quiz_correct_count"] == 1
        assert record["correct_count"] == 5


class TestDatabaseFacade:
    """Test the module-level init_db helper"""

    def test_init_db_creates_schema(self, tmp_path, monkeypatch):
        from tango import database
        from tango.core.database import database_manager

        monkeypatch.setattr(database_manager, "_db_manager", None)

        manager = database.init_db(str(tmp_path / "facade.db"))

        assert database.get_db_manager() is manager
        assert manager.get_words(None, 10) == []
