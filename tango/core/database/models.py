"""
Database models for the vocabulary study engine
"""

from datetime import datetime
from typing import TypedDict


class User(TypedDict):
    """User model"""
    id: int
    username: str
    created_at: datetime


class WordRow(TypedDict):
    """Word model"""
    id: int
    english: str
    japanese: str
    level: str
    created_at: datetime


class UserWord(TypedDict):
    """Learning history record for one (user, word) pair"""
    id: int
    user_id: int
    word_id: int
    status: str
    correct_count: int
    mistake_count: int
    quiz_correct_count: int
    quiz_mistake_count: int
    flashcard_learned_count: int
    last_studied_at: datetime
    created_at: datetime
    updated_at: datetime


class UserWordWithWord(UserWord):
    """Learning history record joined with its word"""
    english: str
    japanese: str
    level: str


class UserStats(TypedDict):
    """Totals over a user's full learning history"""
    total_words: int
    learned_words: int
    quiz_correct: int
    quiz_mistakes: int
    quiz_accuracy: int
