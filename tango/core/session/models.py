"""
Domain models for study sessions
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

LEVEL_ALL = "all"
LEVELS = ("中1", "中2", "中3")


@dataclass(frozen=True)
class Word:
    """A vocabulary entry, immutable once loaded"""

    id: int
    english: str
    japanese: str
    level: str

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Word":
        return cls(
            id=int(row["id"]),
            english=str(row["english"]),
            japanese=str(row["japanese"]),
            level=str(row.get("level", "")),
        )


class Direction(Enum):
    """Which field is the prompt and which is the answer"""

    EN_TO_JA = "en-to-ja"
    JA_TO_EN = "ja-to-en"

    def prompt(self, word: Word) -> str:
        return word.english if self is Direction.EN_TO_JA else word.japanese

    def answer(self, word: Word) -> str:
        return word.japanese if self is Direction.EN_TO_JA else word.english


class StudyMode(Enum):
    FLASHCARD = "flashcard"
    QUIZ = "quiz"


class SessionStatus(Enum):
    """Lifecycle states of a study session"""

    IDLE = "idle"
    SETUP = "setup"
    ACTIVE = "active"
    FINISHED = "finished"


@dataclass
class SessionItem:
    """One word's turn within a session"""

    word: Word
    revealed: bool = False
    answered: bool = False
    selected_answer: str | None = None
    options: list[str] = field(default_factory=list)

    def reset(self) -> None:
        """Return the item to its unanswered, unflipped state"""
        self.revealed = False
        self.answered = False
        self.selected_answer = None
        self.options = []


@dataclass(frozen=True)
class AnswerRecord:
    """Outcome of one quiz question"""

    word_id: int
    english: str
    japanese: str
    user_answer: str
    correct_answer: str
    is_correct: bool
    time_spent_seconds: int
