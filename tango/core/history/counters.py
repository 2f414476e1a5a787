"""
Counter rules for learning history writes

Two counter families live side by side on every record: the legacy
correct/mistake pair, updated by every study mode, and the mode-specific
quiz pair and flashcard learned count, updated only by their own mode.
"""

from collections.abc import Mapping
from enum import Enum

from .schemas import UserWordUpdate

STATUS_LEARNING = "learning"
STATUS_MASTERED = "mastered"

COUNTER_FIELDS = (
    "correct_count",
    "mistake_count",
    "quiz_correct_count",
    "quiz_mistake_count",
    "flashcard_learned_count",
)


class StudyType(Enum):
    QUIZ = "quiz"
    FLASHCARD = "flashcard"


def _study_type(update: UserWordUpdate) -> StudyType | None:
    try:
        return StudyType(update.study_type) if update.study_type else None
    except ValueError:
        # Unknown types are handled like clients that send none at all.
        return None


def initial_counters(update: UserWordUpdate) -> dict[str, int]:
    """Counters for the first write of a (user, word) pair"""
    counters = dict.fromkeys(COUNTER_FIELDS, 0)
    hit = 1 if update.is_correct else 0
    miss = 1 - hit
    study_type = _study_type(update)

    if study_type is StudyType.QUIZ:
        counters.update(
            quiz_correct_count=hit,
            quiz_mistake_count=miss,
            correct_count=hit,
            mistake_count=miss,
        )
    elif study_type is StudyType.FLASHCARD:
        # A first flashcard write always counts as one learn, whatever isLearned says.
        counters.update(flashcard_learned_count=1, correct_count=1)
    else:
        counters.update(correct_count=hit, mistake_count=miss)

    return counters


def updated_counters(existing: Mapping[str, int], update: UserWordUpdate) -> dict[str, int]:
    """
    Counters that change when update is applied to an existing record.

    Un-learning a flashcard zeroes the flashcard count but takes at most one
    off the legacy correct count, matching records already in storage.
    """
    changes: dict[str, int] = {}
    study_type = _study_type(update)

    def bump(field: str, condition: bool) -> None:
        if condition:
            changes[field] = existing[field] + 1

    if study_type is StudyType.QUIZ:
        bump("quiz_correct_count", update.is_correct)
        bump("quiz_mistake_count", not update.is_correct)
        bump("correct_count", update.is_correct)
        bump("mistake_count", not update.is_correct)
    elif study_type is StudyType.FLASHCARD:
        if update.is_learned is False:
            changes["flashcard_learned_count"] = 0
            if existing["correct_count"] > 0:
                changes["correct_count"] = existing["correct_count"] - 1
        else:
            changes["flashcard_learned_count"] = existing["flashcard_learned_count"] + 1
            changes["correct_count"] = existing["correct_count"] + 1
    else:
        bump("correct_count", update.is_correct)
        bump("mistake_count", not update.is_correct)

    return changes
