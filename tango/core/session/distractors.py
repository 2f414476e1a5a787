"""
Multiple-choice option generation for quiz questions
"""

import logging
import random
from collections.abc import Iterable, Sequence
from typing import TypeVar

from .models import Direction, Word

logger = logging.getLogger(__name__)

T = TypeVar("T")

WRONG_ANSWER_COUNT = 3


class DistractorGenerator:
    """Builds the four shuffled options shown for a quiz question"""

    def __init__(self, rng: random.Random | None = None):
        self.rng = rng or random.Random()

    def shuffle(self, items: Iterable[T]) -> list[T]:
        """Fisher-Yates shuffle into a new list"""
        result = list(items)
        for i in range(len(result) - 1, 0, -1):
            j = self.rng.randrange(i + 1)
            result[i], result[j] = result[j], result[i]
        return result

    def generate(
        self,
        question: Word,
        pool: Sequence[Word],
        direction: Direction,
        excluded_answer: str | None = None,
    ) -> list[str]:
        """
        Return the correct answer plus up to three distinct wrong answers,
        shuffled.

        excluded_answer is the previous question's correct answer. It is kept
        out of the options on a first pass and only allowed back in when the
        pool cannot otherwise supply three wrong answers.
        """
        correct = direction.answer(question)
        others = [word for word in pool if word.id != question.id]

        first_pass = [
            word for word in others
            if excluded_answer is None or direction.answer(word) != excluded_answer
        ]
        wrong = self._draw_wrong_answers(first_pass, direction, correct, [])

        if len(wrong) < WRONG_ANSWER_COUNT:
            wrong = self._draw_wrong_answers(others, direction, correct, wrong)

        if len(wrong) < WRONG_ANSWER_COUNT:
            logger.warning(
                f"Pool of {len(pool)} words yields only {len(wrong)} distinct "
                f"wrong answers for word {question.id}"
            )

        return self.shuffle([correct, *wrong])

    def _draw_wrong_answers(
        self,
        candidates: Sequence[Word],
        direction: Direction,
        correct: str,
        collected: list[str],
    ) -> list[str]:
        wrong = list(collected)
        for word in self.shuffle(candidates):
            if len(wrong) >= WRONG_ANSWER_COUNT:
                break
            answer = direction.answer(word)
            if answer == correct or answer in wrong:
                continue
            wrong.append(answer)
        return wrong
