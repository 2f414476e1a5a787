"""
Word pool loading for study sessions
"""

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol

from .models import LEVEL_ALL, Word

logger = logging.getLogger(__name__)

NO_WORDS_NOTICE = "No words were found for this level."
FETCH_FAILED_NOTICE = "Failed to fetch words."


class WordSupply(Protocol):
    """Anything that can hand out words by level and count"""

    def get_words(self, level: str | None, count: int) -> list[dict[str, Any]]: ...


@dataclass(frozen=True)
class WordPool:
    """Result of a pool load: the frozen word list or an empty-state notice"""

    level: str
    count: int
    words: tuple[Word, ...] = ()
    notice: str | None = None

    @property
    def is_empty(self) -> bool:
        return not self.words

    def __len__(self) -> int:
        return len(self.words)


@dataclass
class WordPoolLoader:
    """Requests word lists from the word supply and normalizes empty results"""

    supply: WordSupply
    loads: int = field(default=0, init=False)

    async def load(self, level: str | None, count: int) -> WordPool:
        """
        Fetch up to count words for level.

        Never raises for supply problems: an empty or failed fetch comes
        back as an empty pool carrying a user-facing notice.
        """
        level = level or LEVEL_ALL
        self.loads += 1
        supply_level = None if level == LEVEL_ALL else level

        try:
            rows = await asyncio.to_thread(self.supply.get_words, supply_level, count)
        except Exception as e:
            logger.error(f"Error fetching words for level={level}, count={count}: {e}")
            return WordPool(level=level, count=count, notice=FETCH_FAILED_NOTICE)

        words = self._to_words(rows)
        if not words:
            logger.info(f"No words available for level={level}, count={count}")
            return WordPool(level=level, count=count, notice=NO_WORDS_NOTICE)

        if len(words) < count:
            logger.info(f"Requested {count} words for level={level}, got {len(words)}")
        return WordPool(level=level, count=count, words=tuple(words))

    @staticmethod
    def _to_words(rows: Sequence[dict[str, Any]] | None) -> list[Word]:
        words = []
        for row in rows or []:
            try:
                words.append(row if isinstance(row, Word) else Word.from_row(row))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed word row {row!r}: {e}")
        return words
