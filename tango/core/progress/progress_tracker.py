"""
Flashcard progress kept on the device, mirrored to learning history
"""

import asyncio
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any

from ...utils import calculate_success_rate, extract_json_safely, format_json_safely, safe_int
from ..errors import InvalidRequestError, UnauthorizedError
from ..history.counters import STATUS_LEARNING, STATUS_MASTERED, StudyType
from ..history.history_client import HistoryClient
from .local_store import KeyValueStore

logger = logging.getLogger(__name__)

STORAGE_KEY = "flashcard-progress"

CredentialProvider = Callable[[], str | None]


@dataclass(frozen=True)
class ProgressEntry:
    """Cross-session flashcard state for one word"""

    word_id: int
    last_studied_at: datetime
    study_count: int = 0
    is_learned: bool = False

    def to_blob(self) -> dict[str, Any]:
        return {
            "wordId": self.word_id,
            "lastStudied": int(self.last_studied_at.timestamp() * 1000),
            "studyCount": self.study_count,
            "isLearned": self.is_learned,
        }

    @classmethod
    def from_blob(cls, word_id: int, data: dict[str, Any]) -> "ProgressEntry":
        last_studied = data.get("lastStudied")
        if isinstance(last_studied, (int, float)):
            studied_at = datetime.fromtimestamp(last_studied / 1000)
        elif isinstance(last_studied, str):
            studied_at = datetime.fromisoformat(last_studied)
        else:
            studied_at = datetime.fromtimestamp(0)
        return cls(
            word_id=word_id,
            last_studied_at=studied_at,
            study_count=safe_int(data.get("studyCount")),
            is_learned=bool(data.get("isLearned") or False),
        )


class ProgressTracker:
    """
    Owns the local progress map and the fire-and-forget history writes.

    Local state is authoritative: it is saved in full after every change,
    and server writes never block or roll it back.
    """

    def __init__(
        self,
        store: KeyValueStore,
        history_client: HistoryClient | None = None,
        credential_provider: CredentialProvider | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.store = store
        self.history_client = history_client
        self.credential_provider = credential_provider or (lambda: None)
        self.clock = clock
        self._entries: dict[int, ProgressEntry] = {}
        self._pending: set[asyncio.Task] = set()
        self._loaded = False

    def load(self) -> dict[int, ProgressEntry]:
        """Read the local blob once; later calls return the in-memory map"""
        if self._loaded:
            return dict(self._entries)

        self._loaded = True
        raw = extract_json_safely(self.store.get(STORAGE_KEY))
        for key, value in raw.items():
            try:
                word_id = int(key)
                self._entries[word_id] = ProgressEntry.from_blob(word_id, value)
            except (TypeError, ValueError, AttributeError) as e:
                logger.error(f"Error loading progress for word {key}: {e}")

        logger.info(f"Loaded local progress for {len(self._entries)} words")
        return dict(self._entries)

    def get(self, word_id: int) -> ProgressEntry | None:
        self.load()
        return self._entries.get(word_id)

    def is_learned(self, word_id: int) -> bool:
        entry = self.get(word_id)
        return bool(entry and entry.is_learned)

    def toggle_learned(self, word_id: int) -> ProgressEntry:
        """
        Flip the learned flag for a word.

        study_count grows only on the transition to learned.
        """
        self.load()
        now = self.clock()
        existing = self._entries.get(word_id) or ProgressEntry(
            word_id=word_id, last_studied_at=now
        )
        is_learned = not existing.is_learned
        entry = replace(
            existing,
            last_studied_at=now,
            study_count=existing.study_count + 1 if is_learned else existing.study_count,
            is_learned=is_learned,
        )
        self._entries[word_id] = entry
        self._save()

        self._dispatch({
            "wordId": word_id,
            "isCorrect": True,
            "status": STATUS_LEARNING,
            "studyType": StudyType.FLASHCARD.value,
            "isLearned": is_learned,
        })
        return entry

    def record_quiz_answer(self, word_id: int, is_correct: bool) -> None:
        """Send a quiz hit or miss to learning history"""
        self._dispatch({
            "wordId": word_id,
            "isCorrect": is_correct,
            "status": STATUS_MASTERED if is_correct else STATUS_LEARNING,
            "studyType": StudyType.QUIZ.value,
        })

    def learned_summary(self, word_ids: Iterable[int]) -> tuple[int, int, int]:
        """(learned, total, rounded percentage) over the given words"""
        ids = list(word_ids)
        learned = sum(1 for word_id in ids if self.is_learned(word_id))
        return learned, len(ids), calculate_success_rate(learned, len(ids))

    def _save(self) -> None:
        blob = {str(word_id): entry.to_blob() for word_id, entry in self._entries.items()}
        try:
            self.store.set(STORAGE_KEY, format_json_safely(blob))
        except OSError as e:
            logger.error(f"Error saving local progress: {e}")

    def _dispatch(self, payload: dict[str, Any]) -> None:
        if self.history_client is None:
            return

        token = self.credential_provider()
        if not token:
            logger.debug(f"Guest mode, history write for word {payload['wordId']} skipped")
            return

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning(
                f"No running event loop, history write for word {payload['wordId']} skipped"
            )
            return

        task = loop.create_task(self._send(token, payload))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _send(self, token: str, payload: dict[str, Any]) -> None:
        try:
            await self.history_client.save(token, payload)
        except UnauthorizedError as e:
            logger.info(f"History write rejected, continuing in guest mode: {e}")
        except InvalidRequestError as e:
            logger.warning(f"History write for word {payload.get('wordId')} invalid: {e}")
        except Exception as e:
            logger.error(f"Error saving learning history for word {payload.get('wordId')}: {e}")

    @property
    def pending_writes(self) -> int:
        return len(self._pending)

    async def drain(self) -> None:
        """Wait for in-flight history writes to settle"""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
