"""
Study session state machines for flashcards and multiple-choice quizzes
"""

import logging
import uuid
from collections.abc import Callable
from datetime import datetime

from ...config import StudyTimings
from ...utils import Timer, calculate_success_rate
from ..errors import InvalidRequestError, SessionStateError
from ..locks.transition_lock import TransitionLockManager
from ..progress.progress_tracker import ProgressEntry, ProgressTracker
from ..timing.countdown import Countdown, CountdownTimer
from ..timing.scheduler import Scheduler, TimerHandle
from .distractors import DistractorGenerator
from .models import (
    LEVEL_ALL,
    AnswerRecord,
    Direction,
    SessionItem,
    SessionStatus,
    StudyMode,
    Word,
)
from .word_pool_loader import WordPool, WordPoolLoader

logger = logging.getLogger(__name__)

SessionListener = Callable[[str, "StudySession"], None]


class StudySession:
    """
    Shared lifecycle for both study modes: idle -> setup -> active -> finished.

    Only the session mutates current_index and status. Every deferred
    callback (countdown ticks, expiry grace, review delays) is bound to the
    item token that was current when it was scheduled; the token changes on
    every item change and on teardown, so late callbacks are ignored.
    """

    mode: StudyMode

    def __init__(
        self,
        loader: WordPoolLoader,
        tracker: ProgressTracker,
        scheduler: Scheduler,
        timings: StudyTimings | None = None,
        lock_manager: TransitionLockManager | None = None,
        session_id: str | None = None,
        level: str = LEVEL_ALL,
        count: int = 10,
        direction: Direction = Direction.EN_TO_JA,
    ):
        self.loader = loader
        self.tracker = tracker
        self.scheduler = scheduler
        self.timings = timings or StudyTimings()
        self.lock_manager = lock_manager or TransitionLockManager()
        self.session_id = session_id or uuid.uuid4().hex[:12]

        self.level = level or LEVEL_ALL
        self.count = count
        self.direction = direction
        self._validate_count(count)

        self.status = SessionStatus.IDLE
        self.pool: WordPool | None = None
        self.items: list[SessionItem] = []
        self.current_index = 0
        self.notice: str | None = None

        limit_ms, tick_ms, grace_ms = self._countdown_settings()
        self.countdown = Countdown(limit_ms, tick_ms)
        self._timer = CountdownTimer(
            self.countdown,
            scheduler,
            on_expire=self._on_countdown_expired,
            grace_ms=grace_ms,
            on_tick=lambda countdown: self._notify("tick"),
        )
        self._token = 0
        self._load_token = 0
        self._pending: list[TimerHandle] = []
        self._listeners: list[SessionListener] = []
        self.timer = Timer()
        self.created_at = datetime.now()

    # Mode hooks

    def _countdown_settings(self) -> tuple[int, int, int]:
        raise NotImplementedError

    def _validate_count(self, count: int) -> None:
        if count <= 0:
            raise InvalidRequestError(f"Word count must be positive, got {count}")

    def _on_item_entered(self, item: SessionItem, excluded_answer: str | None) -> None:
        """Set up per-item state after the position changed"""

    def _can_advance(self, item: SessionItem) -> bool:
        return True

    def _on_countdown_expired(self, token: int) -> None:
        raise NotImplementedError

    def _on_finished(self) -> None:
        """Finalize results when the last item is left"""

    def _on_reset(self) -> None:
        """Discard per-run results"""

    # Read-only views

    @property
    def current_item(self) -> SessionItem | None:
        if self.status is SessionStatus.ACTIVE and self.current_index < len(self.items):
            return self.items[self.current_index]
        return None

    @property
    def current_word(self) -> Word | None:
        item = self.current_item
        return item.word if item else None

    @property
    def item_token(self) -> int:
        """Token identifying the item currently shown; pass it back with input"""
        return self._token

    @property
    def words(self) -> list[Word]:
        return [item.word for item in self.items]

    def add_listener(self, listener: SessionListener) -> None:
        self._listeners.append(listener)

    def _notify(self, event: str) -> None:
        for listener in list(self._listeners):
            listener(event, self)

    # Setup

    def configure(
        self,
        level: str | None = None,
        count: int | None = None,
        direction: Direction | None = None,
    ) -> None:
        """
        Change the filter or direction.

        A running session is torn down and the machine goes back to setup.
        A new level or count drops the loaded pool.
        """
        if count is not None:
            self._validate_count(count)

        if self.status in (SessionStatus.ACTIVE, SessionStatus.FINISHED):
            self._teardown()

        if (level is not None and (level or LEVEL_ALL) != self.level) or (
            count is not None and count != self.count
        ):
            self.pool = None
            self._load_token += 1
        if level is not None:
            self.level = level or LEVEL_ALL
        if count is not None:
            self.count = count
        if direction is not None:
            self.direction = direction

        self.status = SessionStatus.SETUP if self.pool else SessionStatus.IDLE
        self._notify("configured")

    async def prepare(self) -> bool:
        """
        Load the word pool for the current filter.

        The session sits in setup while the fetch is outstanding. An empty
        or failed fetch leaves it idle with a notice and no pool.
        """
        if self.status is SessionStatus.ACTIVE:
            raise SessionStateError("The word pool is frozen while a session is active")

        self._load_token += 1
        load_token = self._load_token
        self.status = SessionStatus.SETUP
        self.notice = None
        self.pool = None

        pool = await self.loader.load(self.level, self.count)

        if load_token != self._load_token:
            logger.debug(f"Session {self.session_id} discarded a superseded pool load")
            return False

        if pool.is_empty:
            self.notice = pool.notice
            self.status = SessionStatus.IDLE
            self._notify("load_failed")
            return False

        self.pool = pool
        self._notify("loaded")
        return True

    async def start(self) -> bool:
        """Enter active with item 0, loading the pool first when needed"""
        if self.status is SessionStatus.ACTIVE:
            raise SessionStateError(f"Session {self.session_id} is already active")

        if self.pool is None and not await self.prepare():
            return False

        self._begin()
        return True

    def retry(self) -> bool:
        """Run again over the same pool with fresh state"""
        if self.status is SessionStatus.ACTIVE:
            raise SessionStateError(f"Session {self.session_id} is already active")
        if self.pool is None:
            return False
        self._begin()
        return True

    async def play_again(self) -> bool:
        """Discard this run, fetch a new pool and wait in setup"""
        self._teardown()
        self.status = SessionStatus.SETUP
        return await self.prepare()

    def reset(self) -> None:
        """Tear everything down and return to idle"""
        self._teardown()
        self.pool = None
        self.notice = None
        self.status = SessionStatus.IDLE
        self._notify("reset")

    def close(self) -> None:
        self.reset()
        self._listeners.clear()
        logger.info(f"Closed {self.mode.value} session {self.session_id}")

    # Transitions

    def _begin(self) -> None:
        self._teardown()
        self.items = [SessionItem(word) for word in self.pool.words]
        self.current_index = 0
        self.status = SessionStatus.ACTIVE
        self.timer.start()
        logger.info(
            f"Started {self.mode.value} session {self.session_id}: "
            f"{len(self.items)} words, level={self.level}, {self.direction.value}"
        )
        self._enter_item(excluded_answer=None)
        self._notify("started")

    def _teardown(self) -> None:
        self._cancel_item_timers()
        self._token += 1
        self.items = []
        self.current_index = 0
        self._on_reset()

    def _cancel_item_timers(self) -> None:
        self._timer.cancel()
        for handle in self._pending:
            handle.cancel()
        self._pending.clear()

    def _enter_item(self, excluded_answer: str | None) -> None:
        self._token += 1
        item = self.items[self.current_index]
        item.reset()
        self._on_item_entered(item, excluded_answer)
        self._timer.start(self._token)

    def _schedule(self, delay_ms: int, callback: Callable[[int], None]) -> None:
        """Run callback(token) after delay_ms unless the item changes first"""
        token = self._token

        def run():
            if token != self._token:
                logger.debug(f"Session {self.session_id} dropped stale callback {token}")
                return
            callback(token)

        self._pending.append(self.scheduler.call_later(delay_ms, run))

    def _is_stale(self, item_token: int | None) -> bool:
        return item_token is not None and item_token != self._token

    def advance(self, item_token: int | None = None) -> bool:
        """
        Move to the next item, or finish after the last one.

        Rejected when not active, when item_token names an item that is no
        longer current, or while another transition is in flight.
        """
        if self.status is not SessionStatus.ACTIVE or self._is_stale(item_token):
            return False
        if not self._can_advance(self.items[self.current_index]):
            return False

        with self.lock_manager.hold(self.session_id, "advance") as acquired:
            if not acquired:
                return False
            self._step(1)
        return True

    def _step(self, offset: int) -> None:
        leaving = self.items[self.current_index]
        self._cancel_item_timers()

        next_index = self.current_index + offset
        if next_index >= len(self.items):
            self._finish()
            return

        self.current_index = next_index
        self._enter_item(excluded_answer=self.direction.answer(leaving.word))
        self._notify("moved")

    def _finish(self) -> None:
        self._token += 1
        self.status = SessionStatus.FINISHED
        self.timer.stop()
        self._on_finished()
        logger.info(
            f"Finished {self.mode.value} session {self.session_id} "
            f"in {self.timer.get_elapsed_time():.1f}s"
        )
        self._notify("finished")


class FlashcardSession(StudySession):
    """Self-paced recall with a per-card countdown"""

    mode = StudyMode.FLASHCARD

    def _countdown_settings(self) -> tuple[int, int, int]:
        return (
            self.timings.flashcard_time_limit_ms,
            self.timings.flashcard_tick_ms,
            self.timings.flashcard_expiry_grace_ms,
        )

    def _on_countdown_expired(self, token: int) -> None:
        self.advance(item_token=token)

    def _on_finished(self) -> None:
        self.current_index = 0
        for item in self.items:
            item.revealed = False

    def flip(self) -> bool:
        """Toggle the current card between its two faces"""
        item = self.current_item
        if item is None:
            return False
        item.revealed = not item.revealed
        self._notify("flipped")
        return item.revealed

    def retreat(self, item_token: int | None = None) -> bool:
        """Go back one card; a no-op on the first card"""
        if self.status is not SessionStatus.ACTIVE or self._is_stale(item_token):
            return False
        if self.current_index == 0:
            return False

        with self.lock_manager.hold(self.session_id, "retreat") as acquired:
            if not acquired:
                return False
            self._step(-1)
        return True

    def mark_learned(self, word_id: int | None = None) -> ProgressEntry | None:
        """
        Toggle the learned flag of word_id, or of the current card.

        Also works from the results view once the session has finished.
        """
        if word_id is None:
            word = self.current_word
            if word is None:
                return None
            word_id = word.id

        entry = self.tracker.toggle_learned(word_id)
        self._notify("marked")
        return entry

    def is_learned(self, word_id: int) -> bool:
        return self.tracker.is_learned(word_id)

    def learned_summary(self) -> tuple[int, int, int]:
        """(learned, total, percentage) over this session's words"""
        words = self.pool.words if self.pool else ()
        return self.tracker.learned_summary(word.id for word in words)


class QuizSession(StudySession):
    """Four-option multiple choice with a per-question countdown"""

    mode = StudyMode.QUIZ

    def __init__(
        self,
        *args,
        generator: DistractorGenerator | None = None,
        min_word_count: int = 4,
        **kwargs,
    ):
        self.min_word_count = min_word_count
        self.generator = generator or DistractorGenerator()
        self._records: list[AnswerRecord] = []
        self._results: tuple[AnswerRecord, ...] | None = None
        super().__init__(*args, **kwargs)

    def _countdown_settings(self) -> tuple[int, int, int]:
        return (
            self.timings.quiz_time_limit_ms,
            self.timings.quiz_tick_ms,
            self.timings.quiz_expiry_grace_ms,
        )

    def _validate_count(self, count: int) -> None:
        super()._validate_count(count)
        if count < self.min_word_count:
            raise InvalidRequestError(
                f"A quiz needs at least {self.min_word_count} words, got {count}"
            )

    @property
    def options(self) -> list[str]:
        item = self.current_item
        return list(item.options) if item else []

    @property
    def results(self) -> tuple[AnswerRecord, ...]:
        if self._results is not None:
            return self._results
        return tuple(self._records)

    @property
    def correct_count(self) -> int:
        return sum(1 for record in self.results if record.is_correct)

    def accuracy(self) -> int:
        return calculate_success_rate(self.correct_count, len(self.results))

    def _on_item_entered(self, item: SessionItem, excluded_answer: str | None) -> None:
        item.options = self.generator.generate(
            item.word, self.pool.words, self.direction, excluded_answer
        )

    def _can_advance(self, item: SessionItem) -> bool:
        return item.answered

    def _on_finished(self) -> None:
        self._results = tuple(self._records)

    def _on_reset(self) -> None:
        self._records = []
        self._results = None

    def select_answer(self, answer: str, item_token: int | None = None) -> AnswerRecord | None:
        """Answer the current question; ignored once answered or timed out"""
        item = self.current_item
        if item is None or self._is_stale(item_token):
            return None
        if item.answered or self.countdown.expired:
            return None

        item.selected_answer = answer
        return self._record(item, answer)

    def _on_countdown_expired(self, token: int) -> None:
        item = self.current_item
        if item is None or token != self._token or item.answered:
            return
        logger.debug(f"Question {self.current_index} of session {self.session_id} timed out")
        self._record(item, "")

    def _record(self, item: SessionItem, answer: str) -> AnswerRecord:
        self._timer.cancel()
        item.answered = True

        correct_answer = self.direction.answer(item.word)
        record = AnswerRecord(
            word_id=item.word.id,
            english=item.word.english,
            japanese=item.word.japanese,
            user_answer=answer,
            correct_answer=correct_answer,
            is_correct=answer == correct_answer,
            time_spent_seconds=(self.countdown.elapsed_ms + 500) // 1000,
        )
        self._records.append(record)

        self.tracker.record_quiz_answer(record.word_id, record.is_correct)
        self._schedule(self.timings.quiz_review_delay_ms, self._advance_after_review)
        self._notify("answered")
        return record

    def _advance_after_review(self, token: int) -> None:
        self.advance(item_token=token)
