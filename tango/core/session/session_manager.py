"""
Session management for the vocabulary study engine
"""

import logging
from datetime import datetime

from ...config import Settings, StudyTimings
from ..auth.token_service import TokenService
from ..database.database_manager import DatabaseManager
from ..history.history_client import ServiceHistoryClient
from ..history.history_service import LearningHistoryService
from ..locks.transition_lock import TransitionLockManager
from ..progress.local_store import JsonFileStore
from ..progress.progress_tracker import CredentialProvider, ProgressTracker
from ..timing.scheduler import AsyncioScheduler, Scheduler
from .distractors import DistractorGenerator
from .models import LEVEL_ALL, Direction, StudyMode
from .study_session import FlashcardSession, QuizSession, StudySession
from .word_pool_loader import WordPoolLoader, WordSupply

logger = logging.getLogger(__name__)

GUEST_KEY = "guest"


class SessionManager:
    """Keeps one live study session per user"""

    def __init__(
        self,
        word_supply: WordSupply,
        tracker: ProgressTracker,
        scheduler: Scheduler | None = None,
        timings: StudyTimings | None = None,
        lock_manager: TransitionLockManager | None = None,
        generator: DistractorGenerator | None = None,
        default_word_count: int = 10,
        min_quiz_word_count: int = 4,
        session_max_age_hours: int = 24,
    ):
        self.loader = WordPoolLoader(word_supply)
        self.tracker = tracker
        self.scheduler = scheduler or AsyncioScheduler()
        self.timings = timings or StudyTimings()
        self.lock_manager = lock_manager or TransitionLockManager()
        self.generator = generator or DistractorGenerator()
        self.default_word_count = default_word_count
        self.min_quiz_word_count = min_quiz_word_count
        self.session_max_age_hours = session_max_age_hours
        self.user_sessions: dict[str, StudySession] = {}

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        credential_provider: CredentialProvider | None = None,
        db_manager: DatabaseManager | None = None,
    ) -> "SessionManager":
        """Wire the sqlite word supply, local store and history service together"""
        db_manager = db_manager or DatabaseManager(settings.database_url.replace("sqlite:///", ""))
        db_manager.init_database()

        history_service = LearningHistoryService(
            db_manager, TokenService(settings.token_secret, settings.token_ttl_hours)
        )
        tracker = ProgressTracker(
            JsonFileStore(settings.local_progress_path),
            history_client=ServiceHistoryClient(history_service),
            credential_provider=credential_provider,
        )
        tracker.load()

        return cls(
            word_supply=db_manager,
            tracker=tracker,
            timings=StudyTimings.from_settings(settings),
            default_word_count=settings.default_word_count,
            min_quiz_word_count=settings.min_quiz_word_count,
            session_max_age_hours=settings.session_max_age_hours,
        )

    async def stop(self):
        """End every session and let pending history writes finish"""
        for user_key in list(self.user_sessions):
            self.end_session(user_key)
        await self.tracker.drain()

    def create_session(
        self,
        mode: StudyMode,
        user_key: str = GUEST_KEY,
        level: str = LEVEL_ALL,
        count: int | None = None,
        direction: Direction = Direction.EN_TO_JA,
    ) -> StudySession:
        """Create a session in idle state, replacing the user's previous one"""
        self.end_session(user_key)

        # Compact id: user key plus the last 6 digits of the timestamp
        timestamp = int(datetime.now().timestamp()) % 1000000
        common = dict(
            loader=self.loader,
            tracker=self.tracker,
            scheduler=self.scheduler,
            timings=self.timings,
            lock_manager=self.lock_manager,
            session_id=f"{user_key}_{timestamp}",
            level=level,
            count=count or self.default_word_count,
            direction=direction,
        )
        if mode is StudyMode.QUIZ:
            session = QuizSession(
                generator=self.generator,
                min_word_count=self.min_quiz_word_count,
                **common,
            )
        else:
            session = FlashcardSession(**common)

        self.user_sessions[user_key] = session
        return session

    async def start_study_session(
        self,
        mode: StudyMode,
        user_key: str = GUEST_KEY,
        level: str = LEVEL_ALL,
        count: int | None = None,
        direction: Direction = Direction.EN_TO_JA,
    ) -> StudySession:
        """
        Create and start a session.

        Check session.status: when no words were found the session stays
        idle and session.notice says why.
        """
        session = self.create_session(mode, user_key, level, count, direction)
        if not await session.start():
            logger.info(f"Session for {user_key} not started: {session.notice}")
        return session

    def get_session(self, user_key: str = GUEST_KEY) -> StudySession | None:
        """Get live session for user"""
        return self.user_sessions.get(user_key)

    def end_session(self, user_key: str = GUEST_KEY) -> bool:
        """Tear down the user's session, cancelling its timers"""
        session = self.user_sessions.pop(user_key, None)
        if session is None:
            return False
        session.close()
        return True

    def cleanup_expired_sessions(self, max_age_hours: int | None = None):
        """Clean up sessions older than max_age_hours"""
        max_age_hours = max_age_hours or self.session_max_age_hours
        current_time = datetime.now()
        expired_sessions = []

        for user_key, session in self.user_sessions.items():
            age = (current_time - session.created_at).total_seconds() / 3600
            if age > max_age_hours:
                expired_sessions.append(user_key)

        for user_key in expired_sessions:
            self.end_session(user_key)
            logger.info(f"Cleaned up expired session for {user_key}")
