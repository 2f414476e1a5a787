"""
Learning history endpoints: authenticated read, upsert and stats
"""

import logging
from typing import Any

from pydantic import ValidationError

from ...utils import calculate_success_rate
from ..auth.token_service import TokenService, parse_bearer
from ..database.database_manager import DatabaseManager
from ..database.models import UserStats, UserWord, UserWordWithWord
from ..errors import InvalidRequestError, StudyError, UnauthorizedError
from .schemas import UserWordUpdate

logger = logging.getLogger(__name__)


class LearningHistoryService:
    """Bearer-authenticated access to per-user learning history"""

    def __init__(self, db_manager: DatabaseManager, token_service: TokenService):
        self.db_manager = db_manager
        self.token_service = token_service

    def authenticate(self, authorization: str | None) -> int:
        """Resolve an Authorization header to a user id"""
        token = parse_bearer(authorization)
        if token is None:
            raise UnauthorizedError("Authentication required")

        user_id = self.token_service.verify_token(token)
        if user_id is None or self.db_manager.get_user_by_id(user_id) is None:
            raise UnauthorizedError("Invalid token")
        return user_id

    def list_user_words(self, authorization: str | None) -> list[UserWordWithWord]:
        """Every word the user touched, most recently studied first"""
        user_id = self.authenticate(authorization)
        return self.db_manager.get_user_words(user_id)

    def save_user_word(
        self, authorization: str | None, payload: dict[str, Any]
    ) -> UserWord:
        """Create or update the history record named by payload['wordId']"""
        user_id = self.authenticate(authorization)

        if not payload.get("wordId"):
            raise InvalidRequestError("wordId is required")
        try:
            update = UserWordUpdate.model_validate(payload)
        except ValidationError as e:
            raise InvalidRequestError(f"Invalid learning history payload: {e}") from e

        record = self.db_manager.upsert_user_word(user_id, update)
        if record is None:
            raise StudyError("Failed to save learning history")
        return record

    def get_stats(self, authorization: str | None) -> UserStats:
        """Totals over the full history; display truncation is up to the caller"""
        records = self.list_user_words(authorization)
        quiz_correct = sum(r["quiz_correct_count"] for r in records)
        quiz_mistakes = sum(r["quiz_mistake_count"] for r in records)
        return UserStats(
            total_words=len(records),
            learned_words=sum(1 for r in records if r["flashcard_learned_count"] > 0),
            quiz_correct=quiz_correct,
            quiz_mistakes=quiz_mistakes,
            quiz_accuracy=calculate_success_rate(quiz_correct, quiz_correct + quiz_mistakes),
        )
