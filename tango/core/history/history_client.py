"""
Client side of the learning history endpoints
"""

import asyncio
import logging
from typing import Any, Protocol

from ..database.models import UserWordWithWord
from .history_service import LearningHistoryService

logger = logging.getLogger(__name__)


class HistoryClient(Protocol):
    """Sends learning history writes on behalf of a bearer credential"""

    async def save(self, token: str, payload: dict[str, Any]) -> None: ...


class ServiceHistoryClient:
    """Calls an in-process LearningHistoryService from a worker thread"""

    def __init__(self, service: LearningHistoryService):
        self.service = service

    @staticmethod
    def _authorization(token: str) -> str:
        return f"Bearer {token}"

    async def save(self, token: str, payload: dict[str, Any]) -> None:
        await asyncio.to_thread(
            self.service.save_user_word, self._authorization(token), payload
        )

    async def fetch(self, token: str) -> list[UserWordWithWord]:
        return await asyncio.to_thread(
            self.service.list_user_words, self._authorization(token)
        )
