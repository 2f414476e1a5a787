"""Transition lock manager for serializing session index changes"""

import contextlib
import logging

logger = logging.getLogger(__name__)


class TransitionLockManager:
    """
    Keeps at most one index transition in flight per session.

    A transition acquires the lock for its session before mutating the
    current position and releases it once the new item is fully set up.
    Requests arriving in between are rejected, not queued.
    """

    def __init__(self):
        self._in_flight: dict[str, str] = {}

    def is_locked(self, session_id: str) -> bool:
        """Check if a transition is in flight for the session"""
        return session_id in self._in_flight

    def acquire_lock(self, session_id: str, operation: str) -> bool:
        """
        Try to acquire the transition lock

        Args:
            session_id: Study session identifier
            operation: Name of the transition being performed

        Returns:
            True if lock acquired, False if another transition is in flight
        """
        if session_id in self._in_flight:
            logger.warning(
                f"Session {session_id} rejected {operation}: "
                f"{self._in_flight[session_id]} still in flight"
            )
            return False

        self._in_flight[session_id] = operation
        return True

    def release_lock(self, session_id: str) -> bool:
        """Release the transition lock; False if the session was not locked"""
        if self._in_flight.pop(session_id, None) is None:
            logger.warning(f"Attempted to release non-existent lock for session {session_id}")
            return False
        return True

    @contextlib.contextmanager
    def hold(self, session_id: str, operation: str):
        """Context manager yielding whether the lock was acquired"""
        acquired = self.acquire_lock(session_id, operation)
        try:
            yield acquired
        finally:
            if acquired:
                self.release_lock(session_id)

    def get_active_locks_count(self) -> int:
        return len(self._in_flight)
