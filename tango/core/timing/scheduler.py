"""
Timer sources for countdowns and delayed session transitions
"""

import asyncio
import heapq
import itertools
import logging
from collections.abc import Callable
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class TimerHandle(Protocol):
    """A pending callback that can be cancelled"""

    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Schedules callbacks after a delay given in milliseconds"""

    def call_later(
        self, delay_ms: int, callback: Callable[..., Any], *args: Any
    ) -> TimerHandle: ...


class AsyncioScheduler:
    """Scheduler backed by the running asyncio event loop"""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        self._loop = loop

    def call_later(
        self, delay_ms: int, callback: Callable[..., Any], *args: Any
    ) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(max(0, delay_ms) / 1000, callback, *args)


class VirtualTimerHandle:
    """Handle returned by VirtualScheduler"""

    def __init__(self, due_ms: int):
        self.due_ms = due_ms
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class VirtualScheduler:
    """
    Deterministic scheduler driven by a virtual clock.

    Nothing runs until advance() is called; callbacks then fire in due-time
    order (ties in scheduling order) and may schedule further callbacks,
    which also fire if they fall inside the advanced window.
    """

    def __init__(self):
        self.now_ms = 0
        self._queue: list[tuple[int, int, VirtualTimerHandle, Callable[..., Any], tuple]] = []
        self._seq = itertools.count()

    def call_later(
        self, delay_ms: int, callback: Callable[..., Any], *args: Any
    ) -> VirtualTimerHandle:
        due = self.now_ms + max(0, delay_ms)
        handle = VirtualTimerHandle(due)
        heapq.heappush(self._queue, (due, next(self._seq), handle, callback, args))
        return handle

    def advance(self, ms: int) -> int:
        """Move the clock forward, firing due callbacks. Returns how many fired."""
        target = self.now_ms + ms
        fired = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, handle, callback, args = heapq.heappop(self._queue)
            if handle.cancelled:
                continue
            self.now_ms = due
            callback(*args)
            fired += 1
        self.now_ms = target
        return fired

    @property
    def pending_count(self) -> int:
        """Number of scheduled callbacks that have not fired or been cancelled"""
        return sum(1 for entry in self._queue if not entry[2].cancelled)
