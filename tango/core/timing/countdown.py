"""
Per-item countdown: pure tick logic plus a scheduler-bound driver
"""

import logging
from collections.abc import Callable

from .scheduler import Scheduler, TimerHandle

logger = logging.getLogger(__name__)


class Countdown:
    """Time budget for one session item, advanced by explicit ticks"""

    def __init__(self, limit_ms: int, tick_ms: int):
        if limit_ms <= 0 or tick_ms <= 0:
            raise ValueError("limit_ms and tick_ms must be positive")
        self.limit_ms = limit_ms
        self.tick_ms = tick_ms
        self.remaining_ms = limit_ms
        self.expired = False

    def start(self, limit_ms: int | None = None) -> None:
        """Begin a fresh budget, optionally with a new limit"""
        if limit_ms is not None:
            if limit_ms <= 0:
                raise ValueError("limit_ms must be positive")
            self.limit_ms = limit_ms
        self.remaining_ms = self.limit_ms
        self.expired = False

    def reset(self) -> None:
        self.start()

    def tick(self) -> bool:
        """
        Consume one granularity step.

        Returns True only on the tick that reaches zero. Ticks after expiry
        are ignored until the countdown is started again.
        """
        if self.expired:
            return False

        self.remaining_ms = max(0, self.remaining_ms - self.tick_ms)
        if self.remaining_ms == 0:
            self.expired = True
            return True
        return False

    @property
    def elapsed_ms(self) -> int:
        return self.limit_ms - self.remaining_ms

    @property
    def remaining_seconds(self) -> int:
        """Whole seconds left, rounded up for display"""
        return -(-self.remaining_ms // 1000)

    @property
    def progress(self) -> float:
        """Fraction of the budget still available, 1.0 at start"""
        return self.remaining_ms / self.limit_ms


class CountdownTimer:
    """
    Drives a Countdown from a Scheduler.

    Every run is bound to a token supplied by the owner. cancel() or a new
    start() invalidates the previous token, so callbacks that were already
    queued for an older item return without touching anything.
    """

    def __init__(
        self,
        countdown: Countdown,
        scheduler: Scheduler,
        on_expire: Callable[[int], None],
        grace_ms: int = 0,
        on_tick: Callable[[Countdown], None] | None = None,
    ):
        self.countdown = countdown
        self.scheduler = scheduler
        self.on_expire = on_expire
        self.grace_ms = grace_ms
        self.on_tick = on_tick
        self._token: int | None = None
        self._handle: TimerHandle | None = None

    @property
    def is_running(self) -> bool:
        return self._token is not None

    def start(self, token: int) -> None:
        """Cancel any pending run and start counting down for token"""
        self.cancel()
        self.countdown.start()
        self._token = token
        self._handle = self.scheduler.call_later(
            self.countdown.tick_ms, self._on_tick, token
        )

    def cancel(self) -> None:
        """Drop the pending tick or expiry callback, if any"""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        self._token = None

    def _on_tick(self, token: int) -> None:
        if token != self._token:
            return

        reached_zero = self.countdown.tick()
        if self.on_tick:
            self.on_tick(self.countdown)

        if not reached_zero:
            self._handle = self.scheduler.call_later(
                self.countdown.tick_ms, self._on_tick, token
            )
            return

        logger.debug(f"Countdown {token} reached zero")
        if self.grace_ms > 0:
            self._handle = self.scheduler.call_later(self.grace_ms, self._fire, token)
        else:
            self._fire(token)

    def _fire(self, token: int) -> None:
        if token != self._token:
            return
        self._handle = None
        self._token = None
        self.on_expire(token)
