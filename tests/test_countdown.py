"""
Tests for countdown logic and timer scheduling
"""

from unittest.mock import Mock

import pytest

from tango.core.timing.countdown import Countdown, CountdownTimer
from tango.core.timing.scheduler import VirtualScheduler


class TestCountdown:
    """Test the pure tick/expiry logic"""

    def test_flashcard_budget_expires_after_five_ticks(self):
        """5000ms in 1000ms steps reaches zero on the fifth tick"""
        countdown = Countdown(5000, 1000)
        countdown.start()

        results = [countdown.tick() for _ in range(5)]

        assert results == [False, False, False, False, True]
        assert countdown.remaining_ms == 0
        assert countdown.expired is True

    def test_quiz_budget_expires_exactly_once(self):
        """10000ms in 100ms steps expires once; extra ticks change nothing"""
        countdown = Countdown(10000, 100)
        countdown.start()

        expirations = sum(countdown.tick() for _ in range(100))
        assert expirations == 1
        assert countdown.remaining_ms == 0

        assert countdown.tick() is False
        assert countdown.remaining_ms == 0
        assert countdown.expired is True

    def test_tick_clamps_at_zero(self):
        """A granularity that does not divide the limit still stops at zero"""
        countdown = Countdown(250, 100)

        for _ in range(3):
            countdown.tick()

        assert countdown.remaining_ms == 0
        assert countdown.expired is True

    def test_reset_restores_budget(self):
        """reset() brings back the full budget and clears expiry"""
        countdown = Countdown(3000, 1000)
        for _ in range(3):
            countdown.tick()

        countdown.reset()

        assert countdown.remaining_ms == 3000
        assert countdown.expired is False
        assert countdown.elapsed_ms == 0

    def test_display_helpers(self):
        """Remaining seconds round up and progress falls from 1.0"""
        countdown = Countdown(10000, 100)
        for _ in range(15):
            countdown.tick()

        assert countdown.remaining_ms == 8500
        assert countdown.remaining_seconds == 9
        assert countdown.progress == pytest.approx(0.85)
        assert countdown.elapsed_ms == 1500

    def test_invalid_limits_rejected(self):
        with pytest.raises(ValueError):
            Countdown(0, 100)
        with pytest.raises(ValueError):
            Countdown(1000, 0)


class TestVirtualScheduler:
    """Test the deterministic scheduler"""

    def test_callbacks_fire_in_due_order(self):
        scheduler = VirtualScheduler()
        fired = []

        scheduler.call_later(300, fired.append, "c")
        scheduler.call_later(100, fired.append, "a")
        scheduler.call_later(200, fired.append, "b")

        assert scheduler.advance(250) == 2
        assert fired == ["a", "b"]
        assert scheduler.now_ms == 250
        assert scheduler.pending_count == 1

    def test_cancelled_callbacks_do_not_fire(self):
        scheduler = VirtualScheduler()
        callback = Mock()

        handle = scheduler.call_later(100, callback)
        handle.cancel()
        scheduler.advance(1000)

        callback.assert_not_called()
        assert scheduler.pending_count == 0

    def test_callbacks_scheduled_inside_window_also_fire(self):
        scheduler = VirtualScheduler()
        fired = []

        def chain(n):
            fired.append(n)
            if n < 3:
                scheduler.call_later(100, chain, n + 1)

        scheduler.call_later(100, chain, 1)
        scheduler.advance(300)

        assert fired == [1, 2, 3]


class TestCountdownTimer:
    """Test the scheduler-bound countdown driver"""

    @pytest.fixture
    def scheduler(self):
        return VirtualScheduler()

    def test_expiry_fires_after_grace(self, scheduler):
        """Flashcard timing: zero at 5s, expiry event one second later"""
        on_expire = Mock()
        timer = CountdownTimer(Countdown(5000, 1000), scheduler, on_expire, grace_ms=1000)

        timer.start(token=7)
        scheduler.advance(5000)

        assert timer.countdown.expired is True
        on_expire.assert_not_called()

        scheduler.advance(1000)
        on_expire.assert_called_once_with(7)
        assert timer.is_running is False

    def test_zero_grace_fires_on_last_tick(self, scheduler):
        """Quiz timing: the expiry event fires at the tick that reaches zero"""
        on_expire = Mock()
        timer = CountdownTimer(Countdown(10000, 100), scheduler, on_expire, grace_ms=0)

        timer.start(token=1)
        scheduler.advance(9900)
        on_expire.assert_not_called()

        scheduler.advance(100)
        on_expire.assert_called_once_with(1)

    def test_cancel_drops_pending_expiry(self, scheduler):
        """A cancelled timer never fires, even during its grace period"""
        on_expire = Mock()
        timer = CountdownTimer(Countdown(5000, 1000), scheduler, on_expire, grace_ms=1000)

        timer.start(token=1)
        scheduler.advance(5500)
        timer.cancel()
        scheduler.advance(10000)

        on_expire.assert_not_called()
        assert scheduler.pending_count == 0

    def test_restart_invalidates_previous_run(self, scheduler):
        """Starting with a new token resets the budget and silences the old run"""
        on_expire = Mock()
        timer = CountdownTimer(Countdown(5000, 1000), scheduler, on_expire, grace_ms=1000)

        timer.start(token=1)
        scheduler.advance(4000)
        timer.start(token=2)

        assert timer.countdown.remaining_ms == 5000

        scheduler.advance(6000)
        on_expire.assert_called_once_with(2)

    def test_on_tick_reports_each_step(self, scheduler):
        ticks = []
        timer = CountdownTimer(
            Countdown(3000, 1000),
            scheduler,
            Mock(),
            on_tick=lambda countdown: ticks.append(countdown.remaining_ms),
        )

        timer.start(token=1)
        scheduler.advance(3000)

        assert ticks == [2000, 1000, 0]
