"""Unit tests for timer services and SafeDebounce.

Tests cover:
- ManualTimerService ordering, cancellation and nested scheduling
- AsyncioTimerService on a real event loop
- Debounce collapsing, liveness checks and rewrapping
"""

import asyncio

import pytest

from formstate.debounce import (
    AsyncioTimerService,
    ManualTimerService,
    SafeDebounce,
    safe_debounce,
)
from formstate.errors import NoTimerServiceError


class TestManualTimerService:
    """Test the virtual clock."""

    def test_nothing_fires_before_deadline(self, timers):
        """Should hold callbacks until their deadline is reached."""
        fired = []
        timers.call_later(1.0, lambda: fired.append("a"))

        assert timers.advance(0.75) == 0
        assert fired == []
        assert timers.advance(0.25) == 1
        assert fired == ["a"]

    def test_fires_in_deadline_order(self, timers):
        """Should fire due callbacks by deadline, ties in scheduling order."""
        fired = []
        timers.call_later(2.0, lambda: fired.append("late"))
        timers.call_later(1.0, lambda: fired.append("first"))
        timers.call_later(1.0, lambda: fired.append("second"))

        timers.advance(5)
        assert fired == ["first", "second", "late"]
        assert timers.now == 5

    def test_cancelled_handles_do_not_fire(self, timers):
        """Should skip cancelled callbacks."""
        fired = []
        handle = timers.call_later(1.0, lambda: fired.append("a"))
        assert timers.pending == 1

        handle.cancel()
        assert timers.pending == 0
        assert timers.advance(2) == 0
        assert fired == []

    def test_callbacks_scheduled_while_advancing(self, timers):
        """Should fire callbacks scheduled by earlier callbacks when they fall due."""
        fired = []

        def first():
            fired.append(("first", timers.now))
            timers.call_later(0.5, lambda: fired.append(("second", timers.now)))

        timers.call_later(1.0, first)
        timers.advance(2.0)

        assert fired == [("first", 1.0), ("second", 1.5)]


class TestAsyncioTimerService:
    """Test scheduling on an asyncio loop."""

    def test_schedules_on_running_loop(self):
        """Should run the callback on the running loop after the delay."""
        fired = []

        async def scenario():
            service = AsyncioTimerService()
            service.call_later(0.01, lambda: fired.append("done"))
            await asyncio.sleep(0.05)

        asyncio.run(scenario())
        assert fired == ["done"]

    def test_cancel_prevents_callback(self):
        """Should return a handle that cancels the callback."""
        fired = []

        async def scenario():
            service = AsyncioTimerService()
            handle = service.call_later(0.01, lambda: fired.append("done"))
            handle.cancel()
            await asyncio.sleep(0.05)

        asyncio.run(scenario())
        assert fired == []

    def test_for_running_loop_binds_current_loop(self):
        """Should bind the loop running at construction time."""
        fired = []

        async def scenario():
            service = AsyncioTimerService.for_running_loop()
            service.call_later(0.01, lambda: fired.append("done"))
            await asyncio.sleep(0.05)

        asyncio.run(scenario())
        assert fired == ["done"]

    def test_for_running_loop_outside_loop_raises(self):
        """Should refuse to bind when no event loop is running."""
        with pytest.raises(NoTimerServiceError, match="no asyncio event loop is running"):
            AsyncioTimerService.for_running_loop()


class TestSafeDebounce:
    """Test debouncing and lifecycle safety."""

    def test_burst_collapses_into_single_call(self, timers):
        """Should call back once, with the last arguments, after the quiet period."""
        calls = []
        debounced = safe_debounce(calls.append, 500, timers)

        debounced(1)
        timers.advance(0.25)
        debounced(2)
        timers.advance(0.25)
        debounced(3)

        assert calls == []
        timers.advance(0.5)
        assert calls == [3]

    def test_each_call_restarts_the_delay(self, timers):
        """Should measure the delay from the latest call."""
        calls = []
        debounced = safe_debounce(lambda: calls.append("x"), 1000, timers)

        debounced()
        timers.advance(0.75)
        debounced()
        timers.advance(0.75)
        assert calls == []
        timers.advance(0.25)
        assert calls == ["x"]

    def test_forwards_keyword_arguments(self, timers):
        """Should forward keyword arguments to the callback."""
        calls = []
        debounced = safe_debounce(lambda **kw: calls.append(kw), 10, timers)
        debounced(value=False)
        timers.advance(1)
        assert calls == [{"value": False}]

    def test_does_not_fire_when_never_mounted(self, timers):
        """Should not call back before the owner started."""
        calls = []
        debounced = SafeDebounce(calls.append, 100, timers)
        debounced("x")
        timers.advance(1)
        assert calls == []
        assert debounced.pending is False

    def test_unmount_cancels_pending_call(self, timers):
        """Should cancel the timer and stay silent after teardown."""
        calls = []
        debounced = safe_debounce(calls.append, 100, timers)
        debounced("x")
        assert debounced.pending is True

        debounced.unmount()
        assert debounced.pending is False
        assert debounced.live is False
        timers.advance(1)
        assert calls == []

    def test_liveness_checked_when_timer_fires(self, timers):
        """Should skip the callback if the owner ended without cancelling."""
        calls = []
        debounced = safe_debounce(calls.append, 100, timers)
        debounced("x")
        debounced._live = False

        timers.advance(1)
        assert calls == []

    def test_context_manager_scopes_liveness(self, timers):
        """Should be live inside the block and torn down after it."""
        calls = []
        with SafeDebounce(calls.append, 100, timers) as debounced:
            assert debounced.live is True
            debounced("inside")
            timers.advance(1)
            debounced("late")

        timers.advance(1)
        assert calls == ["inside"]

    def test_rewrap_cancels_stale_timer(self, timers):
        """Should drop the pending call when the callback or delay changes."""
        old_calls, new_calls = [], []
        debounced = safe_debounce(old_calls.append, 100, timers)
        debounced("stale")

        debounced.rewrap(callback=new_calls.append, delay_ms=200)
        assert timers.pending == 0

        debounced("fresh")
        timers.advance(0.1)
        assert new_calls == []
        timers.advance(0.1)
        assert old_calls == []
        assert new_calls == ["fresh"]
        assert debounced.delay_ms == 200
