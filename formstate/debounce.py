"""Lifecycle-safe debouncing on top of a cancellable timer service.

The engine never sleeps or spawns threads. Delayed work goes through a
TimerService, which only has to offer ``call_later(delay, callback)`` returning
a handle with ``cancel()``. Two services ship with the package:

- AsyncioTimerService: schedules on an asyncio event loop
- ManualTimerService: a virtual clock advanced explicitly, for tests and for
  hosts that drive their own loop

SafeDebounce wraps a callback so that repeated calls restart the delay and the
callback only runs once calls stop. It also tracks liveness: once its owner is
torn down (``unmount``), a timer that still fires does nothing.

Usage:
    >>> timers = ManualTimerService()
    >>> calls = []
    >>> debounced = safe_debounce(calls.append, 500, timers)
    >>> debounced("a"); debounced("b")
    >>> timers.advance(0.5)
    >>> calls
    ['b']
"""

import asyncio
import heapq
import itertools
from typing import Any, Callable, List, Optional, Tuple

import structlog
from typing_extensions import Protocol

from formstate.errors import NoTimerServiceError

logger = structlog.get_logger(__name__)


class TimerHandle(Protocol):
    """A scheduled callback that can be cancelled before it runs."""

    def cancel(self) -> None:
        ...


class TimerService(Protocol):
    """Schedules callbacks after a delay expressed in seconds."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        ...


class AsyncioTimerService:
    """TimerService backed by an asyncio event loop.

    When no loop is given, the running loop at scheduling time is used, so
    scheduling outside a loop raises RuntimeError. Use ``for_running_loop``
    to bind the loop up front instead.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self._loop = loop

    @classmethod
    def for_running_loop(cls) -> "AsyncioTimerService":
        """Bind a service to the event loop running right now.

        Raises:
            NoTimerServiceError: If no event loop is running
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            raise NoTimerServiceError() from None
        return cls(loop)

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(delay, callback)


class _ManualHandle:
    def __init__(self, deadline: float, callback: Callable[[], None]) -> None:
        self.deadline = deadline
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualTimerService:
    """TimerService driven by an explicit virtual clock.

    Nothing fires until ``advance`` is called. Due callbacks run in deadline
    order (ties in scheduling order), and callbacks scheduled while advancing
    fire in the same call when they fall due before the target time.

    Attributes:
        now: Current virtual time in seconds
    """

    def __init__(self, start: float = 0.0) -> None:
        self.now = start
        self._queue: List[Tuple[float, int, _ManualHandle]] = []
        self._sequence = itertools.count()

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        handle = _ManualHandle(self.now + max(delay, 0.0), callback)
        heapq.heappush(self._queue, (handle.deadline, next(self._sequence), handle))
        return handle

    def advance(self, seconds: float) -> int:
        """Move the clock forward and fire everything that falls due.

        Args:
            seconds: How far to move the clock

        Returns:
            Number of callbacks fired
        """
        target = self.now + seconds
        fired = 0
        while self._queue and self._queue[0][0] <= target:
            deadline, _, handle = heapq.heappop(self._queue)
            if handle.cancelled:
                continue
            self.now = deadline
            handle.callback()
            fired += 1
        self.now = target
        return fired

    @property
    def pending(self) -> int:
        """Number of scheduled callbacks that have not fired or been cancelled."""
        return sum(1 for _, _, handle in self._queue if not handle.cancelled)


class SafeDebounce:
    """Debounced, liveness-checked wrapper around a callback.

    Every call cancels the pending timer and schedules a new one; only the
    last call's arguments reach the callback. The callback never runs while
    the wrapper is not live (before ``mount`` or after ``unmount``).

    Attributes:
        delay_ms: Quiet period in milliseconds
    """

    def __init__(
        self,
        callback: Callable[..., Any],
        delay_ms: int,
        timers: TimerService,
    ) -> None:
        self._callback = callback
        self.delay_ms = delay_ms
        self._timers = timers
        self._handle: Optional[TimerHandle] = None
        self._live = False

    @property
    def live(self) -> bool:
        return self._live

    @property
    def pending(self) -> bool:
        """Whether a call is waiting for its quiet period to end."""
        return self._handle is not None

    def mount(self) -> None:
        """Mark the owning scope as started."""
        self._live = True

    def unmount(self) -> None:
        """Mark the owning scope as ended and drop any pending call."""
        self._live = False
        self.cancel()

    def cancel(self) -> None:
        """Cancel the pending call, if any."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def rewrap(
        self,
        callback: Optional[Callable[..., Any]] = None,
        delay_ms: Optional[int] = None,
    ) -> None:
        """Swap the callback and/or delay, cancelling the pending call first."""
        self.cancel()
        if callback is not None:
            self._callback = callback
        if delay_ms is not None:
            self.delay_ms = delay_ms

    def __call__(self, *args: Any, **kwargs: Any) -> None:
        self.cancel()
        self._handle = self._timers.call_later(
            self.delay_ms / 1000.0, lambda: self._fire(args, kwargs)
        )

    def _fire(self, args: Tuple[Any, ...], kwargs: Any) -> None:
        self._handle = None
        if not self._live:
            logger.debug("debounce_skipped_not_live", delay_ms=self.delay_ms)
            return
        self._callback(*args, **kwargs)

    def __enter__(self) -> "SafeDebounce":
        self.mount()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.unmount()


def safe_debounce(
    callback: Callable[..., Any], delay_ms: int, timers: TimerService
) -> SafeDebounce:
    """Wrap ``callback`` in a mounted SafeDebounce."""
    debounced = SafeDebounce(callback, delay_ms, timers)
    debounced.mount()
    return debounced


__all__ = [
    "TimerHandle",
    "TimerService",
    "AsyncioTimerService",
    "ManualTimerService",
    "SafeDebounce",
    "safe_debounce",
]
