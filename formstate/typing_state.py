"""Typing flag tracking.

The typing flag is a two-state machine per scope:

    IDLE --edit--> TYPING --edit--> TYPING (timer re-armed)
                   TYPING --quiet period elapsed--> IDLE

With TypingScope.FIELD every field key is its own scope; with TypingScope.FORM
every field shares a single scope. Each scope owns its own SafeDebounce, so
the quiet period of one field never resets another's.

Usage:
    >>> from formstate.debounce import ManualTimerService
    >>> timers = ManualTimerService()
    >>> tracker = TypingTracker(TypingScope.FIELD, delay_ms=1500, timers=timers)
    >>> tracker.start("name")
    >>> tracker.is_typing("name"), tracker.is_typing("mobile")
    (True, False)
    >>> _ = timers.advance(1.5)
    >>> tracker.is_typing("name")
    False
"""

from functools import partial
from typing import Callable, Dict, Optional

import structlog

from formstate.debounce import SafeDebounce, TimerService, safe_debounce
from formstate.types import TypingScope, TypingState

logger = structlog.get_logger(__name__)

FORM_SCOPE = "*"
"""Scope key used for every field when the typing scope is form-wide."""

TransitionListener = Callable[[str, TypingState, TypingState], None]
"""Called with (scope key, old state, new state) on every state change."""


class TypingTracker:
    """Owns the typing flags of one form and the timers that reset them.

    Attributes:
        scope: Whether flags are tracked per field or form-wide
        delay_ms: Quiet period after the last edit before a flag resets
    """

    def __init__(
        self,
        scope: TypingScope,
        delay_ms: int,
        timers: TimerService,
        on_transition: Optional[TransitionListener] = None,
    ) -> None:
        self.scope = TypingScope(scope)
        self.delay_ms = delay_ms
        self._timers = timers
        self._on_transition = on_transition
        self._states: Dict[str, TypingState] = {}
        self._debouncers: Dict[str, SafeDebounce] = {}
        self._disposed = False

    def scope_key(self, field: str) -> str:
        """Map a field key to the scope whose flag governs it."""
        return FORM_SCOPE if self.scope is TypingScope.FORM else field

    def state(self, field: str) -> TypingState:
        return self._states.get(self.scope_key(field), TypingState.IDLE)

    def is_typing(self, field: Optional[str] = None) -> bool:
        """Whether ``field`` is in its typing window, or any scope when omitted."""
        if field is None:
            return any(state is TypingState.TYPING for state in self._states.values())
        return self.state(field) is TypingState.TYPING

    def start(self, field: str) -> None:
        """Record an edit: flag the scope as typing and re-arm its reset timer."""
        if self._disposed:
            return
        key = self.scope_key(field)
        # Arm first: if scheduling fails the flag must stay untouched.
        self._debouncer(key)()
        self._set(key, TypingState.TYPING)

    def dispose(self) -> None:
        """Cancel every pending reset; late timers become no-ops."""
        self._disposed = True
        for debouncer in self._debouncers.values():
            debouncer.unmount()

    @property
    def pending(self) -> int:
        """Number of scopes waiting for their quiet period to end."""
        return sum(1 for debouncer in self._debouncers.values() if debouncer.pending)

    def _debouncer(self, key: str) -> SafeDebounce:
        debouncer = self._debouncers.get(key)
        if debouncer is None:
            debouncer = safe_debounce(partial(self._stop, key), self.delay_ms, self._timers)
            self._debouncers[key] = debouncer
        return debouncer

    def _stop(self, key: str) -> None:
        self._set(key, TypingState.IDLE)

    def _set(self, key: str, new_state: TypingState) -> None:
        old_state = self._states.get(key, TypingState.IDLE)
        self._states[key] = new_state
        if old_state is new_state:
            return
        logger.debug("typing_transition", scope=key, old=old_state.value, new=new_state.value)
        if self._on_transition is not None:
            self._on_transition(key, old_state, new_state)


__all__ = [
    "TypingTracker",
    "TransitionListener",
    "FORM_SCOPE",
]
