"""Event system for form controllers.

A Python host has no implicit re-render, so a controller announces every state
change it makes as a typed FormEvent. UI bindings subscribe to know when to
query fields again; most importantly ``typing.stopped``, after which hidden
errors may become visible.

Listeners are called synchronously, in registration order. A failing listener
is logged and skipped; it never affects other listeners or the controller.
"""

import json
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

import structlog

from formstate.types import EventType

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class FormEvent:
    """A single notification emitted by a form controller.

    Attributes:
        event_id: Unique event identifier (e.g., "evt_3f2a...")
        type: Event type from EventType enum
        form_id: ID of the form that emitted the event
        ts: UTC timestamp when the event occurred
        field: Optional - field key (or typing scope) the event relates to
        payload: Optional event-specific data (e.g., raw text, previous raw text
            and dependent field keys)

    Examples:
        >>> from datetime import datetime, timezone
        >>> event = FormEvent(
        ...     event_id="evt_001",
        ...     type=EventType.FIELD_CHANGED,
        ...     form_id="form_001",
        ...     ts=datetime.now(timezone.utc),
        ...     field="name",
        ...     payload={"raw": "Ann", "previous": ""},
        ... )
        >>> event.to_dict()["type"]
        'field.changed'
    """
    event_id: str
    type: EventType
    form_id: str
    ts: datetime
    field: Optional[str] = None
    payload: Optional[Dict[str, Any]] = None

    def __post_init__(self):
        if isinstance(self.type, str) and not isinstance(self.type, EventType):
            object.__setattr__(self, "type", EventType(self.type))

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary for serialization.

        Returns:
            Dictionary with all event fields; the timestamp is ISO 8601.
        """
        result: Dict[str, Any] = {
            "eventId": self.event_id,
            "type": self.type.value,
            "formId": self.form_id,
            "ts": self.ts.isoformat(),
        }
        if self.field is not None:
            result["field"] = self.field
        if self.payload is not None:
            result["payload"] = self.payload
        return result

    def to_jsonl(self) -> str:
        """Convert event to a single line of JSON."""
        return json.dumps(self.to_dict(), separators=(",", ":"))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FormEvent":
        """Create FormEvent from dictionary (camelCase keys)."""
        ts = datetime.fromisoformat(data["ts"].replace("Z", "+00:00"))
        return cls(
            event_id=data["eventId"],
            type=EventType(data["type"]),
            form_id=data["formId"],
            ts=ts,
            field=data.get("field"),
            payload=data.get("payload"),
        )


EventListener = Callable[[FormEvent], None]
"""Type alias for event listener callbacks."""


class EventEmitter:
    """Dispatches FormEvents to type-specific and wildcard listeners.

    Examples:
        >>> emitter = EventEmitter()
        >>> seen = []
        >>> emitter.on(EventType.TYPING_STOPPED, seen.append)
        >>> emitter.listener_count(EventType.TYPING_STOPPED)
        1
    """

    def __init__(self):
        self._listeners: Dict[EventType, List[EventListener]] = {}
        self._any_listeners: List[EventListener] = []

    def on(self, event_type: EventType, listener: EventListener) -> None:
        """Subscribe to a specific event type."""
        self._listeners.setdefault(event_type, []).append(listener)

    def on_any(self, listener: EventListener) -> None:
        """Subscribe to every event type."""
        self._any_listeners.append(listener)

    def off(self, event_type: EventType, listener: EventListener) -> None:
        """Unsubscribe from a specific event type. Unknown listeners are ignored."""
        listeners = self._listeners.get(event_type, [])
        if listener in listeners:
            listeners.remove(listener)

    def off_any(self, listener: EventListener) -> None:
        """Unsubscribe a wildcard listener. Unknown listeners are ignored."""
        if listener in self._any_listeners:
            self._any_listeners.remove(listener)

    def emit(self, event: FormEvent) -> None:
        """Dispatch an event to type-specific listeners, then wildcard listeners.

        Args:
            event: Event to dispatch
        """
        # Copy so listeners may unsubscribe while being notified.
        listeners = list(self._listeners.get(event.type, [])) + list(self._any_listeners)
        for listener in listeners:
            try:
                listener(event)
            except Exception:
                logger.warning(
                    "event_listener_failed",
                    event_type=event.type.value,
                    form_id=event.form_id,
                    field=event.field,
                    exc_info=True,
                )

    def clear(self) -> None:
        """Remove all event listeners."""
        self._listeners.clear()
        self._any_listeners.clear()

    def listener_count(self, event_type: Optional[EventType] = None) -> int:
        """Count listeners for one type, or all listeners including wildcards."""
        if event_type is not None:
            return len(self._listeners.get(event_type, []))
        return len(self._any_listeners) + sum(len(ls) for ls in self._listeners.values())


__all__ = [
    "FormEvent",
    "EventListener",
    "EventEmitter",
]
