"""Core type definitions for formstate.

This module defines the fundamental types shared across the engine:
- FieldKind: Tag distinguishing independent from dependent field descriptors
- TypingScope: Whether typing suppression is tracked per field or per form
- TypingState: The two states of a typing flag
- EventType: Notification types emitted by a form controller
- DescriptorIssueCode: Reasons a form descriptor is rejected at construction
- ValueBox: A field's raw text paired with its parsed value
- FieldPresentation: The binding-agnostic view of one field

These types form the contract between the engine and UI bindings. Nothing in
this module knows about a concrete rendering technology.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Generic, Optional, TypeVar

T = TypeVar("T")

Parser = Callable[[str], Any]
"""Turns raw field text into a domain value. Must be total and pure."""

Formatter = Callable[[Optional[str]], str]
"""Reformats raw UI input before it is stored. Must be total and pure."""

IndependentValidator = Callable[[Any], bool]
DependentValidator = Callable[[Any, Any], bool]

ChangeTextHandler = Callable[[str], None]
ClearHandler = Callable[[], None]


class FieldKind(str, Enum):
    """Descriptor variants.

    An independent field is validated on its own parsed value; a dependent
    field is validated on its own parsed value plus the current parsed value
    of the field named by ``depends_on``.
    """
    INDEPENDENT = "independent"
    DEPENDENT = "dependent"


class TypingScope(str, Enum):
    """Granularity of the "user is typing" flag.

    FIELD keeps one flag per field so an edit only suppresses the edited
    field's error. FORM keeps a single flag shared by every field.
    """
    FIELD = "field"
    FORM = "form"


class TypingState(str, Enum):
    """Typing flag states.

    IDLE -> TYPING happens synchronously on every edit; TYPING -> IDLE happens
    when the debounce window elapses without further edits.
    """
    IDLE = "idle"
    TYPING = "typing"


class EventType(str, Enum):
    """Notification types emitted by a form controller."""
    FIELD_CHANGED = "field.changed"
    FIELD_CLEARED = "field.cleared"
    TYPING_STARTED = "typing.started"
    TYPING_STOPPED = "typing.stopped"
    FORM_DISPOSED = "form.disposed"


class DescriptorIssueCode(str, Enum):
    """Reasons a form descriptor is rejected at construction time."""
    NOT_CALLABLE = "not_callable"
    UNKNOWN_DEPENDENCY = "unknown_dependency"
    SELF_DEPENDENCY = "self_dependency"
    DEPENDENCY_CYCLE = "dependency_cycle"
    MISSING_ATTRIBUTE = "missing_attribute"
    MISSING_DEPENDENCY = "missing_dependency"
    UNKNOWN_KIND = "unknown_kind"


@dataclass(frozen=True)
class ValueBox(Generic[T]):
    """A field's raw text paired with its parsed domain value.

    ``parsed`` is always the field parser applied to ``raw``. The two are
    never updated separately: a new box replaces the old one as a unit.

    Attributes:
        raw: Text exactly as stored for the field
        parsed: Result of the field parser applied to ``raw``

    Examples:
        >>> box = ValueBox(raw="42", parsed=42)
        >>> box.to_dict()
        {'raw': '42', 'parsed': 42}
    """
    raw: str
    parsed: T

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        return {"raw": self.raw, "parsed": self.parsed}


@dataclass(frozen=True)
class FieldPresentation:
    """Binding-agnostic presentation state of one field.

    Derived on demand from the controller's current state and never stored.

    Attributes:
        value: Raw text of the field
        valid: True/False once evaluated, None when a non-required field is empty
        error: Error text to display, or None when no error should be visible
        on_change_text: Callback the UI calls with new raw text
        on_cleared: Callback the UI calls to reset the field to empty
    """
    value: str
    valid: Optional[bool]
    error: Optional[str]
    on_change_text: ChangeTextHandler
    on_cleared: ClearHandler

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a props dict using the camelCase keys UI bindings expect."""
        return {
            "value": self.value,
            "valid": self.valid,
            "error": self.error,
            "onChangeText": self.on_change_text,
            "onCleared": self.on_cleared,
        }


__all__ = [
    "FieldKind",
    "TypingScope",
    "TypingState",
    "EventType",
    "DescriptorIssueCode",
    "ValueBox",
    "FieldPresentation",
    "Parser",
    "Formatter",
    "IndependentValidator",
    "DependentValidator",
    "ChangeTextHandler",
    "ClearHandler",
]
