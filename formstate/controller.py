"""Form state controller.

The FormController owns the live state of one form: a box per field and the
typing flags. It coordinates the validation engine, the typing tracker and the
event emitter, and hands each field to the UI through an adapter.

Error visibility rule: a field shows its error text only when its parsed value
is non-empty, its typing scope is idle, and its validator rejected the value.

Usage:
    >>> from formstate.debounce import ManualTimerService
    >>> from formstate.descriptors import IndependentField
    >>> timers = ManualTimerService()
    >>> form = FormController(
    ...     {"name": IndependentField(error="Invalid name", validator=lambda v: len(v) >= 3)},
    ...     timers=timers,
    ... )
    >>> form.register("name").on_change_text("Al")
    >>> form.register("name").error is None
    True
    >>> _ = timers.advance(1.5)
    >>> form.register("name").error
    'Invalid name'
"""

import uuid
from datetime import datetime, timezone
from functools import partial
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Union

import structlog

from formstate.adapters import AdapterLike, as_adapter
from formstate.boxes import box, create_initial_state, replace_box, unbox_all
from formstate.debounce import AsyncioTimerService, TimerService
from formstate.descriptors import FormDescriptor
from formstate.errors import FormDisposedError, UnknownFieldError
from formstate.events import EventEmitter, FormEvent
from formstate.formatting import apply_formatter
from formstate.settings import FormSettings
from formstate.types import EventType, FieldPresentation, TypingScope, TypingState, ValueBox
from formstate.typing_state import TypingTracker
from formstate.validation import ValidationEngine, ValidationResult

logger = structlog.get_logger(__name__)


class FormController:
    """Owns and exposes the state of a single form instance.

    Attributes:
        form: The checked form descriptor (read-only)
        form_id: Identifier carried by every emitted event
        settings: Typing delay and scope in effect for this form
        adapter: Adapter applied to every registered field
        emitter: Event emitter notifying UI bindings of state changes
    """

    def __init__(
        self,
        form: Union[FormDescriptor, Mapping],
        adapter: AdapterLike = None,
        *,
        timers: Optional[TimerService] = None,
        settings: Optional[FormSettings] = None,
        emitter: Optional[EventEmitter] = None,
        form_id: Optional[str] = None,
        typing_delay_ms: Optional[int] = None,
        typing_scope: Optional[Union[TypingScope, str]] = None,
    ):
        """Initialize the controller and box every field's initial value.

        Args:
            form: FormDescriptor, or a mapping of field descriptors to check
            adapter: Adapter, plain callable or None for pass-through
            timers: Timer service for the typing reset; bound to the running
                asyncio loop when omitted
            settings: FormSettings; read from the environment when omitted
            emitter: Event emitter to publish on; a private one when omitted
            form_id: Identifier for events and logs; generated when omitted
            typing_delay_ms: Overrides ``settings.typing_delay_ms``
            typing_scope: Overrides ``settings.typing_scope``

        Raises:
            InvalidFormDescriptorError: If the descriptor set is malformed
            NoTimerServiceError: If ``timers`` is omitted outside a running loop
        """
        overrides: Dict[str, Any] = {}
        if typing_delay_ms is not None:
            overrides["typing_delay_ms"] = typing_delay_ms
        if typing_scope is not None:
            overrides["typing_scope"] = TypingScope(typing_scope)

        if settings is None:
            settings = FormSettings(**overrides)
        elif overrides:
            settings = settings.model_copy(update=overrides)

        self.form = FormDescriptor.coerce(form)
        self.form_id = form_id or f"form_{uuid.uuid4().hex[:16]}"
        self.settings = settings
        self.adapter = as_adapter(adapter)
        self.emitter = emitter or EventEmitter()
        self._engine = ValidationEngine(self.form)
        self._state: Dict[str, ValueBox] = create_initial_state(self.form)
        if timers is None:
            timers = AsyncioTimerService.for_running_loop()
        self._typing = TypingTracker(
            scope=settings.typing_scope,
            delay_ms=settings.typing_delay_ms,
            timers=timers,
            on_transition=self._on_typing_transition,
        )
        self._closed = False
        self._log = logger.bind(form_id=self.form_id)
        self._log.debug(
            "form_created",
            fields=list(self.form),
            typing_delay_ms=settings.typing_delay_ms,
            typing_scope=settings.typing_scope.value,
        )

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def state(self) -> Mapping[str, ValueBox]:
        """Read-only view of the current boxes."""
        return MappingProxyType(self._state)

    def register(self, key: str) -> Any:
        """Return the adapted presentation of a field.

        Called once per field on every render or query. The only side effect
        is creating fresh callbacks bound to this field.

        Args:
            key: Field key

        Returns:
            Whatever the adapter produces; a FieldPresentation by default

        Raises:
            UnknownFieldError: If ``key`` is not part of the form
            FormDisposedError: If the form has been closed
        """
        self._ensure_open()
        presentation = apply_formatter(self.present_field(key), self.form[key].formatter)
        return self.adapter.present(presentation)

    def present_field(self, key: str) -> FieldPresentation:
        """Compose a field's raw value, validity and visible error.

        Unlike ``register`` this applies neither the formatter nor the adapter.

        Raises:
            UnknownFieldError: If ``key`` is not part of the form
        """
        self._ensure_field(key)
        descriptor = self.form[key]
        current = self._state[key]
        valid = self._engine.validate_field(self._state, key)

        show_error = bool(current.parsed) and not self._typing.is_typing(key) and valid is False

        return FieldPresentation(
            value=current.raw,
            valid=valid,
            error=descriptor.error if show_error else None,
            on_change_text=partial(self.change, key),
            on_cleared=partial(self.clear, key),
        )

    def change(self, key: str, raw: str) -> None:
        """Store new raw text for a field and start its typing window.

        Raises:
            UnknownFieldError: If ``key`` is not part of the form
            FormDisposedError: If the form has been closed
        """
        self._apply(key, raw, EventType.FIELD_CHANGED)

    def clear(self, key: str) -> None:
        """Reset a field to empty text. Same resulting state as ``change(key, "")``."""
        self._apply(key, "", EventType.FIELD_CLEARED)

    def snapshot(self) -> Dict[str, Any]:
        """Current parsed value of every field."""
        return unbox_all(self._state)

    @property
    def is_valid(self) -> bool:
        """Overall validity, recomputed from the current state."""
        return self._engine.is_valid(self._state)

    def current_validity(self) -> bool:
        return self._engine.is_valid(self._state)

    def validate(self) -> ValidationResult:
        """Per-field validation outcomes for the current state."""
        return self._engine.validate(self._state)

    def is_typing(self, key: Optional[str] = None) -> bool:
        """Whether ``key`` (or, when omitted, any field) is inside its typing window."""
        if key is not None:
            self._ensure_field(key)
        return self._typing.is_typing(key)

    def close(self) -> None:
        """Tear the form down. Pending typing resets are cancelled and never fire.

        Closing twice is a no-op.
        """
        if self._closed:
            return
        self._closed = True
        self._typing.dispose()
        self._log.debug("form_closed")
        self._emit(EventType.FORM_DISPOSED)

    def __enter__(self) -> "FormController":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _apply(self, key: str, raw: str, event_type: EventType) -> None:
        self._ensure_open()
        self._ensure_field(key)
        state = self._state
        previous = state[key]
        self._state = replace_box(state, key, box(raw, self.form[key].parser))
        try:
            self._typing.start(key)
        except Exception:
            self._state = state
            raise
        self._log.debug(event_type.value.replace(".", "_"), field=key)
        self._emit(
            event_type,
            field=key,
            payload={
                "raw": raw,
                "previous": previous.raw,
                "dependents": self.form.dependents_of(key),
            },
        )

    def _on_typing_transition(self, scope: str, old: TypingState, new: TypingState) -> None:
        if self._closed:
            return
        event_type = EventType.TYPING_STARTED if new is TypingState.TYPING else EventType.TYPING_STOPPED
        self._emit(event_type, field=scope)

    def _emit(
        self,
        event_type: EventType,
        field: Optional[str] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.emitter.emit(
            FormEvent(
                event_id=f"evt_{uuid.uuid4().hex[:16]}",
                type=event_type,
                form_id=self.form_id,
                ts=datetime.now(timezone.utc),
                field=field,
                payload=payload,
            )
        )

    def _ensure_field(self, key: str) -> None:
        if key not in self.form:
            raise UnknownFieldError(key, list(self.form))

    def _ensure_open(self) -> None:
        if self._closed:
            raise FormDisposedError(self.form_id)


def create_form(
    descriptors: Union[FormDescriptor, Mapping],
    adapter: AdapterLike = None,
    **kwargs: Any,
) -> FormController:
    """Build a FormController.

    ``register``, ``snapshot`` and ``is_valid`` on the returned controller are
    the per-field binding, the parsed values and the overall validity.
    Keyword arguments are passed to FormController.
    """
    return FormController(descriptors, adapter, **kwargs)


__all__ = [
    "FormController",
    "create_form",
]
