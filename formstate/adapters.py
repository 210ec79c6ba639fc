"""Adapters from field presentations to UI binding props.

An adapter is a pure transformation ``present(FieldPresentation) -> props``
with no side effects and no hidden state. The controller applies the adapter
chosen at construction to every registered field.

- PassThroughAdapter (default): returns the presentation unchanged, for
  bindings whose input already exposes value/on_change_text/on_cleared/error
- ChangeEventAdapter: for bindings that report edits as change events
- FunctionAdapter: wraps any plain ``presentation -> props`` callable
"""

from collections.abc import Mapping
from typing import Any, Callable, Dict, Union

from typing_extensions import Protocol, runtime_checkable

from formstate.types import FieldPresentation


@runtime_checkable
class Adapter(Protocol):
    """Turns a FieldPresentation into the props a UI binding consumes."""

    def present(self, presentation: FieldPresentation) -> Any:
        ...


class PassThroughAdapter:
    """Returns the presentation as is."""

    def present(self, presentation: FieldPresentation) -> FieldPresentation:
        return presentation


def extract_text(event: Any) -> str:
    """Read the new text out of a change event.

    Accepts plain strings, mappings shaped like ``{"target": {"value": ...}}``
    or ``{"value": ...}``, and objects exposing ``target.value`` or ``value``.

    Examples:
        >>> extract_text({"target": {"value": "abc"}})
        'abc'
        >>> extract_text("abc")
        'abc'
    """
    if isinstance(event, str):
        return event
    if isinstance(event, Mapping):
        target = event.get("target", event)
        if isinstance(target, Mapping):
            return target["value"]
        return target.value
    target = getattr(event, "target", event)
    return target.value


class ChangeEventAdapter:
    """Props for bindings that report edits as change events.

    Drops ``valid``, ``on_change_text`` and ``on_cleared`` and exposes
    ``on_change(event)``, which forwards the event's text to the field.

    Examples:
        >>> adapter = ChangeEventAdapter()
        >>> seen = []
        >>> props = adapter.present(FieldPresentation(
        ...     value="", valid=None, error=None,
        ...     on_change_text=seen.append, on_cleared=lambda: None,
        ... ))
        >>> props["on_change"]({"target": {"value": "abc"}})
        >>> seen, sorted(props)
        (['abc'], ['error', 'on_change', 'value'])
    """

    def present(self, presentation: FieldPresentation) -> Dict[str, Any]:
        on_change_text = presentation.on_change_text

        def on_change(event: Any) -> None:
            on_change_text(extract_text(event))

        return {
            "value": presentation.value,
            "error": presentation.error,
            "on_change": on_change,
        }


class FunctionAdapter:
    """Adapter around a plain ``presentation -> props`` callable."""

    def __init__(self, fn: Callable[[FieldPresentation], Any]) -> None:
        self._fn = fn

    def present(self, presentation: FieldPresentation) -> Any:
        return self._fn(presentation)


AdapterLike = Union[Adapter, Callable[[FieldPresentation], Any], None]


def as_adapter(adapter: AdapterLike) -> Adapter:
    """Normalize None, an Adapter or a plain callable into an Adapter."""
    if adapter is None:
        return PassThroughAdapter()
    if isinstance(adapter, Adapter):
        return adapter
    if callable(adapter):
        return FunctionAdapter(adapter)
    raise TypeError(f"Expected an adapter or a callable, got {type(adapter).__name__}")


__all__ = [
    "Adapter",
    "AdapterLike",
    "PassThroughAdapter",
    "ChangeEventAdapter",
    "FunctionAdapter",
    "as_adapter",
    "extract_text",
]
