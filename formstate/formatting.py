"""Input formatting layered over a field's change handler.

A field may declare ``formatter``. Its public change handler then becomes
``on_change_text(formatter(raw))``: the UI input is reformatted before it is
stored and validated. Validation and typing suppression are untouched.
"""

import dataclasses
from functools import reduce
from typing import Any, Callable, Optional

from formstate.types import FieldPresentation, Formatter


def compose(*fns: Callable[[Any], Any]) -> Callable[[Any], Any]:
    """Compose right to left: ``compose(f, g)(x) == f(g(x))``.

    Examples:
        >>> compose(str.upper, str.strip)("  abc ")
        'ABC'
    """

    def composed(value: Any) -> Any:
        return reduce(lambda acc, fn: fn(acc), reversed(fns), value)

    return composed


def apply_formatter(
    presentation: FieldPresentation, formatter: Optional[Formatter]
) -> FieldPresentation:
    """Route the presentation's change handler through ``formatter``.

    Presentations of fields without a formatter are returned unchanged.
    """
    if formatter is None:
        return presentation
    return dataclasses.replace(
        presentation, on_change_text=compose(presentation.on_change_text, formatter)
    )


__all__ = [
    "compose",
    "apply_formatter",
]
