"""Value boxes and form state.

A box pairs a field's raw text with its parsed value. Form state is a mapping
from field key to box, built once from the descriptor and afterwards only
replaced key by key: ``replace_box`` returns a new mapping in which every
other key keeps the very same box object.
"""

from typing import Any, Dict, Mapping, Optional

from formstate.descriptors import FormDescriptor, pass_through
from formstate.types import Parser, ValueBox

FormState = Dict[str, ValueBox]


def box(raw: str, parser: Optional[Parser] = None) -> ValueBox:
    """Create a box from raw text.

    Args:
        raw: Raw field text
        parser: Optional parser; the identity is used when omitted

    Returns:
        ValueBox holding ``raw`` and ``parser(raw)``

    Examples:
        >>> box("12", int)
        ValueBox(raw='12', parsed=12)
        >>> box("abc")
        ValueBox(raw='abc', parsed='abc')
    """
    return ValueBox(raw=raw, parsed=(parser or pass_through)(raw))


def create_initial_state(form: FormDescriptor) -> FormState:
    """Box every field's initial text (or ``""``) through its parser."""
    return {key: box(field.initial_raw, field.parser) for key, field in form.items()}


def replace_box(state: Mapping[str, ValueBox], key: str, new_box: ValueBox) -> FormState:
    """Return a copy of ``state`` with only ``key`` replaced."""
    updated = dict(state)
    updated[key] = new_box
    return updated


def unbox_all(state: Mapping[str, ValueBox]) -> Dict[str, Any]:
    """Project form state down to parsed values, keeping every key.

    Examples:
        >>> unbox_all({"age": box("7", int), "name": box("Ann")})
        {'age': 7, 'name': 'Ann'}
    """
    return {key: value_box.parsed for key, value_box in state.items()}


__all__ = [
    "FormState",
    "box",
    "create_initial_state",
    "replace_box",
    "unbox_all",
]
