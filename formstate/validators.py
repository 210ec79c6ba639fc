"""Reusable validator factories.

Each factory returns a plain predicate that can be used as the ``validator``
of a field descriptor. ``equals_dependency`` is meant for DependentField;
the rest take a single value and fit IndependentField.
"""

import re
from typing import Any, Dict, Union

from jsonschema import Draft7Validator

from formstate.types import DependentValidator, IndependentValidator


def matches(pattern: Union[str, "re.Pattern[str]"]) -> IndependentValidator:
    """Accept values in which ``pattern`` is found.

    Anchor the pattern (``^...$``) to require a whole-value match.

    Examples:
        >>> matches(r"^[0-9]{9}$")("123456789")
        True
        >>> matches(r"^[0-9]{9}$")("123 123 123")
        False
    """
    compiled = re.compile(pattern)

    def validator(value: Any) -> bool:
        return compiled.search(str(value)) is not None

    return validator


def min_length(length: int) -> IndependentValidator:
    """Accept values with at least ``length`` items."""

    def validator(value: Any) -> bool:
        return len(value) >= length

    return validator


def max_length(length: int) -> IndependentValidator:
    """Accept values with at most ``length`` items."""

    def validator(value: Any) -> bool:
        return len(value) <= length

    return validator


def equals_dependency() -> DependentValidator:
    """Accept values equal to the dependency's current parsed value."""

    def validator(value: Any, dependency_value: Any) -> bool:
        return value == dependency_value

    return validator


def all_of(*validators: IndependentValidator) -> IndependentValidator:
    """Accept values every given validator accepts, stopping at the first rejection."""

    def validator(value: Any) -> bool:
        return all(check(value) for check in validators)

    return validator


def conforms_to(schema: Dict[str, Any]) -> IndependentValidator:
    """Accept values that satisfy a JSON Schema fragment.

    Handy for parsed values: e.g. ``{"type": "integer", "minimum": 18}`` on a
    field parsed with ``int``.

    Raises:
        jsonschema.SchemaError: If ``schema`` itself is invalid

    Examples:
        >>> adult = conforms_to({"type": "integer", "minimum": 18})
        >>> adult(21), adult(12)
        (True, False)
    """
    Draft7Validator.check_schema(schema)
    schema_validator = Draft7Validator(schema)

    def validator(value: Any) -> bool:
        return schema_validator.is_valid(value)

    return validator


__all__ = [
    "matches",
    "min_length",
    "max_length",
    "equals_dependency",
    "all_of",
    "conforms_to",
]
