"""Field and form validation.

Validity is recomputed from the current form state on every query and never
cached. Each field evaluates to one of three outcomes:

- True: the validator accepted the parsed value
- False: the validator rejected it
- None: the field is not required and its parsed value is empty, so it was
  not evaluated at all

A form is valid when no field evaluates to False. Dependent fields receive the
dependency's parsed value as it is at query time.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from formstate.descriptors import FormDescriptor
from formstate.errors import UnknownFieldError
from formstate.types import FieldKind, ValueBox


def validate_field(
    form: FormDescriptor, state: Mapping[str, ValueBox], key: str
) -> Optional[bool]:
    """Validate a single field against the current state.

    Args:
        form: The form descriptor
        state: Current boxes, one per field
        key: Field to validate

    Returns:
        True or False from the validator, or None when the field is not
        required and its parsed value is falsy

    Raises:
        UnknownFieldError: If ``key`` is not part of the form
    """
    if key not in form:
        raise UnknownFieldError(key, list(form))

    descriptor = form[key]
    parsed = state[key].parsed

    # Only optional fields are exempt when empty; a required empty field
    # still goes through its validator.
    if not descriptor.required and not parsed:
        return None

    if descriptor.kind is FieldKind.DEPENDENT:
        return descriptor.check(parsed, state[descriptor.depends_on].parsed)
    return descriptor.check(parsed)


def validate_form(form: FormDescriptor, state: Mapping[str, ValueBox]) -> bool:
    """Return True iff no field evaluates to False.

    Examples:
        >>> from formstate.boxes import create_initial_state
        >>> from formstate.descriptors import IndependentField
        >>> form = FormDescriptor({
        ...     "nickname": IndependentField(error="x", validator=lambda v: False, required=False),
        ... })
        >>> validate_form(form, create_initial_state(form))
        True
    """
    return all(validate_field(form, state, key) is not False for key in form)


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating every field of a form.

    Attributes:
        is_valid: Whether no field evaluated to False
        fields: Per-field outcome (True, False or None)
        invalid_fields: Keys whose validator rejected the value
        unevaluated_fields: Keys skipped because they are optional and empty
    """
    is_valid: bool
    fields: Dict[str, Optional[bool]]
    invalid_fields: List[str] = field(default_factory=list)
    unevaluated_fields: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        return {
            "isValid": self.is_valid,
            "fields": dict(self.fields),
            "invalidFields": list(self.invalid_fields),
            "unevaluatedFields": list(self.unevaluated_fields),
        }


class ValidationEngine:
    """Validates form state against one form descriptor.

    Attributes:
        form: The descriptor every state is checked against

    Examples:
        >>> from formstate.boxes import box
        >>> from formstate.descriptors import IndependentField
        >>> engine = ValidationEngine(FormDescriptor({
        ...     "name": IndependentField(error="Invalid name", validator=lambda v: len(v) >= 3),
        ... }))
        >>> engine.validate({"name": box("Al")}).invalid_fields
        ['name']
    """

    def __init__(self, form: FormDescriptor) -> None:
        self.form = form

    def validate_field(self, state: Mapping[str, ValueBox], key: str) -> Optional[bool]:
        return validate_field(self.form, state, key)

    def is_valid(self, state: Mapping[str, ValueBox]) -> bool:
        return validate_form(self.form, state)

    def validate(self, state: Mapping[str, ValueBox]) -> ValidationResult:
        """Validate every field and collect the per-field outcomes."""
        outcomes: Dict[str, Optional[bool]] = {}
        invalid: List[str] = []
        unevaluated: List[str] = []

        for key in self.form:
            outcome = validate_field(self.form, state, key)
            outcomes[key] = outcome
            if outcome is None:
                unevaluated.append(key)
            elif outcome is False:
                invalid.append(key)

        return ValidationResult(
            is_valid=not invalid,
            fields=outcomes,
            invalid_fields=invalid,
            unevaluated_fields=unevaluated,
        )


__all__ = [
    "validate_field",
    "validate_form",
    "ValidationEngine",
    "ValidationResult",
]
