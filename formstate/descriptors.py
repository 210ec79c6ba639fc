"""Field and form descriptors.

A form is described once, up front, by a FormDescriptor: one descriptor per
field key. Each descriptor is one of two explicit variants:

- IndependentField: ``validator(value) -> bool``
- DependentField: ``validator(value, dependency_value) -> bool`` where
  ``dependency_value`` is the current parsed value of the ``depends_on`` field

Variants are discriminated by their ``kind`` tag, never by probing for
attributes. A FormDescriptor is checked when it is built and is read-only
afterwards.

Usage:
    >>> form = FormDescriptor({
    ...     "password": IndependentField(error="Too short", validator=lambda v: len(v) >= 8),
    ...     "confirm": DependentField(
    ...         error="Passwords differ",
    ...         depends_on="password",
    ...         validator=lambda v, password: v == password,
    ...     ),
    ... })
    >>> form["confirm"].kind
    <FieldKind.DEPENDENT: 'dependent'>
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, ClassVar, Dict, Iterator, List, Optional, Union

from formstate.errors import DescriptorIssue, InvalidFormDescriptorError
from formstate.types import (
    DependentValidator,
    DescriptorIssueCode,
    FieldKind,
    Formatter,
    IndependentValidator,
    Parser,
)


def pass_through(raw: str) -> str:
    """Identity parser used when a field declares none."""
    return raw


class _FieldBehaviour:
    """Behaviour shared by both descriptor variants."""

    parser: Optional[Parser]
    initial: Optional[str]

    def parse(self, raw: str) -> Any:
        """Apply the field parser (or the identity) to raw text."""
        return (self.parser or pass_through)(raw)

    @property
    def initial_raw(self) -> str:
        """Raw text the field starts with. An empty initial counts as none."""
        return self.initial or ""


@dataclass(frozen=True)
class IndependentField(_FieldBehaviour):
    """Descriptor for a field validated on its own parsed value.

    Attributes:
        error: Text shown when the field is invalid
        validator: Predicate over the parsed value
        initial: Optional - raw text the field starts with
        required: Whether an empty value is still validated (default True)
        parser: Optional - turns raw text into the domain value
        formatter: Optional - reformats UI input before it is stored
    """
    error: str
    validator: IndependentValidator
    initial: Optional[str] = None
    required: bool = True
    parser: Optional[Parser] = None
    formatter: Optional[Formatter] = None

    kind: ClassVar[FieldKind] = FieldKind.INDEPENDENT

    def check(self, value: Any, dependency_value: Any = None) -> bool:
        return bool(self.validator(value))


@dataclass(frozen=True)
class DependentField(_FieldBehaviour):
    """Descriptor for a field validated against another field's current value.

    Attributes:
        error: Text shown when the field is invalid
        depends_on: Key of the sibling field whose parsed value is passed along
        validator: Predicate over (parsed value, sibling parsed value)
        initial: Optional - raw text the field starts with
        required: Whether an empty value is still validated (default True)
        parser: Optional - turns raw text into the domain value
        formatter: Optional - reformats UI input before it is stored
    """
    error: str
    depends_on: str
    validator: DependentValidator
    initial: Optional[str] = None
    required: bool = True
    parser: Optional[Parser] = None
    formatter: Optional[Formatter] = None

    kind: ClassVar[FieldKind] = FieldKind.DEPENDENT

    def check(self, value: Any, dependency_value: Any = None) -> bool:
        return bool(self.validator(value, dependency_value))


Field = Union[IndependentField, DependentField]


def check_fields(fields: Mapping) -> List[DescriptorIssue]:
    """Collect every problem in a set of field descriptors.

    Args:
        fields: Mapping of field key to descriptor

    Returns:
        List of DescriptorIssue, empty when the descriptor set is sound
    """
    issues: List[DescriptorIssue] = []

    for key, descriptor in fields.items():
        for attr in ("validator", "parser", "formatter"):
            fn = getattr(descriptor, attr, None)
            if attr == "validator" or fn is not None:
                if not callable(fn):
                    issues.append(
                        DescriptorIssue(
                            field=key,
                            code=DescriptorIssueCode.NOT_CALLABLE,
                            message=f"Field '{key}' has a non-callable {attr}",
                        )
                    )

        if descriptor.kind is not FieldKind.DEPENDENT:
            continue

        dependency = descriptor.depends_on
        if dependency == key:
            issues.append(
                DescriptorIssue(
                    field=key,
                    code=DescriptorIssueCode.SELF_DEPENDENCY,
                    message=f"Field '{key}' depends on itself",
                    dependency=dependency,
                )
            )
        elif dependency not in fields:
            issues.append(
                DescriptorIssue(
                    field=key,
                    code=DescriptorIssueCode.UNKNOWN_DEPENDENCY,
                    message=f"Field '{key}' depends on unknown field '{dependency}'",
                    dependency=dependency,
                )
            )
        elif _in_cycle(fields, key):
            issues.append(
                DescriptorIssue(
                    field=key,
                    code=DescriptorIssueCode.DEPENDENCY_CYCLE,
                    message=f"Field '{key}' is part of a dependency cycle",
                    dependency=dependency,
                )
            )

    return issues


def _in_cycle(fields: Mapping, start: str) -> bool:
    # Each dependent field names exactly one dependency, so a cycle through
    # ``start`` is found by following the chain until it ends or repeats.
    seen = {start}
    current = fields[start]
    while current.kind is FieldKind.DEPENDENT:
        nxt = current.depends_on
        if nxt == start:
            return True
        if nxt not in fields or nxt in seen:
            return False
        seen.add(nxt)
        current = fields[nxt]
    return False


class FormDescriptor(Mapping):
    """Read-only mapping of field key to field descriptor.

    The descriptor set is checked on construction; every issue found is
    reported at once through InvalidFormDescriptorError.

    Examples:
        >>> FormDescriptor({
        ...     "confirm": DependentField(error="x", depends_on="mobile", validator=lambda v, d: v == d),
        ... })
        Traceback (most recent call last):
            ...
        formstate.errors.InvalidFormDescriptorError: Invalid form descriptor: Field 'confirm' depends on unknown field 'mobile'
    """

    def __init__(self, fields: Mapping):
        self._fields: Dict[str, Field] = dict(fields)
        issues = check_fields(self._fields)
        if issues:
            raise InvalidFormDescriptorError(issues)

    def __getitem__(self, key: str) -> Field:
        return self._fields[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self) -> str:
        return f"FormDescriptor({list(self._fields)!r})"

    def dependents_of(self, key: str) -> List[str]:
        """Keys of the fields whose validity depends on ``key``."""
        return [
            name
            for name, descriptor in self._fields.items()
            if descriptor.kind is FieldKind.DEPENDENT and descriptor.depends_on == key
        ]

    @classmethod
    def coerce(cls, fields: Union["FormDescriptor", Mapping]) -> "FormDescriptor":
        """Return ``fields`` unchanged if already checked, else build one."""
        if isinstance(fields, FormDescriptor):
            return fields
        if any(isinstance(entry, Mapping) for entry in fields.values()):
            return cls.from_dict(dict(fields))
        return cls(fields)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FormDescriptor":
        """Build a FormDescriptor from plain dicts.

        Entries carrying ``dependsOn`` (or ``depends_on``) become DependentField,
        all others IndependentField. An explicit ``kind`` entry takes precedence.
        Entries that already are descriptors are kept as they are.

        Args:
            data: Mapping of field key to a dict with ``error``, ``validator`` and
                optional ``initial``, ``required``, ``parser``, ``formatter``,
                ``dependsOn``/``depends_on`` and ``kind``

        Returns:
            New FormDescriptor instance

        Raises:
            InvalidFormDescriptorError: If an entry lacks ``error`` or
                ``validator``, names an unknown ``kind``, is dependent without a
                dependency, or fails the regular construction checks

        Examples:
            >>> form = FormDescriptor.from_dict({
            ...     "name": {"error": "Invalid name", "validator": lambda v: len(v) >= 3},
            ... })
            >>> form["name"].kind
            <FieldKind.INDEPENDENT: 'independent'>
        """
        fields: Dict[str, Field] = {}
        issues: List[DescriptorIssue] = []
        for key, entry in data.items():
            if not isinstance(entry, Mapping):
                fields[key] = entry
                continue

            missing = [attr for attr in ("error", "validator") if attr not in entry]
            for attr in missing:
                issues.append(
                    DescriptorIssue(
                        field=key,
                        code=DescriptorIssueCode.MISSING_ATTRIBUTE,
                        message=f"Field '{key}' is missing '{attr}'",
                    )
                )

            depends_on = entry.get("dependsOn", entry.get("depends_on"))
            kind = entry.get("kind")
            if kind is None:
                kind = FieldKind.INDEPENDENT if depends_on is None else FieldKind.DEPENDENT
            elif kind not in {member.value for member in FieldKind}:
                issues.append(
                    DescriptorIssue(
                        field=key,
                        code=DescriptorIssueCode.UNKNOWN_KIND,
                        message=f"Field '{key}' has unknown kind {kind!r}",
                    )
                )
                continue
            else:
                kind = FieldKind(kind)

            if kind is FieldKind.DEPENDENT and depends_on is None:
                issues.append(
                    DescriptorIssue(
                        field=key,
                        code=DescriptorIssueCode.MISSING_DEPENDENCY,
                        message=f"Dependent field '{key}' is missing 'dependsOn'",
                    )
                )
                continue
            if missing:
                continue

            common = {
                "error": entry["error"],
                "validator": entry["validator"],
                "initial": entry.get("initial"),
                "required": entry.get("required", True),
                "parser": entry.get("parser"),
                "formatter": entry.get("formatter"),
            }
            if kind is FieldKind.DEPENDENT:
                fields[key] = DependentField(depends_on=depends_on, **common)
            else:
                fields[key] = IndependentField(**common)

        if issues:
            raise InvalidFormDescriptorError(issues)
        return cls(fields)


__all__ = [
    "IndependentField",
    "DependentField",
    "Field",
    "FormDescriptor",
    "check_fields",
    "pass_through",
]
