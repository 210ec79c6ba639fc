"""Exceptions and structured issue records for formstate.

Field invalidity is never an exception: it is reported as ``valid=False`` and,
when visible, as error text on the field presentation. The exceptions here
cover programmer errors only:

- InvalidFormDescriptorError: the descriptor set is malformed (raised once,
  at construction, listing every DescriptorIssue found)
- UnknownFieldError: a field key that is not part of the form was used
- FormDisposedError: the form was used after it was closed
- NoTimerServiceError: no timer service was given and no asyncio event loop
  is running to provide one
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from formstate.types import DescriptorIssueCode


@dataclass(frozen=True)
class DescriptorIssue:
    """A single problem found while checking a form descriptor.

    Attributes:
        field: Key of the offending field
        code: Specific issue code
        message: Human-readable description
        dependency: Optional - the ``depends_on`` key involved, if any

    Examples:
        >>> issue = DescriptorIssue(
        ...     field="confirm",
        ...     code=DescriptorIssueCode.UNKNOWN_DEPENDENCY,
        ...     message="Field 'confirm' depends on unknown field 'mobil'",
        ...     dependency="mobil",
        ... )
        >>> issue.to_dict()["code"]
        'unknown_dependency'
    """
    field: str
    code: DescriptorIssueCode
    message: str
    dependency: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        result: Dict[str, Any] = {
            "field": self.field,
            "code": self.code.value if isinstance(self.code, DescriptorIssueCode) else self.code,
            "message": self.message,
        }
        if self.dependency is not None:
            result["dependency"] = self.dependency
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DescriptorIssue":
        """Create DescriptorIssue from dict."""
        code = data["code"]
        if isinstance(code, str):
            code = DescriptorIssueCode(code)
        return cls(
            field=data["field"],
            code=code,
            message=data["message"],
            dependency=data.get("dependency"),
        )


class InvalidFormDescriptorError(ValueError):
    """Raised when a form descriptor fails its construction-time checks.

    Attributes:
        issues: Every issue found, in field order
    """

    def __init__(self, issues: Sequence[DescriptorIssue]):
        self.issues: List[DescriptorIssue] = list(issues)
        summary = "; ".join(issue.message for issue in self.issues)
        super().__init__(f"Invalid form descriptor: {summary}")

    def codes(self) -> List[DescriptorIssueCode]:
        """Return the issue codes, in order."""
        return [issue.code for issue in self.issues]


class UnknownFieldError(LookupError):
    """Raised when a field key is not part of the form."""

    def __init__(self, field: str, known: Sequence[str]):
        self.field = field
        self.known = list(known)
        super().__init__(
            f"Unknown field '{field}'. Known fields are: {', '.join(self.known) or '(none)'}"
        )


class FormDisposedError(RuntimeError):
    """Raised when a form is registered or edited after it was closed."""

    def __init__(self, form_id: str):
        self.form_id = form_id
        super().__init__(f"Form '{form_id}' has been closed")


class NoTimerServiceError(RuntimeError):
    """Raised when a form needs the asyncio timer service outside a running loop."""

    def __init__(self) -> None:
        super().__init__(
            "No timer service was given and no asyncio event loop is running. "
            "Pass timers=ManualTimerService() or build the form inside a running loop."
        )


__all__ = [
    "DescriptorIssue",
    "InvalidFormDescriptorError",
    "UnknownFieldError",
    "FormDisposedError",
    "NoTimerServiceError",
]
