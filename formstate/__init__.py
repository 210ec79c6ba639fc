"""formstate: framework-agnostic form state and validation engine.

formstate provides:
- Per-field raw/parsed value boxes with pluggable parsers
- Independent and dependent (cross-field) validation
- Typing suppression: errors stay hidden until the user stops typing
- Optional input formatters applied before values are stored
- Adapters that reshape each field for a concrete UI binding

Basic usage:
    >>> from formstate import IndependentField, create_form
    >>> from formstate.debounce import ManualTimerService
    >>> form = create_form(
    ...     {"name": IndependentField(error="Invalid name", validator=lambda v: len(v) >= 3)},
    ...     timers=ManualTimerService(),
    ... )
    >>> form.is_valid
    False
"""

__version__ = "0.1.0"

# Version info
VERSION = (0, 1, 0)

# Core exports
from formstate.adapters import ChangeEventAdapter, PassThroughAdapter
from formstate.controller import FormController, create_form
from formstate.descriptors import DependentField, FormDescriptor, IndependentField
from formstate.settings import FormSettings
from formstate.types import FieldPresentation, TypingScope

# Package metadata
__all__ = [
    "__version__",
    "VERSION",
    "FormController",
    "create_form",
    "FormDescriptor",
    "IndependentField",
    "DependentField",
    "FieldPresentation",
    "TypingScope",
    "FormSettings",
    "PassThroughAdapter",
    "ChangeEventAdapter",
]
