"""Unit tests for adapters and input formatting."""

from types import SimpleNamespace

import pytest

from formstate.adapters import (
    ChangeEventAdapter,
    FunctionAdapter,
    PassThroughAdapter,
    as_adapter,
    extract_text,
)
from formstate.formatting import apply_formatter, compose
from formstate.types import FieldPresentation


def make_presentation(sink=None):
    sink = sink if sink is not None else []
    return FieldPresentation(
        value="abc",
        valid=False,
        error="Invalid",
        on_change_text=sink.append,
        on_cleared=lambda: sink.append(""),
    )


class TestPassThroughAdapter:
    """Test the default adapter."""

    def test_returns_presentation_unchanged(self):
        """Should hand back the very same presentation."""
        presentation = make_presentation()
        assert PassThroughAdapter().present(presentation) is presentation

    def test_presentation_to_dict_uses_binding_keys(self):
        """Should expose camelCase callback keys."""
        data = make_presentation().to_dict()
        assert set(data) == {"value", "valid", "error", "onChangeText", "onCleared"}


class TestChangeEventAdapter:
    """Test the change-event adapter."""

    def test_drops_internal_props(self):
        """Should keep value and error and replace the callbacks with on_change."""
        props = ChangeEventAdapter().present(make_presentation())
        assert props["value"] == "abc"
        assert props["error"] == "Invalid"
        assert "valid" not in props
        assert "on_change_text" not in props
        assert "on_cleared" not in props

    def test_on_change_forwards_event_text(self):
        """Should call on_change_text with the event target's value."""
        sink = []
        props = ChangeEventAdapter().present(make_presentation(sink))

        props["on_change"]({"target": {"value": "from dict"}})
        props["on_change"](SimpleNamespace(target=SimpleNamespace(value="from object")))
        props["on_change"]("plain")

        assert sink == ["from dict", "from object", "plain"]

    def test_extract_text_shapes(self):
        """Should read text from the supported event shapes."""
        assert extract_text({"value": "a"}) == "a"
        assert extract_text({"target": SimpleNamespace(value="b")}) == "b"
        assert extract_text(SimpleNamespace(value="c")) == "c"


class TestAsAdapter:
    """Test adapter normalization."""

    def test_none_gives_pass_through(self):
        """Should default to the pass-through adapter."""
        assert isinstance(as_adapter(None), PassThroughAdapter)

    def test_adapter_instances_are_kept(self):
        """Should keep objects that already implement present."""
        adapter = ChangeEventAdapter()
        assert as_adapter(adapter) is adapter

    def test_plain_callables_are_wrapped(self):
        """Should wrap a function into a FunctionAdapter."""
        adapter = as_adapter(lambda p: {"text": p.value})
        assert isinstance(adapter, FunctionAdapter)
        assert adapter.present(make_presentation()) == {"text": "abc"}

    def test_other_values_are_rejected(self):
        """Should raise TypeError for values that cannot adapt."""
        with pytest.raises(TypeError):
            as_adapter(42)


class TestFormatting:
    """Test formatter composition over the change handler."""

    def test_compose_runs_right_to_left(self):
        """Should apply the last function first."""
        assert compose(lambda s: s + "!", str.upper)("hi") == "HI!"

    def test_compose_without_functions_is_identity(self):
        """Should return the input when nothing is composed."""
        assert compose()("same") == "same"

    def test_apply_formatter_formats_before_change(self):
        """Should hand the formatted text to on_change_text."""
        sink = []
        formatted = apply_formatter(make_presentation(sink), str.upper)
        formatted.on_change_text("abc")
        assert sink == ["ABC"]

    def test_apply_formatter_keeps_other_props(self):
        """Should not touch value, validity, error or on_cleared."""
        presentation = make_presentation()
        formatted = apply_formatter(presentation, str.upper)
        assert formatted.value == presentation.value
        assert formatted.valid == presentation.valid
        assert formatted.error == presentation.error
        assert formatted.on_cleared is presentation.on_cleared

    def test_no_formatter_returns_same_presentation(self):
        """Should leave fields without a formatter untouched."""
        presentation = make_presentation()
        assert apply_formatter(presentation, None) is presentation
