"""Unit tests for value boxes and form state."""

from formstate.boxes import box, create_initial_state, replace_box, unbox_all
from formstate.descriptors import FormDescriptor, IndependentField
from formstate.types import ValueBox


def always(value):
    return True


class TestBox:
    """Test creating boxes."""

    def test_box_without_parser_passes_raw_through(self):
        """Should store the raw text as the parsed value."""
        assert box("abc") == ValueBox(raw="abc", parsed="abc")

    def test_box_with_parser(self):
        """Should parse the raw text."""
        value_box = box("42", int)
        assert value_box.raw == "42"
        assert value_box.parsed == 42

    def test_parser_sees_empty_string(self):
        """Should hand empty input to the parser as well."""
        value_box = box("", lambda raw: raw.strip() or None)
        assert value_box.parsed is None


class TestFormState:
    """Test initial state, key-level replacement and unboxing."""

    def test_initial_state_uses_initial_or_empty(self):
        """Should box each field's initial text, or an empty string."""
        form = FormDescriptor({
            "name": IndependentField(error="x", validator=always, initial="Ann"),
            "age": IndependentField(error="x", validator=always, parser=len),
            "city": IndependentField(error="x", validator=always),
        })
        state = create_initial_state(form)

        assert state["name"] == ValueBox(raw="Ann", parsed="Ann")
        assert state["age"] == ValueBox(raw="", parsed=0)
        assert state["city"] == ValueBox(raw="", parsed="")

    def test_replace_box_copies_on_write(self):
        """Should return a new mapping and keep other boxes by identity."""
        state = {"a": box("1"), "b": box("2")}
        updated = replace_box(state, "a", box("3"))

        assert updated is not state
        assert state["a"].raw == "1"
        assert updated["a"].raw == "3"
        assert updated["b"] is state["b"]

    def test_unbox_all_keeps_every_key(self):
        """Should project every box to its parsed value."""
        state = {"age": box("7", int), "name": box(""), "city": box("Oslo")}
        assert unbox_all(state) == {"age": 7, "name": "", "city": "Oslo"}

    def test_box_to_dict(self):
        """Should serialize raw and parsed values."""
        assert box("5", int).to_dict() == {"raw": "5", "parsed": 5}
