"""Unit tests for FormSettings."""

import pydantic
import pytest

from formstate.settings import DEFAULT_TYPING_DELAY_MS, FormSettings
from formstate.types import TypingScope


class TestFormSettings:
    """Test defaults, environment variables and overrides."""

    def test_defaults(self):
        """Should default to a 1500ms per-field typing window."""
        settings = FormSettings()
        assert settings.typing_delay_ms == DEFAULT_TYPING_DELAY_MS == 1500
        assert settings.typing_scope is TypingScope.FIELD

    def test_environment_variables(self, monkeypatch):
        """Should read FORMSTATE_* variables."""
        monkeypatch.setenv("FORMSTATE_TYPING_DELAY_MS", "300")
        monkeypatch.setenv("FORMSTATE_TYPING_SCOPE", "form")

        settings = FormSettings()
        assert settings.typing_delay_ms == 300
        assert settings.typing_scope is TypingScope.FORM

    def test_kwargs_override_environment(self, monkeypatch):
        """Should prefer explicit arguments over the environment."""
        monkeypatch.setenv("FORMSTATE_TYPING_DELAY_MS", "300")
        assert FormSettings(typing_delay_ms=50).typing_delay_ms == 50

    def test_negative_delay_is_rejected(self):
        """Should refuse a negative typing window."""
        with pytest.raises(pydantic.ValidationError):
            FormSettings(typing_delay_ms=-1)

    def test_unknown_scope_is_rejected(self):
        """Should refuse scopes other than field and form."""
        with pytest.raises(pydantic.ValidationError):
            FormSettings(typing_scope="page")

    def test_settings_are_frozen(self):
        """Should not allow mutation after construction."""
        settings = FormSettings()
        with pytest.raises(pydantic.ValidationError):
            settings.typing_delay_ms = 10
