"""Shared fixtures for the formstate test suite."""

import re

import pytest

from formstate.debounce import ManualTimerService
from formstate.descriptors import DependentField, IndependentField


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep FORMSTATE_* variables from the host out of the tests."""
    monkeypatch.delenv("FORMSTATE_TYPING_DELAY_MS", raising=False)
    monkeypatch.delenv("FORMSTATE_TYPING_SCOPE", raising=False)


@pytest.fixture
def timers():
    return ManualTimerService()


@pytest.fixture
def contact_fields():
    """name + mobile, both required."""
    return {
        "name": IndependentField(
            error="Invalid name",
            validator=lambda name: len(name) >= 3,
        ),
        "mobile": IndependentField(
            error="Invalid mobile",
            validator=lambda mobile: re.search(r"^[0-9]{9}$", mobile) is not None,
        ),
    }


@pytest.fixture
def mobile_fields():
    """mobile + confirm_mobile, the latter depending on the former."""
    return {
        "mobile": IndependentField(
            error="Invalid mobile",
            validator=lambda mobile: re.search(r"^[0-9]{9}$", mobile) is not None,
        ),
        "confirm_mobile": DependentField(
            error="Numbers do not match",
            depends_on="mobile",
            validator=lambda value, mobile: value == mobile,
        ),
    }
