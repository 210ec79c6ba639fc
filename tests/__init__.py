"""Test suite for formstate.

This package contains tests for:
- Descriptor checking (dependencies, callables, declarative dicts)
- Value boxes and key-level copy-on-write state
- Field and form validation, including dependent fields
- Debouncing, timer services and typing suppression
- Event emission, adapters and formatters
- Controller scenarios end to end
"""
