"""
Global pytest Configuration and Fixture Definitions

Shared fixtures for the validation engine tests: isolated settings that ignore
any .env file and TAG_VALIDATION_* variables of the host, a fresh registry of
the built-in rules, a fresh failure sink, and a factory for field contexts.
"""

import os
from typing import Any, Callable, Optional

import pytest

from tagvalidation.config.settings import EnvironmentManager, ValidationSettings
from tagvalidation.validation import (
    FailureSink,
    FieldContext,
    FieldDescriptor,
    FieldValue,
    RuleRegistry,
    build_default_registry,
)


def pytest_configure(config):
    """Register custom test markers."""
    config.addinivalue_line(
        "markers",
        "unit: Unit tests for individual components and functions"
    )
    config.addinivalue_line(
        "markers",
        "concurrency: Tests exercising the engine from several threads"
    )


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch):
    """Remove TAG_VALIDATION_* variables so host settings cannot leak in."""
    for key in list(os.environ):
        if key.startswith("TAG_VALIDATION_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def settings() -> ValidationSettings:
    """Default settings, without .env discovery."""
    return ValidationSettings(EnvironmentManager(env_file=""))


@pytest.fixture
def registry() -> RuleRegistry:
    """Fresh registry holding the built-in rules."""
    return build_default_registry()


@pytest.fixture
def sink() -> FailureSink:
    """Fresh failure sink for one validation run."""
    return FailureSink()


@pytest.fixture
def make_context(sink, settings) -> Callable[..., FieldContext]:
    """
    Factory building a FieldContext that shares the test's sink.

    Example:
        context = make_context("Age", FieldValue.signed(11), "max=10")
    """
    def _make(name: str, field_value: FieldValue, tag: Optional[str] = None,
              display_name: Optional[str] = None, **metadata: Any) -> FieldContext:
        if tag is not None:
            metadata[settings.TAG_NAME] = tag
        if display_name is not None:
            metadata[settings.NAME_KEY] = display_name
        descriptor = FieldDescriptor(name=name, metadata=metadata)
        return FieldContext(descriptor, field_value, sink, settings)

    return _make
