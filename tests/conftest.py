"""
Shared pytest fixtures and configuration for all tests.
"""
import logging
import os
from typing import Any, Callable, Dict, Optional
from unittest.mock import MagicMock

import pytest

# Hypothesis configuration for property-based testing
from hypothesis import settings, Verbosity, Phase

# Default profile: balanced for local development
settings.register_profile(
    "default",
    max_examples=100,
    verbosity=Verbosity.normal,
    deadline=None,
    print_blob=True,
)

# CI profile: more thorough testing for continuous integration
settings.register_profile(
    "ci",
    max_examples=200,
    verbosity=Verbosity.verbose,
    deadline=None,
    print_blob=True,
    derandomize=True,
)

# Debug profile: minimal examples for quick debugging
settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    deadline=None,
    print_blob=True,
    phases=[Phase.explicit, Phase.reuse, Phase.generate],  # Skip shrinking for speed
)

# Fast profile: quick smoke tests
settings.register_profile(
    "fast",
    max_examples=20,
    verbosity=Verbosity.normal,
    deadline=None,
)

settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "default"))


@pytest.fixture
def mock_sender() -> MagicMock:
    """Create a configured mock telemetry sender."""
    mock = MagicMock()
    mock.is_configured = True
    mock.send = MagicMock(return_value=None)
    return mock


@pytest.fixture
def make_record() -> Callable[..., logging.LogRecord]:
    """Factory for log records with optional properties and exception."""

    def _make(
        msg: str = "test message",
        level: Optional[int] = logging.INFO,
        name: str = "tests.sample",
        properties: Optional[Dict[str, Any]] = None,
        exception: Optional[BaseException] = None,
        args: tuple = (),
        **attributes: Any
    ) -> logging.LogRecord:
        exc_info = None
        if exception is not None:
            exc_info = (type(exception), exception, exception.__traceback__)

        record = logging.LogRecord(
            name=name,
            level=level if level is not None else logging.NOTSET,
            pathname="/srv/app/orders.py",
            lineno=42,
            msg=msg,
            args=args,
            exc_info=exc_info,
            func="place_order",
        )
        if level is None:
            record.levelno = None
        if properties is not None:
            record.properties = properties
        for key, value in attributes.items():
            setattr(record, key, value)
        return record

    return _make


@pytest.fixture
def raised_exception() -> ValueError:
    """An exception with a real traceback."""
    try:
        raise ValueError("order total must be positive")
    except ValueError as e:
        return e
