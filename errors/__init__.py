"""
Error handling module for the log appender.

This module provides structured error handling with:
- ErrorCode enum for standardized error codes
- AppenderException base class and its setup, argument and
  translation subclasses
"""

from errors.codes import ErrorCode
from errors.exceptions import (
    AppenderException,
    ConfigurationError,
    InvalidArgumentError,
    TranslationError,
)

__all__ = [
    "ErrorCode",
    "AppenderException",
    "ConfigurationError",
    "InvalidArgumentError",
    "TranslationError",
]
