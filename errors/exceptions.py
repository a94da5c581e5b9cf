"""
Exception classes for the log appender.

Every error raised by the appender derives from AppenderException so a
host application can catch them in one place. The translation error keeps
the original fault as its cause.
"""

from typing import Any, Optional

from errors.codes import ErrorCode


class AppenderException(Exception):
    """
    Base exception class for all appender errors.

    Carries:
    - error_code: A standardized error code from the ErrorCode enum
    - message: A human-readable error message
    - details: Optional additional context

    Example:
        raise AppenderException(
            error_code=ErrorCode.INVALID_ARGUMENT,
            message="record is required",
            details={"argument": "record"}
        )
    """

    default_error_code = ErrorCode.TRANSLATION_ERROR

    def __init__(
        self,
        message: str,
        error_code: Optional[ErrorCode] = None,
        details: Optional[dict[str, Any]] = None
    ):
        self.error_code = error_code or self.default_error_code
        self.message = message
        self.details = details
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert the exception to a dictionary for structured logging.

        Returns:
            Dictionary containing error_code, message, and details
        """
        result = {
            "error_code": self.error_code.value,
            "message": self.message,
        }
        if self.details is not None:
            result["details"] = self.details
        return result

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(error_code={self.error_code.value!r}, "
            f"message={self.message!r}, details={self.details!r})"
        )


class ConfigurationError(AppenderException):
    """
    Raised when the appender cannot be set up.

    Lists the missing and invalid settings so the startup failure
    message names everything that needs fixing.
    """

    default_error_code = ErrorCode.CONFIGURATION_ERROR

    def __init__(
        self,
        message: str,
        missing_fields: Optional[list[str]] = None,
        invalid_fields: Optional[dict[str, str]] = None
    ):
        self.missing_fields = missing_fields or []
        self.invalid_fields = invalid_fields or {}
        details = None
        if self.missing_fields or self.invalid_fields:
            details = {
                "missing_fields": self.missing_fields,
                "invalid_fields": self.invalid_fields,
            }
        super().__init__(message, details=details)
        # str(exc) carries the full listing
        self.args = (self.format_error_message(),)

    def format_error_message(self) -> str:
        """Format a descriptive error message listing all issues."""
        parts = [self.message]

        if self.missing_fields:
            parts.append(f"\nMissing required fields: {', '.join(self.missing_fields)}")

        if self.invalid_fields:
            invalid_parts = [f"  - {field}: {error}" for field, error in self.invalid_fields.items()]
            parts.append("\nInvalid field values:\n" + "\n".join(invalid_parts))

        return "".join(parts)


class InvalidArgumentError(AppenderException, ValueError):
    """Raised when append is called without a record."""

    default_error_code = ErrorCode.INVALID_ARGUMENT


class TranslationError(AppenderException):
    """
    Raised when a record cannot be turned into telemetry or handed off.

    The underlying fault is available as ``cause`` and is also chained
    as ``__cause__`` when raised with ``raise ... from``.
    """

    default_error_code = ErrorCode.TRANSLATION_ERROR

    def __init__(
        self,
        message: str,
        cause: Optional[BaseException] = None,
        error_code: Optional[ErrorCode] = None,
        details: Optional[dict[str, Any]] = None
    ):
        self.cause = cause
        if cause is not None:
            details = {**(details or {}), "cause": f"{type(cause).__name__}: {cause}"}
        super().__init__(message, error_code=error_code, details=details)


# Convenience factory functions for common error types

def missing_instrumentation_key(
    message: str = "[instrumentation_key] is required."
) -> ConfigurationError:
    """Create the error raised when no instrumentation key is configured."""
    return ConfigurationError(message, missing_fields=["instrumentation_key"])


def invalid_argument(name: str) -> InvalidArgumentError:
    """Create an invalid argument exception for a missing argument."""
    return InvalidArgumentError(
        f"Argument '{name}' must not be None",
        details={"argument": name}
    )


def translation_failed(
    cause: BaseException,
    message: str = (
        "An error occurred while attempting to append a log record to "
        "Application Insights. See the cause for details."
    )
) -> TranslationError:
    """Create a translation error wrapping the underlying fault."""
    return TranslationError(message, cause=cause)


def sender_unavailable(
    cause: BaseException,
    details: Optional[dict[str, Any]] = None
) -> TranslationError:
    """Create an error for a payload the ingestion endpoint did not accept."""
    return TranslationError(
        "Telemetry could not be delivered to the ingestion endpoint",
        cause=cause,
        error_code=ErrorCode.SENDER_UNAVAILABLE,
        details=details
    )
