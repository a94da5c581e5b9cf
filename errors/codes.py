"""
Error code catalog for the log appender.

This module defines the error codes raised while configuring the
appender, dispatching records to it, and handing telemetry to the sender.
"""

from enum import Enum


class ErrorCode(str, Enum):
    """
    Enumeration of all error codes used by the appender.

    - Setup errors: raised once, before the appender becomes active
    - Caller errors: raised for bad input to append
    - Translation errors: raised for faults while building or sending telemetry
    """

    # Setup errors
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    """Instrumentation key missing or settings invalid"""

    # Caller errors
    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    """A required argument (e.g. the log record) was None"""

    # Translation errors
    TRANSLATION_ERROR = "TRANSLATION_ERROR"
    """Building the telemetry payload or handing it off failed"""

    SENDER_UNAVAILABLE = "SENDER_UNAVAILABLE"
    """The ingestion endpoint rejected the payload or could not be reached"""
