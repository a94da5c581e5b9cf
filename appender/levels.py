"""
Extra logging levels and the level to severity mapping.

TRACE sits below DEBUG; SEVERE sits between ERROR and CRITICAL and marks
the point where records become Critical telemetry. FATAL is CRITICAL.
"""

import logging
from typing import Optional

from telemetry.models import SeverityLevel

TRACE = 5
SEVERE = 45
FATAL = logging.CRITICAL

logging.addLevelName(TRACE, "TRACE")
logging.addLevelName(SEVERE, "SEVERE")


def severity_of(levelno: Optional[int]) -> SeverityLevel:
    """
    Map a logging level number to a severity bucket.

    Thresholds are checked in ascending order and the first one the level
    falls below wins:

        below INFO         -> VERBOSE
        INFO .. WARNING    -> INFORMATION
        WARNING .. ERROR   -> WARNING
        ERROR .. SEVERE    -> ERROR
        SEVERE and above   -> CRITICAL

    A record without a level maps to VERBOSE.
    """
    if levelno is None or levelno < logging.INFO:
        return SeverityLevel.VERBOSE
    elif levelno < logging.WARNING:
        return SeverityLevel.INFORMATION
    elif levelno < logging.ERROR:
        return SeverityLevel.WARNING
    elif levelno < SEVERE:
        return SeverityLevel.ERROR
    else:
        return SeverityLevel.CRITICAL
