"""
Application Insights appender for Python logging.

This module provides:
- EventTranslator, which turns log records into telemetry payloads
- TelemetryAppender, the logging.Handler that forwards records
- create_appender(), a factory usable from dictConfig
- TRACE and SEVERE levels and the level to severity mapping
"""

from appender.levels import FATAL, SEVERE, TRACE, severity_of
from appender.translator import EventTranslator, is_reserved_property
from appender.handler import TelemetryAppender, create_appender

__all__ = [
    "TRACE",
    "SEVERE",
    "FATAL",
    "severity_of",
    "EventTranslator",
    "is_reserved_property",
    "TelemetryAppender",
    "create_appender",
]
