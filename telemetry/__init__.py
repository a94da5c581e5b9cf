"""
Telemetry module: payload models, senders and local structured logging.

This module provides:
- TelemetryPayload, the backend-ready form of one log record
- TelemetrySender protocol and TelemetryClient, backed by the Azure
  Monitor OpenTelemetry log exporter
- JSONFormatter and setup_logging for the appender's own diagnostics
"""

from telemetry.models import SeverityLevel, TelemetryKind, TelemetryPayload
from telemetry.sender import TelemetryClient, TelemetrySender, to_log_data
from telemetry.log_config import JSONFormatter, setup_logging

__all__ = [
    "SeverityLevel",
    "TelemetryKind",
    "TelemetryPayload",
    "TelemetryClient",
    "TelemetrySender",
    "to_log_data",
    "JSONFormatter",
    "setup_logging",
]
