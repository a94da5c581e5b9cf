"""
Telemetry payload models.

A TelemetryPayload is the enriched, backend-ready form of one log record.
It is built by the event translator, handed to a sender once, and not
retained afterwards.
"""

from datetime import datetime, timezone
from enum import Enum, IntEnum
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class SeverityLevel(IntEnum):
    """Application Insights severity buckets, ordered by seriousness."""
    VERBOSE = 0
    INFORMATION = 1
    WARNING = 2
    ERROR = 3
    CRITICAL = 4


class TelemetryKind(str, Enum):
    """Kind of telemetry item produced for a record."""
    TRACE = "Trace"
    EXCEPTION = "Exception"


class TelemetryPayload(BaseModel):
    """
    One trace or exception telemetry item.

    Attributes:
        kind: Trace for plain records, Exception when the record carried one
        severity: Severity bucket the record's level maps into
        message: Rendered log message
        exception: The exception object (Exception kind only)
        properties: Custom dimensions attached to the item
        operation_id: Correlation id of the logical operation
        parent_operation_id: Correlation id of the containing operation
        timestamp: When the payload was built (UTC)
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    kind: TelemetryKind
    severity: SeverityLevel = SeverityLevel.VERBOSE
    message: str = ""
    exception: Optional[BaseException] = None
    properties: Dict[str, str] = Field(default_factory=dict)
    operation_id: Optional[str] = None
    parent_operation_id: Optional[str] = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

