"""
Structured logging for the appender's own diagnostics.

Local log output is JSON, one object per line, carrying the operation ids
of the current context so local output and forwarded telemetry can be
joined on the same ids.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from correlation.context import get_operation_id, get_parent_operation_id


class JSONFormatter(logging.Formatter):
    """
    Log formatter that outputs logs in JSON format.

    Each log entry contains:
    - timestamp: ISO 8601 formatted UTC timestamp
    - level: Log level name
    - message: The log message
    - logger: Name of the logger that produced the entry
    - operation_id / parent_operation_id: Correlation ids of the current context

    Additional fields can be included via the 'extra_data' attribute
    on the log record.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "operation_id": get_operation_id() or "",
        }

        parent_operation_id = get_parent_operation_id()
        if parent_operation_id:
            log_data["parent_operation_id"] = parent_operation_id

        if record.module:
            log_data["module"] = record.module
        if record.funcName and record.funcName != "<module>":
            log_data["function"] = record.funcName
        if record.lineno:
            log_data["line"] = record.lineno

        if getattr(record, "extra_data", None):
            log_data.update(record.extra_data)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if record.stack_info:
            log_data["stack_trace"] = record.stack_info

        return json.dumps(log_data, default=str)


def setup_logging(settings: Optional[Any] = None) -> logging.Logger:
    """
    Configure JSON logging on the root logger.

    Replaces existing root handlers with a stdout handler using
    JSONFormatter. The level comes from settings.log_level (default INFO).

    Args:
        settings: Settings object with a log_level attribute

    Returns:
        The appender's diagnostics logger
    """
    log_level_str = "INFO"
    if settings is not None and hasattr(settings, "log_level"):
        log_level_str = settings.log_level

    log_level = logging.getLevelName(log_level_str.upper())
    if not isinstance(log_level, int):
        log_level = logging.INFO

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setLevel(log_level)
    stdout_handler.setFormatter(JSONFormatter())
    root_logger.addHandler(stdout_handler)

    logger = logging.getLogger("telemetry")
    logger.info("Logging configured", extra={
        "extra_data": {"log_level": log_level_str}
    })
    return logger
