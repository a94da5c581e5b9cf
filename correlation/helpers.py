"""
Correlation properties on log records.

Operation ids travel to the appender as two reserved entries in the
record's ``properties`` mapping. The appender consumes them for the
telemetry operation context and never forwards them as custom properties.

Records get a ``properties`` mapping either through
``extra={"properties": {...}}`` or from attach_correlation().
"""

import logging
from typing import Any, Dict, Mapping, Optional

PROPERTIES_ATTRIBUTE = "properties"

OPERATION_ID_PROPERTY = "ai:operation_id"
OPERATION_PARENT_ID_PROPERTY = "ai:operation_parentId"

FATAL = logging.CRITICAL


def correlation_properties(
    operation_id: str,
    parent_operation_id: Optional[str] = None
) -> Dict[str, Optional[str]]:
    """
    Build the reserved correlation entries.

    Example:
        logger.info("GET Index", extra={
            "properties": correlation_properties(operation_id, root_id)
        })
    """
    return {
        OPERATION_ID_PROPERTY: operation_id,
        OPERATION_PARENT_ID_PROPERTY: parent_operation_id,
    }


def attach_correlation(
    record: logging.LogRecord,
    operation_id: str,
    parent_operation_id: Optional[str] = None
) -> logging.LogRecord:
    """
    Set the operation ids on a record and return it.

    The record gets a new properties mapping, so a mapping passed in
    through ``extra`` is left as it was. Both reserved keys are always
    written; an omitted parent id is stored as None and leaves the
    telemetry parent id unset. Ids are not validated.

    Args:
        record: The record to annotate
        operation_id: Id of the logical operation (usually a fresh uuid4)
        parent_operation_id: Id of the containing operation, if any

    Returns:
        The same record, for chaining
    """
    # May be the caller's own dict from extra, never update it in place
    properties = getattr(record, PROPERTIES_ATTRIBUTE, None) or {}
    setattr(record, PROPERTIES_ATTRIBUTE, {
        **properties,
        **correlation_properties(operation_id, parent_operation_id),
    })
    return record


def get_record_operation_id(record: logging.LogRecord) -> Optional[str]:
    properties = getattr(record, PROPERTIES_ATTRIBUTE, None) or {}
    return properties.get(OPERATION_ID_PROPERTY)


def get_record_parent_operation_id(record: logging.LogRecord) -> Optional[str]:
    properties = getattr(record, PROPERTIES_ATTRIBUTE, None) or {}
    return properties.get(OPERATION_PARENT_ID_PROPERTY)


def _log(
    logger: logging.Logger,
    level: int,
    message: str,
    operation_id: str,
    parent_operation_id: Optional[str],
    exception: Optional[BaseException],
    properties: Optional[Mapping[str, Any]]
) -> None:
    if not logger.isEnabledFor(level):
        return

    record_properties = dict(properties or {})
    record_properties.update(correlation_properties(operation_id, parent_operation_id))

    exc_info = None
    if exception is not None:
        exc_info = (type(exception), exception, exception.__traceback__)

    # stacklevel=3 reports the caller of debug()/info()/... as the location
    logger.log(
        level,
        message,
        exc_info=exc_info,
        extra={PROPERTIES_ATTRIBUTE: record_properties},
        stacklevel=3,
    )


def debug(logger: logging.Logger, message: str, operation_id: str,
          parent_operation_id: Optional[str] = None,
          exception: Optional[BaseException] = None,
          properties: Optional[Mapping[str, Any]] = None) -> None:
    """Log at DEBUG with correlation ids attached."""
    _log(logger, logging.DEBUG, message, operation_id, parent_operation_id, exception, properties)


def info(logger: logging.Logger, message: str, operation_id: str,
         parent_operation_id: Optional[str] = None,
         exception: Optional[BaseException] = None,
         properties: Optional[Mapping[str, Any]] = None) -> None:
    """Log at INFO with correlation ids attached."""
    _log(logger, logging.INFO, message, operation_id, parent_operation_id, exception, properties)


def warn(logger: logging.Logger, message: str, operation_id: str,
         parent_operation_id: Optional[str] = None,
         exception: Optional[BaseException] = None,
         properties: Optional[Mapping[str, Any]] = None) -> None:
    """Log at WARNING with correlation ids attached."""
    _log(logger, logging.WARNING, message, operation_id, parent_operation_id, exception, properties)


def error(logger: logging.Logger, message: str, operation_id: str,
          parent_operation_id: Optional[str] = None,
          exception: Optional[BaseException] = None,
          properties: Optional[Mapping[str, Any]] = None) -> None:
    """Log at ERROR with correlation ids attached."""
    _log(logger, logging.ERROR, message, operation_id, parent_operation_id, exception, properties)


def fatal(logger: logging.Logger, message: str, operation_id: str,
          parent_operation_id: Optional[str] = None,
          exception: Optional[BaseException] = None,
          properties: Optional[Mapping[str, Any]] = None) -> None:
    """Log at CRITICAL (FATAL) with correlation ids attached."""
    _log(logger, FATAL, message, operation_id, parent_operation_id, exception, properties)
