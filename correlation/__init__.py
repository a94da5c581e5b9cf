"""
Correlation helpers for distributed tracing.

This module provides:
- attach_correlation() and friends for the reserved operation id properties
- debug/info/warn/error/fatal convenience functions that log with ids attached
- Context variables holding the current operation ids
- CorrelationFilter, which stamps the context ids onto records
"""

from correlation.context import (
    get_operation_id,
    get_parent_operation_id,
    reset_operation,
    set_operation,
)
from correlation.filters import CorrelationFilter
from correlation.helpers import (
    OPERATION_ID_PROPERTY,
    OPERATION_PARENT_ID_PROPERTY,
    PROPERTIES_ATTRIBUTE,
    attach_correlation,
    correlation_properties,
    debug,
    error,
    fatal,
    get_record_operation_id,
    get_record_parent_operation_id,
    info,
    warn,
)

__all__ = [
    "OPERATION_ID_PROPERTY",
    "OPERATION_PARENT_ID_PROPERTY",
    "PROPERTIES_ATTRIBUTE",
    "attach_correlation",
    "correlation_properties",
    "get_record_operation_id",
    "get_record_parent_operation_id",
    "debug",
    "info",
    "warn",
    "error",
    "fatal",
    "set_operation",
    "reset_operation",
    "get_operation_id",
    "get_parent_operation_id",
    "CorrelationFilter",
]
