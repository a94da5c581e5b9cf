"""Logging filter that stamps context operation ids onto records."""

import logging

from correlation.context import get_operation_id, get_parent_operation_id
from correlation.helpers import (
    OPERATION_ID_PROPERTY,
    PROPERTIES_ATTRIBUTE,
    attach_correlation,
)


class CorrelationFilter(logging.Filter):
    """
    Attach the current context's operation ids to each record.

    Records that already carry an operation id (for example ones logged
    with correlation.info()) are left untouched. The filter never drops
    a record, and never writes into a properties dict the caller passed
    through ``extra``.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        operation_id = get_operation_id()
        if operation_id is None:
            return True

        properties = getattr(record, PROPERTIES_ATTRIBUTE, None) or {}
        if OPERATION_ID_PROPERTY not in properties:
            attach_correlation(record, operation_id, get_parent_operation_id())
        return True
