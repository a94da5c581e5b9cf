"""
Middleware components for web applications that use the appender.

This module contains FastAPI middleware that assigns operation ids to
incoming requests.
"""

from middleware.operation_id import (
    OPERATION_ID_HEADER,
    ROOT_REQUEST_ID_HEADER,
    OperationIdMiddleware,
)

__all__ = [
    "OperationIdMiddleware",
    "OPERATION_ID_HEADER",
    "ROOT_REQUEST_ID_HEADER",
]
