"""
Operation id middleware for request correlation.

Every request gets a fresh operation id. When the caller's Application
Insights request tracking sent a root request id, it becomes the parent
operation id, so the request's log telemetry hangs under the caller's
request in the trace tree.
"""

import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from correlation.context import reset_operation, set_operation

ROOT_REQUEST_ID_HEADER = "ApplicationInsights-RequestTrackingTelemetryModule-RootRequest-Id"

OPERATION_ID_HEADER = "X-Operation-ID"


class OperationIdMiddleware(BaseHTTPMiddleware):
    """
    Middleware that assigns operation ids to each request.

    The ids are:
    1. Generated (operation id) or read from the root request header (parent id)
    2. Stored in request.state for route handlers
    3. Stored in context variables for CorrelationFilter and JSONFormatter
    4. Echoed on the response as X-Operation-ID
    """

    def __init__(self, app: ASGIApp):
        super().__init__(app)

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Response]
    ) -> Response:
        operation_id = str(uuid.uuid4())
        parent_operation_id = request.headers.get(ROOT_REQUEST_ID_HEADER) or None

        request.state.operation_id = operation_id
        request.state.parent_operation_id = parent_operation_id

        tokens = set_operation(operation_id, parent_operation_id)

        try:
            response = await call_next(request)
            response.headers[OPERATION_ID_HEADER] = operation_id
            return response
        finally:
            # Reset so ids don't leak between requests
            reset_operation(tokens)
