"""
Sample web application wired to the Application Insights appender.

Each page request logs one line with correlation ids: a fresh operation
id per request and, when present, the caller's root request id as the
parent.

Run with:
    INSTRUMENTATION_KEY=... uvicorn main:app
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request

import correlation
from appender.handler import TelemetryAppender, create_appender
from config.settings import get_settings
from middleware.operation_id import OperationIdMiddleware
from telemetry.log_config import setup_logging

logger = logging.getLogger("webapp")


def create_app(appender: Optional[TelemetryAppender] = None) -> FastAPI:
    """
    Create the sample application.

    Args:
        appender: Appender to register; built from settings at startup when None

    Startup fails with ConfigurationError when no instrumentation key is
    configured.

    Sending telemetry blocks until the export finishes, so routes that log
    through the appender are plain functions and run in the threadpool,
    never on the event loop.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        active_appender = appender
        if active_appender is None:
            settings = get_settings()
            setup_logging(settings)
            active_appender = create_appender(settings=settings)

        logger.addHandler(active_appender)
        logger.setLevel(logging.DEBUG)
        app.state.appender = active_appender

        yield

        logger.removeHandler(active_appender)
        active_appender.close()

    app = FastAPI(title="Application Insights Appender Sample", version="1.0.0", lifespan=lifespan)
    app.add_middleware(OperationIdMiddleware)

    @app.get("/")
    def index(request: Request):
        correlation.info(logger, "GET Index", request.state.operation_id,
                         request.state.parent_operation_id)
        return {"page": "index"}

    @app.get("/about")
    def about(request: Request):
        correlation.info(logger, "GET About", request.state.operation_id,
                         request.state.parent_operation_id)
        return {"page": "about", "message": "Your application description page."}

    @app.get("/contact")
    def contact(request: Request):
        correlation.info(logger, "GET Contact", request.state.operation_id,
                         request.state.parent_operation_id)
        return {"page": "contact", "message": "Your contact page."}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
