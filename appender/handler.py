"""
Logging handler that forwards records to Application Insights.

TelemetryAppender is the seam between Python's logging framework and the
event translator. Register it like any other handler, directly or
through logging.config.dictConfig:

    "handlers": {
        "appinsights": {
            "()": "appender.handler.create_appender",
            "instrumentation_key": "00000000-0000-0000-0000-000000000000",
            "level": "INFO",
        }
    }
"""

import logging
from typing import Optional, Union

from appender.translator import EventTranslator
from config.settings import Settings, get_settings
from correlation.filters import CorrelationFilter
from telemetry.sender import TelemetryClient, TelemetrySender

logger = logging.getLogger(__name__)

# Records from these loggers are never forwarded; sending them would log again
INTERNAL_LOGGERS = ("appender", "telemetry", "azure", "opentelemetry", "urllib3")


class InternalLoggerFilter(logging.Filter):
    """Drop records emitted by the appender's own stack."""

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name
        return not any(name == prefix or name.startswith(prefix + ".") for prefix in INTERNAL_LOGGERS)


class TelemetryAppender(logging.Handler):
    """
    Handler that translates each record into telemetry and sends it.

    append() raises on failure. emit(), which the logging framework calls,
    routes failures to handleError(), so the framework's own error policy
    (logging.raiseExceptions) decides how loudly they surface.
    """

    def __init__(
        self,
        sender: TelemetrySender,
        level: Union[int, str] = logging.NOTSET,
        owns_sender: bool = False
    ):
        """
        Initialize the appender.

        Args:
            sender: Configured telemetry sender
            level: Minimum level forwarded
            owns_sender: Close the sender when the handler is closed

        Raises:
            ConfigurationError: If the sender is not configured
        """
        super().__init__(level)
        self.translator = EventTranslator(sender)
        self.owns_sender = owns_sender
        self.addFilter(InternalLoggerFilter())

    @property
    def sender(self) -> TelemetrySender:
        return self.translator.sender

    def append(self, record: logging.LogRecord) -> None:
        """
        Forward one record.

        Raises:
            InvalidArgumentError: If record is None
            TranslationError: If the record could not be translated or sent
        """
        self.translator.append(record)

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self.append(record)
        except RecursionError:
            raise
        except Exception:
            self.handleError(record)

    def close(self) -> None:
        try:
            if self.owns_sender and hasattr(self.sender, "close"):
                self.sender.close()
        finally:
            super().close()


def create_appender(
    instrumentation_key: Optional[str] = None,
    level: Optional[Union[int, str]] = None,
    settings: Optional[Settings] = None,
    sender: Optional[TelemetrySender] = None,
    correlate_context: bool = True
) -> TelemetryAppender:
    """
    Build a ready-to-register appender.

    The sender is resolved in order: the given sender, a client for the
    given instrumentation key, or a client built from settings (loaded
    from the environment when not passed in).

    Args:
        instrumentation_key: Key for a new TelemetryClient
        level: Handler level; defaults to settings.appender_level, else NOTSET
        settings: Appender settings
        sender: Pre-built sender
        correlate_context: Attach the context operation ids to records

    Raises:
        ConfigurationError: If no usable instrumentation key is available
    """
    owns_sender = sender is None
    if sender is None:
        if instrumentation_key is not None:
            sender = TelemetryClient(instrumentation_key=instrumentation_key)
        else:
            settings = settings or get_settings()
            sender = TelemetryClient.from_settings(settings)

    if level is None:
        level = settings.appender_level if settings is not None else logging.NOTSET

    appender = TelemetryAppender(sender, level=level, owns_sender=owns_sender)
    if correlate_context:
        appender.addFilter(CorrelationFilter())

    logger.info("Application Insights appender activated", extra={
        "extra_data": {"level": logging.getLevelName(appender.level)}
    })
    return appender
