"""
Telemetry senders.

The translator depends only on the TelemetrySender protocol. TelemetryClient
is the concrete sender: it turns each payload into an OpenTelemetry log
record and hands it to the Azure Monitor log exporter, one export per
payload. The exporter owns the Application Insights wire format; delivery
guarantees beyond that single export belong to the backend.
"""

import logging
import re
import traceback
import uuid
from typing import Callable, Dict, Optional, Protocol, runtime_checkable

from azure.monitor.opentelemetry.exporter import AzureMonitorLogExporter
from opentelemetry._logs import SeverityNumber
from opentelemetry.sdk._logs import LogData, LogRecord
from opentelemetry.sdk._logs.export import LogExporter, LogExportResult
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.util.instrumentation import InstrumentationScope
from opentelemetry.trace import TraceFlags

from config.settings import DEFAULT_INGESTION_ENDPOINT, Settings
from errors.exceptions import (
    ConfigurationError,
    missing_instrumentation_key,
    sender_unavailable,
)
from telemetry.models import SeverityLevel, TelemetryKind, TelemetryPayload

logger = logging.getLogger(__name__)

ExporterFactory = Callable[[str, float], LogExporter]

EXCEPTION_TYPE_ATTRIBUTE = "exception.type"
EXCEPTION_MESSAGE_ATTRIBUTE = "exception.message"
EXCEPTION_STACKTRACE_ATTRIBUTE = "exception.stacktrace"

_SCOPE = InstrumentationScope("appinsights-log-appender", "1.0.0")

# The exporter buckets severity numbers four at a time: DEBUG..INFO..WARN..ERROR..FATAL
_SEVERITY_NUMBERS = {
    SeverityLevel.VERBOSE: SeverityNumber.DEBUG,
    SeverityLevel.INFORMATION: SeverityNumber.INFO,
    SeverityLevel.WARNING: SeverityNumber.WARN,
    SeverityLevel.ERROR: SeverityNumber.ERROR,
    SeverityLevel.CRITICAL: SeverityNumber.FATAL,
}

_SPAN_ID_MASK = (1 << 64) - 1
_SPAN_ID_PATTERN = re.compile(r"[0-9a-fA-F]{16}")


@runtime_checkable
class TelemetrySender(Protocol):
    """Collaborator that ships telemetry payloads to a backend."""

    def configure(self, credential: str) -> None:
        ...

    def send(self, payload: TelemetryPayload) -> None:
        ...


def trace_id_of(operation_id: str) -> int:
    """
    Map an operation id onto a 128-bit trace id.

    Uuids and 32-digit hex ids map to their own value, which Application
    Insights shows as the operation id. Any other string maps to a stable
    name-based uuid, so records of one operation still share a trace id.
    """
    try:
        return uuid.UUID(operation_id).int
    except ValueError:
        return uuid.uuid5(uuid.NAMESPACE_OID, operation_id).int


def span_id_of(parent_operation_id: str) -> int:
    """Map a parent operation id onto a 64-bit span id."""
    if _SPAN_ID_PATTERN.fullmatch(parent_operation_id):
        return int(parent_operation_id, 16)
    return trace_id_of(parent_operation_id) & _SPAN_ID_MASK


def _exception_attributes(payload: TelemetryPayload) -> Dict[str, str]:
    exc = payload.exception
    if exc is None:
        return {
            EXCEPTION_TYPE_ATTRIBUTE: "Exception",
            EXCEPTION_MESSAGE_ATTRIBUTE: payload.message,
        }

    return {
        EXCEPTION_TYPE_ATTRIBUTE: f"{type(exc).__module__}.{type(exc).__qualname__}",
        # The rendered log message replaces the exception's own text
        EXCEPTION_MESSAGE_ATTRIBUTE: payload.message or str(exc),
        EXCEPTION_STACKTRACE_ATTRIBUTE: "".join(
            traceback.format_exception(type(exc), exc, exc.__traceback__)
        ),
    }


def to_log_data(payload: TelemetryPayload, resource: Resource) -> LogData:
    """
    Convert a payload to the log data the exporter consumes.

    Custom properties become log attributes. Exception payloads add the
    exception.* attributes, which make the exporter emit exception
    telemetry instead of a trace. The operation ids travel as the
    record's trace and span ids.
    """
    attributes: Dict[str, str] = dict(payload.properties)
    if payload.kind == TelemetryKind.EXCEPTION:
        attributes.update(_exception_attributes(payload))

    trace_id = trace_id_of(payload.operation_id) if payload.operation_id is not None else None
    span_id = span_id_of(payload.parent_operation_id) if payload.parent_operation_id is not None else None
    timestamp = int(payload.timestamp.timestamp() * 1_000_000_000)

    record = LogRecord(
        timestamp=timestamp,
        observed_timestamp=timestamp,
        trace_id=trace_id,
        span_id=span_id,
        trace_flags=TraceFlags(TraceFlags.SAMPLED) if trace_id is not None else None,
        severity_text=payload.severity.name,
        severity_number=_SEVERITY_NUMBERS[payload.severity],
        body=payload.message,
        resource=resource,
        attributes=attributes,
    )
    return LogData(log_record=record, instrumentation_scope=_SCOPE)


def create_log_exporter(connection_string: str, timeout: float) -> LogExporter:
    """Build the Azure Monitor exporter; offline retry storage stays off."""
    return AzureMonitorLogExporter(
        connection_string=connection_string,
        disable_offline_storage=True,
        timeout=timeout,
    )


class TelemetryClient:
    """
    Sender for Application Insights.

    The client must be configured with an instrumentation key before the
    first send. Configuration happens once; afterwards the client is only
    read, so a single instance can be shared by concurrent appenders.
    """

    def __init__(
        self,
        instrumentation_key: Optional[str] = None,
        endpoint: str = DEFAULT_INGESTION_ENDPOINT,
        timeout: float = 10.0,
        role_name: Optional[str] = None,
        exporter_factory: Optional[ExporterFactory] = None
    ):
        """
        Initialize the client.

        Args:
            instrumentation_key: Configure immediately with this key when given
            endpoint: Base URL of the ingestion service
            timeout: Timeout for each export in seconds
            role_name: Cloud role name attached to every telemetry item
            exporter_factory: Builds the log exporter from a connection
                string and timeout (tests inject a fake exporter)
        """
        self.endpoint = endpoint
        self.timeout = timeout
        self.role_name = role_name
        self._exporter_factory = exporter_factory or create_log_exporter
        self._resource = Resource.create({SERVICE_NAME: role_name}) if role_name else Resource.get_empty()
        self._instrumentation_key: Optional[str] = None
        self._exporter: Optional[LogExporter] = None

        if instrumentation_key is not None:
            self.configure(instrumentation_key)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        exporter_factory: Optional[ExporterFactory] = None
    ) -> "TelemetryClient":
        """Build a configured client from appender settings."""
        return cls(
            instrumentation_key=settings.instrumentation_key,
            endpoint=settings.ingestion_endpoint,
            timeout=settings.send_timeout_seconds,
            role_name=settings.role_name,
            exporter_factory=exporter_factory,
        )

    @property
    def instrumentation_key(self) -> Optional[str]:
        return self._instrumentation_key

    @property
    def is_configured(self) -> bool:
        return self._exporter is not None

    def connection_string(self, instrumentation_key: str) -> str:
        return f"InstrumentationKey={instrumentation_key};IngestionEndpoint={self.endpoint}"

    def configure(self, credential: str) -> None:
        """
        Set the instrumentation key and build the exporter for it.

        Raises:
            ConfigurationError: If the key is missing, blank, or rejected
                by the exporter.
        """
        if not credential or not credential.strip():
            raise missing_instrumentation_key()

        instrumentation_key = credential.strip()
        try:
            exporter = self._exporter_factory(self.connection_string(instrumentation_key), self.timeout)
        except ValueError as e:
            raise ConfigurationError(
                "Application Insights rejected the connection settings",
                invalid_fields={"instrumentation_key": str(e)}
            ) from e

        if self._exporter is not None:
            self._exporter.shutdown()
        self._exporter = exporter
        self._instrumentation_key = instrumentation_key

        logger.debug("Telemetry client configured", extra={
            "extra_data": {"endpoint": self.endpoint}
        })

    def send(self, payload: TelemetryPayload) -> None:
        """
        Export one payload.

        Raises:
            ConfigurationError: If the client was never configured.
            TranslationError: If the exporter failed or reported that the
                item was not delivered.
        """
        if self._exporter is None:
            raise ConfigurationError(
                "Telemetry client used before an instrumentation key was configured",
                missing_fields=["instrumentation_key"]
            )

        log_data = to_log_data(payload, self._resource)

        try:
            result = self._exporter.export([log_data])
        except Exception as e:
            raise sender_unavailable(e, details={"endpoint": self.endpoint}) from e

        if result != LogExportResult.SUCCESS:
            raise sender_unavailable(
                ConnectionError(f"Log export finished with {result.name}"),
                details={"endpoint": self.endpoint, "export_result": result.name}
            )

    def close(self) -> None:
        """Shut the exporter down."""
        if self._exporter is not None:
            self._exporter.shutdown()
