"""
Unit tests for the telemetry client and the payload to log record mapping.

Tests cover:
- Severity, message, properties and exception attributes on log records
- Operation ids carried as trace and span ids
- Client configuration checks and the exporter connection string
- Export failures surfacing as sender errors
"""

import uuid
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
from azure.monitor.opentelemetry.exporter import AzureMonitorLogExporter
from hypothesis import given
from hypothesis import strategies as st
from opentelemetry._logs import SeverityNumber
from opentelemetry.sdk._logs.export import LogExportResult
from opentelemetry.sdk.resources import SERVICE_NAME, Resource

from errors.codes import ErrorCode
from errors.exceptions import ConfigurationError, TranslationError
from telemetry.models import SeverityLevel, TelemetryKind, TelemetryPayload
from telemetry.sender import (
    TelemetryClient,
    TelemetrySender,
    create_log_exporter,
    span_id_of,
    to_log_data,
    trace_id_of,
)

KEY = "11111111-2222-3333-4444-555555555555"
ENDPOINT = "https://ingest.example.com/"
OPERATION_ID = "4bf92f35-77b3-4da6-a3ce-929d0e0e4736"
PARENT_ID = "00f067aa0ba902b7"


@pytest.fixture
def exporter():
    exporter = MagicMock()
    exporter.export.return_value = LogExportResult.SUCCESS
    return exporter


@pytest.fixture
def exporter_factory(exporter):
    return MagicMock(return_value=exporter)


@pytest.fixture
def trace_payload():
    return TelemetryPayload(
        kind=TelemetryKind.TRACE,
        severity=SeverityLevel.WARNING,
        message="disk almost full",
        properties={"LoggerName": "ops", "tenant": "contoso"},
        operation_id=OPERATION_ID,
        parent_operation_id=PARENT_ID,
        timestamp=datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc),
    )


class TestToLogData:
    """Tests for to_log_data()."""

    def test_trace_record(self, trace_payload):
        record = to_log_data(trace_payload, Resource.get_empty()).log_record

        assert record.body == "disk almost full"
        assert record.severity_number == SeverityNumber.WARN
        assert record.severity_text == "WARNING"
        assert dict(record.attributes) == {"LoggerName": "ops", "tenant": "contoso"}
        assert record.timestamp == 1705314600 * 1_000_000_000

    def test_operation_ids_become_trace_context(self, trace_payload):
        record = to_log_data(trace_payload, Resource.get_empty()).log_record

        assert record.trace_id == uuid.UUID(OPERATION_ID).int
        assert record.span_id == int(PARENT_ID, 16)

    def test_unset_ids_leave_trace_context_empty(self):
        payload = TelemetryPayload(kind=TelemetryKind.TRACE, message="x")

        record = to_log_data(payload, Resource.get_empty()).log_record

        assert not record.trace_id
        assert not record.span_id

    @pytest.mark.parametrize("severity,number", [
        (SeverityLevel.VERBOSE, SeverityNumber.DEBUG),
        (SeverityLevel.INFORMATION, SeverityNumber.INFO),
        (SeverityLevel.WARNING, SeverityNumber.WARN),
        (SeverityLevel.ERROR, SeverityNumber.ERROR),
        (SeverityLevel.CRITICAL, SeverityNumber.FATAL),
    ])
    def test_severity_numbers(self, severity, number):
        payload = TelemetryPayload(kind=TelemetryKind.TRACE, severity=severity)

        assert to_log_data(payload, Resource.get_empty()).log_record.severity_number == number

    def test_exception_attributes(self, raised_exception):
        payload = TelemetryPayload(
            kind=TelemetryKind.EXCEPTION,
            severity=SeverityLevel.ERROR,
            message="checkout failed",
            exception=raised_exception,
            properties={"tenant": "contoso"},
        )

        attributes = to_log_data(payload, Resource.get_empty()).log_record.attributes

        assert attributes["exception.type"] == "builtins.ValueError"
        assert attributes["exception.message"] == "checkout failed"
        assert "order total must be positive" in attributes["exception.stacktrace"]
        assert attributes["tenant"] == "contoso"

    def test_trace_record_has_no_exception_attributes(self, trace_payload):
        attributes = to_log_data(trace_payload, Resource.get_empty()).log_record.attributes

        assert not any(key.startswith("exception.") for key in attributes)

    def test_resource_is_attached(self, trace_payload):
        resource = Resource.create({SERVICE_NAME: "orders-api"})

        record = to_log_data(trace_payload, resource).log_record

        assert record.resource.attributes[SERVICE_NAME] == "orders-api"


class TestOperationIdMapping:
    """Tests for trace_id_of() and span_id_of()."""

    def test_uuid_keeps_its_value(self):
        assert trace_id_of(OPERATION_ID) == uuid.UUID(OPERATION_ID).int
        assert trace_id_of(OPERATION_ID.replace("-", "")) == uuid.UUID(OPERATION_ID).int

    def test_w3c_span_id_keeps_its_value(self):
        assert span_id_of(PARENT_ID) == int(PARENT_ID, 16)

    @given(st.text())
    def test_any_string_maps_to_a_stable_trace_id(self, operation_id):
        trace_id = trace_id_of(operation_id)

        assert trace_id == trace_id_of(operation_id)
        assert 0 <= trace_id < 2 ** 128

    @given(st.text())
    def test_any_string_maps_to_a_64_bit_span_id(self, parent_operation_id):
        assert 0 <= span_id_of(parent_operation_id) < 2 ** 64

    def test_different_ids_map_apart(self):
        assert trace_id_of("|root.1.") != trace_id_of("|root.2.")


class TestTelemetryClient:
    """Tests for TelemetryClient."""

    def test_is_a_telemetry_sender(self, exporter_factory):
        assert isinstance(TelemetryClient(KEY, exporter_factory=exporter_factory), TelemetrySender)

    def test_configure_builds_exporter_for_connection_string(self, exporter_factory):
        TelemetryClient(KEY, endpoint=ENDPOINT, timeout=5.0, exporter_factory=exporter_factory)

        exporter_factory.assert_called_once_with(
            f"InstrumentationKey={KEY};IngestionEndpoint={ENDPOINT}", 5.0
        )

    def test_send_exports_one_record(self, exporter_factory, exporter, trace_payload):
        client = TelemetryClient(KEY, role_name="orders-api", exporter_factory=exporter_factory)

        client.send(trace_payload)

        [batch] = exporter.export.call_args.args
        [log_data] = batch
        assert log_data.log_record.body == "disk almost full"
        assert log_data.log_record.resource.attributes[SERVICE_NAME] == "orders-api"

    @pytest.mark.parametrize("key", [None, "", "   "])
    def test_configure_rejects_missing_key(self, exporter_factory, key):
        client = TelemetryClient(exporter_factory=exporter_factory)

        with pytest.raises(ConfigurationError) as exc_info:
            client.configure(key)

        assert exc_info.value.error_code == ErrorCode.CONFIGURATION_ERROR
        assert not client.is_configured
        exporter_factory.assert_not_called()

    def test_configure_strips_key(self, exporter_factory):
        client = TelemetryClient(exporter_factory=exporter_factory)

        client.configure(f"  {KEY} ")

        assert client.instrumentation_key == KEY
        assert client.is_configured

    def test_key_rejected_by_exporter_is_a_configuration_error(self):
        factory = MagicMock(side_effect=ValueError("Invalid instrumentation key"))

        with pytest.raises(ConfigurationError) as exc_info:
            TelemetryClient("not-a-key", exporter_factory=factory)

        assert "instrumentation_key" in exc_info.value.invalid_fields

    def test_reconfigure_shuts_previous_exporter_down(self, exporter_factory, exporter):
        client = TelemetryClient(KEY, exporter_factory=exporter_factory)

        client.configure(KEY)

        exporter.shutdown.assert_called_once()

    def test_send_before_configure_fails(self, exporter_factory, exporter, trace_payload):
        client = TelemetryClient(exporter_factory=exporter_factory)

        with pytest.raises(ConfigurationError):
            client.send(trace_payload)

        exporter.export.assert_not_called()

    def test_failed_export_raises_sender_unavailable(self, exporter_factory, exporter, trace_payload):
        exporter.export.return_value = LogExportResult.FAILURE
        client = TelemetryClient(KEY, endpoint=ENDPOINT, exporter_factory=exporter_factory)

        with pytest.raises(TranslationError) as exc_info:
            client.send(trace_payload)

        assert exc_info.value.error_code == ErrorCode.SENDER_UNAVAILABLE
        assert exc_info.value.details["export_result"] == "FAILURE"
        assert exc_info.value.details["endpoint"] == ENDPOINT

    def test_exporter_error_raises_sender_unavailable(self, exporter_factory, exporter, trace_payload):
        exporter.export.side_effect = ConnectionError("connection refused")
        client = TelemetryClient(KEY, endpoint=ENDPOINT, exporter_factory=exporter_factory)

        with pytest.raises(TranslationError) as exc_info:
            client.send(trace_payload)

        assert exc_info.value.error_code == ErrorCode.SENDER_UNAVAILABLE
        assert isinstance(exc_info.value.cause, ConnectionError)
        assert exc_info.value.details == {
            "endpoint": ENDPOINT,
            "cause": "ConnectionError: connection refused",
        }

    def test_close_shuts_exporter_down(self, exporter_factory, exporter):
        TelemetryClient(KEY, exporter_factory=exporter_factory).close()

        exporter.shutdown.assert_called_once()

    def test_close_without_configure(self, exporter_factory):
        TelemetryClient(exporter_factory=exporter_factory).close()

    def test_from_settings(self, exporter_factory):
        from config.settings import Settings

        settings = Settings(
            instrumentation_key=KEY,
            ingestion_endpoint=ENDPOINT,
            send_timeout_seconds=3.0,
            role_name="orders-api",
            _env_file=None,
        )

        client = TelemetryClient.from_settings(settings, exporter_factory=exporter_factory)

        assert client.instrumentation_key == KEY
        assert client.endpoint == ENDPOINT
        assert client.role_name == "orders-api"
        exporter_factory.assert_called_once_with(
            f"InstrumentationKey={KEY};IngestionEndpoint={ENDPOINT}", 3.0
        )

    def test_default_factory_builds_azure_exporter(self):
        exporter = create_log_exporter(f"InstrumentationKey={KEY};IngestionEndpoint={ENDPOINT}", 5.0)
        try:
            assert isinstance(exporter, AzureMonitorLogExporter)
        finally:
            exporter.shutdown()
