"""
Translation of log records into telemetry payloads.

EventTranslator turns one logging.LogRecord into a trace or exception
payload, copies logging metadata, custom properties, correlation ids and
caller location onto it, and hands it to the sender. It keeps no state
between calls apart from the sender reference, so one instance can serve
any number of threads.
"""

import logging
from collections.abc import Mapping
from typing import Any, Dict, Optional

from appender.levels import severity_of
from correlation.helpers import (
    OPERATION_ID_PROPERTY,
    OPERATION_PARENT_ID_PROPERTY,
    PROPERTIES_ATTRIBUTE,
)
from errors.exceptions import (
    ConfigurationError,
    TranslationError,
    invalid_argument,
    translation_failed,
)
from telemetry.models import TelemetryKind, TelemetryPayload
from telemetry.sender import TelemetrySender

RESERVED_PREFIXES = ("ai:", "log4net")

# Placeholders logging.Logger.findCaller() uses when the caller is unknown
_UNKNOWN_LOCATION = {"(unknown file)", "(unknown function)"}


def is_reserved_property(key: str) -> bool:
    """Return True for keys with a reserved prefix (case-insensitive)."""
    return key.lower().startswith(RESERVED_PREFIXES)


def _add_property(properties: Dict[str, str], key: str, value: str) -> None:
    if key in properties:
        raise ValueError(f"Property '{key}' has already been added")
    properties[key] = value


def _record_properties(record: logging.LogRecord) -> Mapping:
    properties = getattr(record, PROPERTIES_ATTRIBUTE, None)
    if properties is None:
        return {}
    if not isinstance(properties, Mapping):
        raise TypeError(
            f"record.{PROPERTIES_ATTRIBUTE} must be a mapping, got {type(properties).__name__}"
        )
    return properties


def _exception_of(record: logging.LogRecord) -> Optional[BaseException]:
    exc_info = record.exc_info
    if isinstance(exc_info, tuple) and len(exc_info) == 3:
        return exc_info[1]
    return None


class EventTranslator:
    """
    Build telemetry from log records and forward it.

    Example:
        translator = EventTranslator(TelemetryClient(instrumentation_key=key))
        translator.append(record)
    """

    def __init__(self, sender: TelemetrySender):
        """
        Initialize the translator.

        Args:
            sender: Configured telemetry sender

        Raises:
            InvalidArgumentError: If sender is None
            ConfigurationError: If the sender reports it is not configured
        """
        if sender is None:
            raise invalid_argument("sender")
        if getattr(sender, "is_configured", True) is False:
            raise ConfigurationError(
                "Telemetry sender has no instrumentation key configured",
                missing_fields=["instrumentation_key"]
            )
        self.sender = sender

    def append(self, record: logging.LogRecord) -> None:
        """
        Translate a record and hand the payload to the sender.

        Exactly one send happens per successful call; when anything fails
        nothing is sent.

        Raises:
            InvalidArgumentError: If record is None
            TranslationError: If building or sending the payload failed
        """
        if record is None:
            raise invalid_argument("record")

        try:
            payload = self.translate(record)
            self.sender.send(payload)
        except TranslationError:
            raise
        except Exception as e:
            raise translation_failed(e) from e

    def translate(self, record: logging.LogRecord) -> TelemetryPayload:
        """
        Build the telemetry payload for a record without sending it.

        Records carrying an exception become Exception telemetry, all
        others Trace telemetry.
        """
        if record is None:
            raise invalid_argument("record")

        exception = _exception_of(record)
        payload = TelemetryPayload(
            kind=TelemetryKind.TRACE if exception is None else TelemetryKind.EXCEPTION,
            severity=severity_of(getattr(record, "levelno", None)),
            message=record.getMessage(),
            exception=exception,
        )

        self._update_metadata(record, payload)
        return payload

    def _update_metadata(self, record: logging.LogRecord, payload: TelemetryPayload) -> None:
        properties = payload.properties

        for key, value in (
            ("LoggerName", record.name),
            ("ThreadName", record.threadName),
            ("Domain", getattr(record, "processName", None)),
            ("Identity", getattr(record, "identity", None)),
        ):
            if value:
                _add_property(properties, key, str(value))

        record_properties = _record_properties(record)
        self._update_custom_metadata(record_properties, properties)
        self._update_operation_metadata(record_properties, payload)
        self._update_location_metadata(record, properties)

    def _update_custom_metadata(self, record_properties: Mapping, properties: Dict[str, str]) -> None:
        for key, value in record_properties.items():
            if is_reserved_property(str(key)) or value is None:
                continue
            _add_property(properties, str(key), str(value))

    def _update_operation_metadata(self, record_properties: Mapping, payload: TelemetryPayload) -> None:
        if OPERATION_ID_PROPERTY in record_properties:
            payload.operation_id = _optional_str(record_properties[OPERATION_ID_PROPERTY])

        if OPERATION_PARENT_ID_PROPERTY in record_properties:
            payload.parent_operation_id = _optional_str(record_properties[OPERATION_PARENT_ID_PROPERTY])

    def _update_location_metadata(self, record: logging.LogRecord, properties: Dict[str, str]) -> None:
        lineno = getattr(record, "lineno", None)
        location = (
            ("ClassName", getattr(record, "module", None)),
            ("FileName", getattr(record, "pathname", None)),
            ("LineNumber", str(lineno) if lineno else None),
            ("MethodName", getattr(record, "funcName", None)),
        )
        for field_name, value in location:
            if value and value not in _UNKNOWN_LOCATION:
                _add_property(properties, f"location_{field_name}", value)


def _optional_str(value: Any) -> Optional[str]:
    return None if value is None else str(value)
