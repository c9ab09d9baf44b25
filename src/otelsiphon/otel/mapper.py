"""
OTLP log request to flat record mapping.

Walks an OTLP/JSON ``ExportLogsServiceRequest`` mapping
(resourceLogs -> scopeLogs -> logRecords) and produces one denormalized
``FlatLogRecord`` per log record, in document order.
"""

from __future__ import annotations

import copy
import json
import logging
import math
from collections.abc import Callable, Mapping
from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime
from typing import Any

from otelsiphon.otel.normalizers import (
    format_iso,
    identifier_to_hex,
    nano_timestamp_to_int,
    nano_timestamp_to_iso,
    resolve_severity,
)
from otelsiphon.otel.values import (
    DEFAULT_MAX_DEPTH,
    OtelValue,
    decode_key_value_list,
    decode_value,
)

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Default clock: the current UTC instant."""
    return datetime.now(UTC)


@dataclass(frozen=True)
class FlatLogRecord:
    """One OTLP log record flattened with its resource and scope context."""

    timestamp: str
    timestamp_ns: int
    severity_number: int
    severity_text: str
    body: str
    observed_timestamp: str | None = None
    observed_timestamp_ns: int = 0
    trace_id: str | None = None
    span_id: str | None = None
    flags: int | None = None
    attributes: dict[str, OtelValue] = field(default_factory=dict)
    resource_attributes: dict[str, OtelValue] = field(default_factory=dict)
    scope_name: str | None = None
    scope_version: str | None = None
    scope_attributes: dict[str, OtelValue] = field(default_factory=dict)
    dropped_attributes_count: int | None = None

    def to_dict(self) -> dict[str, Any]:
        """Storage form of the record; optional fields that are None are omitted."""
        return {key: value for key, value in asdict(self).items() if value is not None}


def _as_list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


def _as_mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _optional_int(value: Any) -> int | None:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return None


def _optional_str(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def _json_number_form(value: Any) -> Any:
    # Whole doubles print without a fraction ("1" not "1.0"), non-finite ones as null.
    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        if value.is_integer() and abs(value) < 1e21:
            return int(value)
        return value
    if isinstance(value, list):
        return [_json_number_form(item) for item in value]
    if isinstance(value, dict):
        return {key: _json_number_form(item) for key, item in value.items()}
    return value


def coerce_body(raw_body: Any, *, max_depth: int = DEFAULT_MAX_DEPTH) -> str:
    """
    Render a log body AnyValue as text.

    Strings pass through verbatim and other values become compact JSON. A
    missing body is the empty string, not ``"null"``.
    """
    if raw_body is None:
        return ""
    decoded = decode_value(raw_body, max_depth=max_depth)
    if isinstance(decoded, str):
        return decoded
    return json.dumps(
        _json_number_form(decoded),
        separators=(",", ":"),
        ensure_ascii=False,
        default=str,
    )


def transform_log_record(
    log_record: Mapping[str, Any],
    *,
    resource_attributes: Mapping[str, OtelValue],
    scope: Mapping[str, Any],
    scope_attributes: Mapping[str, OtelValue],
    clock: Clock = utc_now,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> FlatLogRecord:
    """
    Flatten a single OTLP/JSON log record.

    Resource and scope attribute mappings are deep-copied so records never
    share mutable state.

    Args:
        log_record: OTLP/JSON ``LogRecord`` mapping
        resource_attributes: Decoded attributes of the enclosing resource
        scope: OTLP/JSON ``InstrumentationScope`` mapping (may be empty)
        scope_attributes: Decoded attributes of the enclosing scope
        clock: Source of "now" for records without ``timeUnixNano``
        max_depth: Maximum nesting of array/kvlist values

    Returns:
        The flat record
    """
    time_unix_nano = log_record.get("timeUnixNano")
    observed_unix_nano = log_record.get("observedTimeUnixNano")

    # Display timestamp falls back to "now", the raw integer stays 0.
    timestamp = nano_timestamp_to_iso(time_unix_nano) or format_iso(clock())

    severity_number = log_record.get("severityNumber")

    return FlatLogRecord(
        timestamp=timestamp,
        timestamp_ns=nano_timestamp_to_int(time_unix_nano),
        observed_timestamp=nano_timestamp_to_iso(observed_unix_nano),
        observed_timestamp_ns=nano_timestamp_to_int(observed_unix_nano),
        severity_number=_optional_int(severity_number) or 0,
        severity_text=resolve_severity(severity_number, log_record.get("severityText")),
        body=coerce_body(log_record.get("body"), max_depth=max_depth),
        trace_id=identifier_to_hex(log_record.get("traceId")),
        span_id=identifier_to_hex(log_record.get("spanId")),
        flags=_optional_int(log_record.get("flags")),
        attributes=decode_key_value_list(log_record.get("attributes"), max_depth=max_depth),
        resource_attributes=copy.deepcopy(dict(resource_attributes)),
        scope_name=_optional_str(scope.get("name")),
        scope_version=_optional_str(scope.get("version")),
        scope_attributes=copy.deepcopy(dict(scope_attributes)),
        dropped_attributes_count=_optional_int(log_record.get("droppedAttributesCount")),
    )


def transform(
    request: Mapping[str, Any],
    *,
    clock: Clock = utc_now,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> list[FlatLogRecord]:
    """
    Transform an OTLP/JSON logs request into flat records.

    Never raises on field-level anomalies: missing lists are empty,
    malformed entries are skipped over as empty objects, and every log
    record yields exactly one output record.

    Args:
        request: Decoded ``ExportLogsServiceRequest`` JSON object
        clock: Source of "now" for records without ``timeUnixNano``
        max_depth: Maximum nesting of array/kvlist values

    Returns:
        Flat records in document order (possibly empty)
    """
    records: list[FlatLogRecord] = []

    for resource_logs in _as_list(_as_mapping(request).get("resourceLogs")):
        resource_logs = _as_mapping(resource_logs)
        resource = _as_mapping(resource_logs.get("resource"))
        resource_attributes = decode_key_value_list(
            resource.get("attributes"), max_depth=max_depth
        )

        for scope_logs in _as_list(resource_logs.get("scopeLogs")):
            scope_logs = _as_mapping(scope_logs)
            scope = _as_mapping(scope_logs.get("scope"))
            scope_attributes = decode_key_value_list(
                scope.get("attributes"), max_depth=max_depth
            )

            for log_record in _as_list(scope_logs.get("logRecords")):
                records.append(
                    transform_log_record(
                        _as_mapping(log_record),
                        resource_attributes=resource_attributes,
                        scope=scope,
                        scope_attributes=scope_attributes,
                        clock=clock,
                        max_depth=max_depth,
                    )
                )

    logger.debug("Transformed %d OTLP log records", len(records))
    return records
