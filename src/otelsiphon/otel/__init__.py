"""OTLP log decoding and flattening."""

from otelsiphon.otel.decoder import decode_otlp_request
from otelsiphon.otel.mapper import FlatLogRecord, transform, utc_now
from otelsiphon.otel.normalizers import (
    identifier_to_hex,
    nano_timestamp_to_iso,
    resolve_severity,
)
from otelsiphon.otel.values import decode_key_value_list, decode_value

__all__ = [
    "FlatLogRecord",
    "decode_key_value_list",
    "decode_otlp_request",
    "decode_value",
    "identifier_to_hex",
    "nano_timestamp_to_iso",
    "resolve_severity",
    "transform",
    "utc_now",
]
