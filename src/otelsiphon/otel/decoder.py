"""
OTLP request envelope decoding.

Turns a raw OTLP/HTTP request body into the OTLP/JSON mapping consumed by
the mapper: reverses gzip compression, then parses JSON (or protobuf, which
is converted to the equivalent OTLP/JSON mapping).
"""

from __future__ import annotations

import gzip
import json
import logging
import zlib
from typing import Any

from google.protobuf.json_format import MessageToDict
from google.protobuf.message import DecodeError
from opentelemetry.proto.collector.logs.v1.logs_service_pb2 import (
    ExportLogsServiceRequest,
)

from otelsiphon.exceptions import PayloadDecodeError, PayloadTooLargeError

logger = logging.getLogger(__name__)

GZIP_MAGIC = b"\x1f\x8b"
PROTOBUF_CONTENT_TYPES = frozenset({"application/x-protobuf", "application/protobuf"})


def is_gzip(payload: bytes, content_encoding: str | None = None) -> bool:
    """Whether the body is gzip: declared by header, or sniffed from the magic bytes."""
    if content_encoding and "gzip" in content_encoding.lower():
        return True
    return payload[:2] == GZIP_MAGIC


def _gunzip(payload: bytes) -> bytes:
    try:
        return gzip.decompress(payload)
    except (OSError, EOFError, zlib.error) as exc:
        logger.warning("Failed to decompress OTLP payload: %s", exc)
        raise PayloadDecodeError(f"Invalid gzip payload: {exc}") from exc


def _parse_protobuf(payload: bytes) -> dict[str, Any]:
    request = ExportLogsServiceRequest()
    try:
        request.ParseFromString(payload)
    except DecodeError as exc:
        logger.warning("Failed to parse OTLP protobuf payload: %s", exc)
        raise PayloadDecodeError("Invalid OTLP protobuf payload") from exc
    return MessageToDict(request, use_integers_for_enums=True)


def _parse_json(payload: bytes) -> Any:
    try:
        return json.loads(payload.decode("utf-8"))
    except UnicodeDecodeError as exc:
        logger.warning("OTLP payload is not valid UTF-8: %s", exc)
        raise PayloadDecodeError("OTLP payload is not valid UTF-8") from exc
    except json.JSONDecodeError as exc:
        logger.warning("Failed to parse OTLP JSON payload: %s", exc)
        raise PayloadDecodeError(f"Invalid OTLP JSON payload: {exc.msg}") from exc


def decode_otlp_request(
    payload: bytes,
    *,
    content_encoding: str | None = None,
    content_type: str | None = None,
    max_payload_bytes: int | None = None,
) -> dict[str, Any]:
    """
    Decode an OTLP/HTTP logs payload into its OTLP/JSON mapping.

    Gzip is reversed when the ``Content-Encoding`` header says so, or when
    the body starts with the gzip magic number even without the header.

    Args:
        payload: Raw request body bytes
        content_encoding: HTTP Content-Encoding header, if any
        content_type: HTTP Content-Type header (may include charset)
        max_payload_bytes: Size limit applied after decompression

    Returns:
        ExportLogsServiceRequest as an OTLP/JSON dict (camelCase keys)

    Raises:
        PayloadDecodeError: If the payload is empty, not decompressible, not
            parseable, or not a JSON object
        PayloadTooLargeError: If the decoded body exceeds ``max_payload_bytes``
    """
    if not payload:
        raise PayloadDecodeError("Empty OTLP payload")

    if is_gzip(payload, content_encoding):
        payload = _gunzip(payload)

    if max_payload_bytes is not None and len(payload) > max_payload_bytes:
        raise PayloadTooLargeError(len(payload), max_payload_bytes)

    normalized = (content_type or "").split(";")[0].strip().lower()
    if normalized in PROTOBUF_CONTENT_TYPES:
        return _parse_protobuf(payload)

    decoded = _parse_json(payload)
    if not isinstance(decoded, dict):
        raise PayloadDecodeError(
            f"Expected OTLP JSON object, got {type(decoded).__name__}"
        )
    return decoded
