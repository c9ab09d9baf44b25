"""
OTLP log receiver.

Single ingestion path shared by every surface:
- Direct call with an already-decoded (or JSON string) payload via ``write``
- Raw HTTP bodies via ``ingest`` (used by the API and the CLI)

Both transform the request into flat records and hand them to the sink,
skipping the sink entirely when there is nothing to deliver.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, TypedDict

from otelsiphon.exceptions import PayloadDecodeError
from otelsiphon.otel.decoder import decode_otlp_request
from otelsiphon.otel.mapper import Clock, FlatLogRecord, transform, utc_now
from otelsiphon.otel.values import DEFAULT_MAX_DEPTH
from otelsiphon.sinks.base import LogSink

logger = logging.getLogger(__name__)


class WriteResult(TypedDict):
    success: bool
    recordsWritten: int


class OtlpReceiver:
    """Decode, flatten and deliver OTLP log requests to a sink."""

    def __init__(
        self,
        sink: LogSink,
        *,
        clock: Clock = utc_now,
        max_depth: int = DEFAULT_MAX_DEPTH,
        max_payload_bytes: int | None = None,
    ):
        self.sink = sink
        self.clock = clock
        self.max_depth = max_depth
        self.max_payload_bytes = max_payload_bytes

    def _deliver(self, request: Mapping[str, Any]) -> list[FlatLogRecord]:
        records = transform(request, clock=self.clock, max_depth=self.max_depth)
        if records:
            self.sink.send(records)
            logger.info("Delivered %d OTLP log records", len(records))
        else:
            logger.debug("OTLP request contained no log records")
        return records

    def write(self, data: Any) -> WriteResult:
        """
        Ingest an OTLP/JSON logs request given as a mapping or JSON text.

        Args:
            data: Decoded ``ExportLogsServiceRequest`` object, or its JSON string

        Returns:
            ``{"success": True, "recordsWritten": n}``

        Raises:
            PayloadDecodeError: If ``data`` is neither a mapping nor valid JSON text
            SinkError: If the sink fails to store the records
        """
        try:
            if isinstance(data, str):
                try:
                    request = json.loads(data)
                except json.JSONDecodeError as exc:
                    raise PayloadDecodeError(f"Invalid OTLP JSON payload: {exc.msg}") from exc
            elif isinstance(data, Mapping):
                request = data
            else:
                raise PayloadDecodeError(f"Unexpected data type: {type(data).__name__}")

            records = self._deliver(request)
        except Exception:
            logger.exception("Error processing OTLP logs via direct call")
            raise

        return {"success": True, "recordsWritten": len(records)}

    def ingest(
        self,
        payload: bytes,
        *,
        content_encoding: str | None = None,
        content_type: str | None = None,
    ) -> int:
        """
        Ingest a raw OTLP/HTTP request body.

        Args:
            payload: Request body, optionally gzip-compressed
            content_encoding: HTTP Content-Encoding header
            content_type: HTTP Content-Type header

        Returns:
            Number of records delivered to the sink

        Raises:
            PayloadDecodeError: If the envelope cannot be decoded
            SinkError: If the sink fails to store the records
        """
        request = decode_otlp_request(
            payload,
            content_encoding=content_encoding,
            content_type=content_type,
            max_payload_bytes=self.max_payload_bytes,
        )
        return len(self._deliver(request))
