"""
HTTP pipeline sink.

Posts each batch as a JSON array to a streaming pipeline's HTTP ingest
endpoint (for example a Cloudflare Pipelines stream).
"""

import logging
from collections.abc import Sequence
from typing import Any

import httpx

from otelsiphon.exceptions import SinkError
from otelsiphon.otel.mapper import FlatLogRecord

logger = logging.getLogger(__name__)


class HttpPipelineSink:
    """Deliver flat records to an HTTP endpoint with a single POST per batch."""

    def __init__(
        self,
        url: str,
        *,
        token: str = "",
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ):
        if not url:
            raise ValueError("HttpPipelineSink requires a URL")

        headers = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        self.url = url
        self._client = httpx.Client(headers=headers, timeout=timeout, transport=transport)

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self) -> "HttpPipelineSink":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def send(self, records: Sequence[FlatLogRecord]) -> None:
        payload = [record.to_dict() for record in records]
        try:
            response = self._client.post(self.url, json=payload)
        except httpx.HTTPError as exc:
            logger.error("Pipeline request to %s failed: %s", self.url, exc)
            raise SinkError(
                f"Pipeline request failed: {exc}", record_count=len(records)
            ) from exc

        if response.is_error:
            logger.error(
                "Pipeline rejected %d records: %s %s",
                len(records),
                response.status_code,
                response.text[:500],
            )
            raise SinkError(
                f"Pipeline rejected records with status {response.status_code}",
                record_count=len(records),
            )

        logger.debug("Sent %d records to %s", len(records), self.url)
