"""
otelsiphon FastAPI Application.

OTLP/HTTP logs receiver: ``POST /v1/logs`` (or ``POST /``) accepts
JSON or protobuf ``ExportLogsServiceRequest`` bodies, optionally gzip
compressed. ``GET`` on any path is a health check.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import Depends, FastAPI, Header, Request, status
from fastapi.responses import JSONResponse, PlainTextResponse

from otelsiphon import __version__
from otelsiphon.config import settings
from otelsiphon.logging_config import setup_logging
from otelsiphon.services.receiver import OtlpReceiver
from otelsiphon.sinks import build_sink

logger = logging.getLogger(__name__)

LOGS_PATHS = ("/", "/v1/logs")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for FastAPI application.

    Builds the configured sink once and closes it on shutdown.
    """
    setup_logging(context="api")

    sink = build_sink(settings)
    app.state.receiver = OtlpReceiver(
        sink,
        max_depth=settings.max_value_depth,
        max_payload_bytes=settings.max_payload_bytes,
    )
    logger.info("OTLP receiver ready (sink=%s)", settings.sink_type)

    yield

    logger.info("Application shutdown initiated...")
    try:
        sink.close()
    except Exception as e:
        logger.error(f"Error closing sink: {e}", exc_info=True)


app = FastAPI(
    lifespan=lifespan,
    title="otelsiphon",
    description="OTLP logs receiver that flattens records for columnar storage",
    version=__version__,
    docs_url=None,
    redoc_url=None,
    openapi_url=None,
)


def get_receiver(request: Request) -> OtlpReceiver:
    """Dependency returning the receiver built during startup."""
    return request.app.state.receiver


def _success_body() -> dict[str, Any]:
    return {"partialSuccess": {"rejectedLogRecords": 0, "errorMessage": ""}}


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": "Internal server error", "message": message},
    )


@app.get("/{full_path:path}")
async def health(full_path: str) -> dict[str, Any]:
    """Health check, answered on every path."""
    return {
        "status": "ok",
        "message": "OTLP receiver is ready",
        "version": __version__,
        "endpoints": {"logs": "/v1/logs"},
    }


async def ingest_logs(
    request: Request,
    receiver: OtlpReceiver = Depends(get_receiver),
    content_type: str | None = Header(default=None, alias="Content-Type"),
    content_encoding: str | None = Header(default=None, alias="Content-Encoding"),
) -> JSONResponse:
    """Ingest an OTLP logs export request."""
    payload = await request.body()

    try:
        count = receiver.ingest(
            payload,
            content_encoding=content_encoding,
            content_type=content_type,
        )
    except Exception as exc:
        logger.error("Error processing OTLP logs: %s", exc, exc_info=True)
        return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc))

    logger.debug("Accepted OTLP request with %d log records", count)
    return JSONResponse(status_code=status.HTTP_200_OK, content=_success_body())


for _path in LOGS_PATHS:
    app.add_api_route(_path, ingest_logs, methods=["POST"])


@app.post("/{full_path:path}")
async def unknown_post(full_path: str) -> PlainTextResponse:
    return PlainTextResponse(
        "Not found. Use / or /v1/logs endpoint",
        status_code=status.HTTP_404_NOT_FOUND,
    )


@app.api_route("/{full_path:path}", methods=["PUT", "PATCH", "DELETE", "OPTIONS"])
async def method_not_allowed(full_path: str) -> PlainTextResponse:
    return PlainTextResponse(
        "Method not allowed. Use POST to send logs or GET for health check.",
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
    )
