"""Destinations for flat log records."""

from otelsiphon.config import Settings
from otelsiphon.exceptions import ConfigurationError
from otelsiphon.sinks.base import LogSink
from otelsiphon.sinks.database import DatabaseSink
from otelsiphon.sinks.http import HttpPipelineSink
from otelsiphon.sinks.jsonl import JsonlFileSink
from otelsiphon.sinks.memory import MemorySink

SINK_TYPES = ("http", "jsonl", "database", "memory")


def build_sink(settings: Settings) -> LogSink:
    """
    Create the sink selected by ``settings.sink_type``.

    Raises:
        ConfigurationError: For an unknown sink type or missing sink settings
    """
    sink_type = settings.sink_type.strip().lower()

    if sink_type == "http":
        if not settings.sink_url:
            raise ConfigurationError("OTELSIPHON_SINK_URL is required for the http sink")
        return HttpPipelineSink(
            settings.sink_url,
            token=settings.sink_token,
            timeout=settings.sink_timeout,
        )
    if sink_type == "jsonl":
        return JsonlFileSink(settings.sink_path)
    if sink_type == "database":
        return DatabaseSink(settings.database_url)
    if sink_type == "memory":
        return MemorySink()

    raise ConfigurationError(
        f"Unknown sink type {settings.sink_type!r}; expected one of {', '.join(SINK_TYPES)}"
    )


__all__ = [
    "DatabaseSink",
    "HttpPipelineSink",
    "JsonlFileSink",
    "LogSink",
    "MemorySink",
    "SINK_TYPES",
    "build_sink",
]
