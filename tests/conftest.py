"""
Pytest configuration and fixtures for otelsiphon tests.

Provides a fixed clock, a sample OTLP/JSON request, an in-memory sink and
an API test client wired to it.
"""

import logging
from typing import Any

import pytest
from payloads import FIXED_NOW, SPAN_ID_HEX, TRACE_ID_HEX, build_request, string_attr

from otelsiphon.services.receiver import OtlpReceiver
from otelsiphon.sinks.memory import MemorySink


@pytest.fixture
def fixed_clock():
    """Clock that always returns FIXED_NOW."""
    return lambda: FIXED_NOW


@pytest.fixture
def sample_request() -> dict[str, Any]:
    """Request with two records covering most LogRecord fields."""
    return build_request(
        [
            {
                "timeUnixNano": "1700000000000000000",
                "observedTimeUnixNano": "1700000000500000000",
                "severityNumber": 9,
                "body": {"stringValue": "user logged in"},
                "attributes": [string_attr("user.id", "u-1")],
                "traceId": TRACE_ID_HEX,
                "spanId": SPAN_ID_HEX,
                "flags": 1,
                "droppedAttributesCount": 2,
            },
            {
                "timeUnixNano": "1700000001000000000",
                "severityNumber": 17,
                "body": {"kvlistValue": {"values": [string_attr("error", "timeout")]}},
            },
        ]
    )


@pytest.fixture
def memory_sink() -> MemorySink:
    return MemorySink()


@pytest.fixture
def receiver(memory_sink: MemorySink, fixed_clock) -> OtlpReceiver:
    return OtlpReceiver(memory_sink, clock=fixed_clock, max_payload_bytes=1_048_576)


@pytest.fixture
def api_client(receiver: OtlpReceiver):
    """Create a test client for FastAPI with the receiver dependency overridden."""
    from fastapi.testclient import TestClient

    from otelsiphon.api.app import app, get_receiver

    app.dependency_overrides[get_receiver] = lambda: receiver

    # Lifespan (sink construction) is not run without a context manager.
    client = TestClient(app)
    yield client

    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def reset_otelsiphon_logger():
    """Undo handler/propagation changes made by setup_logging()."""
    yield
    root = logging.getLogger("otelsiphon")
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    root.propagate = True
    root.setLevel(logging.NOTSET)
