"""Tests for flat record sinks."""

import json
from unittest.mock import MagicMock

import httpx
import pytest
from payloads import build_request
from sqlalchemy.orm import Session

from otelsiphon.config import Settings
from otelsiphon.db.models import OtelLogRecord
from otelsiphon.exceptions import ConfigurationError, SinkError
from otelsiphon.otel.mapper import transform
from otelsiphon.sinks import (
    DatabaseSink,
    HttpPipelineSink,
    JsonlFileSink,
    MemorySink,
    build_sink,
)


@pytest.fixture
def records(sample_request, fixed_clock):
    return transform(sample_request, clock=fixed_clock)


class TestMemorySink:
    """Tests for MemorySink."""

    def test_keeps_batches(self, records):
        """Test each send is kept as its own batch."""
        sink = MemorySink()

        sink.send(records)
        sink.send(records[:1])

        assert len(sink.batches) == 2
        assert sink.records == records + records[:1]


class TestJsonlFileSink:
    """Tests for JsonlFileSink."""

    def test_appends_one_line_per_record(self, tmp_path, records):
        """Test records are appended as JSON lines across calls."""
        path = tmp_path / "out" / "logs.jsonl"
        sink = JsonlFileSink(path)

        sink.send(records)
        sink.send(records[:1])

        lines = path.read_text(encoding="utf-8").splitlines()
        assert len(lines) == 3
        first = json.loads(lines[0])
        assert first == records[0].to_dict()
        assert "observed_timestamp" not in json.loads(lines[1])

    def test_write_failure_raises_sink_error(self, tmp_path, records):
        """Test filesystem errors surface as SinkError."""
        sink = JsonlFileSink(tmp_path)  # a directory, not a file

        with pytest.raises(SinkError) as exc_info:
            sink.send(records)

        assert exc_info.value.record_count == len(records)


class TestHttpPipelineSink:
    """Tests for HttpPipelineSink."""

    def test_posts_json_array(self, records):
        """Test records are posted as a JSON array with the bearer token."""
        captured: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            captured.append(request)
            return httpx.Response(200, json={"success": True})

        with HttpPipelineSink(
            "https://pipeline.example.com/ingest",
            token="secret",
            transport=httpx.MockTransport(handler),
        ) as sink:
            sink.send(records)

        assert len(captured) == 1
        request = captured[0]
        assert request.method == "POST"
        assert request.headers["Authorization"] == "Bearer secret"
        assert json.loads(request.content) == [r.to_dict() for r in records]

    def test_no_token_no_auth_header(self, records):
        """Test the Authorization header is only sent with a token."""
        captured: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            captured.append(request)
            return httpx.Response(202)

        sink = HttpPipelineSink("https://pipeline.example.com", transport=httpx.MockTransport(handler))
        sink.send(records)
        sink.close()

        assert "Authorization" not in captured[0].headers

    def test_error_status_raises_sink_error(self, records):
        """Test non-2xx responses surface as SinkError."""
        transport = httpx.MockTransport(lambda request: httpx.Response(503, text="busy"))
        sink = HttpPipelineSink("https://pipeline.example.com", transport=transport)

        with pytest.raises(SinkError, match="503"):
            sink.send(records)

    def test_transport_error_raises_sink_error(self, records):
        """Test connection failures surface as SinkError."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        sink = HttpPipelineSink("https://pipeline.example.com", transport=httpx.MockTransport(handler))

        with pytest.raises(SinkError, match="connection refused"):
            sink.send(records)

    def test_requires_url(self):
        """Test a URL is mandatory."""
        with pytest.raises(ValueError):
            HttpPipelineSink("")


class TestDatabaseSink:
    """Tests for DatabaseSink."""

    def test_inserts_rows(self, records):
        """Test each record becomes one row with its JSON attributes."""
        sink = DatabaseSink("sqlite://")

        sink.send(records)

        with Session(sink.engine) as session:
            rows = session.query(OtelLogRecord).order_by(OtelLogRecord.id).all()
            assert len(rows) == 2
            assert rows[0].severity_text == "INFO"
            assert rows[0].timestamp_ns == 1700000000000000000
            assert rows[0].resource_attributes == {"service.name": "checkout"}
            assert rows[1].body == '{"error":"timeout"}'
            assert rows[1].trace_id is None
        sink.close()

    def test_full_fixed64_range_and_long_identifiers(self, fixed_clock):
        """Test unsigned 64-bit timestamps and oversized pass-through text are stored."""
        long_id = "not-an-id!" * 20
        request = build_request(
            [
                {
                    "timeUnixNano": "18446744073709551615",
                    "observedTimeUnixNano": "18446744073709551615",
                    "traceId": long_id,
                    "spanId": long_id,
                    "severityText": "S" * 200,
                }
            ]
        )
        records = transform(request, clock=fixed_clock)
        sink = DatabaseSink("sqlite://")

        sink.send(records)

        with Session(sink.engine) as session:
            row = session.query(OtelLogRecord).one()
            assert row.timestamp == "2554-07-21T23:34:33.709Z"
            assert row.timestamp_ns == 18446744073709551615
            assert row.observed_timestamp_ns == 18446744073709551615
            assert row.trace_id == long_id
            assert row.span_id == long_id
            assert row.severity_text == "S" * 200
        sink.close()

    def test_driver_errors_raise_sink_error(self, records):
        """Test non-SQLAlchemy driver errors are wrapped and rolled back."""
        sink = DatabaseSink("sqlite://")
        session = MagicMock()
        session.commit.side_effect = OverflowError("int too large to convert")
        sink._session_factory = lambda: session

        with pytest.raises(SinkError, match="int too large") as exc_info:
            sink.send(records)

        assert exc_info.value.record_count == len(records)
        session.rollback.assert_called_once()
        session.close.assert_called_once()
        sink.close()

    def test_requires_url_or_engine(self):
        """Test a database URL or engine is mandatory."""
        with pytest.raises(ValueError):
            DatabaseSink()


class TestBuildSink:
    """Tests for build_sink."""

    def test_jsonl(self, tmp_path):
        """Test the jsonl sink writes to sink_path."""
        sink = build_sink(Settings(sink_type="jsonl", sink_path=str(tmp_path / "a.jsonl")))

        assert isinstance(sink, JsonlFileSink)
        assert sink.path == tmp_path / "a.jsonl"

    def test_memory(self):
        """Test the memory sink."""
        assert isinstance(build_sink(Settings(sink_type="memory")), MemorySink)

    def test_http(self):
        """Test the http sink requires and uses sink_url."""
        sink = build_sink(Settings(sink_type="HTTP", sink_url="https://pipeline.example.com"))

        assert isinstance(sink, HttpPipelineSink)
        sink.close()

    def test_http_without_url(self):
        """Test a missing sink_url is a configuration error."""
        with pytest.raises(ConfigurationError, match="SINK_URL"):
            build_sink(Settings(sink_type="http", sink_url=""))

    def test_database(self):
        """Test the database sink uses database_url."""
        sink = build_sink(Settings(sink_type="database", database_url="sqlite://"))

        assert isinstance(sink, DatabaseSink)
        sink.close()

    def test_unknown_type(self):
        """Test unknown sink types are rejected."""
        with pytest.raises(ConfigurationError, match="Unknown sink type"):
            build_sink(Settings(sink_type="kafka"))

