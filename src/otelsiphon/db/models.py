"""
SQLAlchemy database models for otelsiphon.

One row per flattened OTLP log record.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy import JSON, DateTime, Index, Integer, Numeric, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.sql import func
from sqlalchemy.types import TypeDecorator

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests).
JsonColumn = JSON().with_variant(JSONB(), "postgresql")


class WideInteger(TypeDecorator):
    """
    Integer covering the full OTLP ``fixed64`` range.

    Stored as ``NUMERIC(20, 0)`` where the dialect has native decimals and
    as decimal text otherwise, since values may exceed a signed BIGINT.
    """

    impl = Numeric(20, 0)
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.supports_native_decimal:
            return dialect.type_descriptor(Numeric(20, 0))
        return dialect.type_descriptor(String(20))

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if dialect.supports_native_decimal:
            return Decimal(value)
        return str(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return int(value)


class Base(DeclarativeBase):
    """Base class for all database models."""

    pass


class OtelLogRecord(Base):
    """A flattened OTLP log record."""

    __tablename__ = "otel_log_records"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    timestamp: Mapped[str] = mapped_column(String(32), nullable=False)
    timestamp_ns: Mapped[int] = mapped_column(WideInteger, nullable=False, default=0)
    observed_timestamp: Mapped[Optional[str]] = mapped_column(String(32))
    observed_timestamp_ns: Mapped[int] = mapped_column(WideInteger, nullable=False, default=0)
    severity_number: Mapped[int] = mapped_column(WideInteger, nullable=False, default=0)
    severity_text: Mapped[str] = mapped_column(Text, nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False, default="")
    trace_id: Mapped[Optional[str]] = mapped_column(Text)
    span_id: Mapped[Optional[str]] = mapped_column(Text)
    flags: Mapped[Optional[int]] = mapped_column(WideInteger)
    attributes: Mapped[dict[str, Any]] = mapped_column(JsonColumn, nullable=False, default=dict)
    resource_attributes: Mapped[dict[str, Any]] = mapped_column(
        JsonColumn, nullable=False, default=dict
    )
    scope_name: Mapped[Optional[str]] = mapped_column(Text)
    scope_version: Mapped[Optional[str]] = mapped_column(Text)
    scope_attributes: Mapped[dict[str, Any]] = mapped_column(
        JsonColumn, nullable=False, default=dict
    )
    dropped_attributes_count: Mapped[Optional[int]] = mapped_column(WideInteger)
    ingested_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    __table_args__ = (
        Index("ix_otel_log_records_timestamp_ns", "timestamp_ns"),
        Index("ix_otel_log_records_trace_id", "trace_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<OtelLogRecord(id={self.id}, timestamp={self.timestamp}, "
            f"severity_text={self.severity_text})>"
        )
