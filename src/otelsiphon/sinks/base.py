"""
Sink protocol for flat log records.

A sink durably accepts a non-empty batch of records produced by one
transformation call. Delivery failures are raised as ``SinkError``; sinks
do not retry.
"""

from collections.abc import Sequence
from typing import Protocol

from otelsiphon.otel.mapper import FlatLogRecord


class LogSink(Protocol):
    """Protocol for flat log record destinations."""

    def send(self, records: Sequence[FlatLogRecord]) -> None:
        """
        Deliver a batch of records.

        Args:
            records: Flat records in document order (never empty)

        Raises:
            SinkError: If the batch could not be stored
        """
        ...

    def close(self) -> None:
        """Release any resources held by the sink."""
        ...
