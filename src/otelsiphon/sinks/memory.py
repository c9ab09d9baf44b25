"""In-memory sink, used for dry runs and tests."""

from collections.abc import Sequence

from otelsiphon.otel.mapper import FlatLogRecord


class MemorySink:
    """Collects records in a list; each ``send`` call is kept as one batch."""

    def __init__(self) -> None:
        self.batches: list[list[FlatLogRecord]] = []

    @property
    def records(self) -> list[FlatLogRecord]:
        return [record for batch in self.batches for record in batch]

    def send(self, records: Sequence[FlatLogRecord]) -> None:
        self.batches.append(list(records))

    def close(self) -> None:
        pass
