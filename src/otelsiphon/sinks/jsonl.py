"""JSON-lines file sink."""

import json
import logging
import threading
from collections.abc import Sequence
from pathlib import Path

from otelsiphon.exceptions import SinkError
from otelsiphon.otel.mapper import FlatLogRecord

logger = logging.getLogger(__name__)


class JsonlFileSink:
    """
    Append records to a file, one JSON object per line.

    Each batch is written with a single ``write`` call under a lock so that
    concurrent requests never interleave lines.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path).expanduser()
        self._lock = threading.Lock()

    def send(self, records: Sequence[FlatLogRecord]) -> None:
        lines = "".join(
            json.dumps(record.to_dict(), ensure_ascii=False, default=str) + "\n"
            for record in records
        )
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self._lock, self.path.open("a", encoding="utf-8") as handle:
                handle.write(lines)
        except OSError as exc:
            logger.error("Failed to write %d records to %s: %s", len(records), self.path, exc)
            raise SinkError(
                f"Failed to write records to {self.path}: {exc}",
                record_count=len(records),
            ) from exc

        logger.debug("Wrote %d records to %s", len(records), self.path)

    def close(self) -> None:
        pass
