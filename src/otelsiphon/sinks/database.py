"""SQL database sink backed by SQLAlchemy."""

import logging
from collections.abc import Sequence

from sqlalchemy import Engine
from sqlalchemy.exc import SQLAlchemyError

from otelsiphon.db.connection import create_db_engine, create_session_factory
from otelsiphon.db.models import OtelLogRecord
from otelsiphon.exceptions import SinkError
from otelsiphon.otel.mapper import FlatLogRecord

logger = logging.getLogger(__name__)


class DatabaseSink:
    """Insert each batch into ``otel_log_records`` in one transaction."""

    def __init__(self, database_url: str | None = None, *, engine: Engine | None = None):
        if engine is None:
            if not database_url:
                raise ValueError("DatabaseSink requires a database URL or an engine")
            engine = create_db_engine(database_url)
        self.engine = engine
        self._session_factory = create_session_factory(engine)

    def send(self, records: Sequence[FlatLogRecord]) -> None:
        rows = [OtelLogRecord(**record.to_dict()) for record in records]
        session = self._session_factory()
        try:
            session.add_all(rows)
            session.commit()
        except (SQLAlchemyError, OverflowError, ValueError) as exc:
            session.rollback()
            logger.error("Failed to insert %d records: %s", len(records), exc)
            raise SinkError(
                f"Failed to store records: {exc}", record_count=len(records)
            ) from exc
        finally:
            session.close()

        logger.debug("Inserted %d records into otel_log_records", len(rows))

    def close(self) -> None:
        self.engine.dispose()
