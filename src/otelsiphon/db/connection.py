"""
Database connection management for otelsiphon.

Builds engines and session factories for the database sink.
"""

from typing import Any

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from otelsiphon.db.models import Base

_IN_MEMORY_SQLITE_URLS = ("sqlite://", "sqlite:///:memory:")


def create_db_engine(database_url: str) -> Engine:
    """
    Create an engine for ``database_url`` and make sure the schema exists.

    SQLite URLs get ``check_same_thread=False`` so the engine can be shared
    with the API's worker threads. In-memory SQLite is pinned to a single
    connection, otherwise every checkout would see an empty database.
    """
    if database_url.startswith("sqlite"):
        kwargs: dict[str, Any] = {"connect_args": {"check_same_thread": False}}
        if database_url in _IN_MEMORY_SQLITE_URLS:
            kwargs["poolclass"] = StaticPool
        engine = create_engine(database_url, echo=False, **kwargs)
    else:
        engine = create_engine(database_url, echo=False, pool_pre_ping=True)

    Base.metadata.create_all(bind=engine)
    return engine


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Create a session factory bound to ``engine``."""
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)
