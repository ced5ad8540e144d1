"""SQLModel database engine, table setup and store sessions."""

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

logger = logging.getLogger(__name__)

# Request handlers run in FastAPI's threadpool. With StaticPool they all share
# one sqlite3 connection, so store sessions must not interleave.
_session_lock = threading.RLock()


def make_engine(database_url: str) -> Engine:
    """Create an engine for the given URL.

    In-memory SQLite gets a StaticPool so every session in the process sees
    the same database.
    """
    connect_args = {}
    kwargs = {}
    if database_url.startswith("sqlite"):
        # SQLite needs check_same_thread=False; PostgreSQL does not
        connect_args["check_same_thread"] = False
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool

    return create_engine(
        database_url,
        echo=False,
        connect_args=connect_args,
        **kwargs,
    )


@contextmanager
def store_session(engine: Engine) -> Iterator[Session]:
    """One serialized unit of work. Objects stay usable after commit."""
    with _session_lock:
        with Session(engine, expire_on_commit=False) as session:
            yield session


def create_db_and_tables(engine: Engine):
    """Create all tables. Called on startup."""
    # Register the table models on the metadata
    import flowgenie.models  # noqa: F401

    SQLModel.metadata.create_all(engine)
    logger.info(f"Database ready ({engine.url.get_backend_name()})")
