"""Engine construction for the SQL stock store."""

from __future__ import annotations

import logging

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.engine import make_url
from sqlalchemy.pool import StaticPool

from marketstock.infrastructure.persistence.sql_models import Base

logger = logging.getLogger(__name__)


def make_engine(database_url: str, busy_timeout_seconds: int = 30) -> Engine:
    """Create an engine and make sure the stock tables exist.

    SQLite connections may be used from several threads and wait up to
    *busy_timeout_seconds* for a competing writer instead of failing.
    """
    url = make_url(database_url)
    is_sqlite = url.get_backend_name() == "sqlite"
    is_sqlite_memory = is_sqlite and url.database in (None, "", ":memory:")

    connect_args: dict[str, object] = {}
    engine_kwargs: dict[str, object] = dict(pool_pre_ping=True)
    if is_sqlite:
        connect_args = {"check_same_thread": False, "timeout": busy_timeout_seconds}
        if is_sqlite_memory:
            engine_kwargs.update(poolclass=StaticPool)

    engine = create_engine(database_url, connect_args=connect_args, **engine_kwargs)

    if is_sqlite:
        @event.listens_for(engine, "connect")
        def _set_sqlite_pragmas(dbapi_connection, _connection_record):
            cursor = dbapi_connection.cursor()
            try:
                cursor.execute("PRAGMA foreign_keys=ON")
                cursor.execute(f"PRAGMA busy_timeout={busy_timeout_seconds * 1000}")
            finally:
                cursor.close()

    Base.metadata.create_all(engine)
    logger.debug("Stock tables ready on %s", url.render_as_string(hide_password=True))
    return engine
