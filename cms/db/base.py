"""SQLAlchemy engine ownership and the `Database` component.

The service targets MySQL or PostgreSQL in production and SQLite for local
development and CI. `Database` is what the application container registers
as its `db` component: it owns one Engine, knows the table prefix, and hands
out connections. A database can be pinned to a single connection so that
everything a test does runs inside one transaction that is rolled back
afterwards.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Connection, Engine, URL, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool

from cms.config import DbConfig, database_url
from cms.db.schema import Schema, get_schema

logger = logging.getLogger(__name__)


def _create_engine(url: URL, schema_name: str = "") -> Engine:
    """Create an Engine with dialect-specific connection settings.

    For SQLite in-memory URLs, use a StaticPool to keep a single connection
    alive across the process. SQLite connections are allowed to cross threads
    because FastAPI runs sync handlers in a worker pool.
    """
    kwargs: dict = {"future": True, "pool_pre_ping": True}
    backend = url.get_backend_name()
    if backend == "sqlite":
        kwargs["connect_args"] = {"check_same_thread": False}
        if (url.database or ":memory:") == ":memory:":
            kwargs["poolclass"] = StaticPool
    elif backend == "postgresql" and schema_name:
        kwargs["connect_args"] = {"options": f"-csearch_path={schema_name}"}

    engine = create_engine(url, **kwargs)

    if backend == "sqlite":
        # pysqlite defers BEGIN until the first DML and never wraps DDL; take
        # over transaction control so CREATE/DROP roll back with the rest.
        @event.listens_for(engine, "connect")
        def _sqlite_connect(dbapi_connection, connection_record):  # type: ignore[no-untyped-def]
            dbapi_connection.isolation_level = None
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        @event.listens_for(engine, "begin")
        def _sqlite_begin(conn):  # type: ignore[no-untyped-def]
            conn.exec_driver_sql("BEGIN")

    return engine


class Database:
    """Connection component: engine, table prefix and schema for one database."""

    def __init__(self, url: str | URL, *, table_prefix: str = "", schema_name: str = "") -> None:
        self.url = make_url(url) if isinstance(url, str) else url
        self.table_prefix = table_prefix or ""
        self.schema_name = schema_name or ""
        self._engine: Engine | None = None
        self._pinned: Connection | None = None

    @classmethod
    def from_config(cls, config: DbConfig) -> "Database":
        return cls(database_url(config), table_prefix=config.table_prefix, schema_name=config.schema_name)

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            self._engine = _create_engine(self.url, self.schema_name)
            logger.debug("db_engine_created backend=%s prefix=%s", self.url.get_backend_name(), self.table_prefix)
        return self._engine

    @property
    def schema(self) -> Schema:
        return get_schema(self.table_prefix)

    @property
    def driver_name(self) -> str:
        return self.url.get_backend_name()

    def table_name(self, name: str) -> str:
        """Return the physical name of a logical table (prefix applied)."""
        return f"{self.table_prefix}{name}"

    @contextmanager
    def begin(self) -> Iterator[Connection]:
        """Yield a connection inside a transaction that commits on success.

        When pinned, the block runs in a savepoint on the pinned connection:
        a failing block is rolled back to where it started, and the outer
        transaction stays owned by whoever pinned it.
        """
        if self._pinned is not None:
            with self._pinned.begin_nested():
                yield self._pinned
            return
        with self.engine.begin() as conn:
            yield conn

    @property
    def is_pinned(self) -> bool:
        return self._pinned is not None

    def pin(self, connection: Connection) -> None:
        self._pinned = connection

    def unpin(self) -> None:
        self._pinned = None

    def ping(self) -> bool:
        try:
            with self.begin() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError:
            logger.error("db_ping_failed", exc_info=True)
            return False

    def dispose(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None


__all__ = ["Database"]
