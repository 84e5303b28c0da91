"""Class-based schema migrations.

A migration is a `Migration` subclass identified by its import path
(`package.module:ClassName`). Applied migrations are journaled by name in
the `migrations` table and never re-applied. Parameters configured for a
migration are passed to its constructor and kept on `self.params`.
"""

from __future__ import annotations

import inspect
import logging
from typing import Any, Mapping, Sequence

from sqlalchemy import insert, select
from sqlalchemy.engine import Connection

from cms.db.base import Database
from cms.db.records import MigrationRecord
from cms.errors import InvalidConfigError
from cms.helpers import import_string, qualified_name, utcnow

logger = logging.getLogger(__name__)


class Migration:
    """Base class for migrations. Subclasses implement `up()`."""

    def __init__(self, db: Database, *args: Any, **params: Any) -> None:
        self.db = db
        self.args = args
        self.params = params

    @property
    def name(self) -> str:
        return qualified_name(type(self))

    def up(self, conn: Connection) -> None:
        raise NotImplementedError

    def execute_script(self, conn: Connection, sql: str) -> None:
        _exec_sql_compat(conn, sql)


def _exec_sql_compat(conn: Connection, sql: str) -> None:
    """Execute SQL text, tolerating multi-statement scripts on SQLite.

    SQLite's DB-API (pysqlite) does not allow multiple statements in a single
    execute() call, and executescript() would commit the open transaction.
    Split statements on ';' for SQLite, skipping comments, empty segments and
    explicit transaction control. Other dialects receive the script as-is.
    """
    name = (getattr(conn.dialect, "name", "") or "").lower()
    if "sqlite" not in name:
        conn.exec_driver_sql(sql)
        return
    for stmt in sql.split(";"):
        lines = [ln for ln in (stmt or "").splitlines() if not ln.strip().startswith("--")]
        s = "\n".join(lines).strip()
        if not s:
            continue
        if s.upper() in {"BEGIN", "COMMIT", "END"}:
            continue
        conn.exec_driver_sql(s)


def resolve_migration(identifier: str) -> type[Migration]:
    cls = import_string(identifier)
    if not inspect.isclass(cls) or not issubclass(cls, Migration):
        raise InvalidConfigError(f"{identifier} is not a migration class")
    return cls


def build_migration(
    db: Database, identifier: str, params: Mapping[str, Any] | Sequence[Any] | None = None
) -> Migration:
    """Instantiate a migration; mappings become keyword args, sequences positional."""
    cls = resolve_migration(identifier)
    if params is None:
        return cls(db)
    if isinstance(params, Mapping):
        return cls(db, **dict(params))
    if isinstance(params, (str, bytes)):
        return cls(db, params)
    return cls(db, *params)


def is_applied(conn: Connection, db: Database, name: str) -> bool:
    t = db.schema.migrations
    return conn.execute(select(t.c.id).where(t.c.name == name)).first() is not None


def applied_migrations(db: Database) -> list[str]:
    """Return journaled migration names in application order."""
    t = db.schema.migrations
    with db.begin() as conn:
        MigrationRecord(db.schema).create_table(conn)
        rows = conn.execute(select(t.c.name).order_by(t.c.id)).all()
    return [str(r[0]) for r in rows]


def apply_migration(db: Database, migration: Migration) -> bool:
    """Run `migration.up()` and journal it. Returns False if already applied."""
    with db.begin() as conn:
        MigrationRecord(db.schema).create_table(conn)
        if is_applied(conn, db, migration.name):
            logger.info("migration_already_applied name=%s", migration.name)
            return False
        migration.up(conn)
        conn.execute(insert(db.schema.migrations).values(name=migration.name, applyTime=utcnow()))
    logger.info("migration_applied name=%s", migration.name)
    return True


__all__ = [
    "Migration",
    "apply_migration",
    "applied_migrations",
    "build_migration",
    "is_applied",
    "resolve_migration",
]
