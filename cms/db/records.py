"""Table records: one object per table with guarded schema lifecycle.

A record wraps a SQLAlchemy `Table` and exposes create/drop and foreign key
management. Every lifecycle operation first checks `can_manage_table()`; a
record that cannot name its table skips the operation instead of failing, so
installers can walk a list of records without special cases.
"""

from __future__ import annotations

import logging

from sqlalchemy import ForeignKeyConstraint, Table
from sqlalchemy.engine import Connection
from sqlalchemy.schema import AddConstraint, DropConstraint

from cms.db.schema import Schema, get_schema

logger = logging.getLogger(__name__)


class TableRecord:
    logical_name: str = ""

    def __init__(self, schema: Schema | None = None) -> None:
        self.schema = schema or get_schema()

    @property
    def table_name(self) -> str:
        return self.logical_name

    @property
    def table(self) -> Table:
        return self.schema.tables[self.table_name]

    def can_manage_table(self) -> bool:
        return True

    def foreign_keys(self) -> list[ForeignKeyConstraint]:
        return sorted(
            (c for c in self.table.constraints if isinstance(c, ForeignKeyConstraint)),
            key=lambda c: str(c.name),
        )

    def _skip(self, operation: str) -> bool:
        if self.can_manage_table():
            return False
        logger.debug("table_operation_skipped record=%s operation=%s", type(self).__name__, operation)
        return True

    def create_table(self, conn: Connection) -> None:
        if self._skip("create_table"):
            return
        self.table.create(conn, checkfirst=True)
        logger.info("table_created name=%s", self.table.name)

    def drop_table(self, conn: Connection) -> None:
        if self._skip("drop_table"):
            return
        self.table.drop(conn, checkfirst=True)
        logger.info("table_dropped name=%s", self.table.name)

    def add_foreign_keys(self, conn: Connection) -> None:
        if self._skip("add_foreign_keys"):
            return
        if not conn.dialect.supports_alter:
            # SQLite: the keys were created inline with the table
            return
        for fk in self.foreign_keys():
            conn.execute(AddConstraint(fk))

    def drop_foreign_keys(self, conn: Connection) -> None:
        if self._skip("drop_foreign_keys"):
            return
        if not conn.dialect.supports_alter:
            return
        for fk in self.foreign_keys():
            conn.execute(DropConstraint(fk))


class UserRecord(TableRecord):
    logical_name = "users"


class SectionRecord(TableRecord):
    logical_name = "sections"


class EntryRecord(TableRecord):
    logical_name = "entries"


class SearchIndexRecord(TableRecord):
    logical_name = "searchindex"


class PluginRecord(TableRecord):
    logical_name = "plugins"


class MigrationRecord(TableRecord):
    logical_name = "migrations"


__all__ = [
    "EntryRecord",
    "MigrationRecord",
    "PluginRecord",
    "SearchIndexRecord",
    "SectionRecord",
    "TableRecord",
    "UserRecord",
]
