"""Per-section entry content table.

Each section stores the localized content of its entries in its own table,
`entrycontent_<section handle>`. One row per (entry, language) pair, enforced
by a unique index. The descriptor is only meaningful once bound to a
section: asking an unbound descriptor for its table name is an error, while
table lifecycle operations on it are skipped.
"""

from __future__ import annotations

from typing import Any, Optional

from sqlalchemy import (
    Column,
    ForeignKeyConstraint,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    insert,
    select,
)
from sqlalchemy.engine import Connection

from cms.db.records import TableRecord
from cms.db.schema import Schema, audit_columns
from cms.errors import InvalidConfigError
from cms.models.section import Section


TABLE_NAME_PREFIX = "entrycontent_"


class EntryContentRecord(TableRecord):
    def __init__(self, section: Optional[Section] = None, *, schema: Optional[Schema] = None) -> None:
        super().__init__(schema)
        self.section: Optional[Section] = section if isinstance(section, Section) else None
        self._table: Optional[Table] = None

    @staticmethod
    def table_name_for_section(section: Section) -> str:
        """Return the logical content table name for a section."""
        return TABLE_NAME_PREFIX + section.handle

    @property
    def table_name(self) -> str:
        if self.section is None:
            raise InvalidConfigError("Cannot get the table name if a section hasn't been defined.")
        return self.table_name_for_section(self.section)

    @property
    def table(self) -> Table:
        if self._table is None:
            self._table = self._build_table()
        return self._table

    def can_manage_table(self) -> bool:
        return self.section is not None

    def _build_table(self) -> Table:
        physical = self.schema.table_name(self.table_name)
        # Own MetaData: content tables come and go with their sections
        return Table(
            physical,
            MetaData(),
            Column("id", Integer, primary_key=True, autoincrement=True),
            Column("entryId", Integer, nullable=False),
            Column("language", String(12), nullable=False),
            Column("title", String(255), nullable=True),
            *audit_columns(),
            ForeignKeyConstraint(
                ["entryId"], [self.schema.entries.c.id],
                name=f"{physical}_entryId_fk", ondelete="CASCADE", use_alter=True,
            ),
            Index(f"{physical}_entryId_language_unq_idx", "entryId", "language", unique=True),
        )

    def insert_content(self, conn: Connection, *, entry_id: int, language: str, title: Optional[str]) -> int:
        """Insert a content row and return its id.

        A second row for the same entry and language raises IntegrityError.
        """
        result = conn.execute(
            insert(self.table).values(entryId=entry_id, language=language, title=title)
        )
        return int(result.inserted_primary_key[0])

    def find_content(self, conn: Connection, entry_id: int, language: str) -> Optional[dict[str, Any]]:
        t = self.table
        row = conn.execute(
            select(t).where(t.c.entryId == entry_id, t.c.language == language)
        ).mappings().first()
        return dict(row) if row else None


__all__ = ["EntryContentRecord", "TABLE_NAME_PREFIX"]
