"""Core table definitions.

Tables are SQLAlchemy Core objects built per table prefix: every physical
name is `<prefix><logical name>`. Column names keep the camelCase used by
stored data and by the search index contract (`elementId`, `entryId`).
Foreign keys are declared `use_alter` so they can be managed separately from
table creation on dialects that support ALTER TABLE.
"""

from __future__ import annotations

import uuid
from functools import lru_cache

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKeyConstraint,
    Integer,
    MetaData,
    PrimaryKeyConstraint,
    String,
    Table,
    Text,
    UniqueConstraint,
)

from cms.helpers import utcnow


def audit_columns() -> list[Column]:
    """Standard bookkeeping columns carried by every record table."""
    return [
        Column("dateCreated", DateTime, nullable=False, default=utcnow),
        Column("dateUpdated", DateTime, nullable=False, default=utcnow, onupdate=utcnow),
        Column("uid", String(36), nullable=False, default=lambda: str(uuid.uuid4())),
    ]


class Schema:
    """The core tables for one table prefix."""

    def __init__(self, prefix: str = "") -> None:
        self.prefix = prefix
        self.metadata = MetaData()
        p = self.table_name

        self.users = Table(
            p("users"),
            self.metadata,
            Column("id", Integer, primary_key=True, autoincrement=True),
            Column("username", String(100), nullable=False),
            Column("email", String(255), nullable=False),
            Column("admin", Boolean, nullable=False, default=False),
            *audit_columns(),
            UniqueConstraint("username", name=p("users_username_unq")),
        )

        self.sections = Table(
            p("sections"),
            self.metadata,
            Column("id", Integer, primary_key=True, autoincrement=True),
            Column("name", String(255), nullable=False),
            Column("handle", String(64), nullable=False),
            *audit_columns(),
            UniqueConstraint("handle", name=p("sections_handle_unq")),
        )

        self.entries = Table(
            p("entries"),
            self.metadata,
            Column("id", Integer, primary_key=True, autoincrement=True),
            Column("sectionId", Integer, nullable=False),
            Column("authorId", Integer, nullable=True),
            Column("postDate", DateTime, nullable=True),
            Column("enabled", Boolean, nullable=False, default=True),
            *audit_columns(),
            ForeignKeyConstraint(
                ["sectionId"], [self.sections.c.id],
                name=p("entries_sectionId_fk"), ondelete="CASCADE", use_alter=True,
            ),
            ForeignKeyConstraint(
                ["authorId"], [self.users.c.id],
                name=p("entries_authorId_fk"), ondelete="SET NULL", use_alter=True,
            ),
        )

        # Rows here are deleted explicitly after each test; some MySQL setups
        # keep this table on a non-transactional engine.
        self.searchindex = Table(
            p("searchindex"),
            self.metadata,
            Column("elementId", Integer, nullable=False),
            Column("attribute", String(25), nullable=False),
            Column("fieldId", Integer, nullable=False, default=0),
            Column("locale", String(12), nullable=False),
            Column("keywords", Text, nullable=False),
            PrimaryKeyConstraint("elementId", "attribute", "fieldId", "locale", name=p("searchindex_pk")),
        )

        self.plugins = Table(
            p("plugins"),
            self.metadata,
            Column("id", Integer, primary_key=True, autoincrement=True),
            Column("handle", String(150), nullable=False),
            Column("version", String(15), nullable=False),
            Column("enabled", Boolean, nullable=False, default=True),
            Column("installDate", DateTime, nullable=False, default=utcnow),
            Column("uid", String(36), nullable=False, default=lambda: str(uuid.uuid4())),
            UniqueConstraint("handle", name=p("plugins_handle_unq")),
        )

        self.migrations = Table(
            p("migrations"),
            self.metadata,
            Column("id", Integer, primary_key=True, autoincrement=True),
            Column("name", String(255), nullable=False),
            Column("applyTime", DateTime, nullable=False, default=utcnow),
            UniqueConstraint("name", name=p("migrations_name_unq")),
        )

    def table_name(self, name: str) -> str:
        return f"{self.prefix}{name}"

    @property
    def tables(self) -> dict[str, Table]:
        """Core tables keyed by logical name."""
        return {
            "users": self.users,
            "sections": self.sections,
            "entries": self.entries,
            "searchindex": self.searchindex,
            "plugins": self.plugins,
            "migrations": self.migrations,
        }


@lru_cache(maxsize=None)
def get_schema(prefix: str = "") -> Schema:
    """Return the shared Schema for a prefix."""
    return Schema(prefix)


__all__ = ["Schema", "audit_columns", "get_schema"]
