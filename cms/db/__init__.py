"""Database layer: the `Database` component, core schema, table records and
the class-based migrations runner. No ORM sessions are used; statements are
built with SQLAlchemy Core against the tables in `cms.db.schema`.
"""

from cms.db.base import Database
from cms.db.migrations_runner import Migration, apply_migration
from cms.db.schema import Schema, get_schema

__all__ = [
    "Database",
    "Migration",
    "Schema",
    "apply_migration",
    "get_schema",
]
