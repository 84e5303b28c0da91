"""Baseline schema installation and seed data."""

from __future__ import annotations

import logging

from sqlalchemy import insert
from sqlalchemy.engine import Connection

from cms.db.records import (
    EntryRecord,
    MigrationRecord,
    PluginRecord,
    SearchIndexRecord,
    SectionRecord,
    TableRecord,
    UserRecord,
)
from cms.db.schema import Schema
from cms.models.entry_content import EntryContentRecord

logger = logging.getLogger(__name__)

# The admin user created with the database; its search-index rows survive
# the per-test cleanup.
SEED_USER_ID = 1


def core_records(schema: Schema) -> list[TableRecord]:
    """All records installed with the database, in dependency order.

    Includes an unbound content record: its lifecycle calls are skipped and
    content tables are created per section instead.
    """
    return [
        UserRecord(schema),
        SectionRecord(schema),
        EntryRecord(schema),
        EntryContentRecord(schema=schema),
        SearchIndexRecord(schema),
        PluginRecord(schema),
        MigrationRecord(schema),
    ]


def install_core_schema(
    conn: Connection,
    schema: Schema,
    *,
    admin_username: str = "admin",
    admin_email: str = "admin@example.com",
) -> None:
    records = core_records(schema)
    for record in records:
        record.create_table(conn)
    for record in records:
        record.add_foreign_keys(conn)

    conn.execute(
        insert(schema.users).values(id=SEED_USER_ID, username=admin_username, email=admin_email, admin=True)
    )
    conn.execute(
        insert(schema.searchindex),
        [
            {"elementId": SEED_USER_ID, "attribute": "username", "fieldId": 0, "locale": "en_us", "keywords": f" {admin_username.lower()} "},
            {"elementId": SEED_USER_ID, "attribute": "email", "fieldId": 0, "locale": "en_us", "keywords": f" {admin_email.lower()} "},
        ],
    )
    logger.info("core_schema_installed prefix=%s tables=%d", schema.prefix, len(schema.tables))


__all__ = ["SEED_USER_ID", "core_records", "install_core_schema"]
