from __future__ import annotations

from sqlalchemy import text

from cms.db.migrations_runner import Migration


class CreateTagsTable(Migration):
    def up(self, conn):
        table = self.db.table_name(self.params.get("table", "tags"))
        self.execute_script(
            conn,
            f"""
            -- tags for entries
            CREATE TABLE {table} (id INTEGER PRIMARY KEY, name VARCHAR(64) NOT NULL);
            CREATE UNIQUE INDEX {table}_name_unq_idx ON {table} (name);
            """,
        )


class _LogMigration(Migration):
    label = ""

    def up(self, conn):
        conn.exec_driver_sql(
            "CREATE TABLE IF NOT EXISTS migration_log "
            "(id INTEGER PRIMARY KEY AUTOINCREMENT, label VARCHAR(32) NOT NULL)"
        )
        conn.execute(
            text("INSERT INTO migration_log (label) VALUES (:label)"),
            {"label": self.params.get("label", self.label)},
        )


class FirstLogMigration(_LogMigration):
    label = "first"


class SecondLogMigration(_LogMigration):
    label = "second"


class ThirdLogMigration(_LogMigration):
    label = "third"


class NoisyMigration(Migration):
    def up(self, conn):
        print("noisy migration output")


class FailingMigration(Migration):
    def up(self, conn):
        raise RuntimeError("boom")


class NotAMigration:
    pass
