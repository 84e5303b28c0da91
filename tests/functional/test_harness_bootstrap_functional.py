"""Functional tests for the harness bootstrap sequence (`setup_db`).

Each test drives its own harness against a throwaway SQLite database
described by `harness_env`, so the session database is left alone.
"""

from __future__ import annotations

import json
import sys

import pytest
from sqlalchemy import inspect, select, text

from cms.config import db_config_from_env
from cms.db.base import Database
from cms.db.migrations_runner import applied_migrations
from cms.errors import InvalidConfigError
from cms.testing.config import HarnessConfig, load_harness_config
from cms.testing.harness import CmsTestHarness

CORE_TABLES = {"users", "sections", "entries", "searchindex", "plugins", "migrations"}


def _harness(env: dict, **config) -> CmsTestHarness:
    return CmsTestHarness(HarnessConfig.model_validate(config), env=env)


def _db(env: dict) -> Database:
    return Database.from_config(db_config_from_env(env))


def _tables(env: dict) -> set:
    db = _db(env)
    try:
        with db.begin() as conn:
            return set(inspect(conn).get_table_names())
    finally:
        db.dispose()


def _scalars(env: dict, sql: str) -> list:
    db = _db(env)
    try:
        with db.begin() as conn:
            return list(conn.execute(text(sql)).scalars().all())
    finally:
        db.dispose()


def test_without_db_setup_nothing_is_created(harness_env):
    _harness(harness_env).initialize()
    assert _tables(harness_env) == set()


def test_setup_installs_core_schema_and_seed_rows(harness_env):
    _harness(harness_env, dbSetup={"setupCraft": True}).initialize()
    tables = _tables(harness_env)
    assert CORE_TABLES <= tables
    assert not any(name.startswith("entrycontent_") for name in tables)
    assert _scalars(harness_env, "SELECT id FROM users") == [1]
    assert set(_scalars(harness_env, "SELECT elementId FROM searchindex")) == {1}


def test_table_prefix_is_applied_to_core_tables(harness_env):
    env = {**harness_env, "TEST_DB_TABLE_PREFIX": "cms_"}
    _harness(env, dbSetup={"setupCraft": True}).initialize()
    assert {f"cms_{name}" for name in CORE_TABLES} <= _tables(env)


def test_migrations_applied_in_listed_order(harness_env):
    migrations = [
        {"class": "cms_fixtures.migrations:ThirdLogMigration"},
        {"class": "cms_fixtures.migrations:FirstLogMigration"},
        {"class": "cms_fixtures.migrations:SecondLogMigration"},
    ]
    _harness(
        harness_env,
        dbSetup={"setupCraft": True, "setupMigrations": True},
        migrations=migrations,
    ).initialize()

    assert _scalars(harness_env, "SELECT label FROM migration_log ORDER BY id") == ["third", "first", "second"]
    db = _db(harness_env)
    try:
        assert applied_migrations(db) == [
            "cms_fixtures.migrations.ThirdLogMigration",
            "cms_fixtures.migrations.FirstLogMigration",
            "cms_fixtures.migrations.SecondLogMigration",
        ]
    finally:
        db.dispose()


def test_migrations_skipped_without_flag(harness_env):
    _harness(
        harness_env,
        dbSetup={"setupCraft": True, "setupMigrations": False},
        migrations=[{"class": "cms_fixtures.migrations:FirstLogMigration"}],
    ).initialize()
    assert "migration_log" not in _tables(harness_env)
    assert _scalars(harness_env, "SELECT name FROM migrations") == []


def test_migration_params_reach_the_migration(harness_env):
    _harness(
        harness_env,
        dbSetup={"setupMigrations": True},
        migrations=[{"class": "cms_fixtures.migrations:CreateTagsTable", "params": {"table": "labels"}}],
    ).initialize()
    assert "labels" in _tables(harness_env)


def test_applied_migration_is_not_reapplied(harness_env):
    config = {
        "dbSetup": {"setupCraft": True, "setupMigrations": True},
        "migrations": [{"class": "cms_fixtures.migrations:FirstLogMigration"}],
    }
    _harness(harness_env, **config).initialize()
    _harness(harness_env, dbSetup={"setupMigrations": True}, migrations=config["migrations"]).initialize()
    assert _scalars(harness_env, "SELECT label FROM migration_log") == ["first"]


def test_clean_drops_every_table(harness_env):
    db = _db(harness_env)
    with db.begin() as conn:
        conn.exec_driver_sql("CREATE TABLE leftover (id INTEGER PRIMARY KEY)")
    db.dispose()

    _harness(harness_env, dbSetup={"clean": True}).initialize()
    assert _tables(harness_env) == set()


def test_clean_and_setup_can_run_repeatedly(harness_env):
    config = {"dbSetup": {"clean": True, "setupCraft": True}}
    _harness(harness_env, **config).initialize()
    _harness(harness_env, **config).initialize()
    assert _scalars(harness_env, "SELECT id FROM users") == [1]


def test_configured_plugin_is_installed(harness_env):
    _harness(
        harness_env,
        dbSetup={"setupCraft": True},
        plugins=[{"handle": "seo", "class": "cms_fixtures.plugins:SeoPlugin"}],
    ).initialize()
    assert _scalars(harness_env, "SELECT handle FROM plugins") == ["seo"]
    assert _scalars(harness_env, "SELECT version FROM plugins") == ["2.1.0"]
    assert "seo_meta" in _tables(harness_env)


def test_unknown_plugin_handle_raises_and_installs_nothing(harness_env):
    harness = _harness(
        harness_env,
        dbSetup={"setupCraft": True},
        plugins=[{"handle": "nope"}, {"handle": "seo", "class": "cms_fixtures.plugins:SeoPlugin"}],
    )
    with pytest.raises(InvalidConfigError, match="Invalid plugin handle: nope"):
        harness.initialize()
    assert _scalars(harness_env, "SELECT handle FROM plugins") == []


def test_plugin_class_must_be_a_plugin(harness_env):
    harness = _harness(
        harness_env,
        dbSetup={"setupCraft": True},
        plugins=[{"handle": "bad", "class": "cms_fixtures.plugins:NotAPlugin"}],
    )
    with pytest.raises(InvalidConfigError):
        harness.initialize()


def test_output_is_suppressed_during_setup(harness_env, capsys):
    _harness(
        harness_env,
        dbSetup={"setupCraft": True, "setupMigrations": True},
        migrations=[{"class": "cms_fixtures.migrations:NoisyMigration"}],
    ).initialize()
    print("after setup")
    assert capsys.readouterr().out == "after setup\n"


def test_failure_aborts_sequence_and_restores_output(harness_env):
    stdout = sys.stdout
    harness = _harness(
        harness_env,
        dbSetup={"setupCraft": True, "setupMigrations": True},
        migrations=[
            {"class": "cms_fixtures.migrations:FailingMigration"},
            {"class": "cms_fixtures.migrations:FirstLogMigration"},
        ],
        plugins=[{"handle": "seo", "class": "cms_fixtures.plugins:SeoPlugin"}],
    )
    with pytest.raises(RuntimeError, match="boom"):
        harness.initialize()

    assert sys.stdout is stdout
    tables = _tables(harness_env)
    assert "migration_log" not in tables
    assert "seo_meta" not in tables
    assert _scalars(harness_env, "SELECT name FROM migrations") == []


def test_non_migration_class_is_a_config_error(harness_env):
    harness = _harness(
        harness_env,
        dbSetup={"setupMigrations": True},
        migrations=[{"class": "cms_fixtures.migrations:NotAMigration"}],
    )
    with pytest.raises(InvalidConfigError):
        harness.initialize()


def test_bootstrap_application_is_torn_down(harness_env):
    harness = _harness(harness_env, dbSetup={"setupCraft": True})
    harness.initialize()
    assert harness.app is None
    assert harness.web_app is None


@pytest.mark.parametrize(
    "env",
    [
        {"TEST_DB_DRIVER": "sqlite"},
        {"TEST_DB_DRIVER": "sqlite", "TEST_DB_NAME": ":memory:"},
        {},
    ],
)
def test_in_memory_sqlite_is_rejected(env):
    harness = _harness(env, dbSetup={"setupCraft": True})
    with pytest.raises(InvalidConfigError, match="TEST_DB_NAME"):
        harness.initialize()
    with pytest.raises(InvalidConfigError, match="TEST_DB_NAME"):
        harness.before()


def test_bootstrapped_schema_is_visible_to_each_test(harness_env):
    harness = _harness(harness_env, dbSetup={"setupCraft": True})
    harness.initialize()
    app = harness.before()
    try:
        assert app.sections.get_all_sections() == []
    finally:
        harness.after()


def test_after_tears_down_and_purges_when_rollback_fails(harness_env, monkeypatch):
    harness = _harness(harness_env, dbSetup={"setupCraft": True})
    harness.initialize()
    harness.before()

    db = _db(harness_env)
    try:
        with db.begin() as conn:
            conn.execute(
                db.schema.searchindex.insert().values(
                    elementId=9, attribute="title", fieldId=0, locale="en_us", keywords=" nine "
                )
            )
    finally:
        db.dispose()

    forcer = harness._forcer
    rollback_all = forcer.rollback_all

    def failing_rollback():
        rollback_all()
        raise RuntimeError("rollback failed")

    monkeypatch.setattr(forcer, "rollback_all", failing_rollback)
    with pytest.raises(RuntimeError, match="rollback failed"):
        harness.after()

    assert harness.app is None
    assert harness.web_app is None
    assert _scalars(harness_env, "SELECT elementId FROM searchindex") == [1, 1]


def test_test_setup_config_lists_modules_in_order():
    harness = CmsTestHarness(
        HarnessConfig.model_validate(
            {
                "modules": [
                    {"handle": "analytics", "class": "cms_fixtures.modules:AnalyticsModule"},
                    {"handle": "audit", "class": "cms_fixtures.modules:AuditModule"},
                ]
            }
        )
    )
    assert harness.get_test_setup_config() == {
        "modules": {
            "analytics": "cms_fixtures.modules:AnalyticsModule",
            "audit": "cms_fixtures.modules:AuditModule",
        },
        "bootstrap": ["analytics", "audit"],
    }


def test_test_setup_config_empty_without_modules():
    assert CmsTestHarness().get_test_setup_config() == {}


def test_load_harness_config_reads_aliases(tmp_path):
    path = tmp_path / "harness.json"
    path.write_text(
        json.dumps(
            {
                "plugins": [{"handle": "seo"}],
                "migrations": [{"class": "pkg.mod:Migration", "params": ["a", 1]}],
                "dbSetup": {"clean": True, "setupCraft": False},
            }
        ),
        encoding="utf-8",
    )
    config = load_harness_config(path)
    assert [p.handle for p in config.plugins] == ["seo"]
    assert config.migrations[0].class_ == "pkg.mod:Migration"
    assert config.migrations[0].params == ["a", 1]
    assert config.db_setup.clean is True
    assert config.db_setup.setup_cms is False
    assert config.db_setup.setup_migrations is False


def test_load_harness_config_missing_file_is_empty(tmp_path):
    config = load_harness_config(tmp_path / "absent.json")
    assert config.plugins == [] and config.migrations == [] and config.db_setup is None


def test_load_harness_config_rejects_invalid_json(tmp_path):
    path = tmp_path / "harness.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(InvalidConfigError):
        load_harness_config(path)
