"""Functional test bootstrap.

Point the TEST_DB_* variables at a file-backed SQLite database before the
session harness fixture reads them, and select the harness config shipped
with the tests. Tests that drive their own harness use `harness_env`, which
describes a separate throwaway database.
"""

from __future__ import annotations

import os
import pathlib

import pytest

_ROOT = pathlib.Path(__file__).resolve().parents[2]
_DB_FILE = _ROOT / "tmp" / "functional_tests.db"
_DB_FILE.parent.mkdir(parents=True, exist_ok=True)
if _DB_FILE.exists():
    _DB_FILE.unlink()

os.environ["TEST_DB_DRIVER"] = "sqlite"
os.environ["TEST_DB_NAME"] = str(_DB_FILE)
for _var in ("TEST_DB_PASS", "TEST_DB_USER", "TEST_DB_TABLE_PREFIX", "TEST_DB_PORT", "TEST_DB_SCHEMA", "TEST_DB_SERVER"):
    os.environ[_var] = ""
os.environ["CMS_TEST_CONFIG"] = str(_ROOT / "tests" / "cms_test.json")


@pytest.fixture
def harness_env(tmp_path: pathlib.Path) -> dict:
    """TEST_DB_* mapping for a fresh SQLite database under tmp_path."""
    return {
        "TEST_DB_DRIVER": "sqlite",
        "TEST_DB_NAME": str(tmp_path / "harness.db"),
    }
