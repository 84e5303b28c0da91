"""Configuration utilities for the CMS core.

Two kinds of configuration live here:
- `DbConfig`, an immutable bundle of connection settings, with the
  environment-backed factory `db_config_from_env()` used by the test harness
  and `database_url()` which turns a config into an SQLAlchemy URL.
- `AppConfig`, loaded by `load_config()` with the following rules:
  primary source `cms_config.json` at the project root, then optional text
  files under `config/`, then environment variables.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError as PydanticValidationError
from sqlalchemy.engine import URL

from cms.errors import InvalidConfigError


CONFIG_DIR = Path("config")
ROOT_CMS_CONFIG = Path("cms_config.json")
logger = logging.getLogger(__name__)

# DbConfig field -> environment variable read by the test harness
TEST_DB_ENV_VARS: dict[str, str] = {
    "password": "TEST_DB_PASS",
    "user": "TEST_DB_USER",
    "database": "TEST_DB_NAME",
    "table_prefix": "TEST_DB_TABLE_PREFIX",
    "driver": "TEST_DB_DRIVER",
    "port": "TEST_DB_PORT",
    "schema_name": "TEST_DB_SCHEMA",
    "server": "TEST_DB_SERVER",
}

DRIVER_DIALECTS: dict[str, str] = {
    "mysql": "mysql+pymysql",
    "pgsql": "postgresql+psycopg2",
    "postgres": "postgresql+psycopg2",
    "postgresql": "postgresql+psycopg2",
    "sqlite": "sqlite+pysqlite",
}


class DbConfig(BaseModel):
    """Connection settings. Missing values are empty strings, never errors."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    password: str = ""
    user: str = ""
    database: str = ""
    table_prefix: str = Field(default="", alias="tablePrefix")
    driver: str = ""
    port: str = ""
    schema_name: str = Field(default="", alias="schema")
    server: str = ""

    @property
    def is_sqlite(self) -> bool:
        return (self.driver or "sqlite").strip().lower() == "sqlite"


class AppConfig(BaseModel):
    database: DbConfig
    dev_mode: bool = Field(default=False)


def db_config_from_env(env: Optional[Mapping[str, str]] = None) -> DbConfig:
    """Build a DbConfig from the TEST_DB_* environment variables."""
    source = os.environ if env is None else env
    return DbConfig(**{field: source.get(var) or "" for field, var in TEST_DB_ENV_VARS.items()})


def database_url(config: DbConfig) -> URL:
    """Translate a DbConfig into an SQLAlchemy URL.

    An empty driver means SQLite; an empty SQLite database means in-memory.
    """
    driver = (config.driver or "sqlite").strip().lower()
    try:
        drivername = DRIVER_DIALECTS[driver]
    except KeyError:
        raise InvalidConfigError(f"Unsupported database driver: {config.driver!r}") from None

    if drivername.startswith("sqlite"):
        return URL.create(drivername, database=config.database or ":memory:")

    port: Optional[int] = None
    if str(config.port).strip():
        try:
            port = int(str(config.port).strip())
        except ValueError:
            raise InvalidConfigError(f"Invalid database port: {config.port!r}") from None
    return URL.create(
        drivername,
        username=config.user or None,
        password=config.password or None,
        host=config.server or None,
        port=port,
        database=config.database or None,
    )


def _read_config_file(rel_path: str) -> Optional[str]:
    path = CONFIG_DIR / rel_path
    try:
        if path.exists():
            return path.read_text(encoding="utf-8").strip()
    except (OSError, UnicodeDecodeError) as e:
        # Recoverable: log and ignore unreadable override
        logger.warning("Failed to read override %s: %s", path, e)
        return None
    return None


def _env(key: str, default: Optional[str] = None) -> Optional[str]:
    return os.environ.get(key, default)


def _read_json_file(path: Path) -> dict:
    try:
        if path.exists():
            return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.error("Failed to read JSON config %s: %s", path, e)
    return {}


def load_config() -> AppConfig:
    """Load application configuration with validation.

    Precedence (highest first):
    1) Environment variables (DB_DRIVER, DB_SERVER, ...)
    2) Text files in `config/` (optional, e.g. `config/db.driver`)
    3) cms_config.json at project root
    4) Defaults for development (in-memory SQLite)
    """

    base = _read_json_file(ROOT_CMS_CONFIG)

    def _base(path: str, default: Optional[str] = None) -> Optional[str]:
        cur: object = base
        for key in path.split("."):
            if not isinstance(cur, dict) or key not in cur:
                return default
            cur = cur[key]
        return str(cur) if cur is not None else default

    def _setting(env_key: str, file_key: str, json_key: str, default: str = "") -> str:
        return _env(env_key) or _read_config_file(file_key) or _base(json_key) or default

    database = {
        "driver": _setting("DB_DRIVER", "db.driver", "database.driver", "sqlite"),
        "server": _setting("DB_SERVER", "db.server", "database.server"),
        "port": _setting("DB_PORT", "db.port", "database.port"),
        "database": _setting("DB_DATABASE", "db.database", "database.database"),
        "user": _setting("DB_USER", "db.user", "database.user"),
        "password": _setting("DB_PASSWORD", "db.password", "database.password"),
        "table_prefix": _setting("DB_TABLE_PREFIX", "db.table_prefix", "database.tablePrefix"),
        "schema_name": _setting("DB_SCHEMA", "db.schema", "database.schema"),
    }
    dev_mode_text = _setting("CMS_DEV_MODE", "dev_mode", "devMode", "false")

    try:
        return AppConfig(
            database=DbConfig(**database),
            dev_mode=str(dev_mode_text).strip().lower() == "true",
        )
    except PydanticValidationError as e:
        logger.error("Invalid application configuration: %s", e)
        raise


__all__ = [
    "AppConfig",
    "DbConfig",
    "TEST_DB_ENV_VARS",
    "database_url",
    "db_config_from_env",
    "load_config",
]
