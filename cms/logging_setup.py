"""Logging configuration for the CMS.

Module loggers log `event key=value` messages; this routes them to stdout
through one console handler on the `cms` logger tree. SQLAlchemy's engine
logger stays at WARNING so SQL echo only appears when asked for.
"""
from __future__ import annotations
import logging
import os
from logging.config import dictConfig
from typing import Any, Dict, Optional

LOG_LEVEL_ENV = "CMS_LOG_LEVEL"


def _dict_config(level: str) -> Dict[str, Any]:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "cms": {
                "format": "%(asctime)s level=%(levelname)s logger=%(name)s %(message)s",
                "datefmt": "%Y-%m-%dT%H:%M:%S",
            }
        },
        "handlers": {
            "stdout": {
                "class": "logging.StreamHandler",
                "formatter": "cms",
                "stream": "ext://sys.stdout",
            }
        },
        "loggers": {
            "cms": {"level": level, "handlers": ["stdout"], "propagate": False},
            "sqlalchemy.engine": {"level": "WARNING", "handlers": ["stdout"], "propagate": False},
        },
    }


def configure_logging(level: Optional[str] = None) -> None:
    """Configure CMS logging once.

    The level comes from the argument, then `CMS_LOG_LEVEL`, then INFO.
    Does nothing once handlers exist, either from an earlier call (one per
    created app) or on the root logger (pytest capture, an embedding app).
    """
    if logging.getLogger("cms").handlers or logging.getLogger().handlers:
        return
    chosen = (level or os.getenv(LOG_LEVEL_ENV, "") or "INFO").strip().upper()
    dictConfig(_dict_config(chosen))
