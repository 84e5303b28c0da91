from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, HTTPException

from cms.config import load_config
from cms.container import Application
from cms.db.base import Database
from cms.errors import InvalidConfigError
from cms.http.problem import handle_http_exception, handle_invalid_config, handle_unexpected_error
from cms.http.request_id import RequestIdMiddleware
from cms.logging_setup import configure_logging
from cms.routes import api_router

logger = logging.getLogger(__name__)


def create_app(cms: Optional[Application] = None) -> FastAPI:
    """Build the FastAPI app around an application container.

    Without a container, one is created from `load_config()` with its
    database registered as the `db` component.
    """
    # Configure global logging before app instantiation so all modules emit
    try:
        configure_logging()
    except Exception:
        logging.getLogger(__name__).error("global_logging_configuration_failed", exc_info=True)

    if cms is None:
        config = load_config()
        cms = Application(config)
        cms.set("db", Database.from_config(config.database))

    app = FastAPI(title="CMS")
    app.state.cms = cms
    app.add_middleware(RequestIdMiddleware)
    app.add_exception_handler(HTTPException, handle_http_exception)
    app.add_exception_handler(InvalidConfigError, handle_invalid_config)
    app.add_exception_handler(Exception, handle_unexpected_error)
    app.include_router(api_router)
    logger.info("app_created components=%s", ",".join(cms.component_ids()))
    return app


__all__ = ["create_app"]
