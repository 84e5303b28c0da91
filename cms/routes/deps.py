"""Request dependencies."""

from __future__ import annotations

from fastapi import Request

from cms.container import Application


def get_cms(request: Request) -> Application:
    """Return the application container attached by `create_app`."""
    return request.app.state.cms
