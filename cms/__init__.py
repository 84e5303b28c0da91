"""CMS core: sections with per-section entry content tables, a small
application container, and a database-backed test harness (`cms.testing`).

The FastAPI application factory is exposed here; business logic lives in
`cms/logic/`, table definitions in `cms/db/` and route handlers in
`cms/routes/`.
"""

from __future__ import annotations

from cms.main import create_app

__all__ = ["create_app"]
