"""Plugin installation.

Plugins are `Plugin` subclasses resolved by handle: first from classes
registered on the service, then from the `cms.plugins` entry-point group of
installed distributions. Installing runs the plugin's `install()` hook and
records a row in the `plugins` table.
"""

from __future__ import annotations

import inspect
import logging
from importlib.metadata import entry_points
from typing import TYPE_CHECKING, Dict, List, Optional

from sqlalchemy import insert, select
from sqlalchemy.engine import Connection

from cms.errors import InvalidConfigError
from cms.logic.events import EVENT_AFTER_INSTALL_PLUGIN, EVENT_BEFORE_INSTALL_PLUGIN

if TYPE_CHECKING:
    from cms.container import Application

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "cms.plugins"


class Plugin:
    """Base class for installable plugins."""

    handle: str = ""
    version: str = "1.0.0"

    def __init__(self, app: "Application") -> None:
        self.app = app

    def install(self, conn: Connection) -> None:
        """Create plugin-owned tables or seed data. No-op by default."""


class PluginsService:
    def __init__(self, app: "Application") -> None:
        self.app = app
        self._classes: Dict[str, type[Plugin]] = {}
        self._plugins: Dict[str, Plugin] = {}

    def register_plugin_class(self, handle: str, cls: type) -> None:
        if not inspect.isclass(cls) or not issubclass(cls, Plugin):
            raise InvalidConfigError(f"{cls!r} is not a plugin class")
        self._classes[handle] = cls

    def get_plugin_class(self, handle: str) -> Optional[type[Plugin]]:
        if handle in self._classes:
            return self._classes[handle]
        for ep in entry_points(group=ENTRY_POINT_GROUP):
            if ep.name == handle:
                cls = ep.load()
                self.register_plugin_class(handle, cls)
                return cls
        return None

    def is_installed(self, handle: str) -> bool:
        db = self.app.db
        t = db.schema.plugins
        with db.begin() as conn:
            return conn.execute(select(t.c.id).where(t.c.handle == handle)).first() is not None

    def get_installed_handles(self) -> List[str]:
        db = self.app.db
        t = db.schema.plugins
        with db.begin() as conn:
            rows = conn.execute(select(t.c.handle).order_by(t.c.id)).all()
        return [str(r[0]) for r in rows]

    def get_plugin(self, handle: str) -> Optional[Plugin]:
        return self._plugins.get(handle)

    def install_plugin(self, handle: str) -> bool:
        """Install a plugin by handle. Returns False when the handle is unknown."""
        cls = self.get_plugin_class(handle)
        if cls is None:
            logger.warning("plugin_not_found handle=%s", handle)
            return False
        if self.is_installed(handle):
            logger.info("plugin_already_installed handle=%s", handle)
            return True

        plugin = cls(self.app)
        self.app.events.trigger(self, EVENT_BEFORE_INSTALL_PLUGIN, handle=handle)
        db = self.app.db
        with db.begin() as conn:
            plugin.install(conn)
            conn.execute(insert(db.schema.plugins).values(handle=handle, version=plugin.version, enabled=True))
        self._plugins[handle] = plugin
        logger.info("plugin_installed handle=%s version=%s", handle, plugin.version)
        self.app.events.trigger(self, EVENT_AFTER_INSTALL_PLUGIN, handle=handle, plugin=plugin)
        return True


__all__ = ["ENTRY_POINT_GROUP", "Plugin", "PluginsService"]
