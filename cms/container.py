"""Application container.

`Module` holds named components and child modules; `Application` is the
root module with the CMS services registered. There is no process-wide
application instance: whoever creates an `Application` passes it on
explicitly (the FastAPI app keeps it on `app.state.cms`).
"""

from __future__ import annotations

import inspect
import logging
from typing import Any, Dict, Mapping, Optional, Sequence

from cms.config import AppConfig
from cms.errors import InvalidConfigError
from cms.helpers import import_string
from cms.logic.entries import EntriesService
from cms.logic.events import EventDispatcher
from cms.logic.plugins import PluginsService
from cms.logic.search import SearchService
from cms.logic.sections import SectionsService

logger = logging.getLogger(__name__)


class Module:
    def __init__(self, handle: str, parent: Optional["Module"] = None) -> None:
        self.handle = handle
        self.parent = parent
        self._components: Dict[str, Any] = {}
        self._modules: Dict[str, "Module"] = {}

    def get(self, name: str) -> Any:
        try:
            return self._components[name]
        except KeyError:
            raise InvalidConfigError(f"Unknown component ID: {name}") from None

    def set(self, name: str, instance: Any) -> None:
        """Register a component; None removes it."""
        if instance is None:
            self._components.pop(name, None)
        else:
            self._components[name] = instance

    def has(self, name: str) -> bool:
        return name in self._components

    def component_ids(self) -> list[str]:
        return sorted(self._components)

    def set_module(self, handle: str, module: "Module") -> None:
        self._modules[handle] = module

    def get_module(self, handle: str) -> "Module":
        try:
            return self._modules[handle]
        except KeyError:
            raise InvalidConfigError(f"Unknown module: {handle}") from None

    def has_module(self, handle: str) -> bool:
        return handle in self._modules


class Application(Module):
    """Root module with the CMS services.

    `modules` maps handles to module class paths; handles listed in
    `bootstrap` are instantiated immediately, others on first `get_module`.
    The `db` component is not created here; callers set it.
    """

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        *,
        modules: Optional[Mapping[str, str]] = None,
        bootstrap: Sequence[str] = (),
    ) -> None:
        super().__init__("cms")
        self.config = config
        self._module_classes: Dict[str, str] = dict(modules or {})

        self.set("events", EventDispatcher())
        self.set("plugins", PluginsService(self))
        self.set("sections", SectionsService(self))
        self.set("entries", EntriesService(self))
        self.set("search", SearchService(self))

        for handle in bootstrap:
            self.get_module(handle)

    def get_module(self, handle: str) -> Module:
        if not self.has_module(handle) and handle in self._module_classes:
            cls = import_string(self._module_classes[handle])
            if not inspect.isclass(cls) or not issubclass(cls, Module):
                raise InvalidConfigError(f"Module {handle} must be a Module subclass")
            self.set_module(handle, cls(handle, self))
            logger.info("module_loaded handle=%s", handle)
        return super().get_module(handle)

    @property
    def db(self) -> Any:
        return self.get("db")

    @property
    def events(self) -> EventDispatcher:
        return self.get("events")

    @property
    def plugins(self) -> PluginsService:
        return self.get("plugins")

    @property
    def sections(self) -> SectionsService:
        return self.get("sections")

    @property
    def entries(self) -> EntriesService:
        return self.get("entries")

    @property
    def search(self) -> SearchService:
        return self.get("search")

    def close(self) -> None:
        if self.has("db"):
            self.db.dispose()
            self.set("db", None)


__all__ = ["Application", "Module"]
