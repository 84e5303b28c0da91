"""Services registered on the application container.

Each service takes the application in its constructor and reaches the
database and the event dispatcher through it, so a test can swap either.
"""

from cms.logic.entries import EntriesService
from cms.logic.events import EventDispatcher
from cms.logic.plugins import Plugin, PluginsService
from cms.logic.search import SearchService
from cms.logic.sections import SectionsService

__all__ = [
    "EntriesService",
    "EventDispatcher",
    "Plugin",
    "PluginsService",
    "SearchService",
    "SectionsService",
]
