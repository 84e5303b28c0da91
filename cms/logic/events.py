"""Domain event constants and dispatcher.

Listeners subscribe to an event name on a source class (or its dotted path);
an event triggered by an instance of that class or of any subclass reaches
them. Every trigger is also logged and buffered in memory so tests can
observe what fired.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List

from cms.helpers import qualified_name

logger = logging.getLogger(__name__)

EVENT_BEFORE_SAVE_SECTION = "beforeSaveSection"
EVENT_AFTER_SAVE_SECTION = "afterSaveSection"
EVENT_AFTER_DELETE_SECTION = "afterDeleteSection"
EVENT_BEFORE_SAVE_ENTRY = "beforeSaveEntry"
EVENT_AFTER_SAVE_ENTRY = "afterSaveEntry"
EVENT_BEFORE_INSTALL_PLUGIN = "beforeInstallPlugin"
EVENT_AFTER_INSTALL_PLUGIN = "afterInstallPlugin"

EventSource = type | str


@dataclass(frozen=True)
class Event:
    name: str
    sender: Any
    data: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Subscription:
    """Token returned by `EventDispatcher.on`; pass it to `off` to unsubscribe."""

    id: int
    source: EventSource
    name: str
    handler: Callable[[Event], Any]

    def matches(self, sender: Any, name: str) -> bool:
        if name != self.name:
            return False
        if isinstance(self.source, str):
            return any(qualified_name(cls) == self.source for cls in type(sender).__mro__)
        return isinstance(sender, self.source)


class EventDispatcher:
    def __init__(self) -> None:
        self._subscriptions: List[Subscription] = []
        self._ids = itertools.count(1)
        self.buffer: List[Dict[str, Any]] = []

    def on(self, source: EventSource, name: str, handler: Callable[[Event], Any]) -> Subscription:
        subscription = Subscription(next(self._ids), source, name, handler)
        self._subscriptions.append(subscription)
        return subscription

    def off(self, subscription: Subscription) -> bool:
        try:
            self._subscriptions.remove(subscription)
        except ValueError:
            return False
        return True

    def has_handlers(self, source: EventSource | None = None, name: str | None = None) -> bool:
        return any(
            (source is None or s.source == source) and (name is None or s.name == name)
            for s in self._subscriptions
        )

    def trigger(self, sender: Any, name: str, **data: Any) -> Event:
        """Dispatch an event synchronously to every matching listener."""
        event = Event(name=name, sender=sender, data=data)
        sender_name = qualified_name(type(sender))
        logger.info("event_publish type=%s sender=%s", name, sender_name)
        self.buffer.append({"type": name, "sender": sender_name, "payload": data})
        for subscription in list(self._subscriptions):
            if subscription.matches(sender, name):
                subscription.handler(event)
        return event

    def get_buffered_events(self, clear: bool = True) -> List[Dict[str, Any]]:
        """Return buffered events; optionally clear the buffer."""
        events = list(self.buffer)
        if clear:
            self.buffer.clear()
        return events


__all__ = [
    "EVENT_AFTER_DELETE_SECTION",
    "EVENT_AFTER_INSTALL_PLUGIN",
    "EVENT_AFTER_SAVE_ENTRY",
    "EVENT_AFTER_SAVE_SECTION",
    "EVENT_BEFORE_INSTALL_PLUGIN",
    "EVENT_BEFORE_SAVE_ENTRY",
    "EVENT_BEFORE_SAVE_SECTION",
    "Event",
    "EventDispatcher",
    "Subscription",
]
