"""
In-process event bus.

Repositories publish named events after mutations; long-lived components
(the source registry) subscribe to keep their caches in sync.
"""

from typing import Callable, Dict, List

import structlog

logger = structlog.get_logger(__name__)

SOURCES_CHANGED = "sources_changed"


class EventBus:
    def __init__(self):
        self._subscribers: Dict[str, List[Callable[[], None]]] = {}

    def subscribe(self, event: str, callback: Callable[[], None]) -> None:
        callbacks = self._subscribers.setdefault(event, [])
        if callback not in callbacks:
            callbacks.append(callback)

    def unsubscribe(self, event: str, callback: Callable[[], None]) -> None:
        callbacks = self._subscribers.get(event, [])
        if callback in callbacks:
            callbacks.remove(callback)
        if not callbacks:
            self._subscribers.pop(event, None)

    def publish(self, event: str) -> None:
        for callback in list(self._subscribers.get(event, [])):
            try:
                callback()
            except Exception as e:
                logger.error("event_subscriber_failed", event_name=event, error=str(e), exc_info=True)

    def subscriber_count(self, event: str) -> int:
        return len(self._subscribers.get(event, []))


event_bus = EventBus()
