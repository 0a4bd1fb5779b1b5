"""
Source Registry
In-memory view of the active RSS feeds and Twitter handles read by the fetchers
"""

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

import structlog
from sqlalchemy.orm import Session

from ...core.database import SessionLocal
from ...core.events import EventBus, SOURCES_CHANGED, event_bus
from ...repositories.source_repository import SourceRepository

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class FeedSource:
    name: str
    url: str


class SourceRegistry:
    """
    Keeps the last-known-good list of active sources.

    ``reload()`` never raises: when the store is unavailable the previous
    lists stay in place.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session] = SessionLocal,
        events: Optional[EventBus] = None
    ):
        self.session_factory = session_factory
        self.events = events or event_bus
        self._feeds: List[FeedSource] = []
        self._handles: List[str] = []
        self._subscribed = False

    @property
    def feeds(self) -> List[FeedSource]:
        return list(self._feeds)

    @property
    def handles(self) -> List[str]:
        return list(self._handles)

    def subscribe(self) -> None:
        """Refresh automatically whenever a source is created, updated or deleted."""
        if not self._subscribed:
            self.events.subscribe(SOURCES_CHANGED, self.reload)
            self._subscribed = True

    def unsubscribe(self) -> None:
        if self._subscribed:
            self.events.unsubscribe(SOURCES_CHANGED, self.reload)
            self._subscribed = False

    def reload(self) -> None:
        db = None
        try:
            db = self.session_factory()
            repository = SourceRepository(db, events=self.events)
            handles = repository.active_handles()
            feeds = [FeedSource(name=source.name, url=source.url) for source in repository.active_feeds()]
        except Exception as e:
            logger.error(
                "source_registry_reload_failed",
                error=str(e),
                kept_handles=len(self._handles),
                kept_feeds=len(self._feeds),
            )
            return
        finally:
            if db is not None:
                db.close()

        self._handles = handles
        self._feeds = feeds
        logger.info("source_registry_reloaded", handles=len(handles), feeds=len(feeds))

    def snapshot(self) -> Dict[str, int]:
        return {"twitter_handles": len(self._handles), "rss_feeds": len(self._feeds)}


source_registry = SourceRegistry()
