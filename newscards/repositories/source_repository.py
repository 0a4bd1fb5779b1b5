from typing import Any, Dict, List, Optional, Type, Union

from sqlalchemy import desc
from sqlalchemy.orm import Session

from ..core.events import EventBus, SOURCES_CHANGED, event_bus
from ..models.source import RSSSource, TwitterSource

SourceModel = Union[TwitterSource, RSSSource]


class SourceRepository:
    """
    CRUD for Twitter handles and RSS feeds.

    Every mutation publishes ``sources_changed`` so the source registry
    refreshes its in-memory lists.
    """

    def __init__(self, session: Session, events: Optional[EventBus] = None):
        self.session = session
        self.events = events or event_bus

    def active_handles(self) -> List[str]:
        return [
            source.handle
            for source in self.session.query(TwitterSource)
            .filter(TwitterSource.is_active.is_(True))
            .order_by(TwitterSource.added_at)
            .all()
        ]

    def active_feeds(self) -> List[RSSSource]:
        return (
            self.session.query(RSSSource)
            .filter(RSSSource.is_active.is_(True))
            .order_by(RSSSource.added_at)
            .all()
        )

    def list_sources(self, model: Type[SourceModel]) -> List[SourceModel]:
        return self.session.query(model).order_by(desc(model.added_at)).all()

    def get(self, model: Type[SourceModel], source_id: int) -> Optional[SourceModel]:
        return self.session.query(model).filter(model.id == source_id).first()

    def find_twitter_source(self, handle: str) -> Optional[TwitterSource]:
        return self.session.query(TwitterSource).filter(TwitterSource.handle == handle).first()

    def find_rss_source(self, url: str) -> Optional[RSSSource]:
        return self.session.query(RSSSource).filter(RSSSource.url == url).first()

    def add_twitter_source(self, handle: str, is_active: bool = True) -> TwitterSource:
        source = TwitterSource(handle=handle, is_active=is_active)
        return self._save_new(source)

    def add_rss_source(self, name: str, url: str, is_active: bool = True) -> RSSSource:
        source = RSSSource(name=name, url=url, is_active=is_active)
        return self._save_new(source)

    def update(self, source: SourceModel, changes: Dict[str, Any]) -> SourceModel:
        for field, value in changes.items():
            if value is not None and hasattr(source, field) and field not in ("id", "added_at"):
                setattr(source, field, value)
        try:
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        self.session.refresh(source)
        self.events.publish(SOURCES_CHANGED)
        return source

    def delete(self, model: Type[SourceModel], source_id: int) -> bool:
        source = self.get(model, source_id)
        if not source:
            return False
        self.session.delete(source)
        self.session.commit()
        self.events.publish(SOURCES_CHANGED)
        return True

    def _save_new(self, source: SourceModel) -> SourceModel:
        self.session.add(source)
        try:
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        self.session.refresh(source)
        self.events.publish(SOURCES_CHANGED)
        return source
