from datetime import datetime
from typing import Iterable, List, Optional, Set, Tuple

from sqlalchemy import asc
from sqlalchemy.orm import Session

from ..models.queue_item import QueueItem


class QueueRepository:
    def __init__(self, session: Session):
        self.session = session

    def add(self, item: QueueItem) -> QueueItem:
        self.session.add(item)
        try:
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        self.session.refresh(item)
        return item

    def add_many(self, items: List[QueueItem]) -> int:
        if not items:
            return 0
        self.session.add_all(items)
        try:
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        return len(items)

    def get(self, item_id: int) -> Optional[QueueItem]:
        return self.session.query(QueueItem).filter(QueueItem.id == item_id).first()

    def oldest(self, limit: int) -> List[QueueItem]:
        return (
            self.session.query(QueueItem)
            .order_by(asc(QueueItem.enqueued_at), asc(QueueItem.id))
            .limit(limit)
            .all()
        )

    def list_all(self, limit: Optional[int] = None) -> List[QueueItem]:
        query = self.session.query(QueueItem).order_by(asc(QueueItem.enqueued_at), asc(QueueItem.id))
        if limit:
            query = query.limit(limit)
        return query.all()

    def delete(self, item_id: int) -> bool:
        deleted = self.session.query(QueueItem).filter(QueueItem.id == item_id).delete()
        self.session.commit()
        return deleted > 0

    def delete_by_identifier(self, identifier: str) -> bool:
        deleted = self.session.query(QueueItem).filter(QueueItem.identifier == identifier).delete()
        self.session.commit()
        return deleted > 0

    def clear(self) -> int:
        deleted = self.session.query(QueueItem).delete()
        self.session.commit()
        return deleted

    def count(self) -> int:
        return self.session.query(QueueItem).count()

    def titles_and_urls(self) -> List[Tuple[Optional[str], Optional[str]]]:
        return [(item.display_title, item.source_url) for item in self.session.query(QueueItem).all()]

    def existing_identifiers(self, identifiers: Iterable[str]) -> Set[str]:
        ids = [identifier for identifier in identifiers if identifier]
        if not ids:
            return set()
        rows = self.session.query(QueueItem.identifier).filter(QueueItem.identifier.in_(ids)).all()
        return {row[0] for row in rows}

    def record_failure(self, item_id: int, error_message: str) -> Optional[QueueItem]:
        """Bump the attempt counter and move the item to the back of the queue."""
        item = self.get(item_id)
        if not item:
            return None
        item.attempts = (item.attempts or 0) + 1
        item.last_error = error_message
        item.enqueued_at = datetime.utcnow()
        self.session.commit()
        self.session.refresh(item)
        return item
