from datetime import datetime
from typing import Optional
from enum import Enum

from sqlalchemy import Column, Integer, String, Text, DateTime, JSON

from ..core.database import Base


class SourceType(str, Enum):
    RSS = "rss"
    TWITTER = "twitter"
    MANUAL = "manual"


class PromptType(str, Enum):
    NEWS_ARTICLE = "NEWS_ARTICLE"
    DETAILED = "DETAILED"
    BREAKING = "BREAKING"
    CRIME = "CRIME"
    SHORT = "SHORT"


class QueueItem(Base):
    """
    An unpublished candidate waiting for the publish worker.

    ``media`` is an ordered list of ``{"url", "kind", "variants"}`` dicts,
    ``related_stories`` a list of ``{"title", "summary", "image_url", "url"}``
    dicts copied onto the resulting post untouched.
    """
    __tablename__ = "queue_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    identifier = Column(String(100), nullable=False, unique=True, index=True)

    title = Column(String(500))
    raw_text = Column(Text, nullable=False, default="")
    source_url = Column(String(1000))
    image_url = Column(String(1000))
    media = Column(JSON, default=list)
    related_stories = Column(JSON, default=list)

    source_label = Column(String(200), default="Manual")
    source_type = Column(String(50), default=SourceType.MANUAL.value)
    author_name = Column(String(200))
    author_handle = Column(String(200))
    prompt_type = Column(String(50), default=PromptType.DETAILED.value)

    attempts = Column(Integer, default=0, nullable=False)
    last_error = Column(Text)

    enqueued_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    def __repr__(self):
        return f"<QueueItem(identifier='{self.identifier}', source='{self.source_label}')>"

    @property
    def display_title(self) -> Optional[str]:
        """Title used for fuzzy dedup; RSS text keeps it on the first line."""
        if self.title:
            return self.title
        if not self.raw_text:
            return None
        first_line = self.raw_text.split("\n")[0]
        return first_line.replace("Title: ", "", 1).strip() or None
