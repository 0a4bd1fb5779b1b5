from datetime import datetime

from sqlalchemy import Column, Integer, BigInteger, String, Text, DateTime, Boolean, JSON, ForeignKey, Table
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..core.database import Base

post_tags = Table(
    "post_tags",
    Base.metadata,
    Column("post_id", Integer, ForeignKey("posts.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", Integer, ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True),
)


class Post(Base):
    """
    A published news card.

    ``url`` and ``tweet_id`` are unique but nullable, so posts without an
    external URL (manual pastes) or without a tweet never collide.
    """
    __tablename__ = "posts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    post_id = Column(BigInteger, nullable=False, unique=True, index=True)

    title = Column(String(500), nullable=False)
    summary = Column(Text)
    text = Column(Text)
    url = Column(String(1000), unique=True, nullable=True)
    image_search_slug = Column(String(255), default="")

    image_url = Column(String(1000))
    video_url = Column(String(1000))
    media = Column(JSON, default=list)
    related_stories = Column(JSON, default=list)

    source_name = Column(String(200))
    source = Column(String(200), default="Manual")
    source_type = Column(String(50), default="manual")
    tweet_id = Column(String(64), unique=True, nullable=True)
    twitter_url = Column(String(1000))

    categories = Column(JSON, default=lambda: ["General"])
    tags = relationship("Tag", secondary=post_tags, lazy="selectin")

    published_at = Column(DateTime, default=datetime.utcnow, index=True)
    is_published = Column(Boolean, default=True)
    is_ai_news = Column(Boolean, default=False)
    post_type = Column(String(50), default="normal_post")
    lang = Column(String(10), default="te")

    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<Post(post_id={self.post_id}, title='{(self.title or '')[:50]}...', source='{self.source}')>"

    @property
    def primary_category(self) -> str:
        return (self.categories or ["General"])[0]
