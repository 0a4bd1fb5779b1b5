from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, Boolean

from ..core.database import Base


class TwitterSource(Base):
    __tablename__ = "twitter_sources"

    id = Column(Integer, primary_key=True, autoincrement=True)
    handle = Column(String(100), nullable=False, unique=True)
    is_active = Column(Boolean, default=True, nullable=False)
    added_at = Column(DateTime, default=datetime.utcnow)

    def __repr__(self):
        return f"<TwitterSource(handle='{self.handle}', active={self.is_active})>"


class RSSSource(Base):
    __tablename__ = "rss_sources"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    url = Column(String(1000), nullable=False, unique=True)
    is_active = Column(Boolean, default=True, nullable=False)
    added_at = Column(DateTime, default=datetime.utcnow)

    def __repr__(self):
        return f"<RSSSource(name='{self.name}', active={self.is_active})>"
