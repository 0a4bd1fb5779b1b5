import os

# Required settings must exist before any newscards module is imported
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("GOOGLE_API_KEY", "test-google-key")
os.environ.setdefault("TWITTER_API_KEY", "test-twitter-key")
os.environ.setdefault("SCHEDULER_ENABLED", "false")

import pytest  # noqa: E402
from unittest.mock import MagicMock, AsyncMock  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from newscards.core.database import Base  # noqa: E402
from newscards.core.events import EventBus  # noqa: E402
from newscards import models  # noqa: E402,F401
from newscards.models import Post, QueueItem  # noqa: E402
from newscards.news.services.ingestion_service import build_queue_item  # noqa: E402
from newscards.news.services.rewrite_engine import RewriteResult  # noqa: E402


@pytest.fixture
def session_factory():
    # StaticPool keeps one in-memory database shared by every session
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)
    try:
        yield TestingSessionLocal
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def test_db(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def events():
    return EventBus()


@pytest.fixture
def make_queue_item(test_db):
    def _make(raw_text="Title: Story\nSummary: Body", **kwargs):
        item = build_queue_item(raw_text, **kwargs)
        test_db.add(item)
        test_db.commit()
        test_db.refresh(item)
        return item
    return _make


@pytest.fixture
def make_post(test_db):
    counter = {"value": 100000000}

    def _make(title="Existing post", **kwargs):
        counter["value"] += 1
        kwargs.setdefault("post_id", counter["value"])
        kwargs.setdefault("summary", "Existing summary")
        post = Post(title=title, **kwargs)
        test_db.add(post)
        test_db.commit()
        test_db.refresh(post)
        return post
    return _make


@pytest.fixture
def mock_engine():
    engine = MagicMock()
    engine.rewrite = AsyncMock(return_value=RewriteResult(
        title="తెలుగు శీర్షిక",
        summary="తెలుగు సారాంశం",
        category="Politics",
        slug="cm delhi tour",
    ))
    return engine


@pytest.fixture
def mock_pipeline():
    pipeline = MagicMock()
    pipeline.run_rss_fetch = AsyncMock(return_value=3)
    pipeline.run_social_fetch = AsyncMock(return_value=2)
    return pipeline


@pytest.fixture
async def async_client(test_db, mock_pipeline):
    from httpx import AsyncClient, ASGITransport
    from newscards.main import app
    from newscards.core.database import get_db
    from newscards.api.dependencies import get_pipeline

    def override_get_db():
        try:
            yield test_db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_pipeline] = lambda: mock_pipeline

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture
def queue_count(session_factory):
    def _count():
        db = session_factory()
        try:
            return db.query(QueueItem).count()
        finally:
            db.close()
    return _count
