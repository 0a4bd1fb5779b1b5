import asyncio

import pytest
from unittest.mock import AsyncMock, patch

from newscards.models import Post, QueueItem
from newscards.models.queue_item import SourceType
from newscards.news.services.publish_worker import PublishWorker, resolve_category, select_video
from newscards.news.services.rewrite_engine import RewriteResult

CATEGORIES = ["Politics", "Cinema", "Sports", "Crime", "Business", "Technology", "General"]

VIDEO_MEDIA = [{
    "url": "https://pbs.twimg.com/thumb.jpg",
    "kind": "video",
    "variants": [
        {"url": "https://video.twimg.com/pl.m3u8", "content_type": "application/x-mpegURL", "bitrate": 0},
        {"url": "https://video.twimg.com/low.mp4", "content_type": "video/mp4", "bitrate": 832000},
        {"url": "https://video.twimg.com/high.mp4", "content_type": "video/mp4", "bitrate": 2176000},
    ],
}]


@pytest.fixture
def sleep():
    return AsyncMock()


@pytest.fixture
def worker(mock_engine, session_factory, sleep):
    return PublishWorker(
        engine=mock_engine,
        session_factory=session_factory,
        allowed_categories=CATEGORIES,
        sleep=sleep,
    )


def all_posts(session_factory):
    db = session_factory()
    try:
        return db.query(Post).order_by(Post.id).all()
    finally:
        db.close()


class TestHelpers:
    def test_select_video_picks_highest_bitrate_mp4(self):
        assert select_video(VIDEO_MEDIA) == "https://video.twimg.com/high.mp4"

    def test_select_video_ignores_photos_and_empty(self):
        assert select_video([{"url": "https://img.example/a.jpg", "kind": "photo", "variants": []}]) is None
        assert select_video([]) is None
        assert select_video(None) is None

    @pytest.mark.parametrize("category,expected", [
        ("politics", "Politics"),
        ("Cinema", "Cinema"),
        ("Astrology", "General"),
        (None, "General"),
        ("", "General"),
    ])
    def test_resolve_category(self, category, expected):
        assert resolve_category(category, CATEGORIES) == expected


class TestPublishWorker:
    @pytest.mark.asyncio
    async def test_publishes_rewritten_item(self, worker, mock_engine, make_queue_item, queue_count, session_factory):
        make_queue_item(
            "Title: Rains\nSummary: Heavy rain",
            source_url="https://eenadu.example/news/heavy-rains/98765?ref=rss",
            image_url="https://img.example/rain.jpg",
            source_label="Eenadu",
            author_name="Eenadu",
        )

        stats = await worker.process_batch()

        assert stats["published"] == 1
        assert queue_count() == 0
        post = all_posts(session_factory)[0]
        assert post.title == "తెలుగు శీర్షిక"
        assert post.url == "https://eenadu.example/news/heavy-rains/98765"
        assert post.image_url == "https://img.example/rain.jpg"
        assert post.image_search_slug == "cm delhi tour"
        assert post.categories == ["Politics"]
        assert post.lang == "te"
        assert post.post_type == "normal_post"
        assert 100_000_000 <= post.post_id <= 999_999_999
        mock_engine.rewrite.assert_awaited_once_with(
            "Title: Rains\nSummary: Heavy rain",
            "https://eenadu.example/news/heavy-rains/98765?ref=rss",
            "DETAILED",
        )

    @pytest.mark.asyncio
    async def test_duplicate_url_is_removed_without_rewrite(
        self, worker, mock_engine, make_post, make_queue_item, queue_count, session_factory
    ):
        make_post(url="https://eenadu.example/story")
        make_queue_item(source_url="https://EENADU.example/story/?utm_source=feed")

        stats = await worker.process_batch()

        assert stats["duplicate"] == 1
        assert queue_count() == 0
        assert len(all_posts(session_factory)) == 1
        mock_engine.rewrite.assert_not_called()

    @pytest.mark.asyncio
    async def test_exact_match_mode_ignores_longer_urls(
        self, mock_engine, session_factory, make_post, make_queue_item, sleep
    ):
        worker = PublishWorker(mock_engine, session_factory, dedup_url_match="exact", sleep=sleep)
        make_post(url="https://eenadu.example/story-part-two")
        make_queue_item(source_url="https://eenadu.example/story")

        stats = await worker.process_batch()

        assert stats["published"] == 1

    @pytest.mark.asyncio
    async def test_posted_tweet_is_duplicate(self, worker, mock_engine, make_post, make_queue_item, queue_count):
        make_post(tweet_id="555")
        make_queue_item("tweet text", identifier="555", source_type=SourceType.TWITTER)

        stats = await worker.process_batch()

        assert stats["duplicate"] == 1
        assert queue_count() == 0
        mock_engine.rewrite.assert_not_called()

    @pytest.mark.asyncio
    async def test_failed_rewrite_drops_item(self, worker, mock_engine, make_queue_item, queue_count, session_factory):
        mock_engine.rewrite = AsyncMock(return_value=None)
        make_queue_item(source_url="https://eenadu.example/a")

        stats = await worker.process_batch()

        assert stats["rewrite_failed"] == 1
        assert queue_count() == 0
        assert all_posts(session_factory) == []

    @pytest.mark.asyncio
    async def test_manual_text_uses_fallbacks(self, worker, mock_engine, make_queue_item, session_factory):
        mock_engine.rewrite = AsyncMock(return_value=RewriteResult(title="T", summary="S", category=None, slug=None))
        make_queue_item("x", source_label="Manual Paste")

        await worker.process_batch()

        post = all_posts(session_factory)[0]
        assert post.categories == ["General"]
        assert post.image_search_slug == "latest-telugu-news"
        assert post.url is None
        assert post.source == "Manual Paste"

    @pytest.mark.asyncio
    async def test_missing_title_and_summary_fall_back(self, worker, mock_engine, make_queue_item, session_factory):
        mock_engine.rewrite = AsyncMock(return_value=RewriteResult(slug="ab"))
        make_queue_item(source_url="https://eenadu.example/politics/assembly-session.html")

        await worker.process_batch()

        post = all_posts(session_factory)[0]
        assert post.title == "assembly-session"
        assert post.summary == "assembly-session"
        assert post.image_search_slug == "assembly-session"

    @pytest.mark.asyncio
    async def test_no_title_anywhere_uses_default(self, worker, mock_engine, make_queue_item, session_factory):
        mock_engine.rewrite = AsyncMock(return_value=RewriteResult())
        make_queue_item("x")

        await worker.process_batch()

        assert all_posts(session_factory)[0].title == "News Update"

    @pytest.mark.asyncio
    async def test_related_stories_are_carried_over(self, worker, make_queue_item, session_factory):
        stories = [
            {"title": "Earlier", "summary": "Background", "image_url": "https://img.example/1.jpg", "url": "https://a.example/1"},
            {"title": "Reaction", "summary": None, "image_url": None, "url": "https://a.example/2"},
        ]
        make_queue_item("x", related_stories=stories)

        await worker.process_batch()

        assert all_posts(session_factory)[0].related_stories == stories

    @pytest.mark.asyncio
    async def test_video_tweet_becomes_video_post(self, worker, make_queue_item, session_factory):
        make_queue_item(
            "Watch: CM speech",
            identifier="777",
            source_url="https://x.com/TV9Telugu/status/777",
            media=VIDEO_MEDIA,
            source_type=SourceType.TWITTER,
        )

        await worker.process_batch()

        post = all_posts(session_factory)[0]
        assert post.post_type == "normal_video"
        assert post.video_url == "https://video.twimg.com/high.mp4"
        assert post.image_url == "https://pbs.twimg.com/thumb.jpg"
        assert post.tweet_id == "777"
        assert post.twitter_url == "https://x.com/TV9Telugu/status/777"

    @pytest.mark.asyncio
    async def test_insert_conflict_still_removes_item(self, worker, make_post, make_queue_item, queue_count, session_factory):
        existing = make_post(title="Existing")
        make_queue_item("x")

        with patch("newscards.news.services.publish_worker.generate_post_id", return_value=existing.post_id):
            stats = await worker.process_batch()

        assert stats["duplicate"] == 1
        assert queue_count() == 0
        assert len(all_posts(session_factory)) == 1

    @pytest.mark.asyncio
    async def test_unexpected_error_removes_item_and_continues(
        self, worker, mock_engine, make_queue_item, queue_count, session_factory
    ):
        mock_engine.rewrite = AsyncMock(side_effect=[RuntimeError("boom"), RewriteResult(title="Second", summary="S")])
        make_queue_item("first")
        make_queue_item("second")

        stats = await worker.process_batch()

        assert stats["error"] == 1
        assert stats["published"] == 1
        assert queue_count() == 0
        assert [post.title for post in all_posts(session_factory)] == ["Second"]

    @pytest.mark.asyncio
    async def test_batch_size_and_delay(self, worker, make_queue_item, queue_count, sleep):
        for index in range(4):
            make_queue_item(f"item {index}")

        stats = await worker.process_batch()

        assert stats["processed"] == 3
        assert queue_count() == 1
        assert sleep.await_count == 2
        sleep.assert_awaited_with(5.0)

    @pytest.mark.asyncio
    async def test_oldest_items_first(self, worker, mock_engine, make_queue_item):
        make_queue_item("first")
        make_queue_item("second")

        await worker.process_batch()

        texts = [call.args[0] for call in mock_engine.rewrite.await_args_list]
        assert texts == ["first", "second"]

    @pytest.mark.asyncio
    async def test_empty_queue(self, worker, mock_engine):
        stats = await worker.process_batch()
        assert stats["processed"] == 0
        mock_engine.rewrite.assert_not_called()

    @pytest.mark.asyncio
    async def test_retry_policy_keeps_item_until_max_attempts(self, mock_engine, session_factory, make_queue_item, sleep):
        mock_engine.rewrite = AsyncMock(return_value=None)
        worker = PublishWorker(mock_engine, session_factory, failure_policy="retry", max_attempts=3, sleep=sleep)
        make_queue_item("flaky", identifier="flaky-1")

        first = await worker.process_batch()
        second = await worker.process_batch()

        assert first["retained"] == 1
        assert second["retained"] == 1
        db = session_factory()
        try:
            item = db.query(QueueItem).filter_by(identifier="flaky-1").one()
            assert item.attempts == 2
            assert item.last_error == "rewrite returned no result"
        finally:
            db.close()

        third = await worker.process_batch()
        assert third["retained"] == 0
        db = session_factory()
        try:
            assert db.query(QueueItem).count() == 0
        finally:
            db.close()

    @pytest.mark.asyncio
    async def test_overlapping_run_is_skipped(self, worker, mock_engine, make_queue_item):
        release = asyncio.Event()

        async def slow_rewrite(*args):
            await release.wait()
            return RewriteResult(title="T", summary="S")

        mock_engine.rewrite = slow_rewrite
        make_queue_item("x")

        first = asyncio.create_task(worker.process_batch())
        await asyncio.sleep(0)

        assert await worker.process_batch() == {"skipped": True}

        release.set()
        assert (await first)["published"] == 1
