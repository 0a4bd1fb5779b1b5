"""
Feed Fetcher
Polls the registered RSS feeds and queues entries that are not already known
"""

import asyncio
from typing import Any, Callable, List, Optional, Set

import feedparser
import httpx
import structlog
from bs4 import BeautifulSoup
from sqlalchemy.orm import Session

from .content_scraper import USER_AGENT
from .ingestion_service import build_queue_item
from .source_registry import FeedSource, SourceRegistry
from ...core.database import SessionLocal
from ...exceptions import FeedFetchError
from ...models.queue_item import PromptType, QueueItem, SourceType
from ...repositories.post_repository import PostRepository
from ...repositories.queue_repository import QueueRepository
from ...utils.string_utils import best_match
from ...utils.url_utils import normalize_url

logger = structlog.get_logger(__name__)


def extract_entry_image(entry: Any) -> Optional[str]:
    """Image for a feed entry: enclosure, media:content, media:thumbnail, then first <img> in the body."""
    for enclosure in entry.get("enclosures") or []:
        href = enclosure.get("href") or enclosure.get("url")
        if href:
            return href

    for key in ("media_content", "media_thumbnail"):
        for media in entry.get(key) or []:
            if media.get("url"):
                return media["url"]

    for content in entry.get("content") or []:
        value = content.get("value")
        if not value:
            continue
        img = BeautifulSoup(value, "html.parser").find("img")
        if img and img.get("src"):
            return img["src"]

    return None


class KnownContent:
    """Titles and normalized URLs already posted recently or waiting in the queue."""

    def __init__(self):
        self.titles: List[str] = []
        self.urls: Set[str] = set()

    def add(self, title: Optional[str], url: Optional[str]) -> None:
        if title:
            self.titles.append(title)
        if url:
            self.urls.add(normalize_url(url))

    def is_duplicate(self, title: Optional[str], url: Optional[str], threshold: float) -> bool:
        if url and normalize_url(url) in self.urls:
            return True
        if title:
            rating, _ = best_match(title, self.titles)
            if rating > threshold:
                return True
        return False


class FeedFetcher:
    def __init__(
        self,
        registry: SourceRegistry,
        session_factory: Callable[[], Session] = SessionLocal,
        items_per_feed: int = 5,
        recent_window_hours: int = 72,
        similarity_threshold: float = 0.65,
        timeout_seconds: float = 15.0
    ):
        self.registry = registry
        self.session_factory = session_factory
        self.items_per_feed = items_per_feed
        self.recent_window_hours = recent_window_hours
        self.similarity_threshold = similarity_threshold
        self.timeout_seconds = timeout_seconds
        self._lock = asyncio.Lock()

    @property
    def is_running(self) -> bool:
        return self._lock.locked()

    async def fetch_and_queue(self) -> int:
        """
        Run one fetch cycle over every active feed.

        Returns the number of entries queued. A call made while another
        cycle is running returns 0 without doing anything.
        """
        if self._lock.locked():
            logger.info("rss_fetch_already_running")
            return 0

        queued = 0
        async with self._lock:
            db = self.session_factory()
            try:
                known = self._load_known_content(db)
                queue = QueueRepository(db)
                for feed in self.registry.feeds:
                    try:
                        queued += await self._process_feed(feed, known, queue)
                    except Exception as e:
                        logger.error("rss_feed_failed", feed=feed.name, url=feed.url, error=str(e))
            finally:
                db.close()

        logger.info("rss_fetch_completed", queued=queued, feeds=len(self.registry.feeds))
        return queued

    def _load_known_content(self, db: Session) -> KnownContent:
        known = KnownContent()
        for title, url in PostRepository(db).recent_titles_and_urls(self.recent_window_hours):
            known.add(title, url)
        for title, url in QueueRepository(db).titles_and_urls():
            known.add(title, url)
        return known

    async def _process_feed(self, feed: FeedSource, known: KnownContent, queue: QueueRepository) -> int:
        entries = (await self.fetch_entries(feed.url))[:self.items_per_feed]
        queued = 0
        for entry in entries:
            title = (entry.get("title") or "").strip()
            link = entry.get("link")
            if known.is_duplicate(title, link, self.similarity_threshold):
                continue

            queue.add(self._build_item(feed, entry, title, link))
            known.add(title, link)
            queued += 1

        if queued:
            logger.info("rss_feed_queued", feed=feed.name, queued=queued)
        return queued

    def _build_item(self, feed: FeedSource, entry: Any, title: str, link: Optional[str]) -> QueueItem:
        summary = entry.get("summary") or entry.get("description") or ""
        return build_queue_item(
            f"Title: {title}\nSummary: {summary}",
            title=title,
            source_url=link,
            image_url=extract_entry_image(entry),
            source_label=feed.name,
            source_type=SourceType.RSS,
            author_name=feed.name,
            author_handle="RSS_Feed",
            prompt_type=PromptType.NEWS_ARTICLE,
        )

    async def fetch_entries(self, url: str) -> List[Any]:
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_seconds,
                follow_redirects=True,
                headers={"User-Agent": USER_AGENT}
            ) as client:
                response = await client.get(url)
                response.raise_for_status()
        except httpx.HTTPError as e:
            raise FeedFetchError(f"Failed to download feed {url}: {str(e)}")

        parsed = feedparser.parse(response.content)
        if parsed.bozo and not parsed.entries:
            raise FeedFetchError(f"Failed to parse feed {url}: {parsed.get('bozo_exception')}")
        return list(parsed.entries)
