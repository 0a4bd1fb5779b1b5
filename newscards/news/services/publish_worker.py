"""
Publish Worker
Drains the queue: dedups, rewrites through the LLM and publishes posts
"""

import asyncio
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .rewrite_engine import RewriteEngine, RewriteResult
from ...core.database import SessionLocal
from ...models.post import Post
from ...models.queue_item import QueueItem, SourceType
from ...repositories.post_repository import PostRepository
from ...repositories.queue_repository import QueueRepository
from ...utils.url_utils import extract_slug_from_url, generate_post_id, normalize_url

logger = structlog.get_logger(__name__)

MIN_SLUG_LENGTH = 3
VIDEO_KINDS = ("video", "animated_gif")


class ItemOutcome(str, Enum):
    PUBLISHED = "published"
    DUPLICATE = "duplicate"
    REWRITE_FAILED = "rewrite_failed"
    ERROR = "error"


def select_video(media: Optional[List[Dict[str, Any]]]) -> Optional[str]:
    """Highest-bitrate mp4 variant of the first media entry, when that entry is a video."""
    if not media:
        return None
    first = media[0] or {}
    if first.get("kind") not in VIDEO_KINDS:
        return None
    mp4s = [
        variant for variant in first.get("variants") or []
        if variant.get("content_type") == "video/mp4" and variant.get("url")
    ]
    if not mp4s:
        return None
    return max(mp4s, key=lambda variant: variant.get("bitrate") or 0)["url"]


def resolve_category(category: Optional[str], allowed: Sequence[str], default: str = "General") -> str:
    if not category:
        return default
    wanted = category.strip().lower()
    for name in allowed:
        if name.lower() == wanted:
            return name
    return default


class PublishWorker:
    def __init__(
        self,
        engine: RewriteEngine,
        session_factory: Callable[[], Session] = SessionLocal,
        batch_size: int = 3,
        item_delay_seconds: float = 5.0,
        dedup_url_match: str = "contains",
        failure_policy: str = "drop",
        max_attempts: int = 3,
        fallback_slug: str = "latest-telugu-news",
        default_category: str = "General",
        allowed_categories: Optional[Sequence[str]] = None,
        language: str = "te",
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep
    ):
        self.engine = engine
        self.session_factory = session_factory
        self.batch_size = batch_size
        self.item_delay_seconds = item_delay_seconds
        self.dedup_url_match = dedup_url_match
        self.failure_policy = failure_policy
        self.max_attempts = max_attempts
        self.fallback_slug = fallback_slug
        self.default_category = default_category
        self.allowed_categories = list(allowed_categories or [default_category])
        self.language = language
        self.sleep = sleep
        self._lock = asyncio.Lock()

    async def process_batch(self) -> Dict[str, Any]:
        """
        Process up to ``batch_size`` of the oldest queue items, one at a time.

        Every item leaves the queue except under the ``retry`` policy, where a
        failed rewrite stays queued until it has used ``max_attempts``.
        """
        if self._lock.locked():
            logger.info("publish_worker_already_running")
            return {"skipped": True}

        stats: Dict[str, Any] = {outcome.value: 0 for outcome in ItemOutcome}
        stats.update({"processed": 0, "retained": 0, "skipped": False})

        async with self._lock:
            db = self.session_factory()
            try:
                items = QueueRepository(db).oldest(self.batch_size)
                for index, item in enumerate(items):
                    if index:
                        await self.sleep(self.item_delay_seconds)
                    outcome, retained = await self._process_item(db, item)
                    stats[outcome.value] += 1
                    stats["processed"] += 1
                    if retained:
                        stats["retained"] += 1
            finally:
                db.close()

        if stats["processed"]:
            logger.info("publish_batch_completed", **stats)
        return stats

    async def _process_item(self, db: Session, item: QueueItem):
        item_id = item.id
        identifier = item.identifier
        queue = QueueRepository(db)
        posts = PostRepository(db)

        try:
            if self.is_duplicate(posts, item):
                logger.info("queue_item_duplicate", identifier=identifier, url=item.source_url)
                queue.delete(item_id)
                return ItemOutcome.DUPLICATE, False

            result = await self.engine.rewrite(item.raw_text, item.source_url, item.prompt_type)
            if result is None:
                return ItemOutcome.REWRITE_FAILED, self._handle_failure(queue, item, "rewrite returned no result")

            post = self.build_post(item, result)
            try:
                posts.create(post)
            except IntegrityError as e:
                logger.warning("post_insert_conflict", identifier=identifier, error=str(e.orig))
                queue.delete(item_id)
                return ItemOutcome.DUPLICATE, False

            logger.info("post_published", post_id=post.post_id, identifier=identifier, category=post.primary_category)
            queue.delete(item_id)
            return ItemOutcome.PUBLISHED, False

        except Exception as e:
            logger.error("queue_item_failed", identifier=identifier, error=str(e), exc_info=True)
            db.rollback()
            return ItemOutcome.ERROR, self._handle_failure(queue, item, str(e), item_id=item_id)

    def is_duplicate(self, posts: PostRepository, item: QueueItem) -> bool:
        if item.source_url:
            if posts.find_by_url_match(normalize_url(item.source_url), mode=self.dedup_url_match):
                return True
        if item.source_type == SourceType.TWITTER.value and item.identifier:
            return posts.exists_tweet_id(item.identifier)
        return False

    def _handle_failure(
        self,
        queue: QueueRepository,
        item: QueueItem,
        reason: str,
        item_id: Optional[int] = None
    ) -> bool:
        """Returns True when the item stays queued for another attempt."""
        item_id = item_id if item_id is not None else item.id
        if self.failure_policy == "retry":
            current = queue.get(item_id)
            if current is not None and (current.attempts or 0) + 1 < self.max_attempts:
                queue.record_failure(item_id, reason)
                logger.info("queue_item_retained", queue_id=item_id, attempts=current.attempts, reason=reason)
                return True
        queue.delete(item_id)
        logger.info("queue_item_dropped", queue_id=item_id, reason=reason)
        return False

    def build_post(self, item: QueueItem, result: RewriteResult) -> Post:
        url_slug = extract_slug_from_url(item.source_url)
        title = result.title or url_slug or "News Update"
        summary = result.summary or title

        slug = result.slug if result.slug and len(result.slug) >= MIN_SLUG_LENGTH else ""
        slug = slug or url_slug or self.fallback_slug

        media = list(item.media or [])
        image_url = item.image_url or (media[0].get("url") if media else None)
        video_url = select_video(media)
        is_tweet = item.source_type == SourceType.TWITTER.value

        return Post(
            post_id=generate_post_id(),
            title=title,
            summary=summary,
            text=summary,
            url=normalize_url(item.source_url) or None,
            image_search_slug=slug,
            image_url=image_url,
            video_url=video_url,
            media=media,
            related_stories=list(item.related_stories or []),
            source_name=item.author_name,
            source=item.source_label,
            source_type=item.source_type,
            tweet_id=item.identifier if is_tweet else None,
            twitter_url=item.source_url if is_tweet else None,
            categories=[resolve_category(result.category, self.allowed_categories, self.default_category)],
            is_published=True,
            post_type="normal_video" if video_url else "normal_post",
            lang=self.language,
        )
