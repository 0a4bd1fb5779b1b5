"""
Ingestion Service
Builds queue items from manual input, RSS entries and tweets and appends them to the queue
"""

import uuid
from typing import Any, Dict, List, Optional

import structlog
from sqlalchemy.orm import Session

from ...models.queue_item import PromptType, QueueItem, SourceType
from ...repositories.queue_repository import QueueRepository

logger = structlog.get_logger(__name__)


def generate_identifier() -> str:
    return uuid.uuid4().hex


def photo_media(url: Optional[str]) -> List[Dict[str, Any]]:
    if not url:
        return []
    return [{"url": url, "kind": "photo", "variants": []}]


def normalize_tweet_media(tweet: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Flatten twitterapi.io media entries into ``{url, kind, variants}`` dicts."""
    extended = tweet.get("extendedEntities") or tweet.get("extended_entities") or {}
    raw_media = extended.get("media") if isinstance(extended, dict) else None
    if not raw_media:
        raw_media = tweet.get("media") or []
    if isinstance(raw_media, dict):
        raw_media = raw_media.get("media") or []

    media = []
    for entry in raw_media:
        if not isinstance(entry, dict):
            continue
        url = entry.get("media_url_https") or entry.get("url")
        if not url:
            continue
        variants = []
        for variant in (entry.get("video_info") or {}).get("variants") or []:
            if variant.get("url"):
                variants.append({
                    "url": variant["url"],
                    "content_type": variant.get("content_type"),
                    "bitrate": variant.get("bitrate") or 0,
                })
        media.append({"url": url, "kind": entry.get("type") or "photo", "variants": variants})
    return media


def build_queue_item(
    raw_text: str,
    *,
    identifier: Optional[str] = None,
    title: Optional[str] = None,
    source_url: Optional[str] = None,
    image_url: Optional[str] = None,
    media: Optional[List[Dict[str, Any]]] = None,
    related_stories: Optional[List[Dict[str, Any]]] = None,
    source_label: str = "Manual",
    source_type: SourceType = SourceType.MANUAL,
    author_name: Optional[str] = None,
    author_handle: Optional[str] = None,
    prompt_type: PromptType = PromptType.DETAILED,
) -> QueueItem:
    return QueueItem(
        identifier=identifier or generate_identifier(),
        title=title or None,
        raw_text=raw_text or "",
        source_url=source_url or None,
        image_url=image_url or None,
        media=media if media is not None else photo_media(image_url),
        related_stories=list(related_stories or []),
        source_label=source_label,
        source_type=source_type.value,
        author_name=author_name or source_label,
        author_handle=author_handle or source_label,
        prompt_type=prompt_type.value,
        attempts=0,
    )


class IngestionService:
    """Manual entry points into the queue. These skip fetch-time dedup; the worker still dedups."""

    def __init__(self, session: Session):
        self.queue = QueueRepository(session)

    def add_content(
        self,
        content: Optional[str] = None,
        url: Optional[str] = None,
        title: Optional[str] = None,
        image_url: Optional[str] = None,
        source: Optional[str] = None,
        related_stories: Optional[List[Dict[str, Any]]] = None,
    ) -> QueueItem:
        if title:
            raw_text = f"Title: {title}\nContent: {content or ''}"
        else:
            raw_text = content or f"Article from {url}"

        label = source or "Manual Paste"
        item = build_queue_item(
            raw_text,
            title=title,
            source_url=url,
            image_url=image_url,
            related_stories=related_stories,
            source_label=label,
            author_name=source or "Admin",
            author_handle="admin_direct",
        )
        return self._save(item)

    def add_text(self, text: str, title: Optional[str] = None, source: Optional[str] = None) -> QueueItem:
        raw_text = f"Title: {title}\nContent: {text}" if title else text
        item = build_queue_item(
            raw_text,
            title=title,
            source_label=source or "Manual Text",
            author_name="Manual",
            author_handle="manual_text",
        )
        return self._save(item)

    def add_rss_batch(self, entries: List[Dict[str, Any]]) -> int:
        items = []
        for entry in entries:
            title = entry.get("title") or ""
            items.append(build_queue_item(
                f"Title: {title}\nSummary: {entry.get('summary') or ''}",
                title=title,
                source_url=entry.get("url"),
                image_url=entry.get("image_url"),
                related_stories=entry.get("related_stories"),
                source_label=entry.get("source") or "Manual",
                author_name="Manual",
                author_handle="manual",
            ))

        count = self.queue.add_many(items)
        logger.info("queue_batch_added", count=count)
        return count

    def _save(self, item: QueueItem) -> QueueItem:
        saved = self.queue.add(item)
        logger.info("queue_item_added", identifier=saved.identifier, source=saved.source_label)
        return saved
