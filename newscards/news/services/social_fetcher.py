"""
Social Fetcher
Pulls the latest tweets of the registered handles from twitterapi.io into the queue
"""

from typing import Any, Callable, Dict, List, Optional

import httpx
import structlog
from sqlalchemy.orm import Session

from .ingestion_service import build_queue_item, normalize_tweet_media
from .source_registry import SourceRegistry
from ...core.database import SessionLocal
from ...exceptions import SocialApiError
from ...models.queue_item import PromptType, QueueItem, SourceType
from ...repositories.post_repository import PostRepository
from ...repositories.queue_repository import QueueRepository
from ...utils.url_utils import build_tweet_url

logger = structlog.get_logger(__name__)


def extract_tweets(payload: Any) -> List[Dict[str, Any]]:
    """The API has returned tweets both at the top level and nested under ``data``."""
    if not isinstance(payload, dict):
        return []
    tweets = payload.get("tweets")
    if tweets is None and isinstance(payload.get("data"), dict):
        tweets = payload["data"].get("tweets")
    return [tweet for tweet in tweets or [] if isinstance(tweet, dict) and tweet.get("id")]


class SocialFetcher:
    def __init__(
        self,
        api_key: str,
        registry: SourceRegistry,
        session_factory: Callable[[], Session] = SessionLocal,
        base_url: str = "https://api.twitterapi.io",
        tweets_per_handle: int = 5,
        timeout_seconds: float = 15.0
    ):
        self.api_key = api_key
        self.registry = registry
        self.session_factory = session_factory
        self.base_url = base_url.rstrip("/")
        self.tweets_per_handle = tweets_per_handle
        self.timeout_seconds = timeout_seconds

    async def fetch_all(self) -> int:
        total = 0
        handles = self.registry.handles
        for handle in handles:
            total += await self.fetch_for_handle(handle)
        logger.info("social_fetch_completed", handles=len(handles), queued=total)
        return total

    async def fetch_for_handle(self, handle: str) -> int:
        """Queue the newest unseen tweets of ``handle``. Never raises; failures count as 0."""
        try:
            payload = await self._request_last_tweets(handle)
            tweets = extract_tweets(payload)[:self.tweets_per_handle]
            if not tweets:
                return 0
            return self._queue_new_tweets(handle, tweets)
        except SocialApiError as e:
            logger.warning("social_fetch_failed", handle=handle, error=str(e))
            return 0
        except Exception as e:
            logger.error("social_fetch_error", handle=handle, error=str(e), exc_info=True)
            return 0

    async def _request_last_tweets(self, handle: str) -> Any:
        url = f"{self.base_url}/twitter/user/last_tweets"
        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                response = await client.get(
                    url,
                    params={"userName": handle},
                    headers={"X-API-Key": self.api_key}
                )
                response.raise_for_status()
                return response.json()
        except httpx.HTTPStatusError as e:
            raise SocialApiError(f"Twitter API returned {e.response.status_code} for {handle}")
        except httpx.HTTPError as e:
            raise SocialApiError(f"Twitter API request failed for {handle}: {str(e)}")
        except ValueError as e:
            raise SocialApiError(f"Twitter API returned invalid JSON for {handle}: {str(e)}")

    def _queue_new_tweets(self, handle: str, tweets: List[Dict[str, Any]]) -> int:
        db = self.session_factory()
        try:
            ids = [str(tweet["id"]) for tweet in tweets]
            seen = PostRepository(db).existing_tweet_ids(ids) | QueueRepository(db).existing_identifiers(ids)
            items = [
                self.build_item(handle, tweet)
                for tweet in tweets
                if str(tweet["id"]) not in seen
            ]
            count = QueueRepository(db).add_many(items)
        finally:
            db.close()

        if count:
            logger.info("social_handle_queued", handle=handle, queued=count)
        return count

    def build_item(self, handle: str, tweet: Dict[str, Any]) -> QueueItem:
        tweet_id = str(tweet["id"])
        author = tweet.get("author") or tweet.get("user") or {}
        author_handle = author.get("userName") or author.get("screen_name") or handle
        author_name = author.get("name") or handle
        media = normalize_tweet_media(tweet)
        source_url = tweet.get("url") or tweet.get("twitterUrl") or build_tweet_url(author_handle, tweet_id)

        return build_queue_item(
            tweet.get("text") or tweet.get("full_text") or "",
            identifier=tweet_id,
            source_url=source_url,
            image_url=self._first_photo(media),
            media=media,
            source_label=f"@{handle}",
            source_type=SourceType.TWITTER,
            author_name=author_name,
            author_handle=author_handle,
            prompt_type=PromptType.DETAILED,
        )

    @staticmethod
    def _first_photo(media: List[Dict[str, Any]]) -> Optional[str]:
        for entry in media:
            if entry.get("kind") == "photo":
                return entry.get("url")
        return None
