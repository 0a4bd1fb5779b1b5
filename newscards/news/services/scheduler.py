"""
Pipeline wiring and periodic jobs
"""

from dataclasses import dataclass
from typing import Callable, Optional

import structlog
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from sqlalchemy.orm import Session

from .content_scraper import ContentScraperService
from .feed_fetcher import FeedFetcher
from .publish_worker import PublishWorker
from .rewrite_engine import RewriteEngine
from .social_fetcher import SocialFetcher
from .source_registry import SourceRegistry, source_registry
from ...config import Settings
from ...core.database import SessionLocal
from ...services.llm_service import LLMProvider, LLMService

logger = structlog.get_logger(__name__)

WORKER_JOB_ID = "publish_worker"
RSS_JOB_ID = "rss_fetch"
SOCIAL_JOB_ID = "social_fetch"


@dataclass
class NewsPipeline:
    registry: SourceRegistry
    feed_fetcher: FeedFetcher
    social_fetcher: SocialFetcher
    worker: PublishWorker

    async def run_rss_fetch(self) -> int:
        self.registry.reload()
        return await self.feed_fetcher.fetch_and_queue()

    async def run_social_fetch(self) -> int:
        self.registry.reload()
        return await self.social_fetcher.fetch_all()

    async def run_worker(self) -> dict:
        return await self.worker.process_batch()


def build_pipeline(
    settings: Settings,
    session_factory: Callable[[], Session] = SessionLocal,
    registry: Optional[SourceRegistry] = None,
    llm_service: Optional[LLMService] = None
) -> NewsPipeline:
    registry = registry or source_registry
    llm_service = llm_service or LLMService(
        google_api_key=settings.google_api_key,
        openai_api_key=settings.openai_api_key,
        anthropic_api_key=settings.anthropic_api_key,
        google_model_name=settings.google_model_name,
        openai_model_name=settings.openai_model_name,
        anthropic_model_name=settings.anthropic_model_name,
    )
    scraper = ContentScraperService(
        timeout_seconds=settings.scraper_timeout_seconds,
        max_chars=settings.scraper_max_chars,
        skip_domains=settings.scraper_skip_domains,
    )
    engine = RewriteEngine(
        llm_service=llm_service,
        scraper=scraper,
        preferred_provider=LLMProvider(settings.preferred_rewrite_provider),
        categories=settings.allowed_categories,
        temperature=settings.rewrite_temperature,
        max_tokens=settings.rewrite_max_tokens,
    )

    return NewsPipeline(
        registry=registry,
        feed_fetcher=FeedFetcher(
            registry=registry,
            session_factory=session_factory,
            items_per_feed=settings.feed_items_per_source,
            recent_window_hours=settings.recent_posts_window_hours,
            similarity_threshold=settings.title_similarity_threshold,
            timeout_seconds=settings.feed_timeout_seconds,
        ),
        social_fetcher=SocialFetcher(
            api_key=settings.twitter_api_key,
            registry=registry,
            session_factory=session_factory,
            base_url=settings.twitter_api_base_url,
            tweets_per_handle=settings.tweets_per_handle,
            timeout_seconds=settings.twitter_timeout_seconds,
        ),
        worker=PublishWorker(
            engine=engine,
            session_factory=session_factory,
            batch_size=settings.worker_batch_size,
            item_delay_seconds=settings.worker_item_delay_seconds,
            dedup_url_match=settings.dedup_url_match,
            failure_policy=settings.queue_failure_policy,
            max_attempts=settings.max_queue_attempts,
            fallback_slug=settings.fallback_image_slug,
            default_category=settings.default_category,
            allowed_categories=settings.allowed_categories,
            language=settings.post_language,
        ),
    )


def _logged(job_id: str, job: Callable):
    async def run():
        try:
            return await job()
        except Exception as e:
            logger.error("scheduled_job_failed", job_id=job_id, error=str(e), exc_info=True)
            return None
    return run


def create_scheduler(pipeline: NewsPipeline, settings: Settings) -> AsyncIOScheduler:
    scheduler = AsyncIOScheduler(timezone="UTC")
    jobs = (
        (WORKER_JOB_ID, pipeline.run_worker, settings.worker_interval_minutes),
        (RSS_JOB_ID, pipeline.run_rss_fetch, settings.rss_fetch_interval_minutes),
        (SOCIAL_JOB_ID, pipeline.run_social_fetch, settings.social_fetch_interval_minutes),
    )
    for job_id, job, minutes in jobs:
        scheduler.add_job(
            _logged(job_id, job),
            "interval",
            minutes=minutes,
            id=job_id,
            max_instances=1,
            coalesce=True,
        )
    logger.info(
        "scheduler_configured",
        worker_minutes=settings.worker_interval_minutes,
        rss_minutes=settings.rss_fetch_interval_minutes,
        social_minutes=settings.social_fetch_interval_minutes,
    )
    return scheduler
