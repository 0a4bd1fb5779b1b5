from datetime import datetime

from fastapi import APIRouter, Depends

from ...dependencies import get_post_repository, get_queue_repository, get_source_registry, get_source_repository
from ....models.source import RSSSource, TwitterSource
from ....news.schemas.responses import CategoryCount, DashboardStatsResponse, PostResponse, QueueItemResponse
from ....news.services.source_registry import SourceRegistry
from ....repositories.post_repository import PostRepository
from ....repositories.queue_repository import QueueRepository
from ....repositories.source_repository import SourceRepository

router = APIRouter()


@router.get("/dashboard-stats", response_model=DashboardStatsResponse)
async def dashboard_stats(
    posts: PostRepository = Depends(get_post_repository),
    queue: QueueRepository = Depends(get_queue_repository),
    sources: SourceRepository = Depends(get_source_repository),
    registry: SourceRegistry = Depends(get_source_registry)
):
    start_of_day = datetime.utcnow().replace(hour=0, minute=0, second=0, microsecond=0)

    return DashboardStatsResponse(
        total_posts=posts.count(),
        posts_today=posts.count_since(start_of_day),
        queue_length=queue.count(),
        top_categories=[
            CategoryCount(category=name, count=count) for name, count in posts.category_counts(limit=10)
        ],
        recent_posts=[PostResponse.model_validate(post) for post in posts.recent(limit=10)],
        queue_head=[QueueItemResponse.model_validate(item) for item in queue.oldest(5)],
        registry=registry.snapshot(),
        twitter_sources=len(sources.list_sources(TwitterSource)),
        rss_sources=len(sources.list_sources(RSSSource)),
    )
