"""News card API response schemas"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from .requests import RelatedStory


class CamelResponse(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class TriggerResponse(BaseModel):
    success: bool = True
    queued_count: int = 0


class AutoFetchResponse(BaseModel):
    success: bool = True
    queued_total: int = 0


class QueuedResponse(CamelResponse):
    success: bool = True
    queue_id: str


class CountResponse(BaseModel):
    success: bool = True
    count: int = 0


class QueueItemResponse(CamelResponse):
    id: int
    identifier: str
    title: Optional[str] = None
    raw_text: str
    source_url: Optional[str] = None
    image_url: Optional[str] = None
    source_label: Optional[str] = None
    source_type: Optional[str] = None
    author_name: Optional[str] = None
    prompt_type: Optional[str] = None
    attempts: int = 0
    last_error: Optional[str] = None
    enqueued_at: datetime


class QueueListResponse(BaseModel):
    total: int
    items: List[QueueItemResponse]


class TwitterSourceResponse(CamelResponse):
    id: int
    handle: str
    is_active: bool
    added_at: Optional[datetime] = None


class RssSourceResponse(CamelResponse):
    id: int
    name: str
    url: str
    is_active: bool
    added_at: Optional[datetime] = None


class TagResponse(CamelResponse):
    name: str
    slug: str


class PostResponse(CamelResponse):
    post_id: int
    title: str
    summary: Optional[str] = None
    url: Optional[str] = None
    image_search_slug: Optional[str] = None
    image_url: Optional[str] = None
    video_url: Optional[str] = None
    media: List[Dict[str, Any]] = Field(default_factory=list)
    related_stories: List[RelatedStory] = Field(default_factory=list)
    source_name: Optional[str] = None
    source: Optional[str] = None
    source_type: Optional[str] = None
    tweet_id: Optional[str] = None
    twitter_url: Optional[str] = None
    categories: List[str] = Field(default_factory=list)
    tags: List[TagResponse] = Field(default_factory=list)
    published_at: Optional[datetime] = None
    is_published: bool = True
    post_type: Optional[str] = None
    lang: Optional[str] = None


class PostListResponse(CamelResponse):
    posts: List[PostResponse]
    total: int
    page: int
    limit: int
    total_pages: int


class BulkUpdateResponse(BaseModel):
    success: bool = True
    action: str
    affected: int


class ManualPostsResponse(BaseModel):
    success: bool = True
    created: int
    skipped: int
    post_ids: List[int] = Field(default_factory=list)


class CategoryCount(BaseModel):
    category: str
    count: int


class DashboardStatsResponse(CamelResponse):
    total_posts: int
    posts_today: int
    queue_length: int
    top_categories: List[CategoryCount]
    recent_posts: List[PostResponse]
    queue_head: List[QueueItemResponse]
    registry: Dict[str, int]
    twitter_sources: int
    rss_sources: int
