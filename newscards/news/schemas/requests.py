"""News card API request schemas"""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Accepts camelCase on the wire and snake_case from Python."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class RelatedStory(CamelModel):
    title: Optional[str] = None
    summary: Optional[str] = None
    image_url: Optional[str] = None
    url: Optional[str] = None


class AddContentRequest(CamelModel):
    content: Optional[str] = None
    url: Optional[str] = None
    title: Optional[str] = None
    image_url: Optional[str] = None
    source: Optional[str] = None
    related_stories: List[RelatedStory] = Field(default_factory=list)


class RssQueueEntry(CamelModel):
    title: str = Field(..., min_length=1)
    url: Optional[str] = None
    summary: Optional[str] = None
    image_url: Optional[str] = None
    source: Optional[str] = None
    related_stories: List[RelatedStory] = Field(default_factory=list)


class AddTextRequest(CamelModel):
    text: str = Field(..., min_length=1, description="Raw text to rewrite")
    title: Optional[str] = None
    source: Optional[str] = None


class TwitterSourceCreate(CamelModel):
    handle: str = Field(..., min_length=1)
    is_active: bool = True


class TwitterSourceUpdate(CamelModel):
    handle: Optional[str] = None
    is_active: Optional[bool] = None


class RssSourceCreate(CamelModel):
    name: str = Field(..., min_length=1)
    url: str = Field(..., min_length=1)
    is_active: bool = True


class RssSourceUpdate(CamelModel):
    name: Optional[str] = None
    url: Optional[str] = None
    is_active: Optional[bool] = None


class PostUpdateRequest(CamelModel):
    title: Optional[str] = None
    summary: Optional[str] = None
    image_url: Optional[str] = None
    video_url: Optional[str] = None
    image_search_slug: Optional[str] = None
    categories: Optional[List[str]] = None
    tags: Optional[List[str]] = None
    related_stories: Optional[List[RelatedStory]] = None
    is_published: Optional[bool] = None


class BulkUpdateRequest(CamelModel):
    post_ids: List[int] = Field(..., min_length=1)
    action: Literal["publish", "unpublish", "delete"]


class ManualPostInput(CamelModel):
    title: str = Field(..., min_length=1)
    summary: str = ""
    url: Optional[str] = None
    image_url: Optional[str] = None
    video_url: Optional[str] = None
    source: Optional[str] = None
    categories: List[str] = Field(default_factory=lambda: ["General"])
    tags: List[str] = Field(default_factory=list)
    related_stories: List[RelatedStory] = Field(default_factory=list)
    is_published: bool = True


class CreateManualPostsRequest(CamelModel):
    posts: List[ManualPostInput] = Field(..., min_length=1)
