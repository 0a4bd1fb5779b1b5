import math
from typing import Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import IntegrityError

from ...dependencies import get_post_repository, get_tag_repository
from ....models.post import Post
from ....news.schemas.requests import BulkUpdateRequest, CreateManualPostsRequest, PostUpdateRequest
from ....news.schemas.responses import BulkUpdateResponse, ManualPostsResponse, PostListResponse, PostResponse
from ....repositories.post_repository import PostRepository
from ....repositories.tag_repository import TagRepository
from ....utils.url_utils import extract_slug_from_url, generate_post_id, normalize_url

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("/posts", response_model=PostListResponse)
async def list_posts(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    category: Optional[str] = Query(None, description="Category name or 'all'"),
    search: Optional[str] = Query(None, description="Matches title, summary or source"),
    status: Optional[str] = Query(None, description="published, unpublished or all"),
    posts: PostRepository = Depends(get_post_repository)
):
    items, total = posts.list_posts(page=page, limit=limit, category=category, search=search, status=status)
    return PostListResponse(
        posts=[PostResponse.model_validate(post) for post in items],
        total=total,
        page=page,
        limit=limit,
        total_pages=math.ceil(total / limit) if total else 0,
    )


@router.post("/posts/bulk-update", response_model=BulkUpdateResponse)
async def bulk_update_posts(request: BulkUpdateRequest, posts: PostRepository = Depends(get_post_repository)):
    if request.action == "delete":
        affected = posts.bulk_delete(request.post_ids)
    else:
        affected = posts.bulk_set_published(request.post_ids, request.action == "publish")
    logger.info("posts_bulk_updated", action=request.action, affected=affected)
    return BulkUpdateResponse(success=True, action=request.action, affected=affected)


@router.get("/posts/{post_id}", response_model=PostResponse)
async def get_post(post_id: int, posts: PostRepository = Depends(get_post_repository)):
    post = posts.get_by_post_id(post_id)
    if not post:
        raise HTTPException(status_code=404, detail="Post not found")
    return post


@router.put("/posts/{post_id}", response_model=PostResponse)
async def update_post(
    post_id: int,
    request: PostUpdateRequest,
    posts: PostRepository = Depends(get_post_repository),
    tags: TagRepository = Depends(get_tag_repository)
):
    post = posts.get_by_post_id(post_id)
    if not post:
        raise HTTPException(status_code=404, detail="Post not found")

    changes = request.model_dump(exclude_none=True, exclude={"tags", "related_stories"})
    for field, value in changes.items():
        setattr(post, field, value)
    if request.related_stories is not None:
        post.related_stories = [story.model_dump() for story in request.related_stories]
    if request.tags is not None:
        post.tags = tags.get_or_create_many(request.tags)

    return posts.update(post)


@router.delete("/posts/{post_id}")
async def delete_post(post_id: int, posts: PostRepository = Depends(get_post_repository)):
    if not posts.delete(post_id):
        raise HTTPException(status_code=404, detail="Post not found")
    return {"success": True}


@router.post("/posts/{post_id}/toggle-publish", response_model=PostResponse)
async def toggle_publish(post_id: int, posts: PostRepository = Depends(get_post_repository)):
    post = posts.toggle_publish(post_id)
    if not post:
        raise HTTPException(status_code=404, detail="Post not found")
    return post


@router.post("/create-manual-posts", response_model=ManualPostsResponse)
async def create_manual_posts(
    request: CreateManualPostsRequest,
    posts: PostRepository = Depends(get_post_repository),
    tags: TagRepository = Depends(get_tag_repository)
):
    """Publish ready-made cards directly, skipping any whose title and summary already exist."""
    created_ids = []
    skipped = 0

    for entry in request.posts:
        if posts.find_by_title_and_summary_prefix(entry.title, entry.summary):
            skipped += 1
            continue

        url = normalize_url(entry.url) or None
        post = Post(
            post_id=generate_post_id(),
            title=entry.title,
            summary=entry.summary or entry.title,
            url=url,
            image_search_slug=extract_slug_from_url(url) or "",
            image_url=entry.image_url,
            video_url=entry.video_url,
            media=[],
            related_stories=[story.model_dump() for story in entry.related_stories],
            source_name=entry.source or "Manual",
            source=entry.source or "Manual",
            source_type="manual",
            categories=entry.categories or ["General"],
            tags=tags.get_or_create_many(entry.tags),
            is_published=entry.is_published,
            post_type="normal_video" if entry.video_url else "normal_post",
        )
        try:
            posts.create(post)
        except IntegrityError as e:
            logger.warning("manual_post_conflict", title=entry.title, error=str(e.orig))
            skipped += 1
            continue
        created_ids.append(post.post_id)

    logger.info("manual_posts_created", created=len(created_ids), skipped=skipped)
    return ManualPostsResponse(success=True, created=len(created_ids), skipped=skipped, post_ids=created_ids)
