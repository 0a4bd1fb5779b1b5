from typing import List

import structlog
from fastapi import APIRouter, Depends, HTTPException

from ...dependencies import get_source_repository
from ....models.source import RSSSource, TwitterSource
from ....news.schemas.requests import RssSourceCreate, RssSourceUpdate, TwitterSourceCreate, TwitterSourceUpdate
from ....news.schemas.responses import RssSourceResponse, TwitterSourceResponse
from ....repositories.source_repository import SourceRepository

logger = structlog.get_logger(__name__)

router = APIRouter()


def clean_handle(handle: str) -> str:
    return handle.strip().lstrip("@")


@router.get("/twitter-sources", response_model=List[TwitterSourceResponse])
async def list_twitter_sources(sources: SourceRepository = Depends(get_source_repository)):
    return sources.list_sources(TwitterSource)


@router.post("/twitter-sources", response_model=TwitterSourceResponse)
async def add_twitter_source(
    request: TwitterSourceCreate,
    sources: SourceRepository = Depends(get_source_repository)
):
    handle = clean_handle(request.handle)
    if not handle:
        raise HTTPException(status_code=400, detail="Handle is required")
    if sources.find_twitter_source(handle):
        raise HTTPException(status_code=400, detail="Source already exists")

    source = sources.add_twitter_source(handle, is_active=request.is_active)
    logger.info("twitter_source_added", handle=handle)
    return source


@router.put("/twitter-sources/{source_id}", response_model=TwitterSourceResponse)
async def update_twitter_source(
    source_id: int,
    request: TwitterSourceUpdate,
    sources: SourceRepository = Depends(get_source_repository)
):
    source = sources.get(TwitterSource, source_id)
    if not source:
        raise HTTPException(status_code=404, detail="Source not found")

    changes = request.model_dump(exclude_none=True)
    if "handle" in changes:
        changes["handle"] = clean_handle(changes["handle"])
    return sources.update(source, changes)


@router.delete("/twitter-sources/{source_id}")
async def delete_twitter_source(source_id: int, sources: SourceRepository = Depends(get_source_repository)):
    if not sources.delete(TwitterSource, source_id):
        raise HTTPException(status_code=404, detail="Source not found")
    logger.info("twitter_source_deleted", source_id=source_id)
    return {"success": True}


@router.get("/rss-sources", response_model=List[RssSourceResponse])
async def list_rss_sources(sources: SourceRepository = Depends(get_source_repository)):
    return sources.list_sources(RSSSource)


@router.post("/rss-sources", response_model=RssSourceResponse)
async def add_rss_source(
    request: RssSourceCreate,
    sources: SourceRepository = Depends(get_source_repository)
):
    url = request.url.strip()
    if sources.find_rss_source(url):
        raise HTTPException(status_code=400, detail="Source already exists")

    source = sources.add_rss_source(request.name.strip(), url, is_active=request.is_active)
    logger.info("rss_source_added", name=source.name, url=url)
    return source


@router.put("/rss-sources/{source_id}", response_model=RssSourceResponse)
async def update_rss_source(
    source_id: int,
    request: RssSourceUpdate,
    sources: SourceRepository = Depends(get_source_repository)
):
    source = sources.get(RSSSource, source_id)
    if not source:
        raise HTTPException(status_code=404, detail="Source not found")
    return sources.update(source, request.model_dump(exclude_none=True))


@router.delete("/rss-sources/{source_id}")
async def delete_rss_source(source_id: int, sources: SourceRepository = Depends(get_source_repository)):
    if not sources.delete(RSSSource, source_id):
        raise HTTPException(status_code=404, detail="Source not found")
    logger.info("rss_source_deleted", source_id=source_id)
    return {"success": True}
