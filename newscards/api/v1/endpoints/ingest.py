from typing import Any, List

import structlog
from fastapi import APIRouter, Body, Depends, HTTPException
from pydantic import ValidationError

from ...dependencies import get_ingestion_service, get_pipeline
from ....news.schemas.requests import AddContentRequest, AddTextRequest, RssQueueEntry
from ....news.schemas.responses import AutoFetchResponse, CountResponse, QueuedResponse, TriggerResponse
from ....news.services.ingestion_service import IngestionService
from ....news.services.scheduler import NewsPipeline

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("/trigger-rss-fetch", response_model=TriggerResponse)
async def trigger_rss_fetch(pipeline: NewsPipeline = Depends(get_pipeline)):
    """Run one RSS fetch cycle now. Returns 0 when a cycle is already running."""
    queued = await pipeline.run_rss_fetch()
    logger.info("manual_rss_fetch", queued=queued)
    return TriggerResponse(success=True, queued_count=queued)


@router.get("/trigger-auto-fetch", response_model=AutoFetchResponse)
async def trigger_auto_fetch(pipeline: NewsPipeline = Depends(get_pipeline)):
    """Run one social fetch cycle now, reloading the source registry first."""
    queued = await pipeline.run_social_fetch()
    logger.info("manual_social_fetch", queued=queued)
    return AutoFetchResponse(success=True, queued_total=queued)


@router.post("/add-content-to-queue", response_model=QueuedResponse)
async def add_content_to_queue(
    request: AddContentRequest,
    ingestion: IngestionService = Depends(get_ingestion_service)
):
    if not request.content and not request.url:
        raise HTTPException(status_code=400, detail="No content/url")

    item = ingestion.add_content(
        content=request.content,
        url=request.url,
        title=request.title,
        image_url=request.image_url,
        source=request.source,
        related_stories=[story.model_dump() for story in request.related_stories],
    )
    return QueuedResponse(success=True, queue_id=item.identifier)


@router.post("/add-text-to-queue", response_model=QueuedResponse)
async def add_text_to_queue(
    request: AddTextRequest,
    ingestion: IngestionService = Depends(get_ingestion_service)
):
    item = ingestion.add_text(request.text, title=request.title, source=request.source)
    return QueuedResponse(success=True, queue_id=item.identifier)


@router.post("/add-rss-to-queue", response_model=CountResponse)
async def add_rss_to_queue(
    payload: Any = Body(...),
    ingestion: IngestionService = Depends(get_ingestion_service)
):
    """Accepts a bare array of entries or ``{"items": [...]}``."""
    raw_items = payload.get("items") if isinstance(payload, dict) else payload
    if not isinstance(raw_items, list):
        raise HTTPException(status_code=400, detail="Expected an array of RSS items")

    try:
        entries: List[RssQueueEntry] = [RssQueueEntry.model_validate(raw) for raw in raw_items]
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=f"Invalid RSS item: {e.errors()[0].get('msg')}")

    count = ingestion.add_rss_batch([entry.model_dump() for entry in entries])
    return CountResponse(success=True, count=count)
