import structlog
from fastapi import APIRouter, Depends, HTTPException, Query

from ...dependencies import get_queue_repository
from ....news.schemas.responses import CountResponse, QueueItemResponse, QueueListResponse
from ....repositories.queue_repository import QueueRepository

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("/queue", response_model=QueueListResponse)
async def list_queue(
    limit: int = Query(100, ge=1, le=500),
    queue: QueueRepository = Depends(get_queue_repository)
):
    items = queue.list_all(limit=limit)
    return QueueListResponse(
        total=queue.count(),
        items=[QueueItemResponse.model_validate(item) for item in items],
    )


@router.post("/clear-queue", response_model=CountResponse)
async def clear_queue(queue: QueueRepository = Depends(get_queue_repository)):
    removed = queue.clear()
    logger.info("queue_cleared", removed=removed)
    return CountResponse(success=True, count=removed)


@router.delete("/queue/{identifier}")
async def delete_queue_item(identifier: str, queue: QueueRepository = Depends(get_queue_repository)):
    if not queue.delete_by_identifier(identifier):
        raise HTTPException(status_code=404, detail="Queue item not found")
    return {"success": True}
