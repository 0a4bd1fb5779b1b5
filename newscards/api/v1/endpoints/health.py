from datetime import datetime
from typing import Dict, Any

import structlog
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from sqlalchemy import text

from ....core.database import get_db
from ....config import get_settings

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("/health")
async def health_check(db: Session = Depends(get_db)) -> Dict[str, Any]:
    settings = get_settings()
    try:
        db.execute(text("SELECT 1"))
    except Exception as e:
        logger.error("health_check_database_failed", error=str(e))
        raise HTTPException(
            status_code=503,
            detail={
                "status": "unhealthy",
                "database": "unhealthy",
                "error": "Database connectivity failed",
                "timestamp": datetime.utcnow().isoformat()
            }
        )

    return {
        "status": "healthy",
        "service": "NewsCards API",
        "version": "0.1.0",
        "environment": "development" if settings.debug else "production",
        "database": "healthy",
        "scheduler_enabled": settings.scheduler_enabled,
        "timestamp": datetime.utcnow().isoformat(),
    }
