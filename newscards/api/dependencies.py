from functools import lru_cache

from fastapi import Depends
from sqlalchemy.orm import Session

from ..core.database import get_db
from ..news.services.ingestion_service import IngestionService
from ..news.services.scheduler import NewsPipeline, build_pipeline
from ..news.services.source_registry import SourceRegistry, source_registry
from ..repositories.post_repository import PostRepository
from ..repositories.queue_repository import QueueRepository
from ..repositories.source_repository import SourceRepository
from ..repositories.tag_repository import TagRepository
from ..config import get_settings


def get_post_repository(db: Session = Depends(get_db)) -> PostRepository:
    return PostRepository(db)


def get_queue_repository(db: Session = Depends(get_db)) -> QueueRepository:
    return QueueRepository(db)


def get_source_repository(db: Session = Depends(get_db)) -> SourceRepository:
    return SourceRepository(db)


def get_tag_repository(db: Session = Depends(get_db)) -> TagRepository:
    return TagRepository(db)


def get_ingestion_service(db: Session = Depends(get_db)) -> IngestionService:
    return IngestionService(db)


def get_source_registry() -> SourceRegistry:
    return source_registry


@lru_cache()
def get_pipeline() -> NewsPipeline:
    return build_pipeline(get_settings(), registry=source_registry)
