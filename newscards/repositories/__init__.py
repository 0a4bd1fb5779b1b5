from .post_repository import PostRepository
from .queue_repository import QueueRepository
from .source_repository import SourceRepository
from .tag_repository import TagRepository

__all__ = ["PostRepository", "QueueRepository", "SourceRepository", "TagRepository"]
