from .post import Post, post_tags
from .queue_item import QueueItem, SourceType, PromptType
from .source import TwitterSource, RSSSource
from .tag import Tag

__all__ = ["Post", "post_tags", "QueueItem", "SourceType", "PromptType", "TwitterSource", "RSSSource", "Tag"]
