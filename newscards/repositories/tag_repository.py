from typing import List, Optional

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..models.tag import Tag
from ..utils.string_utils import slugify_tag

logger = structlog.get_logger(__name__)


class TagRepository:
    def __init__(self, session: Session):
        self.session = session

    def get_by_slug(self, slug: str) -> Optional[Tag]:
        return self.session.query(Tag).filter(Tag.slug == slug).first()

    def get_or_create(self, name: str) -> Optional[Tag]:
        slug = slugify_tag(name)
        if not slug:
            return None

        tag = self.get_by_slug(slug)
        if tag:
            return tag

        tag = Tag(name=name.strip(), slug=slug)
        self.session.add(tag)
        try:
            self.session.commit()
        except IntegrityError:
            # Same slug or name created in the meantime
            self.session.rollback()
            return self.get_by_slug(slug)
        self.session.refresh(tag)
        return tag

    def get_or_create_many(self, names: Optional[List[str]]) -> List[Tag]:
        tags: List[Tag] = []
        seen = set()
        for name in names or []:
            if not isinstance(name, str):
                continue
            try:
                tag = self.get_or_create(name)
            except Exception as e:
                logger.error("tag_get_or_create_failed", tag_name=name, error=str(e))
                continue
            if tag and tag.slug not in seen:
                seen.add(tag.slug)
                tags.append(tag)
        return tags
