from datetime import datetime, timedelta
from typing import Iterable, List, Optional, Set, Tuple

from sqlalchemy import desc, func, or_
from sqlalchemy.orm import Session

from ..models.post import Post


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class PostRepository:
    def __init__(self, session: Session):
        self.session = session

    def create(self, post: Post) -> Post:
        self.session.add(post)
        try:
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        self.session.refresh(post)
        return post

    def get_by_post_id(self, post_id: int) -> Optional[Post]:
        return self.session.query(Post).filter(Post.post_id == post_id).first()

    def find_by_url_match(self, normalized_url: str, mode: str = "contains") -> Optional[Post]:
        """
        Look up a post by URL. ``contains`` matches any stored URL that holds
        ``normalized_url`` case-insensitively; ``exact`` compares normalized forms.
        """
        if not normalized_url:
            return None
        if mode == "exact":
            return (
                self.session.query(Post)
                .filter(or_(Post.url == normalized_url, Post.url == normalized_url + "/"))
                .first()
            )
        pattern = f"%{_escape_like(normalized_url.lower())}%"
        return (
            self.session.query(Post)
            .filter(func.lower(Post.url).like(pattern, escape="\\"))
            .first()
        )

    def exists_tweet_id(self, tweet_id: str) -> bool:
        return self.session.query(Post.id).filter(Post.tweet_id == tweet_id).first() is not None

    def existing_tweet_ids(self, tweet_ids: Iterable[str]) -> Set[str]:
        ids = [tweet_id for tweet_id in tweet_ids if tweet_id]
        if not ids:
            return set()
        rows = self.session.query(Post.tweet_id).filter(Post.tweet_id.in_(ids)).all()
        return {row[0] for row in rows}

    def recent_titles_and_urls(self, hours: int) -> List[Tuple[str, Optional[str]]]:
        cutoff = datetime.utcnow() - timedelta(hours=hours)
        return [
            (row.title, row.url)
            for row in self.session.query(Post.title, Post.url).filter(Post.published_at >= cutoff).all()
        ]

    def find_by_title_and_summary_prefix(self, title: str, summary: str) -> Optional[Post]:
        prefix = _escape_like((summary or "")[:50].lower())
        return (
            self.session.query(Post)
            .filter(Post.title == title)
            .filter(func.lower(Post.summary).like(f"%{prefix}%", escape="\\"))
            .first()
        )

    def list_posts(
        self,
        page: int = 1,
        limit: int = 20,
        category: Optional[str] = None,
        search: Optional[str] = None,
        status: Optional[str] = None,
    ) -> Tuple[List[Post], int]:
        query = self.session.query(Post)

        if search:
            pattern = f"%{_escape_like(search.lower())}%"
            query = query.filter(
                or_(
                    func.lower(Post.title).like(pattern, escape="\\"),
                    func.lower(Post.summary).like(pattern, escape="\\"),
                    func.lower(Post.source_name).like(pattern, escape="\\"),
                )
            )

        if status == "published":
            query = query.filter(Post.is_published.is_(True))
        elif status == "unpublished":
            query = query.filter(Post.is_published.is_(False))

        posts = query.order_by(desc(Post.published_at)).all()

        # categories is a JSON list, filtered in Python to stay portable across backends
        if category and category != "all":
            posts = [post for post in posts if category in (post.categories or [])]

        total = len(posts)
        offset = (page - 1) * limit
        return posts[offset:offset + limit], total

    def update(self, post: Post) -> Post:
        self.session.commit()
        self.session.refresh(post)
        return post

    def delete(self, post_id: int) -> bool:
        post = self.get_by_post_id(post_id)
        if post:
            self.session.delete(post)
            self.session.commit()
            return True
        return False

    def toggle_publish(self, post_id: int) -> Optional[Post]:
        post = self.get_by_post_id(post_id)
        if not post:
            return None
        post.is_published = not post.is_published
        return self.update(post)

    def bulk_set_published(self, post_ids: List[int], is_published: bool) -> int:
        updated = (
            self.session.query(Post)
            .filter(Post.post_id.in_(post_ids))
            .update({Post.is_published: is_published}, synchronize_session=False)
        )
        self.session.commit()
        return updated

    def bulk_delete(self, post_ids: List[int]) -> int:
        posts = self.session.query(Post).filter(Post.post_id.in_(post_ids)).all()
        for post in posts:
            self.session.delete(post)
        self.session.commit()
        return len(posts)

    def count(self) -> int:
        return self.session.query(Post).count()

    def count_since(self, since: datetime) -> int:
        return self.session.query(Post).filter(Post.published_at >= since).count()

    def category_counts(self, limit: int = 10) -> List[Tuple[str, int]]:
        counts: dict = {}
        for (categories,) in self.session.query(Post.categories).all():
            primary = (categories or ["General"])[0]
            counts[primary] = counts.get(primary, 0) + 1
        return sorted(counts.items(), key=lambda item: item[1], reverse=True)[:limit]

    def recent(self, limit: int = 10) -> List[Post]:
        return self.session.query(Post).order_by(desc(Post.published_at)).limit(limit).all()
