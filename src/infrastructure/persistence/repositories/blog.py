"""SQLAlchemy repositories for the blog sample."""

from __future__ import annotations

from typing import Any

from src.domain.models.blog import Blog as DomainBlog
from src.domain.models.blog import Tag as DomainTag
from src.infrastructure.persistence.models.blog import Blog as OrmBlog
from src.infrastructure.persistence.models.blog import Post as OrmPost
from src.infrastructure.persistence.models.blog import Tag as OrmTag

from .base import SqlRepository


class SqlTagRepository(SqlRepository[DomainTag, int]):
    entity_type = DomainTag
    row_type = OrmTag


class SqlBlogRepository(SqlRepository[DomainBlog, int]):
    """Blogs are inserted together with their posts; updates touch the blog row only."""

    entity_type = DomainBlog
    row_type = OrmBlog

    def _to_row(self, entity: DomainBlog, include_key: bool = True) -> OrmBlog:
        row = super()._to_row(entity, include_key)
        row.posts = [
            OrmPost(**post.model_dump(exclude={"blog_id"} if post.id else {"id", "blog_id"}))
            for post in entity.posts
        ]
        return row

    def _read_generated(self, row: OrmBlog) -> dict[str, Any]:
        generated = super()._read_generated(row)
        generated["posts"] = [(post.id, post.blog_id) for post in row.posts]
        return generated

    def _apply_generated(self, entity: DomainBlog, generated: dict[str, Any]) -> None:
        super()._apply_generated(entity, generated)
        for post, (post_id, blog_id) in zip(entity.posts, generated["posts"]):
            post.id = post_id
            post.blog_id = blog_id
