"""HTTP repositories for the blog sample, matching the routes in app.py."""

from __future__ import annotations

from src.domain.models.blog import Blog, Tag

from .client import ApiRepository


class ApiTagRepository(ApiRepository[Tag, int]):
    entity_type = Tag
    resource = "api/tags"


class ApiBlogRepository(ApiRepository[Blog, int]):
    entity_type = Blog
    resource = "api/blogs"
