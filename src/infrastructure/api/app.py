"""Blog sample API: tags and blogs served from in-memory repositories."""

from __future__ import annotations

from contextlib import asynccontextmanager
from operator import attrgetter

from fastapi import FastAPI

from src.domain.models.blog import Blog, Tag
from src.domain.repositories.base import ExtendedRepository
from src.domain.repositories.blog import BlogMemoryRepository, TagMemoryRepository
from src.domain.services.blog import TagService

from .router import create_resource_router


def create_app(
    tags: ExtendedRepository[Tag, int] | None = None,
    blogs: ExtendedRepository[Blog, int] | None = None,
) -> FastAPI:
    """Build the application.

    Repositories that are not supplied are created in memory and seeded with
    the sample tags and blog at startup.
    """
    seed_tags = tags is None
    seed_blogs = blogs is None
    if seed_tags:
        tags = TagMemoryRepository()
    if seed_blogs:
        blogs = BlogMemoryRepository()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if seed_tags:
            await TagService(tags).seed_data()
        if seed_blogs:
            await blogs.seed_data()
        yield

    app = FastAPI(title="Blazer Blog API", lifespan=lifespan)
    app.include_router(
        create_resource_router(
            tags, Tag, prefix="/api/tags",
            order_by=lambda items: sorted(items, key=attrgetter("name")),
        )
    )
    app.include_router(
        create_resource_router(
            blogs, Blog, prefix="/api/blogs",
            order_by=lambda items: sorted(items, key=attrgetter("title")),
        )
    )
    return app
