"""Concrete SQLAlchemy repository implementations.

Exports the generic SqlRepository, the blog sample repositories and the
get_repositories() factory used for wiring at the application boundary.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from .base import SqlRepository
from .blog import SqlBlogRepository, SqlTagRepository


@dataclass
class Repositories:
    """All repository instances bound to a single session factory."""

    tags: SqlTagRepository
    blogs: SqlBlogRepository


def get_repositories(session_factory: async_sessionmaker[AsyncSession]) -> Repositories:
    """Construct all repositories bound to the given session factory.

    Each repository opens one session per call:

        repos = get_repositories(AsyncSessionLocal)
        tag = await repos.tags.get_by_id(1)
    """
    return Repositories(
        tags=SqlTagRepository(session_factory),
        blogs=SqlBlogRepository(session_factory),
    )


__all__ = [
    "SqlRepository",
    "SqlTagRepository",
    "SqlBlogRepository",
    "Repositories",
    "get_repositories",
]
