"""Managers for the blog sample application.

The orderings and filters here are the in-memory forms (list transforms and
predicates); the sample client runs these services over MemoryRepository.
"""

from __future__ import annotations

from operator import attrgetter

from src.domain.models.blog import Blog, Tag

from .manager import Manager

_SEED_TAGS = [
    (1, "Data Access", "All about managing Data"),
    (2, ".NET Core", "All about .NET Core"),
    (3, "Blazor", "All about Blazor"),
    (4, "Tutorial", "Tutorials"),
]


def _sorted_by(field: str):
    key = attrgetter(field)
    return lambda items: sorted(items, key=key)


class TagService(Manager[Tag, int]):
    async def seed_data(self) -> None:
        for tag_id, name, description in _SEED_TAGS:
            await self.insert(Tag(id=tag_id, name=name, description=description))

    async def get_all(self, skip: int | None = None, take: int | None = None) -> list[Tag] | None:
        """All tags ordered by name."""
        return await self.get(order_by=_sorted_by("name"), skip=skip, take=take)


class BlogService(Manager[Blog, int]):
    async def get_all(self, skip: int | None = None, take: int | None = None) -> list[Blog] | None:
        """Blogs ordered by title, paginated."""
        return await self.get(order_by=_sorted_by("title"), skip=skip, take=take)

    async def get_blog_by_slug(self, slug: str) -> Blog | None:
        """Case-insensitive slug lookup; None when no blog matches."""
        slug = slug.lower()
        blogs = await self.get(filter=lambda blog: blog.slug.lower() == slug)
        return blogs[0] if blogs else None
