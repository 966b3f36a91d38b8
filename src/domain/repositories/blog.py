"""In-memory repositories for the blog sample application."""

from __future__ import annotations

from datetime import datetime, timedelta

from src.domain.exceptions import NullEntityError
from src.domain.keys import KeyRegistry, create_key_accessor
from src.domain.models.blog import Blog, Post, Tag

from .memory import MemoryRepository

_IMAGE_WIDTH = 320
_IMAGE_HEIGHT = 240

_SAMPLE_ABSTRACT = (
    "<p>Notes on building data-access layers that do not care where the data "
    "lives: memory for tests, a relational database in production, or a remote "
    "API from the browser.</p>"
)

_SAMPLE_CONTENT = (
    "<p>A repository hides the store behind six operations: get all, get by id, "
    "insert, update and two flavours of delete.</p>"
    "<p>A manager sits in front of it so that sorting, caching or auditing can be "
    "added without touching any backend.</p>"
)


class TagMemoryRepository(MemoryRepository[Tag, int]):
    entity_type = Tag


class BlogMemoryRepository(MemoryRepository[Blog, int]):
    """Blogs held in memory.  Posts are stored inside their blog.

    Posts without a key get one from the process-wide Post counter, so post
    keys stay unique across every blog repository in the process.
    """

    entity_type = Blog

    def __init__(self, registry: KeyRegistry | None = None) -> None:
        super().__init__(registry=registry)
        self._post_keys = create_key_accessor(Post, registry=registry)

    async def insert(self, entity: Blog) -> Blog | None:
        if entity is None:
            raise NullEntityError("entity")

        # Posts of a blog that is already stored keep their keys.
        if self.keys.get_key(entity) not in self._data:
            for post in entity.posts:
                if self._post_keys.is_unassigned(post.id):
                    self._post_keys.set_key(post, self._post_keys.next_key())

        stored = await super().insert(entity)
        if stored is entity:
            for post in entity.posts:
                if not post.blog_id:
                    post.blog_id = entity.id
        return stored

    async def seed_data(self) -> Blog | None:
        """Insert one sample blog with a single post."""
        post = Post(
            title="Matt's First Blog Post",
            author="Matthew Dennis",
            abstract="This is Sample Blog Post #1",
            content=_SAMPLE_CONTENT,
            date_posted=datetime.now().replace(hour=0, minute=0, second=0, microsecond=0)
            - timedelta(days=4),
            image_url=f"https://loremflickr.com/{_IMAGE_WIDTH}/{_IMAGE_HEIGHT}/programming",
            tags=["C#", "Data Access"],
        )
        blog = Blog(
            author="Matthew",
            title="Matthew's Ramblings",
            slug="MattsRamblings",
            abstract=_SAMPLE_ABSTRACT,
            image_url="https://placeimg.com/1920/200/tech",
            posts=[post],
        )
        return await self.insert(blog)
