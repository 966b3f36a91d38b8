"""Domain model package.

All domain objects are pure Pydantic models with no ORM or infrastructure
dependencies.  Import from this package to avoid coupling application code
to individual module paths.
"""

from .base import Entity
from .blog import Blog, Post, Tag
from .responses import EntityListResponse, EntityResponse

__all__ = [
    "Entity",
    "Tag",
    "Post",
    "Blog",
    "EntityResponse",
    "EntityListResponse",
]
