"""Blog sample domain models.

A Blog owns its Posts; Tags are a separate, flat entity.  Every model marks
its identity with Key so any repository backend can manage it.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated

from pydantic import Field

from src.domain.keys import Key

from .base import Entity


class Tag(Entity):
    """A label that can be applied to blog posts.

    name is limited to 16 characters and description to 64.
    """

    id: Annotated[int, Key()] = 0
    name: str = Field(min_length=1, max_length=16)
    description: str | None = Field(default=None, max_length=64)


class Post(Entity):
    """A single blog post.  tags holds tag names, not Tag entities."""

    id: Annotated[int, Key()] = 0
    blog_id: int = 0
    date_posted: datetime
    author: str
    title: str
    abstract: str
    content: str
    image_url: str
    tags: list[str] = Field(default_factory=list)


class Blog(Entity):
    """A blog and the posts published on it.

    slug is the URL-friendly name used to look a blog up.
    """

    id: Annotated[int, Key()] = 0
    author: str
    title: str
    slug: str
    abstract: str
    image_url: str
    posts: list[Post] = Field(default_factory=list)
