"""Domain services package."""

from .blog import BlogService, TagService
from .manager import Manager

__all__ = ["Manager", "TagService", "BlogService"]
