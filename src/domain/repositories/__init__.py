"""Domain repository interfaces and the in-memory backend.

The abstractions are defined with abc.ABC and @abstractmethod.  The database
implementation lives in src/infrastructure/persistence/ and the HTTP one in
src/infrastructure/api/; all are wired at the application boundary via
dependency injection.
"""

from .base import ExtendedRepository, QueryOptions, Repository
from .blog import BlogMemoryRepository, TagMemoryRepository
from .memory import MemoryRepository

__all__ = [
    "Repository",
    "ExtendedRepository",
    "QueryOptions",
    "MemoryRepository",
    "TagMemoryRepository",
    "BlogMemoryRepository",
]
