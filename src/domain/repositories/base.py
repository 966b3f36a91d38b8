"""Generic repository interfaces.

Repository[T, K] is the CRUD contract every backend implements identically
(in-memory, SQLAlchemy, HTTP).  ExtendedRepository adds customizable
retrieval and is a separate interface, so a caller can tell whether a backend
supports it with a plain isinstance check.

Design notes:
  - All methods are async to accommodate async database drivers and HTTP.
  - T is the domain model type (a pydantic model with a Key-marked field),
    K the type of its key.
  - Store, query and transport failures are logged by the backend and come
    back as None (or False for deletes); they are never raised.
  - skip/take of None or <= 0 mean "no skip" / "no limit".
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

T = TypeVar("T")
K = TypeVar("K")
R = TypeVar("R")


@dataclass(frozen=True)
class QueryOptions:
    """One call's query customization, applied as filter, include, order, skip, take.

    The types of filter and order_by belong to the backend: a predicate and a
    list transform for MemoryRepository, a column expression and a Select
    transform for SqlRepository.
    """

    filter: Any = None
    order_by: Callable[[Any], Any] | None = None
    include: str | None = ""
    skip: int | None = None
    take: int | None = None

    @property
    def include_paths(self) -> list[str]:
        """Related-data names from the comma-separated include string."""
        if not self.include:
            return []
        return [name.strip() for name in self.include.split(",") if name.strip()]

    @property
    def offset(self) -> int | None:
        return self.skip if self.skip is not None and self.skip > 0 else None

    @property
    def limit(self) -> int | None:
        return self.take if self.take is not None and self.take > 0 else None


class Repository(ABC, Generic[T, K]):
    """Abstract CRUD interface shared by every backend."""

    @abstractmethod
    async def get_all(self, skip: int | None = None, take: int | None = None) -> list[T] | None:
        """Return every entity in backend order, after the optional skip/take."""

    @abstractmethod
    async def get_by_id(self, id: K) -> T | None:
        """Return the entity with the given key, or None if not found."""

    @abstractmethod
    async def insert(self, entity: T) -> T | None:
        """Store a new entity, allocating its key when unassigned.

        If an entity with the same key is already stored, nothing is written
        and the stored entity is returned.  Raises NullEntityError for None.
        """

    @abstractmethod
    async def update(self, entity: T) -> T | None:
        """Replace the stored entity sharing this entity's key.

        Raises NullEntityError for None.
        """

    @abstractmethod
    async def delete(self, entity: T) -> bool:
        """Remove the stored entity with this entity's key; True if one was removed."""

    @abstractmethod
    async def delete_by_id(self, id: K) -> bool:
        """Remove the entity with the given key; True if one was removed."""


class ExtendedRepository(Repository[T, K]):
    """Repository with a customizable query and a projecting variant."""

    @abstractmethod
    async def get(
        self,
        filter: Any = None,
        order_by: Callable[[Any], Any] | None = None,
        include: str | None = "",
        skip: int | None = None,
        take: int | None = None,
    ) -> list[T] | None:
        """Return the entities matching filter, ordered and paginated."""

    @abstractmethod
    async def get_projection(
        self,
        projection: Callable[[Any], Any],
        filter: Any = None,
        order_by: Callable[[Any], Any] | None = None,
        include: str | None = "",
        skip: int | None = None,
        take: int | None = None,
    ) -> list[Any] | None:
        """Build the same query as get() and map it through projection."""
