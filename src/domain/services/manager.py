"""Service-layer wrapper around a repository.

A Manager forwards every call to the repository it was built with.  It has no
behaviour of its own: subclasses override methods to add cross-cutting
concerns (a default sort order, auditing, caching) before or after calling
super(), and the backend underneath can be swapped through DI.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Generic, TypeVar

from src.domain.exceptions import NotSupportedError
from src.domain.repositories.base import ExtendedRepository, Repository

T = TypeVar("T")
K = TypeVar("K")


class Manager(Repository[T, K], Generic[T, K]):
    def __init__(self, repository: Repository[T, K]) -> None:
        self._repository = repository

    @property
    def repository(self) -> Repository[T, K]:
        return self._repository

    @property
    def supports_queries(self) -> bool:
        """True when get() and get_projection() can be delegated."""
        return isinstance(self._repository, ExtendedRepository)

    async def get_all(self, skip: int | None = None, take: int | None = None) -> list[T] | None:
        return await self._repository.get_all(skip=skip, take=take)

    async def get_by_id(self, id: K) -> T | None:
        return await self._repository.get_by_id(id)

    async def insert(self, entity: T) -> T | None:
        return await self._repository.insert(entity)

    async def update(self, entity: T) -> T | None:
        return await self._repository.update(entity)

    async def delete(self, entity: T) -> bool:
        return await self._repository.delete(entity)

    async def delete_by_id(self, id: K) -> bool:
        return await self._repository.delete_by_id(id)

    async def get(
        self,
        filter: Any = None,
        order_by: Callable[[Any], Any] | None = None,
        include: str | None = "",
        skip: int | None = None,
        take: int | None = None,
    ) -> list[T] | None:
        return await self._extended().get(
            filter=filter, order_by=order_by, include=include, skip=skip, take=take
        )

    async def get_projection(
        self,
        projection: Callable[[Any], Any],
        filter: Any = None,
        order_by: Callable[[Any], Any] | None = None,
        include: str | None = "",
        skip: int | None = None,
        take: int | None = None,
    ) -> list[Any] | None:
        return await self._extended().get_projection(
            projection, filter=filter, order_by=order_by, include=include, skip=skip, take=take
        )

    def _extended(self) -> ExtendedRepository[T, K]:
        if not isinstance(self._repository, ExtendedRepository):
            raise NotSupportedError(
                f"{type(self._repository).__name__} does not support customized queries"
            )
        return self._repository
