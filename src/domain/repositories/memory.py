"""In-memory repository backend, used by tests and the sample application.

The store is an insertion-ordered dict owned by one repository instance.  It
is not safe for concurrent mutation: callers serialize access themselves.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from itertools import islice
from typing import Any, ClassVar, TypeVar

from pydantic import BaseModel

from src.domain.exceptions import NullEntityError
from src.domain.keys import KeyAccessor, KeyRegistry, create_key_accessor

from .base import ExtendedRepository, QueryOptions

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)
K = TypeVar("K")

Predicate = Callable[[T], bool]
Ordering = Callable[[list[T]], Iterable[T]]


class MemoryRepository(ExtendedRepository[T, K]):
    """ExtendedRepository over a process-local dict.

    filter is a predicate on one entity; order_by receives the filtered list
    and returns it reordered, e.g. ``lambda tags: sorted(tags, key=attrgetter("name"))``.
    include is accepted for contract compatibility and ignored.

    Subclasses set entity_type, or it is passed to the constructor.
    """

    entity_type: ClassVar[type[BaseModel] | None] = None

    def __init__(
        self,
        entity_type: type[T] | None = None,
        registry: KeyRegistry | None = None,
    ) -> None:
        entity_type = entity_type or self.entity_type
        if entity_type is None:
            raise TypeError(f"{type(self).__name__} needs an entity_type")
        self._entity_type = entity_type
        self._data: dict[K, T] = {}
        self._keys: KeyAccessor = create_key_accessor(entity_type, registry=registry)

    @property
    def keys(self) -> KeyAccessor:
        return self._keys

    def __len__(self) -> int:
        return len(self._data)

    async def get_all(self, skip: int | None = None, take: int | None = None) -> list[T] | None:
        return await self.get(skip=skip, take=take)

    async def get_by_id(self, id: K) -> T | None:
        return self._data.get(id)

    async def get(
        self,
        filter: Predicate | None = None,
        order_by: Ordering | None = None,
        include: str | None = "",
        skip: int | None = None,
        take: int | None = None,
    ) -> list[T] | None:
        options = QueryOptions(filter=filter, order_by=order_by, include=include, skip=skip, take=take)
        try:
            return list(self._build_query(options))
        except Exception:
            logger.exception("In-memory %s query failed", self._entity_type.__name__)
            return None

    async def get_projection(
        self,
        projection: Callable[[Iterable[T]], Iterable[Any]],
        filter: Predicate | None = None,
        order_by: Ordering | None = None,
        include: str | None = "",
        skip: int | None = None,
        take: int | None = None,
    ) -> list[Any] | None:
        options = QueryOptions(filter=filter, order_by=order_by, include=include, skip=skip, take=take)
        try:
            return list(projection(self._build_query(options)))
        except Exception:
            logger.exception("In-memory %s projection failed", self._entity_type.__name__)
            return None

    async def insert(self, entity: T) -> T | None:
        if entity is None:
            raise NullEntityError("entity")

        key = self._keys.get_key(entity)
        if self._keys.is_unassigned(key):
            key = self._next_free_key()
            self._keys.set_key(entity, key)

        existing = self._data.get(key)
        if existing is not None:
            logger.debug("%s %s already stored; insert ignored", self._entity_type.__name__, key)
            return existing

        self._data[key] = entity
        return entity

    async def update(self, entity: T) -> T | None:
        if entity is None:
            raise NullEntityError("entity")

        key = self._keys.get_key(entity)
        if key in self._data:
            self._data[key] = entity
        return entity

    async def delete(self, entity: T) -> bool:
        if entity is None:
            raise NullEntityError("entity")
        return await self.delete_by_id(self._keys.get_key(entity))

    async def delete_by_id(self, id: K) -> bool:
        return self._data.pop(id, None) is not None

    def _next_free_key(self) -> K:
        # Keys inserted explicitly are never seen by the shared counter.
        key = self._keys.next_key()
        while key in self._data:
            key = self._keys.next_key()
        return key

    def _build_query(self, options: QueryOptions) -> Iterable[T]:
        items: Iterable[T] = self._data.values()

        if options.filter is not None:
            items = [item for item in items if options.filter(item)]

        if options.order_by is not None:
            items = options.order_by(list(items))

        if options.offset is not None or options.limit is not None:
            start = options.offset or 0
            stop = start + options.limit if options.limit is not None else None
            items = islice(items, start, stop)

        return list(items)
