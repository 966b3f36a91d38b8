"""Generic SQLAlchemy implementation of ExtendedRepository.

Every call opens its own session from the injected async_sessionmaker and
converts rows to domain models before the session closes, so nothing handed
back to a caller is tracked by a session.

Query customization:
  - filter is a boolean column expression on the row class
    (``OrmTag.name == "C#"``);
  - include is a comma-separated list of relationship names, each loaded
    with selectinload;
  - order_by receives the Select and returns it ordered
    (``lambda stmt: stmt.order_by(OrmTag.name)``);
  - a projection receives the finished Select and returns another one
    (``lambda stmt: stmt.with_only_columns(OrmTag.name)``).
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, ClassVar, TypeVar

from pydantic import BaseModel
from sqlalchemy import ColumnElement, Select, inspect, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload

from src.domain.exceptions import ConfigurationError, NullEntityError
from src.domain.keys import KeyAccessor, KeyRegistry, create_key_accessor
from src.domain.repositories.base import ExtendedRepository, QueryOptions
from src.infrastructure.database import Base

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)
K = TypeVar("K")

SelectTransform = Callable[[Select], Select]

# Driver faults such as a refused connection surface as OSError, not SQLAlchemyError.
STORE_ERRORS = (SQLAlchemyError, OSError)


class SqlRepository(ExtendedRepository[T, K]):
    """ExtendedRepository over one ORM row class.

    Subclasses set entity_type (the domain model) and row_type (the ORM
    class), or pass them to the constructor.  The row class must have a
    column named like the entity's Key field.
    """

    entity_type: ClassVar[type[BaseModel] | None] = None
    row_type: ClassVar[type[Base] | None] = None

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        entity_type: type[T] | None = None,
        row_type: type[Base] | None = None,
        registry: KeyRegistry | None = None,
    ) -> None:
        entity_type = entity_type or self.entity_type
        row_type = row_type or self.row_type
        if entity_type is None or row_type is None:
            raise TypeError(f"{type(self).__name__} needs an entity_type and a row_type")

        self._session_factory = session_factory
        self._entity_type = entity_type
        self._row_type = row_type
        self._keys: KeyAccessor = create_key_accessor(entity_type, registry=registry)

        mapper = inspect(row_type)
        key_name = self._keys.key_field.name
        try:
            self._key_column = mapper.columns[key_name]
        except KeyError:
            raise ConfigurationError(
                f"{row_type.__name__} has no column for key field {key_name!r}"
            ) from None
        self._columns = [
            attr.key for attr in mapper.column_attrs if attr.key in entity_type.model_fields
        ]

    @property
    def keys(self) -> KeyAccessor:
        return self._keys

    async def get_all(self, skip: int | None = None, take: int | None = None) -> list[T] | None:
        return await self.get(skip=skip, take=take)

    async def get_by_id(self, id: K) -> T | None:
        try:
            async with self._session_factory() as session:
                row = await session.get(self._row_type, id)
                return self._to_domain(row) if row is not None else None
        except STORE_ERRORS:
            logger.exception("Failed to load %s %s", self._row_type.__name__, id)
            return None

    async def get(
        self,
        filter: ColumnElement[bool] | None = None,
        order_by: SelectTransform | None = None,
        include: str | None = "",
        skip: int | None = None,
        take: int | None = None,
    ) -> list[T] | None:
        options = QueryOptions(filter=filter, order_by=order_by, include=include, skip=skip, take=take)
        try:
            stmt = self._build_query(options)
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                return [self._to_domain(row) for row in result.scalars()]
        except Exception:
            logger.exception("%s query failed", self._row_type.__name__)
            return None

    async def get_projection(
        self,
        projection: SelectTransform,
        filter: ColumnElement[bool] | None = None,
        order_by: SelectTransform | None = None,
        include: str | None = "",
        skip: int | None = None,
        take: int | None = None,
    ) -> list[Any] | None:
        """Run the projected Select.

        A single selected element comes back as a flat list of values (rows
        of the repository's own type are converted to domain models); several
        elements come back as Row tuples.
        """
        options = QueryOptions(filter=filter, order_by=order_by, include=include, skip=skip, take=take)
        try:
            stmt = projection(self._build_query(options))
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                if len(stmt.column_descriptions) == 1:
                    return [
                        self._to_domain(item) if isinstance(item, self._row_type) else item
                        for item in result.scalars()
                    ]
                return list(result.all())
        except Exception:
            logger.exception("%s projection failed", self._row_type.__name__)
            return None

    async def insert(self, entity: T) -> T | None:
        if entity is None:
            raise NullEntityError("entity")

        key = self._keys.get_key(entity)
        assigned = not self._keys.is_unassigned(key)
        try:
            async with self._session_factory() as session:
                if assigned:
                    existing = await session.get(self._row_type, key)
                    if existing is not None:
                        logger.debug("%s %s already stored; insert ignored", self._row_type.__name__, key)
                        return self._to_domain(existing)

                # Without a key the column is left out so the database allocates it.
                row = self._to_row(entity, include_key=assigned)
                session.add(row)
                await session.flush()
                generated = self._read_generated(row)
                await session.commit()
        except STORE_ERRORS:
            logger.exception("Failed to insert %s", self._row_type.__name__)
            return None

        self._apply_generated(entity, generated)
        return entity

    async def update(self, entity: T) -> T | None:
        """Write every mapped column of entity, whether or not it changed.

        The UPDATE is issued without checking that the row exists; when it
        matches nothing the result is None.
        """
        if entity is None:
            raise NullEntityError("entity")

        key = self._keys.get_key(entity)
        values = {
            name: getattr(entity, name) for name in self._columns if name != self._key_column.key
        }
        stmt = update(self._row_type).where(self._key_column == key).values(**values)
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                await session.commit()
        except STORE_ERRORS:
            logger.exception("Failed to update %s %s", self._row_type.__name__, key)
            return None

        if result.rowcount == 0:
            logger.warning("Update matched no %s with key %s", self._row_type.__name__, key)
            return None
        return entity

    async def delete(self, entity: T) -> bool:
        if entity is None:
            raise NullEntityError("entity")

        key = self._keys.get_key(entity)
        try:
            async with self._session_factory() as session:
                row = await session.get(self._row_type, key)
                if row is None:
                    return False
                await session.delete(row)
                await session.commit()
                return True
        except STORE_ERRORS:
            logger.exception("Failed to delete %s %s", self._row_type.__name__, key)
            return False

    async def delete_by_id(self, id: K) -> bool:
        entity = await self.get_by_id(id)
        if entity is None:
            return False
        return await self.delete(entity)

    def _build_query(self, options: QueryOptions) -> Select:
        stmt = select(self._row_type)

        if options.filter is not None:
            stmt = stmt.where(options.filter)

        for name in options.include_paths:
            stmt = stmt.options(selectinload(getattr(self._row_type, name)))

        if options.order_by is not None:
            stmt = options.order_by(stmt)

        if options.offset is not None:
            stmt = stmt.offset(options.offset)

        if options.limit is not None:
            stmt = stmt.limit(options.limit)

        return stmt

    def _to_domain(self, row: Base) -> T:
        # Unloaded attributes (relationships not included) are skipped so no
        # lazy load is attempted outside the session's greenlet.
        unloaded = inspect(row).unloaded
        data = {
            name: getattr(row, name)
            for name in self._entity_type.model_fields
            if name not in unloaded and hasattr(row, name)
        }
        return self._entity_type.model_validate(data, from_attributes=True)

    def _to_row(self, entity: T, include_key: bool = True) -> Base:
        values = {name: getattr(entity, name) for name in self._columns}
        if not include_key:
            values.pop(self._key_column.key, None)
        return self._row_type(**values)

    def _read_generated(self, row: Base) -> dict[str, Any]:
        """Collect values the database generated on flush.

        Called before commit, which may expire the row.
        """
        return {"key": getattr(row, self._key_column.key)}

    def _apply_generated(self, entity: T, generated: dict[str, Any]) -> None:
        """Copy values collected by _read_generated onto entity."""
        if self._keys.is_unassigned(self._keys.get_key(entity)):
            self._keys.set_key(entity, generated["key"])
