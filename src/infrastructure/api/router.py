"""FastAPI resource controller serving a repository over the envelope protocol.

    GET    {prefix}?skip=&take=   -> EntityListResponse
    GET    {prefix}/{id}          -> EntityResponse (data null when absent)
    POST   {prefix}               -> EntityResponse with the stored entity
    PUT    {prefix}               -> EntityResponse with the updated entity
    DELETE {prefix}/{id}          -> EntityResponse, 404 when nothing was deleted

Repository results of None (a swallowed store failure) become HTTP 500.
"""

# No `from __future__ import annotations`: FastAPI reads the endpoint
# annotations, which are built from the entity and key types at runtime.

import logging
from collections.abc import Callable
from typing import Any, Optional

from fastapi import APIRouter, HTTPException, status

from src.domain.exceptions import DataAccessError
from src.domain.keys import KeyRegistry, create_key_accessor
from src.domain.models.responses import EntityListResponse, EntityResponse
from src.domain.repositories.base import ExtendedRepository

logger = logging.getLogger(__name__)


def _server_error(message: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=message)


def create_resource_router(
    repository: ExtendedRepository,
    entity_type: type,
    prefix: str,
    filter: Any = None,
    order_by: Optional[Callable[[Any], Any]] = None,
    include: str = "",
    registry: Optional[KeyRegistry] = None,
) -> APIRouter:
    """Build the CRUD routes for one repository.

    filter, order_by and include are applied to every list request, so the
    server decides ordering and related-data loading for its clients.
    """
    key_type = create_key_accessor(entity_type, registry=registry).key_type.python_type
    name = entity_type.__name__
    single = EntityResponse[entity_type]
    many = EntityListResponse[entity_type]

    router = APIRouter(prefix=prefix, tags=[name])

    @router.get("", response_model=many)
    async def list_entities(skip: Optional[int] = None, take: Optional[int] = None):
        try:
            result = await repository.get(
                filter=filter, order_by=order_by, include=include, skip=skip, take=take
            )
        except DataAccessError:
            logger.exception("Listing %s failed", name)
            raise _server_error(f"Unable to list {name}")
        if result is None:
            raise _server_error(f"Unable to list {name}")
        return many(success=True, data=result)

    @router.get("/{id}", response_model=single)
    async def get_entity(id: key_type):
        try:
            result = await repository.get_by_id(id)
        except DataAccessError:
            logger.exception("Loading %s %s failed", name, id)
            raise _server_error(f"Unable to load {name}")
        return single(success=True, data=result)

    @router.post("", response_model=single)
    async def create_entity(entity: entity_type):
        try:
            result = await repository.insert(entity)
        except DataAccessError:
            logger.exception("Creating %s failed", name)
            raise _server_error(f"Unable to create {name}")
        if result is None:
            raise _server_error(f"Unable to create {name}")
        return single(success=True, data=result)

    @router.put("", response_model=single)
    async def update_entity(entity: entity_type):
        try:
            result = await repository.update(entity)
        except DataAccessError:
            logger.exception("Updating %s failed", name)
            raise _server_error(f"Unable to update {name}")
        if result is None:
            raise _server_error(f"Unable to update {name}")
        return single(success=True, data=result)

    @router.delete("/{id}", response_model=single)
    async def delete_entity(id: key_type):
        try:
            deleted = await repository.delete_by_id(id)
        except DataAccessError:
            logger.exception("Deleting %s %s failed", name, id)
            raise _server_error(f"Unable to delete {name}")
        if not deleted:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail=f"{name} {id} not found"
            )
        return single(success=True)

    return router
