"""HTTP repository backend.

ApiRepository implements the basic Repository contract against a remote
resource controller (see router.py) using an injected httpx.AsyncClient.
It does not offer customized queries: filters and orderings cannot cross the
wire, so a Manager over an ApiRepository raises NotSupportedError for get().

Every request/response exchange is wrapped in an envelope
({"success", "errorMessages", "data"}).  Non-2xx statuses, envelopes with
success=false, undecodable bodies and transport errors are logged and turned
into None (or False for deletes).
"""

from __future__ import annotations

import logging
from typing import Any, ClassVar, TypeVar
from urllib.parse import quote

import httpx
from pydantic import BaseModel

from src.domain.exceptions import NullEntityError
from src.domain.keys import KeyAccessor, KeyRegistry, create_key_accessor
from src.domain.models.responses import EntityListResponse, EntityResponse
from src.domain.repositories.base import Repository
from src.infrastructure.database import Settings, settings

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)
K = TypeVar("K")


def create_http_client(config: Settings | None = None) -> httpx.AsyncClient:
    """Build the AsyncClient ApiRepository instances share.

    The caller owns the client and closes it with ``await client.aclose()``.
    """
    config = config or settings
    return httpx.AsyncClient(
        base_url=config.api_base_url,
        timeout=config.api_timeout,
        headers={"Accept": "application/json"},
    )


class ApiRepository(Repository[T, K]):
    """Repository backed by a remote resource such as ``api/tags``.

    Subclasses set entity_type and resource, or pass them to the constructor.
    """

    entity_type: ClassVar[type[BaseModel] | None] = None
    resource: ClassVar[str | None] = None

    def __init__(
        self,
        client: httpx.AsyncClient,
        resource: str | None = None,
        entity_type: type[T] | None = None,
        registry: KeyRegistry | None = None,
    ) -> None:
        entity_type = entity_type or self.entity_type
        resource = resource or self.resource
        if entity_type is None or not resource:
            raise TypeError(f"{type(self).__name__} needs an entity_type and a resource")

        self._client = client
        self._resource = resource.rstrip("/")
        self._entity_type = entity_type
        self._keys: KeyAccessor = create_key_accessor(entity_type, registry=registry)
        self._single_response = EntityResponse[entity_type]
        self._list_response = EntityListResponse[entity_type]

    @property
    def client(self) -> httpx.AsyncClient:
        return self._client

    async def get_all(self, skip: int | None = None, take: int | None = None) -> list[T] | None:
        params: dict[str, int] = {}
        if skip is not None:
            params["skip"] = skip
        if take is not None:
            params["take"] = take

        try:
            response = await self._client.get(self._resource, params=params)
            return self._read_list(response)
        except (httpx.HTTPError, ValueError):
            logger.exception("GET %s failed", self._resource)
            return None

    async def get_by_id(self, id: K) -> T | None:
        url = self._url_for(id)
        try:
            response = await self._client.get(url)
            return self._read_single(response)
        except (httpx.HTTPError, ValueError):
            logger.exception("GET %s failed", url)
            return None

    async def insert(self, entity: T) -> T | None:
        if entity is None:
            raise NullEntityError("entity")
        try:
            response = await self._client.post(self._resource, json=self._encode(entity))
            return self._read_single(response)
        except (httpx.HTTPError, ValueError):
            logger.exception("POST %s failed", self._resource)
            return None

    async def update(self, entity: T) -> T | None:
        if entity is None:
            raise NullEntityError("entity")
        try:
            response = await self._client.put(self._resource, json=self._encode(entity))
            return self._read_single(response)
        except (httpx.HTTPError, ValueError):
            logger.exception("PUT %s failed", self._resource)
            return None

    async def delete(self, entity: T) -> bool:
        if entity is None:
            raise NullEntityError("entity")
        return await self.delete_by_id(self._keys.get_key(entity))

    async def delete_by_id(self, id: K) -> bool:
        url = self._url_for(id)
        try:
            response = await self._client.delete(url)
            response.raise_for_status()
        except httpx.HTTPError:
            logger.exception("DELETE %s failed", url)
            return False
        return True

    def _url_for(self, id: Any) -> str:
        return f"{self._resource}/{quote(str(id), safe='')}"

    @staticmethod
    def _encode(entity: BaseModel) -> dict[str, Any]:
        return entity.model_dump(mode="json", by_alias=True)

    def _read_single(self, response: httpx.Response) -> T | None:
        response.raise_for_status()
        envelope = self._single_response.model_validate(response.json())
        if not envelope.success:
            logger.warning("%s reported failure: %s", response.url, envelope.error_messages)
            return None
        return envelope.data

    def _read_list(self, response: httpx.Response) -> list[T] | None:
        response.raise_for_status()
        envelope = self._list_response.model_validate(response.json())
        if not envelope.success:
            logger.warning("%s reported failure: %s", response.url, envelope.error_messages)
            return None
        return envelope.data if envelope.data is not None else []
