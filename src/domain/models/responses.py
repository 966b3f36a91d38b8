"""Response envelopes exchanged between the resource controller and ApiRepository.

Wire shape: {"success": bool, "errorMessages": [str], "data": ...}.
"""

from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class EntityResponse(BaseModel, Generic[T]):
    """Envelope around a single entity; data is None when nothing matched."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    success: bool = False
    error_messages: list[str] = Field(default_factory=list)
    data: T | None = None


class EntityListResponse(BaseModel, Generic[T]):
    """Envelope around a page of entities."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    success: bool = False
    error_messages: list[str] = Field(default_factory=list)
    data: list[T] | None = None
