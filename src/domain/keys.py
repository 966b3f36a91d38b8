"""Identity-field access and key allocation for repository entities.

An entity declares its identity by marking exactly one pydantic field with
Key:

    class Tag(BaseModel):
        id: Annotated[int, Key()] = 0

The marked field is resolved once per entity type.  Resolved fields, the
accessors built on them and the integer allocation counters all live in a
KeyRegistry.  default_registry is the single process-wide instance: it is
created on import, filled lazily the first time a repository asks for an
accessor, and never torn down.  Tests call default_registry.reset().
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from operator import attrgetter
from typing import Any, Generic, TypeVar
from uuid import UUID, uuid4

import numpy as np
from pydantic import BaseModel

from .exceptions import ConfigurationError, ExhaustedKeySpaceError, UnsupportedKeyTypeError

E = TypeVar("E", bound=BaseModel)
K = TypeVar("K")


class KeyType(str, Enum):
    INT8 = "int8"
    UINT8 = "uint8"
    INT16 = "int16"
    UINT16 = "uint16"
    INT32 = "int32"
    UINT32 = "uint32"
    INT64 = "int64"
    UINT64 = "uint64"
    UUID = "uuid"

    @property
    def is_integer(self) -> bool:
        return self is not KeyType.UUID

    @property
    def zero(self) -> int | UUID:
        """The unassigned value: a key equal to this is allocated on insert."""
        return UUID(int=0) if self is KeyType.UUID else 0

    @property
    def max_value(self) -> int:
        if not self.is_integer:
            raise TypeError("UUID keys have no maximum value")
        return int(np.iinfo(self.value).max)

    @property
    def python_type(self) -> type:
        return UUID if self is KeyType.UUID else int


# Plain annotations accepted without an explicit Key(key_type=...).
_ANNOTATION_KEY_TYPES: dict[Any, KeyType] = {int: KeyType.INT32, UUID: KeyType.UUID}


@dataclass(frozen=True)
class Key:
    """Annotated marker for the identity field of an entity.

    key_type narrows the width of an int field (Key(KeyType.UINT16)); when
    omitted it is inferred from the annotation.
    """

    key_type: KeyType | type | None = None


@dataclass(frozen=True)
class KeyField:
    name: str
    key_type: KeyType


def _coerce_key_type(entity_type: type, key_type: Any) -> KeyType:
    if isinstance(key_type, KeyType):
        return key_type
    try:
        return _ANNOTATION_KEY_TYPES[key_type]
    except (KeyError, TypeError):
        raise UnsupportedKeyTypeError(entity_type, key_type) from None


def resolve_key_field(entity_type: type) -> KeyField:
    """Find the single Key-marked field of a pydantic model class.

    Raises ConfigurationError when the type is not a pydantic model or marks
    zero or several fields, and UnsupportedKeyTypeError when the marked
    field's type has no accessor.
    """
    fields = getattr(entity_type, "model_fields", None)
    if not isinstance(fields, dict):
        raise ConfigurationError(f"{entity_type.__name__} is not a pydantic model")

    marked = [
        (name, info, marker)
        for name, info in fields.items()
        for marker in info.metadata
        if isinstance(marker, Key)
    ]
    if not marked:
        raise ConfigurationError(f"{entity_type.__name__} does not have a field marked with Key")
    if len(marked) > 1:
        names = ", ".join(name for name, _, _ in marked)
        raise ConfigurationError(
            f"{entity_type.__name__} marks multiple key fields ({names}); only one is supported"
        )

    name, info, marker = marked[0]
    declared = marker.key_type if marker.key_type is not None else info.annotation
    return KeyField(name=name, key_type=_coerce_key_type(entity_type, declared))


class KeyCounter:
    """Allocation counter for one (entity type, integer key type) pair.

    Starts at zero, so the first allocated key is 1.  Never wraps.
    """

    def __init__(self, key_type: KeyType) -> None:
        self.key_type = key_type
        self._maximum = key_type.max_value
        self._value = 0
        self._lock = threading.Lock()

    @property
    def value(self) -> int:
        return self._value

    def next(self) -> int:
        with self._lock:
            if self._value >= self._maximum:
                raise ExhaustedKeySpaceError(
                    f"All {self.key_type.value} key values have been used"
                )
            self._value += 1
            return self._value


class KeyAccessor(ABC, Generic[E, K]):
    """Reads, writes and allocates the identity of one entity type."""

    def __init__(self, entity_type: type[E], key_field: KeyField) -> None:
        self.entity_type = entity_type
        self.key_field = key_field
        self._get = attrgetter(key_field.name)

    @property
    def key_type(self) -> KeyType:
        return self.key_field.key_type

    def get_key(self, entity: E) -> K:
        return self._get(entity)

    def set_key(self, entity: E, key: K) -> K:
        setattr(entity, self.key_field.name, key)
        return key

    def is_unassigned(self, key: K) -> bool:
        return key == self.key_type.zero

    @abstractmethod
    def next_key(self) -> K:
        """Return a key value that has not been handed out before."""


class IntegerKeyAccessor(KeyAccessor[E, int]):
    def __init__(self, entity_type: type[E], key_field: KeyField, counter: KeyCounter) -> None:
        super().__init__(entity_type, key_field)
        self._counter = counter

    def next_key(self) -> int:
        return self._counter.next()


class UuidKeyAccessor(KeyAccessor[E, UUID]):
    def next_key(self) -> UUID:
        # Collisions are treated as impossible; the store is not consulted.
        return uuid4()


class KeyRegistry:
    """Process-wide cache of key fields, accessors and allocation counters."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._fields: dict[type, KeyField] = {}
        self._accessors: dict[tuple[type, KeyType], KeyAccessor] = {}
        self._counters: dict[tuple[type, KeyType], KeyCounter] = {}

    def key_field(self, entity_type: type) -> KeyField:
        with self._lock:
            field = self._fields.get(entity_type)
            if field is None:
                field = resolve_key_field(entity_type)
                self._fields[entity_type] = field
            return field

    def counter(self, entity_type: type, key_type: KeyType) -> KeyCounter:
        with self._lock:
            counter = self._counters.get((entity_type, key_type))
            if counter is None:
                counter = KeyCounter(key_type)
                self._counters[(entity_type, key_type)] = counter
            return counter

    def accessor(self, entity_type: type[E], key_type: KeyType | type | None = None) -> KeyAccessor:
        """Return the cached accessor for entity_type, building it on first use.

        key_type defaults to the type declared on the Key-marked field.
        """
        with self._lock:
            field = self.key_field(entity_type)
            if key_type is not None:
                field = KeyField(field.name, _coerce_key_type(entity_type, key_type))

            accessor = self._accessors.get((entity_type, field.key_type))
            if accessor is None:
                if field.key_type.is_integer:
                    accessor = IntegerKeyAccessor(
                        entity_type, field, self.counter(entity_type, field.key_type)
                    )
                else:
                    accessor = UuidKeyAccessor(entity_type, field)
                self._accessors[(entity_type, field.key_type)] = accessor
            return accessor

    def reset(self) -> None:
        with self._lock:
            self._fields.clear()
            self._accessors.clear()
            self._counters.clear()


default_registry = KeyRegistry()


def create_key_accessor(
    entity_type: type[E],
    key_type: KeyType | type | None = None,
    registry: KeyRegistry | None = None,
) -> KeyAccessor:
    """Factory used by every repository backend; see KeyRegistry.accessor."""
    return (registry or default_registry).accessor(entity_type, key_type)
