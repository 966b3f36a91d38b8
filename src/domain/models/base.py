"""Base class for repository-managed domain models.

Entities are mutable: a repository writes the allocated key back onto the
instance it was given.  Field names are snake_case in Python and camelCase on
the wire; both spellings are accepted on input.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class Entity(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        validate_assignment=True,
    )
