"""Data-access error taxonomy.

Store, query and transport failures are not represented here: repositories
log them and return None / False instead of raising.
"""

from __future__ import annotations


class DataAccessError(Exception):
    """Root of every error raised by the repository layer."""


class ConfigurationError(DataAccessError):
    """An entity type cannot be used with a repository (bad identity field)."""


class UnsupportedKeyTypeError(ConfigurationError):
    """The identity field's type has no KeyAccessor implementation."""

    def __init__(self, entity_type: type, key_type: object) -> None:
        self.entity_type = entity_type
        self.key_type = key_type
        super().__init__(
            f"{getattr(key_type, '__name__', key_type)} is not a supported key type "
            f"for {entity_type.__name__}"
        )


class ExhaustedKeySpaceError(DataAccessError):
    """Every value of an integer key type has already been handed out."""


class NullEntityError(DataAccessError, ValueError):
    """None was passed where an entity is required."""

    def __init__(self, argument: str = "entity") -> None:
        self.argument = argument
        super().__init__(f"{argument} is None")


class NotSupportedError(DataAccessError, NotImplementedError):
    """The wrapped repository does not implement the extended-query contract."""
