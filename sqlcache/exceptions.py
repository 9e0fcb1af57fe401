"""Exceptions raised by sqlcache."""


class SQLCacheError(Exception):
    """Base class for all cache errors."""


class InvalidConfigurationError(SQLCacheError):
    """Raised at construction when one or more options fail validation."""

    def __init__(self, fields: list[str]):
        self.fields = fields
        names = ", ".join(f"'{name}'" for name in fields)
        super().__init__(f"Invalid {names} configuration")


class CacheClosedError(SQLCacheError):
    """Raised when an operation is attempted on a closed cache."""

    def __init__(self) -> None:
        super().__init__("Cache is closed")


class StorageError(SQLCacheError):
    """Raised by a store when the underlying engine fails."""
