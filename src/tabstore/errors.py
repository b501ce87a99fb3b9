"""
Exception hierarchy for tabstore.

Every failure raised by the store, importer, exporter or mutator derives from
DataStoreError. Each class also derives from the closest builtin exception so
callers can catch either the specific kind or the familiar builtin.
"""


class DataStoreError(Exception):
    """Base class for all tabstore errors."""
    pass


class ConfigError(DataStoreError, ValueError):
    """Raised when StoreSettings hold an unusable value."""
    pass


class InvalidSchemaError(DataStoreError, ValueError):
    """Raised for an empty schema or duplicate column names."""
    pass


class NotFoundError(DataStoreError, LookupError):
    """Raised when a column name or variable is not part of the schema."""
    pass


class OutOfRangeError(DataStoreError, IndexError):
    """Raised when a row or column index is outside its bounds."""
    pass


class SizeMismatchError(DataStoreError, ValueError):
    """Raised when an encoded byte width disagrees with a declared width."""
    pass


class MalformedRecordError(DataStoreError, ValueError):
    """Raised for a record with the wrong token count or an unparsable token."""
    pass


class FieldTooLongError(MalformedRecordError):
    """Raised when a categorical token does not fit its column width."""
    pass


class UndeterminedSchemaError(DataStoreError, ValueError):
    """Raised when inference cannot settle the kind or width of every column."""
    pass


class NameConflictError(DataStoreError, ValueError):
    """Raised when a new column name collides with an existing one."""
    pass


class KindMismatchError(DataStoreError, TypeError):
    """Raised when an operation needs a quantitative column but got a categorical one."""
    pass


class StoreIOError(DataStoreError, OSError):
    """Raised when a file cannot be opened, read or written."""
    pass


__all__ = [
    "DataStoreError",
    "ConfigError",
    "InvalidSchemaError",
    "NotFoundError",
    "OutOfRangeError",
    "SizeMismatchError",
    "MalformedRecordError",
    "FieldTooLongError",
    "UndeterminedSchemaError",
    "NameConflictError",
    "KindMismatchError",
    "StoreIOError",
]
