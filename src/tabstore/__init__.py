"""
tabstore: in-memory packed-row tabular data store.

A Schema of named, typed, fixed-width columns backs a RowStore of byte-packed
rows. Rows come from delimited text (with a given schema or an inferred one),
go back out as delimited text, and survive schema changes (dropping a column,
deriving a new one) through a full, all-or-nothing repack.

Single owner, single thread: nothing here locks.
"""

from tabstore.classify import TokenClass, classify
from tabstore.csv_export import write_csv_file, write_csv_string
from tabstore.csv_import import (
    infer_schema_file,
    infer_schema_string,
    read_csv_file,
    read_csv_string,
)
from tabstore.errors import (
    DataStoreError,
    InvalidSchemaError,
    MalformedRecordError,
    NameConflictError,
    NotFoundError,
    OutOfRangeError,
    SizeMismatchError,
    StoreIOError,
    UndeterminedSchemaError,
)
from tabstore.model import Schema, VarKind, VarRole, Variable
from tabstore.mutate import derive_column, drop_column
from tabstore.settings import StoreSettings, get_settings
from tabstore.store import UNBOUNDED, Row, RowStore

__version__ = "0.1.0"

__all__ = [
    "TokenClass",
    "classify",
    "Schema",
    "Variable",
    "VarKind",
    "VarRole",
    "Row",
    "RowStore",
    "UNBOUNDED",
    "StoreSettings",
    "get_settings",
    "read_csv_file",
    "read_csv_string",
    "infer_schema_file",
    "infer_schema_string",
    "write_csv_file",
    "write_csv_string",
    "drop_column",
    "derive_column",
    "DataStoreError",
    "InvalidSchemaError",
    "MalformedRecordError",
    "NameConflictError",
    "NotFoundError",
    "OutOfRangeError",
    "SizeMismatchError",
    "StoreIOError",
    "UndeterminedSchemaError",
]
