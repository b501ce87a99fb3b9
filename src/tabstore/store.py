"""
Row storage over a Schema.

A RowStore owns an ordered list of packed rows. Every row is an immutable
bytes object of exactly schema.row_width() bytes; fields are slices taken at
each Variable's offset. Rows are created only by store operations and read
back as Row snapshots that carry the schema they were packed against.

ARCHITECTURAL RULE:
    The store's schema and rows change together. Operations that change the
    layout build the complete new row list first and swap it in with
    _commit(), so a failure never leaves rows of mixed widths behind.
"""

import struct
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence

from tabstore.codec import decode_text, encode_text
from tabstore.errors import (
    MalformedRecordError,
    NotFoundError,
    OutOfRangeError,
    SizeMismatchError,
)
from tabstore.model import Column, Schema, Variable
from tabstore.settings import StoreSettings, resolve_settings


# possible_values() result for a column whose domain is not countable.
UNBOUNDED = -1


def encode_field(var: Variable, value, settings: StoreSettings) -> bytes:
    """
    Encode one Python value for var.

    Quantitative values are packed with the configured numeric format, whose
    size must equal the column width. Categorical values are str (encoded and
    zero-padded) or bytes (zero-padded).
    """
    if var.is_quantitative:
        numeric = settings.numeric
        if numeric.size != var.width:
            raise SizeMismatchError(
                f"Column {var.name!r} is {var.width} bytes wide but format "
                f"{numeric.fmt!r} packs {numeric.size} bytes"
            )
        return numeric.pack(value)

    if isinstance(value, (bytes, bytearray)):
        if len(value) > var.width:
            raise SizeMismatchError(
                f"Column {var.name!r} is {var.width} bytes wide, got {len(value)} bytes"
            )
        return bytes(value).ljust(var.width, b"\0")
    if not isinstance(value, str):
        raise MalformedRecordError(
            f"Categorical column {var.name!r} needs text, got {type(value).__name__}"
        )
    return encode_text(value, var.width, settings.encoding)


def decode_field(var: Variable, raw: bytes, settings: StoreSettings):
    if var.is_quantitative:
        return settings.numeric.unpack(raw)
    return decode_text(raw, settings.encoding)


def encode_row(schema: Schema, values: Sequence, settings: Optional[StoreSettings] = None) -> bytes:
    """Pack one value per column into a row buffer."""
    settings = resolve_settings(settings)
    if len(values) != len(schema):
        raise MalformedRecordError(
            f"Expected {len(schema)} values, got {len(values)}"
        )
    return b"".join(encode_field(var, value, settings) for var, value in zip(schema, values))


@dataclass(frozen=True)
class Row:
    """
    Read-only snapshot of one packed row.

    Properties:
        schema: Layout the data was packed against
        data: Exactly schema.row_width() bytes
        settings: Encoding rules used to decode values
    """

    schema: Schema
    data: bytes
    settings: StoreSettings

    def __len__(self) -> int:
        return len(self.data)

    def field(self, column: Column) -> bytes:
        """Raw bytes of one column."""
        var = self.schema.resolve(column)
        return self.data[var.offset:var.offset + var.width]

    def field_as(self, column: Column, fmt: Optional[str] = None):
        """
        Reinterpret one column's bytes with a struct format.

        Raises:
            SizeMismatchError: the format's size differs from the column width
        """
        var = self.schema.resolve(column)
        fmt = "<" + (fmt or self.settings.quant_format)
        size = struct.calcsize(fmt)
        if size != var.width:
            raise SizeMismatchError(
                f"Format {fmt[1:]!r} reads {size} bytes but column {var.name!r} is {var.width} bytes wide"
            )
        unpacked = struct.unpack(fmt, self.data[var.offset:var.offset + var.width])
        return unpacked[0] if len(unpacked) == 1 else unpacked

    def value(self, column: Column):
        """Decoded Python value of one column."""
        var = self.schema.resolve(column)
        return decode_field(var, self.data[var.offset:var.offset + var.width], self.settings)

    def values(self) -> tuple:
        return tuple(self.value(var) for var in self.schema)


class RowStore:
    """
    Ordered collection of packed rows sharing one Schema.

    INVARIANTS:
        - len(row) == schema.row_width() for every row, at all times
        - Quantitative columns are exactly settings.numeric.size bytes wide
        - Row buffers are owned by the store; nothing outside can mutate them

    Not safe for concurrent mutation; one owner reads or writes at a time.
    """

    def __init__(self, schema: Schema, settings: Optional[StoreSettings] = None):
        self._settings = resolve_settings(settings)
        self._check_layout(schema)
        self._schema = schema
        self._rows: List[bytes] = []

    def _check_layout(self, schema: Schema) -> None:
        """Quantitative columns must be exactly as wide as the numeric format."""
        size = self._settings.numeric.size
        for var in schema:
            if var.is_quantitative and var.width != size:
                raise SizeMismatchError(
                    f"Quantitative column {var.name!r} is {var.width} bytes wide but format "
                    f"{self._settings.quant_format!r} packs {size} bytes"
                )

    @property
    def schema(self) -> Schema:
        return self._schema

    @property
    def settings(self) -> StoreSettings:
        return self._settings

    def __len__(self) -> int:
        return len(self._rows)

    def __iter__(self) -> Iterator[Row]:
        for data in self._rows:
            yield Row(self._schema, data, self._settings)

    def __repr__(self) -> str:
        return f"RowStore({self._schema!r}, rows={len(self._rows)})"

    def row_count(self) -> int:
        return len(self._rows)

    def column_count(self) -> int:
        return len(self._schema)

    def row_width(self) -> int:
        return self._schema.row_width()

    def column_names(self) -> List[str]:
        return self._schema.names()

    def _checked(self, data) -> bytes:
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise TypeError(f"Row data must be bytes-like, got {type(data).__name__}")
        data = bytes(data)
        if len(data) != self._schema.row_width():
            raise SizeMismatchError(
                f"Row is {len(data)} bytes but the schema needs {self._schema.row_width()}"
            )
        return data

    def _check_index(self, index: int, upper: int) -> None:
        if not isinstance(index, int) or isinstance(index, bool) or index < 0 or index >= upper:
            raise OutOfRangeError(f"Row index {index} out of range for {len(self._rows)} rows")

    def append(self, data) -> None:
        """Append a packed row; its length must equal row_width()."""
        self._rows.append(self._checked(data))

    def insert_at(self, index: int, data) -> None:
        """Insert a packed row before the row currently at index (0 <= index <= len)."""
        self._check_index(index, len(self._rows) + 1)
        self._rows.insert(index, self._checked(data))

    def remove_at(self, index: int) -> None:
        self._check_index(index, len(self._rows))
        del self._rows[index]

    def clear(self) -> None:
        """Remove every row; the schema is unchanged."""
        self._rows.clear()

    def append_values(self, values: Sequence) -> None:
        """Encode one value per column and append the resulting row."""
        self._rows.append(encode_row(self._schema, values, self._settings))

    def get(self, index: int) -> Row:
        self._check_index(index, len(self._rows))
        return Row(self._schema, self._rows[index], self._settings)

    def field(self, index: int, column: Column) -> bytes:
        return self.get(index).field(column)

    def field_as(self, index: int, column: Column, fmt: Optional[str] = None):
        return self.get(index).field_as(column, fmt)

    def value(self, index: int, column: Column):
        return self.get(index).value(column)

    def values(self, index: int) -> tuple:
        return self.get(index).values()

    def column_values(self, column: Column) -> list:
        var = self._schema.resolve(column)
        return [
            decode_field(var, data[var.offset:var.offset + var.width], self._settings)
            for data in self._rows
        ]

    def possible_values(self, name: str) -> int:
        """
        Number of values a column can take.

        Quantitative columns are unbounded (UNBOUNDED). For categorical columns
        this counts distinct raw field byte patterns across the current rows,
        padding included.
        """
        var = self._schema.lookup(name)
        if var is None:
            raise NotFoundError(f"Column {name!r} not in schema")
        if var.is_quantitative:
            return UNBOUNDED
        return len({data[var.offset:var.offset + var.width] for data in self._rows})

    def all_quantitative(self) -> bool:
        return self._schema.all_quantitative()

    def all_categorical(self) -> bool:
        return self._schema.all_categorical()

    def _commit(self, schema: Schema, rows: List[bytes]) -> None:
        """Swap in a new layout together with its fully rebuilt rows."""
        self._check_layout(schema)
        width = schema.row_width()
        for i, data in enumerate(rows):
            if len(data) != width:
                raise SizeMismatchError(
                    f"Rebuilt row {i} is {len(data)} bytes but the new schema needs {width}"
                )
        self._schema = schema
        self._rows = rows

    def raw_rows(self) -> List[bytes]:
        """Snapshot of the packed row buffers, in order."""
        return list(self._rows)

    def copy(self) -> "RowStore":
        """Independent copy; mutating either store never affects the other."""
        clone = RowStore(self._schema, self._settings)
        clone._rows = list(self._rows)
        return clone

    def __copy__(self) -> "RowStore":
        return self.copy()

    def __deepcopy__(self, memo) -> "RowStore":
        return self.copy()


__all__ = [
    "UNBOUNDED",
    "Row",
    "RowStore",
    "encode_field",
    "decode_field",
    "encode_row",
]
