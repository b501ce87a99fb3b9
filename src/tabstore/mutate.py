"""
Schema-evolving operations on a RowStore.

Both operations compute the new Schema, rebuild every row against it, and
only then commit schema and rows together. Any failure part way through
(a bad transform result, an exception raised by the transform) leaves the
store exactly as it was.
"""

import logging
from typing import Callable, Optional

from tabstore.errors import NameConflictError, NotFoundError, SizeMismatchError
from tabstore.model import Column, Variable
from tabstore.store import RowStore, encode_field


logger = logging.getLogger(__name__)

Transform = Callable[[bytes], object]


def drop_column(store: RowStore, column: Column) -> Variable:
    """
    Remove a column and repack every row.

    Each surviving field is copied from its old offset in the old row to its
    new offset in a fresh buffer of the new row width.

    Args:
        store: Store to change in place
        column: Variable, name or index of the column to remove

    Returns:
        The removed Variable (with its old offset)

    Raises:
        NotFoundError: unknown name or non-member Variable
        OutOfRangeError: index outside the column range
        InvalidSchemaError: removing the last remaining column
    """
    old_schema = store.schema
    removed = old_schema.resolve(column)
    new_schema = old_schema.drop(removed)

    moves = []
    for new_var in new_schema:
        old_var = old_schema.lookup(new_var.name)
        moves.append((old_var.offset, new_var.offset, new_var.width))

    width = new_schema.row_width()
    rows = []
    for data in store.raw_rows():
        buf = bytearray(width)
        for old_offset, new_offset, size in moves:
            buf[new_offset:new_offset + size] = data[old_offset:old_offset + size]
        rows.append(bytes(buf))

    store._commit(new_schema, rows)
    logger.debug("Dropped column %r; repacked %d rows to %d bytes", removed.name, len(rows), width)
    return removed


def _encode_derived(var: Variable, value, store: RowStore) -> bytes:
    if isinstance(value, (bytes, bytearray, memoryview)):
        value = bytes(value)
        if len(value) != var.width:
            raise SizeMismatchError(
                f"Transform returned {len(value)} bytes for column {var.name!r} of width {var.width}"
            )
        return value
    return encode_field(var, value, store.settings)


def derive_column(
    store: RowStore,
    new_name: str,
    source_name: str,
    transform: Transform,
    *,
    width: Optional[int] = None,
) -> Variable:
    """
    Append a column computed from an existing one.

    The new column copies the source's role and kind. For every row,
    transform receives the source field's raw bytes and returns the new value:
    raw bytes of exactly the new width, a number (quantitative), or text
    (categorical, zero-padded). Existing offsets never move, so each row is
    extended by appending the new field.

    Args:
        store: Store to change in place
        new_name: Name of the new column; must not already exist
        source_name: Column whose raw bytes feed transform
        transform: Callable raw_bytes -> new value
        width: Byte width of the new column; defaults to the source width.
               Quantitative columns must match the numeric format size.

    Returns:
        The new Variable as placed in the new schema

    Raises:
        NameConflictError: new_name equals source_name or any existing name
        NotFoundError: source_name is not in the schema
        SizeMismatchError: width or a returned value does not fit the column
    """
    old_schema = store.schema
    if new_name == source_name or old_schema.lookup(new_name) is not None:
        raise NameConflictError(f"Column name {new_name!r} is already in use")
    source = old_schema.lookup(source_name)
    if source is None:
        raise NotFoundError(f"Column {source_name!r} to derive from is not in the schema")

    new_width = width if width is not None else source.width
    if source.is_quantitative and new_width != store.settings.numeric.size:
        raise SizeMismatchError(
            f"Quantitative column {new_name!r} must be {store.settings.numeric.size} bytes wide, got {new_width}"
        )
    new_schema = old_schema.add(Variable(new_name, source.kind, new_width, role=source.role))
    new_var = new_schema.lookup(new_name)

    rows = []
    for data in store.raw_rows():
        value = transform(data[source.offset:source.offset + source.width])
        rows.append(data + _encode_derived(new_var, value, store))

    store._commit(new_schema, rows)
    logger.debug("Derived column %r from %r over %d rows", new_name, source_name, len(rows))
    return new_var


__all__ = ["drop_column", "derive_column"]
