"""
Delimited text exporter (RowStore -> text).

Writes a header of column names followed by one line per row, in schema
order. Quantitative fields use the numeric format's canonical text form.
Categorical fields are the stored bytes decoded up to the first NUL, so the
zero padding added on import never appears in the output.
"""

import logging
import warnings
from typing import Iterator, List, Optional

from tabstore.codec import decode_text
from tabstore.errors import StoreIOError
from tabstore.settings import StoreSettings
from tabstore.store import Row, RowStore


logger = logging.getLogger(__name__)


def format_row(row: Row, settings: StoreSettings) -> List[str]:
    """Text form of every field of row, in column order."""
    numeric = settings.numeric
    fields = []
    for var in row.schema:
        raw = row.field(var)
        if var.is_quantitative:
            fields.append(numeric.format(numeric.unpack(raw)))
            continue
        text = decode_text(raw, settings.encoding, errors="replace")
        if settings.delimiter in text or "\n" in text or "\r" in text:
            warnings.warn(
                f"Value {text!r} in column {var.name!r} contains a delimiter or line break "
                f"and will not import back into the same fields",
                UserWarning,
            )
        fields.append(text)
    return fields


def iter_csv_lines(store: RowStore, settings: Optional[StoreSettings] = None) -> Iterator[str]:
    """Yield the header line and then one line per row, each ending in a newline."""
    settings = settings if settings is not None else store.settings
    delimiter = settings.delimiter
    yield delimiter.join(store.column_names()) + "\n"
    for row in store:
        yield delimiter.join(format_row(row, settings)) + "\n"


def write_csv_string(store: RowStore, settings: Optional[StoreSettings] = None) -> str:
    return "".join(iter_csv_lines(store, settings))


def write_csv_file(store: RowStore, path: str, settings: Optional[StoreSettings] = None) -> None:
    """
    Write store to path, replacing any existing file.

    Raises:
        StoreIOError: the destination cannot be opened or written
    """
    settings = settings if settings is not None else store.settings
    try:
        with open(path, "w", encoding=settings.encoding, newline="") as fh:
            for line in iter_csv_lines(store, settings):
                fh.write(line)
    except OSError as e:
        raise StoreIOError(f"Failed to write CSV file {path}: {e}") from e
    logger.debug("Wrote %d rows to %s", store.row_count(), path)


__all__ = ["format_row", "iter_csv_lines", "write_csv_string", "write_csv_file"]
